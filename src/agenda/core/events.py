"""Pure event domain model - no I/O dependencies."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

TODO_CAUSE = "Todo"


@dataclass(frozen=True)
class Cause:
    """A tagged reference explaining why an event exists."""

    kind: str
    value: str

    @classmethod
    def todo(cls, todo_id: str) -> "Cause":
        return cls(kind=TODO_CAUSE, value=todo_id)

    def to_record(self) -> dict:
        return {"type": self.kind, "value": self.value}


@dataclass(frozen=True)
class Event:
    """A scheduled occurrence."""

    id: str
    title: str = ""
    start: datetime | None = None
    duration: timedelta = timedelta(0)
    causes: tuple[Cause, ...] = ()

    @classmethod
    def new(cls, title: str = "", **fields) -> "Event":
        """Create an event with a freshly generated id."""
        return cls(id=str(uuid.uuid4()), title=title, **fields)

    @property
    def end(self) -> datetime | None:
        if self.start is None:
            return None
        return self.start + self.duration

    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() / 60)

    def todo_ids(self) -> list[str]:
        """IDs of the todos this event was scheduled for."""
        return [c.value for c in self.causes if c.kind == TODO_CAUSE]

    def to_display_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat() if self.start else None,
            "duration_minutes": self.duration_minutes(),
            "causes": [c.to_record() for c in self.causes],
        }
