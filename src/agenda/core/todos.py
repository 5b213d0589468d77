"""Pure todo domain model - no I/O dependencies."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

logger = logging.getLogger(__name__)


class Status(str, Enum):
    """Completion status of a todo."""

    READY = "ready"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    COMPLETE = "complete"


STATUS_GLYPHS = {
    Status.READY: " ",
    Status.IN_PROGRESS: "…",
    Status.BLOCKED: "⌛",
    Status.COMPLETE: "✓",
}

UNKNOWN_GLYPH = "?"


def parse_status(value: str) -> Status | str:
    """Coerce a wire value to a Status, keeping unrecognized values as-is."""
    try:
        return Status(value)
    except ValueError:
        return value


def status_glyph(status: Status | str) -> str:
    """Single-glyph indicator for a status."""
    try:
        return STATUS_GLYPHS[Status(status)]
    except ValueError:
        logger.warning(f"Unrecognized todo status: {status!r}")
        return UNKNOWN_GLYPH


@dataclass(frozen=True)
class Estimate:
    """How long a todo is expected to take, in minutes."""

    low_minutes: int
    high_minutes: int

    def is_valid(self) -> bool:
        """Both bounds non-negative and low <= high."""
        return 0 <= self.low_minutes <= self.high_minutes

    def format(self) -> str:
        if self.low_minutes == self.high_minutes:
            return f"{self.low_minutes}m"
        return f"{self.low_minutes}-{self.high_minutes}m"

    def to_record(self) -> dict:
        return {"lowMinutes": self.low_minutes, "highMinutes": self.high_minutes}


@dataclass(frozen=True)
class Todo:
    """A unit of work."""

    id: str
    title: str = ""
    status: Status | str = Status.READY
    estimate: Estimate | None = None
    deadline: datetime | None = None
    dependent_ids: tuple[str, ...] = ()

    @classmethod
    def new(cls, title: str = "", **fields) -> "Todo":
        """Create a todo with a freshly generated id."""
        return cls(id=str(uuid.uuid4()), title=title, **fields)

    @property
    def is_complete(self) -> bool:
        return self.status == Status.COMPLETE

    def status_glyph(self) -> str:
        return status_glyph(self.status)

    def to_display_record(self) -> dict:
        """Project to a JSON-ready record for serialization."""
        status = self.status.value if isinstance(self.status, Status) else self.status
        return {
            "id": self.id,
            "title": self.title,
            "status": status,
            "estimate": self.estimate.to_record() if self.estimate else None,
            "deadline": self.deadline.isoformat() if self.deadline else None,
        }
