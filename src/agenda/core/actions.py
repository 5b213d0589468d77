"""
Action vocabulary and action records.

An action is an immutable record of one discrete change to the agenda.
Records arrive from the log as plain mappings with camelCase keys;
Action.from_record decodes them into typed values and Action.to_record
encodes them back. Pure - no I/O.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

from .events import Cause, Event
from .todos import Estimate, Status, Todo, parse_status

TODO_CREATE = "agenda/todo/create"
TODO_SET_TITLE = "agenda/todo/set/title"
TODO_SET_STATUS = "agenda/todo/set/status"
TODO_SET_ESTIMATE = "agenda/todo/set/estimate"
TODO_SET_DEADLINE = "agenda/todo/set/deadline"
TODO_ADD_DEPENDENT = "agenda/todo/dependent/add"
TODO_REMOVE_DEPENDENT = "agenda/todo/dependent/remove"
TODO_DESTROY = "agenda/todo/destroy"

EVENT_CREATE = "agenda/event/create"
EVENT_SET_TITLE = "agenda/event/set/title"
EVENT_SET_START = "agenda/event/set/start"
EVENT_SET_DURATION = "agenda/event/set/duration"
EVENT_ADD_CAUSE = "agenda/event/cause/add"
EVENT_REMOVE_CAUSE = "agenda/event/cause/remove"
EVENT_DESTROY = "agenda/event/destroy"

# Fields carried by each kind, as (wire key, attribute, required)
_KIND_FIELDS: dict[str, tuple[tuple[str, str, bool], ...]] = {
    TODO_CREATE: (("todo", "todo", False),),
    TODO_SET_TITLE: (("title", "title", True),),
    TODO_SET_STATUS: (("status", "status", True),),
    TODO_SET_ESTIMATE: (("estimate", "estimate", False),),
    TODO_SET_DEADLINE: (("deadline", "deadline", False),),
    TODO_ADD_DEPENDENT: (("dependentId", "dependent_id", True),),
    TODO_REMOVE_DEPENDENT: (("dependentId", "dependent_id", True),),
    TODO_DESTROY: (),
    EVENT_CREATE: (("event", "event", False),),
    EVENT_SET_TITLE: (("title", "title", True),),
    EVENT_SET_START: (("start", "start", False),),
    EVENT_SET_DURATION: (("duration", "duration", True),),
    EVENT_ADD_CAUSE: (("cause", "cause", True),),
    EVENT_REMOVE_CAUSE: (("cause", "cause", True),),
    EVENT_DESTROY: (),
}

TODO_ACTIONS = frozenset(k for k in _KIND_FIELDS if k.startswith("agenda/todo/"))
EVENT_ACTIONS = frozenset(k for k in _KIND_FIELDS if k.startswith("agenda/event/"))


class ActionError(ValueError):
    """Raised when an action record cannot be decoded."""

    pass


@dataclass(frozen=True)
class Action:
    """A single decoded action record."""

    type: str
    todo_id: str | None = None
    event_id: str | None = None
    todo: Mapping[str, Any] | None = None
    event: Mapping[str, Any] | None = None
    title: str | None = None
    status: Status | str | None = None
    estimate: Estimate | None = None
    deadline: datetime | None = None
    dependent_id: str | None = None
    start: datetime | None = None
    duration: timedelta | None = None
    cause: Cause | None = None

    @property
    def is_known(self) -> bool:
        return self.type in _KIND_FIELDS

    @classmethod
    def from_record(cls, record: Any) -> "Action":
        """
        Decode a raw log record.

        Records with an unrecognized type are kept with only their type and
        target ids so the fold can skip them. Raises ActionError when a
        recognized record is missing its target or a field cannot be decoded.
        """
        if not isinstance(record, Mapping):
            raise ActionError(f"Action record must be a mapping, got {type(record).__name__}")

        kind = str(record.get("type") or "")
        todo_id = _optional_id(record.get("todoId"))
        event_id = _optional_id(record.get("eventId"))

        if kind not in _KIND_FIELDS:
            return cls(type=kind, todo_id=todo_id, event_id=event_id)

        if kind in TODO_ACTIONS and todo_id is None:
            raise ActionError(f"{kind}: todoId is required")
        if kind in EVENT_ACTIONS and event_id is None:
            raise ActionError(f"{kind}: eventId is required")

        values: dict[str, Any] = {}
        for key, attr, required in _KIND_FIELDS[kind]:
            if required and record.get(key) is None:
                raise ActionError(f"{kind}: {key} is required")
            decode, _ = _CODECS[key]
            try:
                values[attr] = decode(record.get(key))
            except (TypeError, ValueError) as e:
                raise ActionError(f"{kind}: invalid {key}: {e}") from e

        return cls(type=kind, todo_id=todo_id, event_id=event_id, **values)

    def to_record(self) -> dict:
        """Encode as a log record with camelCase keys."""
        record: dict[str, Any] = {"type": self.type}
        if self.todo_id is not None:
            record["todoId"] = self.todo_id
        if self.event_id is not None:
            record["eventId"] = self.event_id
        for key, attr, _ in _KIND_FIELDS.get(self.type, ()):
            _, encode = _CODECS[key]
            record[key] = encode(getattr(self, attr))
        return record


def create_todo(todo: Todo) -> Action:
    """Build the Create action that reproduces a todo."""
    payload = {
        "title": todo.title,
        "status": todo.status,
        "estimate": todo.estimate,
        "deadline": todo.deadline,
        "dependent_ids": todo.dependent_ids,
    }
    return Action(type=TODO_CREATE, todo_id=todo.id, todo=payload)


def create_event(event: Event) -> Action:
    """Build the Create action that reproduces an event."""
    payload = {
        "title": event.title,
        "start": event.start,
        "duration": event.duration,
        "causes": event.causes,
    }
    return Action(type=EVENT_CREATE, event_id=event.id, event=payload)


# ============== Field codecs ==============


def _optional_id(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _decode_id(value: Any) -> str:
    if value is None:
        raise ValueError("missing identifier")
    return str(value)


def _decode_text(value: Any) -> str:
    return "" if value is None else str(value)


def _decode_status(value: Any) -> Status | str:
    if value is None:
        raise ValueError("missing status")
    if isinstance(value, Status):
        return value
    return parse_status(str(value))


def _encode_status(value: Status | str | None) -> str | None:
    if isinstance(value, Status):
        return value.value
    return value


def _decode_time(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str):
        # fromisoformat only accepts a trailing Z from 3.11 on
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise ValueError(f"expected a point in time, got {value!r}")


def _encode_time(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _decode_duration(value: Any) -> timedelta:
    """Durations are stored in milliseconds."""
    if value is None:
        return timedelta(0)
    if isinstance(value, timedelta):
        duration = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        duration = timedelta(milliseconds=value)
    else:
        raise ValueError(f"expected milliseconds, got {value!r}")
    if duration < timedelta(0):
        raise ValueError("duration must be non-negative")
    return duration


def _encode_duration(value: timedelta | None) -> int:
    if value is None:
        return 0
    return int(value.total_seconds() * 1000)


def _decode_estimate(value: Any) -> Estimate | None:
    if value is None or isinstance(value, Estimate):
        return value
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a mapping, got {value!r}")
    low = value.get("lowMinutes", value.get("lowEstimate"))
    high = value.get("highMinutes", value.get("highEstimate"))
    if low is None or high is None:
        raise ValueError("estimate needs lowMinutes and highMinutes")
    return Estimate(low_minutes=_decode_minutes(low), high_minutes=_decode_minutes(high))


def _decode_minutes(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"expected whole minutes, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"expected whole minutes, got {value!r}")


def _encode_estimate(value: Estimate | None) -> dict | None:
    return value.to_record() if value else None


def _decode_cause(value: Any) -> Cause:
    if isinstance(value, Cause):
        return value
    if not isinstance(value, Mapping) or "type" not in value or "value" not in value:
        raise ValueError(f"expected {{type, value}}, got {value!r}")
    return Cause(kind=str(value["type"]), value=str(value["value"]))


def _encode_cause(value: Cause | None) -> dict | None:
    return value.to_record() if value else None


def _decode_id_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list of ids, got {value!r}")
    return tuple(_decode_id(d) for d in value)


def _decode_causes(value: Any) -> tuple[Cause, ...]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list of causes, got {value!r}")
    return tuple(_decode_cause(c) for c in value)


# attribute -> (wire key, decoder, whether a null value means "not supplied")
_TODO_PAYLOAD_FIELDS = {
    "title": ("title", _decode_text, False),
    "status": ("status", _decode_status, True),
    "estimate": ("estimate", _decode_estimate, False),
    "deadline": ("deadline", _decode_time, False),
    "dependent_ids": ("dependentIDs", _decode_id_list, True),
}

_EVENT_PAYLOAD_FIELDS = {
    "title": ("title", _decode_text, False),
    "start": ("start", _decode_time, False),
    "duration": ("duration", _decode_duration, True),
    "causes": ("causes", _decode_causes, True),
}


def _payload_items(value: Mapping[str, Any], table: dict):
    """Yield (attribute, decoder, raw value) for each supplied entity field.

    Keys may use either the wire spelling or the attribute name; anything
    else is not an entity field and is skipped.
    """
    for attr, (key, decode, skip_none) in table.items():
        if key in value:
            raw = value[key]
        elif attr in value:
            raw = value[attr]
        else:
            continue
        if raw is None and skip_none:
            continue
        yield attr, decode, raw


def _decode_payload(value: Any, table: dict) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a mapping, got {value!r}")
    return {attr: decode(raw) for attr, decode, raw in _payload_items(value, table)}


def _decode_todo_payload(value: Any) -> dict[str, Any]:
    """Decode the supplied fields of a created todo. Unknown keys are dropped."""
    return _decode_payload(value, _TODO_PAYLOAD_FIELDS)


def _decode_event_payload(value: Any) -> dict[str, Any]:
    """Decode the supplied fields of a created event. Unknown keys are dropped."""
    return _decode_payload(value, _EVENT_PAYLOAD_FIELDS)


def _entity_fields(value: Any, table: dict) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        return {}
    fields: dict[str, Any] = {}
    for attr, decode, raw in _payload_items(value, table):
        try:
            fields[attr] = decode(raw)
        except (TypeError, ValueError):
            continue
    return fields


def todo_fields(payload: Any) -> dict[str, Any]:
    """
    Todo constructor arguments from a create payload, never raising.

    Used by the fold, which must accept any Action. Fields whose value
    does not decode keep their defaults.
    """
    return _entity_fields(payload, _TODO_PAYLOAD_FIELDS)


def event_fields(payload: Any) -> dict[str, Any]:
    """Event constructor arguments from a create payload, never raising."""
    return _entity_fields(payload, _EVENT_PAYLOAD_FIELDS)


def _encode_todo_payload(value: Mapping[str, Any] | None) -> dict:
    record: dict[str, Any] = {}
    for attr, item in (value or {}).items():
        match attr:
            case "title":
                record["title"] = item
            case "status":
                record["status"] = _encode_status(item)
            case "estimate":
                record["estimate"] = _encode_estimate(item)
            case "deadline":
                record["deadline"] = _encode_time(item)
            case "dependent_ids":
                record["dependentIDs"] = list(item)
    return record


def _encode_event_payload(value: Mapping[str, Any] | None) -> dict:
    record: dict[str, Any] = {}
    for attr, item in (value or {}).items():
        match attr:
            case "title":
                record["title"] = item
            case "start":
                record["start"] = _encode_time(item)
            case "duration":
                record["duration"] = _encode_duration(item)
            case "causes":
                record["causes"] = [c.to_record() for c in item]
    return record


def _identity(value: Any) -> Any:
    return value


_CODECS = {
    "todo": (_decode_todo_payload, _encode_todo_payload),
    "event": (_decode_event_payload, _encode_event_payload),
    "title": (_decode_text, _identity),
    "status": (_decode_status, _encode_status),
    "estimate": (_decode_estimate, _encode_estimate),
    "deadline": (_decode_time, _encode_time),
    "dependentId": (_decode_id, _identity),
    "start": (_decode_time, _encode_time),
    "duration": (_decode_duration, _encode_duration),
    "cause": (_decode_cause, _encode_cause),
}
