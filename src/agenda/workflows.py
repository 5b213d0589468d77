"""Shared workflow layer between the CLI and the terminal UI.

Loading replays the configured action log into an AgendaState. Each write
function validates the change against the current state, appends one action
to the log, and returns the resulting entity.
"""

import logging
from datetime import datetime, timedelta

from .adapters.yaml_log import YamlActionLog
from .config import Config
from .core import actions as a
from .core.actions import Action, create_event, create_todo
from .core.events import Cause, Event
from .core.state import AgendaState
from .core.todos import Estimate, Status, Todo
from .ports.action_log import ActionLog

logger = logging.getLogger(__name__)


class AgendaError(Exception):
    """Raised when a requested change is not valid for the current agenda."""

    pass


def get_log(config: Config) -> YamlActionLog:
    """Resolve the action log from config."""
    return YamlActionLog(config.log_path)


def load_state(log: ActionLog, limit: int | None = None) -> AgendaState:
    """Replay the log into a fresh state, optionally only its first `limit` actions."""
    actions = log.read()
    if limit is not None:
        actions = actions[:limit]
    state = AgendaState().initialize()
    state.apply_all(actions)
    logger.debug(f"Loaded {len(state.todos)} todos and {len(state.events)} events")
    return state


def parse_estimate(text: str) -> Estimate:
    """Parse "30" or "30-60" (minutes) into a validated Estimate."""
    low_str, _, high_str = text.partition("-")
    try:
        low = int(low_str.strip())
        high = int(high_str.strip()) if high_str.strip() else low
    except ValueError:
        raise AgendaError(f"Invalid estimate {text!r}: expected MINUTES or LOW-HIGH") from None
    estimate = Estimate(low_minutes=low, high_minutes=high)
    _check_estimate(estimate)
    return estimate


def parse_status(text: str) -> Status:
    """Parse a status name, accepting underscores or dashes."""
    try:
        return Status(text.strip().lower().replace("_", "-"))
    except ValueError:
        valid = ", ".join(s.value for s in Status)
        raise AgendaError(f"Unknown status {text!r}. Valid statuses: {valid}") from None


def _check_estimate(estimate: Estimate | None) -> None:
    if estimate is not None and not estimate.is_valid():
        raise AgendaError(
            f"Invalid estimate {estimate.low_minutes}-{estimate.high_minutes}: "
            "bounds must be non-negative and low <= high"
        )


def _require_todo(state: AgendaState, todo_id: str) -> Todo:
    todo = state.resolve_todo(todo_id)
    if todo is None:
        raise AgendaError(f"No todo with id {todo_id}")
    return todo


def _require_event(state: AgendaState, event_id: str) -> Event:
    event = state.resolve_event(event_id)
    if event is None:
        raise AgendaError(f"No event with id {event_id}")
    return event


def _commit(log: ActionLog, state: AgendaState, action: Action) -> AgendaState:
    log.append(action)
    state.apply_action(action)
    return state


# ============== Todos ==============


def add_todo(
    log: ActionLog,
    title: str,
    estimate: Estimate | None = None,
    deadline: datetime | None = None,
) -> Todo:
    """Create a new todo with a fresh id."""
    if not title.strip():
        raise AgendaError("Todo title cannot be empty")
    _check_estimate(estimate)
    todo = Todo.new(title.strip(), estimate=estimate, deadline=deadline)
    state = _commit(log, load_state(log), create_todo(todo))
    return state.resolve_todo(todo.id)


def set_title(log: ActionLog, todo_id: str, title: str) -> Todo:
    state = load_state(log)
    _require_todo(state, todo_id)
    _commit(log, state, Action(type=a.TODO_SET_TITLE, todo_id=todo_id, title=title))
    return state.resolve_todo(todo_id)


def set_status(log: ActionLog, todo_id: str, status: Status) -> Todo:
    state = load_state(log)
    todo = _require_todo(state, todo_id)
    if todo.status == status:
        logger.info(f"Todo {todo_id} is already {status.value}")
        return todo
    _commit(log, state, Action(type=a.TODO_SET_STATUS, todo_id=todo_id, status=status))
    return state.resolve_todo(todo_id)


def set_estimate(log: ActionLog, todo_id: str, estimate: Estimate | None) -> Todo:
    _check_estimate(estimate)
    state = load_state(log)
    _require_todo(state, todo_id)
    _commit(log, state, Action(type=a.TODO_SET_ESTIMATE, todo_id=todo_id, estimate=estimate))
    return state.resolve_todo(todo_id)


def set_deadline(log: ActionLog, todo_id: str, deadline: datetime | None) -> Todo:
    state = load_state(log)
    _require_todo(state, todo_id)
    _commit(log, state, Action(type=a.TODO_SET_DEADLINE, todo_id=todo_id, deadline=deadline))
    return state.resolve_todo(todo_id)


def add_dependent(log: ActionLog, todo_id: str, dependent_id: str) -> Todo:
    """Record that `dependent_id` is blocked by `todo_id`."""
    if todo_id == dependent_id:
        raise AgendaError("A todo cannot block itself")
    state = load_state(log)
    todo = _require_todo(state, todo_id)
    _require_todo(state, dependent_id)
    if dependent_id in todo.dependent_ids:
        logger.info(f"Todo {dependent_id} is already blocked by {todo_id}")
        return todo
    _commit(
        log, state, Action(type=a.TODO_ADD_DEPENDENT, todo_id=todo_id, dependent_id=dependent_id)
    )
    return state.resolve_todo(todo_id)


def remove_dependent(log: ActionLog, todo_id: str, dependent_id: str) -> Todo:
    state = load_state(log)
    _require_todo(state, todo_id)
    _commit(
        log,
        state,
        Action(type=a.TODO_REMOVE_DEPENDENT, todo_id=todo_id, dependent_id=dependent_id),
    )
    return state.resolve_todo(todo_id)


def remove_todo(log: ActionLog, todo_id: str) -> Todo:
    """Destroy a todo, returning it as it was."""
    state = load_state(log)
    todo = _require_todo(state, todo_id)
    _commit(log, state, Action(type=a.TODO_DESTROY, todo_id=todo_id))
    return todo


# ============== Events ==============


def schedule_event(
    log: ActionLog,
    title: str,
    start: datetime | None = None,
    duration: timedelta = timedelta(0),
    todo_id: str | None = None,
) -> Event:
    """Create an event, optionally caused by a todo."""
    if duration < timedelta(0):
        raise AgendaError("Event duration cannot be negative")
    state = load_state(log)
    causes: tuple[Cause, ...] = ()
    if todo_id is not None:
        todo = _require_todo(state, todo_id)
        causes = (Cause.todo(todo.id),)
        title = title or todo.title
    if not title.strip():
        raise AgendaError("Event title cannot be empty")
    event = Event.new(title.strip(), start=start, duration=duration, causes=causes)
    _commit(log, state, create_event(event))
    return state.resolve_event(event.id)


def remove_event(log: ActionLog, event_id: str) -> Event:
    state = load_state(log)
    event = _require_event(state, event_id)
    _commit(log, state, Action(type=a.EVENT_DESTROY, event_id=event_id))
    return event
