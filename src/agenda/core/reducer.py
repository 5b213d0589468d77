"""
Agenda reducer.

Pure function: (snapshot, action) -> snapshot
No side effects. No I/O. Deterministic.

Every mutation helper returns the updated entity, or None when the target
does not exist, in which case the snapshot is returned unchanged. Unknown
action kinds are the identity so that logs written by newer versions still
replay.
"""

import dataclasses
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from . import actions as a
from .actions import Action
from .events import Event
from .todos import Todo


@dataclass(frozen=True)
class AgendaSnapshot:
    """Materialized todos and events at a point in the action log."""

    todos: Mapping[str, Todo] = field(default_factory=dict)
    events: Mapping[str, Event] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "AgendaSnapshot":
        return cls()

    def with_todos(self, todos: dict[str, Todo]) -> "AgendaSnapshot":
        return AgendaSnapshot(todos=todos, events=self.events)

    def with_events(self, events: dict[str, Event]) -> "AgendaSnapshot":
        return AgendaSnapshot(todos=self.todos, events=events)


def reduce(state: AgendaSnapshot | None, action: Action) -> AgendaSnapshot:
    """Apply one action to a snapshot, returning the next snapshot."""
    state = state if state is not None else AgendaSnapshot.empty()
    handler = _HANDLERS.get(action.type)
    if handler is None:
        return state
    return handler(state, action)


def replay(actions: Iterable[Action], limit: int | None = None) -> AgendaSnapshot:
    """
    Fold actions left-to-right from the empty snapshot.

    With a limit, stop after that many actions and return the state as of
    that point in the log.
    """
    state = AgendaSnapshot.empty()
    for count, action in enumerate(actions):
        if limit is not None and count >= limit:
            break
        state = reduce(state, action)
    return state


# ============== Todos ==============


def _put_todo(state: AgendaSnapshot, todo: Todo | None) -> AgendaSnapshot:
    if todo is None:
        return state
    return state.with_todos({**state.todos, todo.id: todo})


def _update_todo(state: AgendaSnapshot, todo_id: str, **changes) -> Todo | None:
    todo = state.todos.get(todo_id)
    if todo is None:
        return None
    return dataclasses.replace(todo, **changes)


def _todo_create(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    return _put_todo(state, Todo(**{**a.todo_fields(action.todo), "id": action.todo_id}))


def _todo_set_title(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    return _put_todo(state, _update_todo(state, action.todo_id, title=action.title))


def _todo_set_status(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    return _put_todo(state, _update_todo(state, action.todo_id, status=action.status))


def _todo_set_estimate(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    return _put_todo(state, _update_todo(state, action.todo_id, estimate=action.estimate))


def _todo_set_deadline(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    return _put_todo(state, _update_todo(state, action.todo_id, deadline=action.deadline))


def _todo_add_dependent(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    todo = state.todos.get(action.todo_id)
    if todo is None:
        return state
    dependents = todo.dependent_ids + (action.dependent_id,)
    return _put_todo(state, dataclasses.replace(todo, dependent_ids=dependents))


def _todo_remove_dependent(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    todo = state.todos.get(action.todo_id)
    if todo is None:
        return state
    dependents = tuple(d for d in todo.dependent_ids if d != action.dependent_id)
    return _put_todo(state, dataclasses.replace(todo, dependent_ids=dependents))


def _todo_destroy(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    if action.todo_id not in state.todos:
        return state
    todos = dict(state.todos)
    del todos[action.todo_id]
    return state.with_todos(todos)


# ============== Events ==============


def _put_event(state: AgendaSnapshot, event: Event | None) -> AgendaSnapshot:
    if event is None:
        return state
    return state.with_events({**state.events, event.id: event})


def _update_event(state: AgendaSnapshot, event_id: str, **changes) -> Event | None:
    event = state.events.get(event_id)
    if event is None:
        return None
    return dataclasses.replace(event, **changes)


def _event_create(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    return _put_event(state, Event(**{**a.event_fields(action.event), "id": action.event_id}))


def _event_set_title(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    return _put_event(state, _update_event(state, action.event_id, title=action.title))


def _event_set_start(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    return _put_event(state, _update_event(state, action.event_id, start=action.start))


def _event_set_duration(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    return _put_event(state, _update_event(state, action.event_id, duration=action.duration))


def _event_add_cause(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    event = state.events.get(action.event_id)
    if event is None:
        return state
    causes = event.causes + (action.cause,)
    return _put_event(state, dataclasses.replace(event, causes=causes))


def _event_remove_cause(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    event = state.events.get(action.event_id)
    if event is None:
        return state
    causes = tuple(c for c in event.causes if c != action.cause)
    return _put_event(state, dataclasses.replace(event, causes=causes))


def _event_destroy(state: AgendaSnapshot, action: Action) -> AgendaSnapshot:
    if action.event_id not in state.events:
        return state
    events = dict(state.events)
    del events[action.event_id]
    return state.with_events(events)


_HANDLERS: dict[str, Callable[[AgendaSnapshot, Action], AgendaSnapshot]] = {
    a.TODO_CREATE: _todo_create,
    a.TODO_SET_TITLE: _todo_set_title,
    a.TODO_SET_STATUS: _todo_set_status,
    a.TODO_SET_ESTIMATE: _todo_set_estimate,
    a.TODO_SET_DEADLINE: _todo_set_deadline,
    a.TODO_ADD_DEPENDENT: _todo_add_dependent,
    a.TODO_REMOVE_DEPENDENT: _todo_remove_dependent,
    a.TODO_DESTROY: _todo_destroy,
    a.EVENT_CREATE: _event_create,
    a.EVENT_SET_TITLE: _event_set_title,
    a.EVENT_SET_START: _event_set_start,
    a.EVENT_SET_DURATION: _event_set_duration,
    a.EVENT_ADD_CAUSE: _event_add_cause,
    a.EVENT_REMOVE_CAUSE: _event_remove_cause,
    a.EVENT_DESTROY: _event_destroy,
}
