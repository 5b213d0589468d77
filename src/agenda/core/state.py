"""Stateful wrapper around the pure reducer."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .actions import Action
from .events import Event
from .reducer import AgendaSnapshot, reduce
from .todos import Todo

logger = logging.getLogger(__name__)


class AgendaState:
    """
    Single owner of the current agenda snapshot.

    Actions are applied one at a time, in the order given. Each step
    replaces the held snapshot with a new value, so a snapshot handed out
    earlier stays valid for its reader.
    """

    def __init__(self):
        self._snapshot = AgendaSnapshot.empty()
        self.applied = 0

    def initialize(self) -> "AgendaState":
        """Establish the empty snapshot. A no-op once actions have been applied."""
        if self.applied:
            logger.debug(f"initialize() called after {self.applied} actions; keeping state")
            return self
        self._snapshot = AgendaSnapshot.empty()
        return self

    @property
    def snapshot(self) -> AgendaSnapshot:
        return self._snapshot

    @property
    def todos(self) -> Mapping[str, Todo]:
        return self._snapshot.todos

    @property
    def events(self) -> Mapping[str, Event]:
        return self._snapshot.events

    def apply_action(self, action: Action | Mapping[str, Any]) -> AgendaSnapshot:
        """Fold one action (or raw record) into the held snapshot."""
        if not isinstance(action, Action):
            action = Action.from_record(action)
        if not action.is_known:
            logger.warning(f"Ignoring unrecognized action type: {action.type!r}")
        self._snapshot = reduce(self._snapshot, action)
        self.applied += 1
        return self._snapshot

    def apply_all(self, actions: Iterable[Action | Mapping[str, Any]]) -> AgendaSnapshot:
        for action in actions:
            self.apply_action(action)
        return self._snapshot

    def resolve_todo(self, todo_id: str) -> Todo | None:
        """Look up a todo by id. Returns None if not found."""
        return self._snapshot.todos.get(todo_id)

    def resolve_event(self, event_id: str) -> Event | None:
        """Look up an event by id. Returns None if not found."""
        return self._snapshot.events.get(event_id)
