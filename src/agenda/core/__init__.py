"""Functional core - pure business logic with no I/O."""

from .todos import Todo, Status, Estimate, status_glyph
from .events import Event, Cause
from .actions import Action, ActionError, create_todo, create_event
from .reducer import AgendaSnapshot, reduce, replay
from .state import AgendaState
from .display import format_todo_line, format_event_line, format_agenda

__all__ = [
    # Entities
    "Todo",
    "Status",
    "Estimate",
    "status_glyph",
    "Event",
    "Cause",
    # Actions
    "Action",
    "ActionError",
    "create_todo",
    "create_event",
    # Reduction
    "AgendaSnapshot",
    "reduce",
    "replay",
    "AgendaState",
    # Display
    "format_todo_line",
    "format_event_line",
    "format_agenda",
]
