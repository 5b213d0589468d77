"""Pure plain-text formatting and views over a snapshot - no I/O dependencies."""

from datetime import datetime

from .events import Event
from .reducer import AgendaSnapshot
from .todos import Status, Todo

# Display order for statuses; unrecognized statuses sort last
_STATUS_ORDER = {
    Status.IN_PROGRESS: 0,
    Status.READY: 1,
    Status.BLOCKED: 2,
    Status.COMPLETE: 3,
}


def format_todo_line(todo: Todo) -> str:
    """
    Format a single todo for display.

    Pure function - no I/O.
    """
    return f"{todo.id}. {todo.status_glyph()} {todo.title}"


def format_todo_details(todo: Todo, snapshot: AgendaSnapshot | None = None) -> str:
    """Multi-line description of one todo, resolving dependents when a snapshot is given."""
    lines = [format_todo_line(todo)]
    if todo.estimate:
        lines.append(f"  estimate: {todo.estimate.format()}")
    if todo.deadline:
        lines.append(f"  deadline: {todo.deadline.strftime('%Y-%m-%d %H:%M')}")
    if todo.dependent_ids:
        if snapshot is None:
            titles = list(todo.dependent_ids)
        else:
            titles = [
                snapshot.todos[d].title if d in snapshot.todos else f"{d} (missing)"
                for d in todo.dependent_ids
            ]
        lines.append(f"  blocks: {', '.join(titles)}")
    return "\n".join(lines)


def format_event_line(event: Event) -> str:
    """
    Format a single event for display.

    Pure function - no I/O.
    """
    when = event.start.strftime("%Y-%m-%d %H:%M") if event.start else "unscheduled"
    length = f" ({event.duration_minutes()} min)" if event.duration else ""
    return f"{event.id}. {when} {event.title}{length}"


def sort_todos(todos: list[Todo]) -> list[Todo]:
    """
    Sort by status (in progress first, complete last), then deadline, then title.

    Pure function - no I/O.
    """

    def sort_key(t: Todo) -> tuple:
        try:
            rank = _STATUS_ORDER[Status(t.status)]
        except ValueError:
            rank = len(_STATUS_ORDER)
        # No deadline sorts after any deadline
        deadline = t.deadline.timestamp() if t.deadline else float("inf")
        return (rank, deadline, t.title.lower())

    return sorted(todos, key=sort_key)


def sort_events(events: list[Event]) -> list[Event]:
    """Sort by start time; unscheduled events go last."""
    return sorted(events, key=lambda e: (e.start is None, e.start.timestamp() if e.start else 0))


def filter_by_status(todos: list[Todo], *statuses: Status | str) -> list[Todo]:
    """Filter todos to the given statuses."""
    return [t for t in todos if t.status in statuses]


def filter_overdue(todos: list[Todo], as_of: datetime) -> list[Todo]:
    """Incomplete todos whose deadline has passed."""
    # Naive datetimes are taken as local time so they compare with aware ones
    cutoff = as_of.astimezone()
    return [
        t for t in todos if t.deadline and t.deadline.astimezone() < cutoff and not t.is_complete
    ]


def resolve_dependents(snapshot: AgendaSnapshot, todo: Todo) -> list[Todo]:
    """Todos blocked by this one. Dangling ids are skipped."""
    return [snapshot.todos[d] for d in todo.dependent_ids if d in snapshot.todos]


def format_agenda(snapshot: AgendaSnapshot, include_complete: bool = True) -> str:
    """
    Format the whole snapshot as plain text.

    Pure function - no I/O.
    """
    todos = sort_todos(list(snapshot.todos.values()))
    if not include_complete:
        todos = [t for t in todos if not t.is_complete]
    events = sort_events(list(snapshot.events.values()))

    todos_text = "\n".join(format_todo_line(t) for t in todos) or "No todos."
    sections = [f"### Todos\n{todos_text}"]
    if events:
        events_text = "\n".join(format_event_line(e) for e in events)
        sections.append(f"### Events\n{events_text}")
    return "\n\n".join(sections)
