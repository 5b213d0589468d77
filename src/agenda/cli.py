"""Agenda CLI - event-sourced personal task manager."""

import json
import logging
import sys
from datetime import datetime, timedelta

import click

from . import __version__, workflows
from .adapters.yaml_log import ActionLogError, YamlActionLog
from .config import load_config
from .core.display import (
    filter_overdue,
    format_agenda,
    format_event_line,
    format_todo_details,
    format_todo_line,
    sort_events,
    sort_todos,
)
from .core.todos import Status
from .workflows import AgendaError


class DateTimeParam(click.ParamType):
    """ISO-8601 date or date-time."""

    name = "datetime"

    def convert(self, value, param, ctx):
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            self.fail(f"{value!r} is not an ISO date or date-time (e.g. 2025-01-15T09:30)", param, ctx)


DATETIME = DateTimeParam()


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _log(ctx: click.Context) -> YamlActionLog:
    return ctx.obj["log"]


def _load(ctx: click.Context, limit: int | None = None):
    try:
        return workflows.load_state(_log(ctx), limit=limit)
    except ActionLogError as e:
        _fail(str(e))


def _write(fn, *args, **kwargs):
    """Run a workflow write, turning expected failures into a clean exit."""
    try:
        return fn(*args, **kwargs)
    except (AgendaError, ActionLogError) as e:
        _fail(str(e))


@click.group()
@click.version_option(version=__version__)
@click.option("--log", "log_file", type=click.Path(dir_okay=False), default=None,
              help="Action log to use (default from agenda.conf or ~/.todo.yaml)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, log_file: str | None, debug: bool):
    """Agenda - event-sourced personal task manager."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    config = load_config()
    if log_file:
        config.log_file = log_file
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["log"] = workflows.get_log(config)


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--all", "show_all", is_flag=True, help="Include completed todos")
@click.option("--overdue", is_flag=True, help="Only incomplete todos past their deadline")
@click.option("--at", "limit", type=click.IntRange(min=0), default=None,
              help="Show the agenda as of the first N actions in the log")
@click.pass_context
def list_todos(ctx, as_json: bool, show_all: bool, overdue: bool, limit: int | None):
    """List todos and events."""
    state = _load(ctx, limit)
    include_complete = show_all or ctx.obj["config"].show_complete

    if overdue:
        todos = filter_overdue(sort_todos(list(state.todos.values())), datetime.now())
        if as_json:
            click.echo(json.dumps([t.to_display_record() for t in todos], indent=2))
            return
        if not todos:
            click.echo("Nothing overdue.")
            return
        for todo in todos:
            click.echo(format_todo_line(todo))
        return

    if as_json:
        todos = sort_todos(list(state.todos.values()))
        if not include_complete:
            todos = [t for t in todos if not t.is_complete]
        click.echo(json.dumps([t.to_display_record() for t in todos], indent=2))
        return

    click.echo(format_agenda(state.snapshot, include_complete=include_complete))


@main.command()
@click.argument("todo_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx, todo_id: str, as_json: bool):
    """Show one todo."""
    state = _load(ctx)
    todo = state.resolve_todo(todo_id)
    if todo is None:
        _fail(f"No todo with id {todo_id}")

    if as_json:
        record = todo.to_display_record()
        record["dependentIDs"] = list(todo.dependent_ids)
        click.echo(json.dumps(record, indent=2))
    else:
        click.echo(format_todo_details(todo, state.snapshot))


@main.command()
@click.argument("title")
@click.option("--estimate", "-e", default=None, help="Estimate in minutes: N or LOW-HIGH")
@click.option("--deadline", "-d", type=DATETIME, default=None, help="Deadline (ISO date/time)")
@click.pass_context
def add(ctx, title: str, estimate: str | None, deadline: datetime | None):
    """Add a todo."""
    parsed = _write(workflows.parse_estimate, estimate) if estimate else None
    todo = _write(workflows.add_todo, _log(ctx), title, estimate=parsed, deadline=deadline)
    click.echo(format_todo_line(todo))


@main.command()
@click.argument("todo_id")
@click.argument("title")
@click.pass_context
def title(ctx, todo_id: str, title: str):
    """Rename a todo."""
    todo = _write(workflows.set_title, _log(ctx), todo_id, title)
    click.echo(format_todo_line(todo))


@main.command()
@click.argument("todo_id")
@click.argument("status_name", metavar="STATUS")
@click.pass_context
def status(ctx, todo_id: str, status_name: str):
    """Set a todo's status (ready, in-progress, blocked, complete)."""
    new_status = _write(workflows.parse_status, status_name)
    todo = _write(workflows.set_status, _log(ctx), todo_id, new_status)
    click.echo(format_todo_line(todo))


def _status_shortcut(name: str, new_status: Status, help_text: str):
    @main.command(name, help=help_text)
    @click.argument("todo_id")
    @click.pass_context
    def command(ctx, todo_id: str):
        todo = _write(workflows.set_status, _log(ctx), todo_id, new_status)
        click.echo(format_todo_line(todo))

    return command


done = _status_shortcut("done", Status.COMPLETE, "Mark a todo complete.")
start = _status_shortcut("start", Status.IN_PROGRESS, "Mark a todo in progress.")
block = _status_shortcut("block", Status.BLOCKED, "Mark a todo blocked.")
reopen = _status_shortcut("reopen", Status.READY, "Mark a todo ready again.")


@main.command()
@click.argument("todo_id")
@click.argument("minutes", required=False)
@click.pass_context
def estimate(ctx, todo_id: str, minutes: str | None):
    """Set a todo's estimate (N or LOW-HIGH minutes); omit to clear."""
    parsed = _write(workflows.parse_estimate, minutes) if minutes else None
    todo = _write(workflows.set_estimate, _log(ctx), todo_id, parsed)
    click.echo(format_todo_details(todo))


@main.command()
@click.argument("todo_id")
@click.argument("when", type=DATETIME, required=False)
@click.pass_context
def deadline(ctx, todo_id: str, when: datetime | None):
    """Set a todo's deadline; omit to clear."""
    todo = _write(workflows.set_deadline, _log(ctx), todo_id, when)
    click.echo(format_todo_details(todo))


@main.command()
@click.argument("todo_id")
@click.argument("dependent_id")
@click.pass_context
def depend(ctx, todo_id: str, dependent_id: str):
    """Record that DEPENDENT_ID is blocked by TODO_ID."""
    todo = _write(workflows.add_dependent, _log(ctx), todo_id, dependent_id)
    click.echo(format_todo_details(todo))


@main.command()
@click.argument("todo_id")
@click.argument("dependent_id")
@click.pass_context
def undepend(ctx, todo_id: str, dependent_id: str):
    """Remove DEPENDENT_ID from the todos blocked by TODO_ID."""
    todo = _write(workflows.remove_dependent, _log(ctx), todo_id, dependent_id)
    click.echo(format_todo_details(todo))


@main.command()
@click.argument("todo_id")
@click.pass_context
def rm(ctx, todo_id: str):
    """Delete a todo."""
    todo = _write(workflows.remove_todo, _log(ctx), todo_id)
    click.echo(f"Removed: {todo.title}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def events(ctx, as_json: bool):
    """List scheduled events."""
    state = _load(ctx)
    scheduled = sort_events(list(state.events.values()))

    if as_json:
        click.echo(json.dumps([e.to_display_record() for e in scheduled], indent=2))
        return
    if not scheduled:
        click.echo("No events.")
        return
    for event in scheduled:
        click.echo(format_event_line(event))


@main.command()
@click.argument("event_title", metavar="TITLE", required=False, default="")
@click.option("--start", "-s", "when", type=DATETIME, default=None, help="Start (ISO date/time)")
@click.option("--minutes", "-m", type=click.IntRange(min=0), default=0, help="Duration in minutes")
@click.option("--todo", "todo_id", default=None, help="Todo this event is for")
@click.pass_context
def schedule(ctx, event_title: str, when: datetime | None, minutes: int, todo_id: str | None):
    """Schedule an event, optionally for a todo."""
    event = _write(
        workflows.schedule_event,
        _log(ctx),
        event_title,
        start=when,
        duration=timedelta(minutes=minutes),
        todo_id=todo_id,
    )
    click.echo(format_event_line(event))


@main.command()
@click.argument("event_id")
@click.pass_context
def unschedule(ctx, event_id: str):
    """Delete an event."""
    event = _write(workflows.remove_event, _log(ctx), event_id)
    click.echo(f"Removed: {event.title}")


@main.command()
@click.pass_context
def edit(ctx):
    """Open the action log in your editor."""
    config = ctx.obj["config"]
    log = _log(ctx)
    if not log.exists():
        log.path.parent.mkdir(parents=True, exist_ok=True)
        log.path.touch()
    click.edit(filename=str(log.path), editor=config.editor or None)
    # Surface mistakes made while editing
    _load(ctx)


@main.command()
@click.pass_context
def ui(ctx):
    """Browse todos in an interactive terminal list."""
    try:
        from .tui import AgendaApp
    except ImportError as e:
        click.echo("Error: Missing dependencies. Run 'pip install textual'", err=True)
        click.echo(f"Details: {e}", err=True)
        sys.exit(1)

    _load(ctx)
    AgendaApp(_log(ctx), show_complete=ctx.obj["config"].show_complete).run()


if __name__ == "__main__":
    main()
