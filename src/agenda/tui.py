"""Interactive terminal list of todos."""

from textual.app import App, ComposeResult
from textual.widgets import Footer, Input, Label, ListItem, ListView

from . import workflows
from .core.display import format_todo_line, sort_todos
from .core.todos import Todo
from .ports.action_log import ActionLog
from .workflows import AgendaError


def todo_lines(todos: list[Todo], show_complete: bool = True) -> list[str]:
    """Lines shown in the list, in display order."""
    ordered = sort_todos(todos)
    if not show_complete:
        ordered = [t for t in ordered if not t.is_complete]
    return [format_todo_line(t) for t in ordered]


class AgendaApp(App[None]):
    CSS = """
    Screen {
        layout: vertical;
    }

    #new-todo {
        dock: top;
        border: solid $primary;
    }

    #todos {
        height: 1fr;
        border: solid green;
    }

    #todos > ListItem.--highlight {
        color: black;
        background: white;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("escape", "quit", "Quit"),
        ("ctrl+c", "quit", "Quit"),
        ("j", "cursor_down", "Down"),
        ("k", "cursor_up", "Up"),
        ("a", "focus_input", "Add"),
    ]

    def __init__(self, log: ActionLog, *, show_complete: bool = True) -> None:
        super().__init__()
        self.action_log = log
        self.show_complete = show_complete
        self.todo_list: ListView
        self.input_box: Input

    def compose(self) -> ComposeResult:
        yield Input(id="new-todo", placeholder="New todo title, then Enter")
        yield ListView(id="todos")
        yield Footer()

    async def on_mount(self) -> None:
        self.todo_list = self.query_one("#todos", ListView)
        self.input_box = self.query_one("#new-todo", Input)
        await self._refresh_todos()
        self.todo_list.focus()

    async def _refresh_todos(self) -> None:
        state = workflows.load_state(self.action_log)
        await self.todo_list.clear()
        for line in todo_lines(list(state.todos.values()), self.show_complete):
            await self.todo_list.append(ListItem(Label(line, markup=False)))
        if self.todo_list.children:
            self.todo_list.index = 0

    def action_cursor_down(self) -> None:
        self.todo_list.action_cursor_down()

    def action_cursor_up(self) -> None:
        self.todo_list.action_cursor_up()

    def action_focus_input(self) -> None:
        self.input_box.focus()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value.strip()
        event.input.value = ""
        if not text:
            self.todo_list.focus()
            return
        try:
            workflows.add_todo(self.action_log, text)
        except AgendaError as e:
            self.notify(str(e), severity="error")
            return
        await self._refresh_todos()
        self.todo_list.focus()
