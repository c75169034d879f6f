"""Task list screen: the list panel, the input box and the status line."""

from __future__ import annotations

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Header, Static

from taskstore import Status
from tasktui.machine import INPUT_MODES, AppState, Mode

HELP = "Enter: toggle, a: add, e: edit, d: delete, T: set test, t: test+commit, E: export, q: quit"

STATUS_PREFIX = {
    Status.PENDING: "[ ]",
    Status.WORKING: "[working]",
    Status.DONE: "[done]",
}

INPUT_TITLES = {
    Mode.ADD: "Enter task description",
    Mode.EDIT: "Edit task description",
    Mode.SET_TEST_COMMAND: "Enter test command (used by 't')",
}


def task_lines(state: AppState) -> Text:
    """Render one line per task, highlighting the selection."""
    text = Text()
    for i, task in enumerate(state.tasks):
        if i:
            text.append("\n")
        line = f"{STATUS_PREFIX[task.status]} {task.description}"
        style = "bold yellow" if i == state.selected else ""
        text.append(line, style=style)
    if not state.tasks:
        text.append("No tasks. Press 'a' to add one.", style="dim")
    return text


class TaskListPanel(Static):
    """Bordered list of tasks."""

    DEFAULT_CSS = """
    TaskListPanel {
        height: 1fr;
        border: solid $primary;
        padding: 0 1;
    }
    """

    def on_mount(self) -> None:
        self.border_title = f"Tasks ({HELP})"

    def show_state(self, state: AppState) -> None:
        self.update(task_lines(state))


class InputPanel(Static):
    """Single-line input box, visible only in the input modes."""

    DEFAULT_CSS = """
    InputPanel {
        height: 3;
        border: solid $success;
        color: $success;
        padding: 0 1;
        display: none;
    }
    """

    def show_state(self, state: AppState) -> None:
        self.display = state.mode in INPUT_MODES
        if self.display:
            self.border_title = INPUT_TITLES[state.mode]
            self.update(Text(state.buffer + "_"))


class StatusLine(Static):
    """Mode and test command summary."""

    DEFAULT_CSS = """
    StatusLine {
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def show_state(self, state: AppState) -> None:
        command = state.test_command.strip() or "(none)"
        self.update(Text(f"Mode: {state.mode.value} | Test command: {command}"))


class TaskListScreen(Screen):
    """Main screen. Every key goes to the app's state machine."""

    def compose(self) -> ComposeResult:
        yield Header()
        yield TaskListPanel(id="tasks")
        yield InputPanel(id="input")
        yield StatusLine(id="status")

    def on_mount(self) -> None:
        self.show_state(self.app.app_state)

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.app.route_key_event(event.key, event.character)

    def show_state(self, state: AppState) -> None:
        self.query_one(TaskListPanel).show_state(state)
        self.query_one(InputPanel).show_state(state)
        self.query_one(StatusLine).show_state(state)
