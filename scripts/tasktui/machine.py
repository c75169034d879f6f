"""
Interaction state machine and key routing.

Everything here is pure: route_key takes the current AppState and one key
event and returns a Transition holding the next state plus the side
effects the run loop must perform (persist, export, run TCR, quit). The
run loop commits the new state only once those effects succeed.

Keys are Textual key names ("enter", "escape", "backspace", "up", "down",
or the character itself for letters). character is the printable text of
the key, if any.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from taskstore import Task

DEFAULT_TEST_COMMAND = ""


class Mode(Enum):
    VIEW = "view"
    ADD = "add"
    EDIT = "edit"
    SET_TEST_COMMAND = "set-test-command"
    SUSPENDED = "suspended"


INPUT_MODES = frozenset({Mode.ADD, Mode.EDIT, Mode.SET_TEST_COMMAND})


class Effect(Enum):
    SAVE = "save"
    EXPORT = "export"
    RUN_TCR = "run-tcr"
    QUIT = "quit"


@dataclass(frozen=True)
class Notice:
    """Message for the user. severity follows Textual's notify levels."""

    message: str
    severity: str = "information"


@dataclass(frozen=True)
class AppState:
    """Complete interaction state: task list plus UI mode."""

    tasks: tuple[Task, ...] = ()
    mode: Mode = Mode.VIEW
    selected: int = 0
    buffer: str = ""
    test_command: str = DEFAULT_TEST_COMMAND

    @property
    def selected_task(self) -> Task | None:
        if 0 <= self.selected < len(self.tasks):
            return self.tasks[self.selected]
        return None


@dataclass(frozen=True)
class Transition:
    state: AppState
    effects: tuple[Effect, ...] = ()
    notice: Notice | None = None


EMPTY_WARNING = Notice("Task description cannot be empty", "warning")


# -----------------------------------------------------------------------------
# View mode
# -----------------------------------------------------------------------------


def _quit(state: AppState) -> Transition:
    return Transition(state, (Effect.QUIT,))


def _move_down(state: AppState) -> Transition:
    if not state.tasks:
        return Transition(state)
    return Transition(replace(state, selected=min(state.selected + 1, len(state.tasks) - 1)))


def _move_up(state: AppState) -> Transition:
    return Transition(replace(state, selected=max(state.selected - 1, 0)))


def _delete(state: AppState) -> Transition:
    if state.selected_task is None:
        return Transition(state)
    tasks = state.tasks[: state.selected] + state.tasks[state.selected + 1:]
    selected = min(state.selected, max(len(tasks) - 1, 0))
    return Transition(replace(state, tasks=tasks, selected=selected), (Effect.SAVE,))


def _toggle(state: AppState) -> Transition:
    task = state.selected_task
    if task is None:
        return Transition(state)
    tasks = list(state.tasks)
    tasks[state.selected] = task.cycled()
    return Transition(replace(state, tasks=tuple(tasks)), (Effect.SAVE,))


def _start_add(state: AppState) -> Transition:
    return Transition(replace(state, mode=Mode.ADD, buffer=""))


def _start_edit(state: AppState) -> Transition:
    task = state.selected_task
    if task is None:
        return Transition(state)
    return Transition(replace(state, mode=Mode.EDIT, buffer=task.description))


def _start_set_test_command(state: AppState) -> Transition:
    return Transition(replace(state, mode=Mode.SET_TEST_COMMAND, buffer=state.test_command))


def _start_tcr(state: AppState) -> Transition:
    return Transition(replace(state, mode=Mode.SUSPENDED), (Effect.RUN_TCR,))


def _export(state: AppState) -> Transition:
    return Transition(
        state,
        (Effect.EXPORT,),
        Notice(f"Exported {len(state.tasks)} task(s)"),
    )


VIEW_KEYS: dict[str, Callable[[AppState], Transition]] = {
    "q": _quit,
    "j": _move_down,
    "down": _move_down,
    "k": _move_up,
    "up": _move_up,
    "d": _delete,
    "a": _start_add,
    "e": _start_edit,
    "T": _start_set_test_command,
    "t": _start_tcr,
    "enter": _toggle,
    "E": _export,
}


def _route_view(state: AppState, key: str, character: str | None) -> Transition:
    handler = VIEW_KEYS.get(key)
    if handler is None:
        return Transition(state)
    return handler(state)


# -----------------------------------------------------------------------------
# Input modes
# -----------------------------------------------------------------------------


def _confirm(state: AppState) -> Transition:
    to_view = replace(state, mode=Mode.VIEW, buffer="")

    if state.mode is Mode.ADD:
        try:
            task = Task.create(state.buffer)
        except ValueError:
            return Transition(state, notice=EMPTY_WARNING)
        return Transition(replace(to_view, tasks=state.tasks + (task,)), (Effect.SAVE,))

    if state.mode is Mode.EDIT:
        current = state.selected_task
        if current is None:
            return Transition(to_view)
        try:
            task = current.with_description(state.buffer)
        except ValueError:
            return Transition(state, notice=EMPTY_WARNING)
        tasks = list(state.tasks)
        tasks[state.selected] = task
        return Transition(replace(to_view, tasks=tuple(tasks)), (Effect.SAVE,))

    # SET_TEST_COMMAND takes the buffer verbatim, whitespace included.
    return Transition(
        replace(to_view, test_command=state.buffer),
        notice=Notice(f"Test command: {state.buffer!r}"),
    )


def _route_input(state: AppState, key: str, character: str | None) -> Transition:
    if key == "enter":
        return _confirm(state)
    if key == "escape":
        return Transition(replace(state, mode=Mode.VIEW, buffer=""))
    if key == "backspace":
        return Transition(replace(state, buffer=state.buffer[:-1]))
    if key == "space":
        character = " "
    if character and len(character) == 1 and character.isprintable():
        return Transition(replace(state, buffer=state.buffer + character))
    return Transition(state)


def _route_suspended(state: AppState, key: str, character: str | None) -> Transition:
    return Transition(state)


ROUTES: dict[Mode, Callable[[AppState, str, str | None], Transition]] = {
    Mode.VIEW: _route_view,
    Mode.ADD: _route_input,
    Mode.EDIT: _route_input,
    Mode.SET_TEST_COMMAND: _route_input,
    Mode.SUSPENDED: _route_suspended,
}


def route_key(state: AppState, key: str, character: str | None = None) -> Transition:
    """Apply one key event to the state. Unknown keys are no-ops."""
    return ROUTES[state.mode](state, key, character)


def resume(state: AppState) -> AppState:
    """Leave the suspended mode after the TCR action has finished."""
    return replace(state, mode=Mode.VIEW, buffer="")


def with_tasks(state: AppState, tasks: tuple[Task, ...]) -> AppState:
    """Swap in a task list re-read from disk, keeping the selection in range."""
    selected = min(state.selected, max(len(tasks) - 1, 0))
    return replace(state, tasks=tasks, selected=selected)
