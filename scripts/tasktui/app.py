"""
TCR Tasks TUI Application.

Main entry point for the terminal user interface.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Ensure scripts directory is in path
SCRIPT_DIR = Path(__file__).resolve().parent.parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from textual.app import App, SuspendNotSupported  # noqa: E402

import taskstore  # noqa: E402
import tcr  # noqa: E402
from logging_setup import setup_logging  # noqa: E402
from taskstore import TaskFileError, export_tasks, load_tasks, save_tasks  # noqa: E402
from tasktui.machine import AppState, Effect, Transition, resume, route_key, with_tasks  # noqa: E402
from tasktui.views.task_list import TaskListScreen  # noqa: E402

logger = logging.getLogger(__name__)

RETURN_PROMPT = "Press Enter to return to UI..."


class TaskListApp(App):
    """Task list with a test && commit || revert action."""

    TITLE = "TCR Tasks"
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        tasks_file: Path | None = None,
        export_file: Path | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.tasks_file = tasks_file or taskstore.TASKS_FILE
        self.export_file = export_file or taskstore.EXPORT_FILE
        self.repo_dir = self.tasks_file.resolve().parent
        self.app_state = AppState(tasks=tuple(load_tasks(self.tasks_file)))

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.sub_title = str(self.tasks_file)
        self.push_screen(TaskListScreen())

    def refresh_view(self) -> None:
        if isinstance(self.screen, TaskListScreen):
            self.screen.show_state(self.app_state)

    def route_key_event(self, key: str, character: str | None = None) -> None:
        self.apply_transition(route_key(self.app_state, key, character))

    def apply_transition(self, transition: Transition) -> None:
        """Perform the transition's effects, then commit its state.

        A failed write discards the whole transition, so the in-memory list
        never drifts from what the user last saw saved.
        """
        state = transition.state
        try:
            for effect in transition.effects:
                if effect is Effect.SAVE:
                    save_tasks(state.tasks, self.tasks_file)
                elif effect is Effect.EXPORT:
                    export_tasks(state.tasks, self.export_file)
        except TaskFileError as e:
            logger.error("%s", e)
            self.notify(str(e), title="Write failed", severity="error")
            return

        self.app_state = state
        if transition.notice:
            if transition.notice.severity == "warning":
                logger.warning("%s", transition.notice.message)
            self.notify(transition.notice.message, severity=transition.notice.severity)

        if Effect.QUIT in transition.effects:
            self.exit()
            return
        if Effect.RUN_TCR in transition.effects:
            self.refresh_view()
            self.test_and_commit()
        self.refresh_view()

    # -------------------------------------------------------------------------
    # test && commit || revert
    # -------------------------------------------------------------------------

    def reload_tasks(self) -> None:
        """Re-read the task file after git has rewritten it."""
        try:
            tasks = tuple(load_tasks(self.tasks_file))
        except TaskFileError as e:
            logger.error("%s", e)
            self.notify(str(e), title="Reload failed", severity="error")
            return
        self.app_state = with_tasks(self.app_state, tasks)

    def _tcr(self, capture: bool) -> tcr.TcrOutcome:
        state = self.app_state
        task = state.selected_task

        def persist() -> None:
            save_tasks(state.tasks, self.tasks_file)

        try:
            return tcr.run_tcr(
                state.test_command,
                persist,
                task.description if task else None,
                cwd=self.repo_dir,
                capture=capture,
            )
        except TaskFileError as e:
            logger.error("%s", e)
            return tcr.TcrOutcome(passed=True, message=f"Tests passed but saving failed: {e}")

    def _tcr_in_terminal(self) -> tcr.TcrOutcome:
        outcome = self._tcr(capture=False)
        print(outcome.message)
        print(RETURN_PROMPT)
        try:
            input()
        except EOFError:
            pass
        return outcome

    def test_and_commit(self) -> None:
        """Run the TCR action with the display suspended.

        Where the terminal cannot be handed over (headless, web) the command
        output is captured instead and only the outcome is shown. Either way
        the state machine is resumed to view mode.
        """
        try:
            try:
                with self.suspend():
                    outcome = self._tcr_in_terminal()
            except SuspendNotSupported:
                logger.info("Display cannot be suspended, capturing command output")
                outcome = self._tcr(capture=True)
        finally:
            self.app_state = resume(self.app_state)

        if outcome.reverted:
            self.reload_tasks()

        if outcome.committed:
            severity = "information"
        elif outcome.passed:
            severity = "warning"
        else:
            severity = "error"
        self.notify(outcome.message, title="Test && commit", severity=severity)


def run(tasks_file: Path | None = None, export_file: Path | None = None) -> None:
    """Run the TUI application."""
    setup_logging()
    try:
        app = TaskListApp(tasks_file=tasks_file, export_file=export_file)
        app.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if app.return_code:
        sys.exit(app.return_code)


if __name__ == "__main__":
    run()
