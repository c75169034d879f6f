"""
External actions for the "test && commit || revert" workflow.

The test command is user supplied text, split on whitespace into a program
and its arguments. No shell is involved, so quotes and pipes are passed
through literally. Version control is plain git: stage everything, commit
with a message, or discard every local modification.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

GIT = "git"
COMMIT_PREFIX = "TCR: completed task"
NO_COMMAND_WARNING = "No test command set (press T to set one)."


@dataclass(frozen=True)
class TcrOutcome:
    """Result of one test-and-commit attempt."""

    passed: bool
    committed: bool = False
    reverted: bool = False
    message: str = ""


def run_test_command(command: str, cwd: Path | None = None, capture: bool = False) -> bool:
    """Run the test command and report whether it exited successfully.

    An empty or whitespace-only command counts as a failure and nothing is
    spawned. With capture=False the command shares the terminal, so the
    caller must have suspended any full-screen display first.
    """
    parts = command.split()
    if not parts:
        logger.info("No test command set")
        return False

    logger.info("Running test command: %s", parts)
    try:
        result = subprocess.run(parts, cwd=cwd, capture_output=capture, text=True)
    except OSError as e:
        logger.warning("Test command could not be started: %s", e)
        return False

    logger.info("Test command exited with %d", result.returncode)
    return result.returncode == 0


def _git(args: list[str], cwd: Path | None) -> subprocess.CompletedProcess:
    return subprocess.run([GIT, *args], cwd=cwd, capture_output=True, text=True)


def commit(message: str, cwd: Path | None = None) -> tuple[bool, str]:
    """Stage all changes and commit them. Returns (success, message)."""
    steps = (
        ("git add", ["add", "-A"]),
        ("git commit", ["commit", "-m", message]),
    )
    for label, args in steps:
        try:
            result = _git(args, cwd)
        except OSError as e:
            return False, f"{label} failed: {e}"
        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            return False, f"{label} failed: {detail}" if detail else f"{label} failed"

    logger.info("Committed: %s", message)
    return True, f"Committed: {message}"


def revert(cwd: Path | None = None) -> tuple[bool, str]:
    """Discard all local modifications to tracked files."""
    try:
        result = _git(["reset", "--hard"], cwd)
    except OSError as e:
        return False, f"git reset failed: {e}"
    if result.returncode != 0:
        return False, f"git reset failed: {result.stderr.strip()}"

    logger.info("Reverted working tree")
    return True, "Reverted local changes"


def commit_message(description: str) -> str:
    return f'{COMMIT_PREFIX} "{description}"'


def run_tcr(
    command: str,
    persist: Callable[[], None],
    description: str | None,
    cwd: Path | None = None,
    capture: bool = False,
) -> TcrOutcome:
    """Run the tests, then commit on success or revert on failure.

    persist is called after a passing run so the commit includes the
    current task file; a TaskFileError from it propagates to the caller.
    description is the selected task, or None when the list is empty, in
    which case nothing is committed.
    """
    if not run_test_command(command, cwd=cwd, capture=capture):
        failed = "Tests failed, not committing."
        if not command.split():
            logger.warning("Reverting without a test command")
            failed = f"{NO_COMMAND_WARNING} {failed}"
        ok, msg = revert(cwd)
        if not ok:
            logger.warning("Revert failed: %s", msg)
            return TcrOutcome(passed=False, message=f"{failed} {msg}")
        return TcrOutcome(
            passed=False,
            reverted=True,
            message=f"{failed} Local changes reverted.",
        )

    persist()

    if description is None:
        return TcrOutcome(passed=True, message="Tests passed, no task selected to commit.")

    ok, msg = commit(commit_message(description), cwd)
    if not ok:
        logger.warning("Commit failed: %s", msg)
        return TcrOutcome(passed=True, message=f"Tests passed. Commit failed: {msg}")
    return TcrOutcome(passed=True, committed=True, message=f"Tests passed. {msg}")
