#!/usr/bin/env python3
"""
Task Store for the TCR task list.

Owns the on-disk representation of the task list. The task file is plain
Markdown, regenerated from scratch on every save:

    # Tasks

    ## Working
    - [~] Wire up the parser

    ## Pending
    - [ ] Write spec

    ## Done
    - [x] Set up repo

Only non-empty groups are written, always in the order Working, Pending,
Done. Loading reads checklist lines only, so headings never come back as
tasks and in-memory order after a reload is the grouped order.

The export file is a JSON array of {"description", "status"} objects. It
is write-only from this program's point of view.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

TASKS_FILE = Path("tasks.md")
EXPORT_FILE = Path("tasks.json")
HEADING = "# Tasks"


class TaskFileError(Exception):
    """Raised when the task file or the export file cannot be read or written."""


class Status(Enum):
    PENDING = "pending"
    WORKING = "working"
    DONE = "done"

    @property
    def marker(self) -> str:
        return _MARKERS[self]

    @property
    def title(self) -> str:
        return self.name.title()

    def cycled(self) -> Status:
        """Next status in the Pending -> Done -> Working -> Pending cycle."""
        return _CYCLE[self]


_MARKERS = {
    Status.PENDING: "- [ ]",
    Status.WORKING: "- [~]",
    Status.DONE: "- [x]",
}

_CYCLE = {
    Status.PENDING: Status.DONE,
    Status.DONE: Status.WORKING,
    Status.WORKING: Status.PENDING,
}

# Section order on disk.
GROUP_ORDER = (Status.WORKING, Status.PENDING, Status.DONE)


@dataclass(frozen=True)
class Task:
    """A single task. Identity is its position in the list."""

    description: str
    status: Status = Status.PENDING

    @classmethod
    def create(cls, text: str, status: Status = Status.PENDING) -> Task:
        """Build a task from user input, rejecting empty descriptions.

        Surrounding whitespace is dropped, as the file format cannot keep it.
        """
        text = text.strip()
        if not text:
            raise ValueError("Task description cannot be empty")
        return cls(description=text, status=status)

    def with_description(self, text: str) -> Task:
        text = text.strip()
        if not text:
            raise ValueError("Task description cannot be empty")
        return replace(self, description=text)

    def cycled(self) -> Task:
        return replace(self, status=self.status.cycled())

    def to_dict(self) -> dict:
        return {"description": self.description, "status": self.status.value}


def _status_for_marker(mark: str) -> Status:
    if mark in ("x", "X"):
        return Status.DONE
    if mark == "~":
        return Status.WORKING
    return Status.PENDING


def parse_line(line: str) -> Task | None:
    """Parse one checklist line, or return None for anything else."""
    stripped = line.strip()
    if not stripped.startswith("- ["):
        return None
    close = stripped.find("]", 3)
    if close == -1:
        return None
    mark = stripped[3:close].strip()
    description = stripped[close + 1:].strip()
    if not description:
        return None
    return Task(description=description, status=_status_for_marker(mark))


def parse_tasks(content: str) -> list[Task]:
    """Parse task file content. Non-checklist lines are ignored."""
    tasks = []
    for line in content.splitlines():
        task = parse_line(line)
        if task is not None:
            tasks.append(task)
    return tasks


def render_tasks(tasks: Iterable[Task]) -> str:
    """Render tasks as the status-grouped Markdown document."""
    tasks = list(tasks)
    lines = [HEADING]
    for status in GROUP_ORDER:
        group = [t for t in tasks if t.status is status]
        if not group:
            continue
        lines.append("")
        lines.append(f"## {status.title}")
        for task in group:
            lines.append(f"{status.marker} {task.description}")
    return "\n".join(lines) + "\n"


def load_tasks(path: Path | None = None) -> list[Task]:
    """Load tasks from the task file. A missing file is an empty list."""
    path = path or TASKS_FILE
    if not path.exists():
        logger.debug("No task file at %s, starting empty", path)
        return []
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TaskFileError(f"Cannot read {path}: {e}") from e
    tasks = parse_tasks(content)
    logger.debug("Loaded %d task(s) from %s", len(tasks), path)
    return tasks


def save_tasks(tasks: Iterable[Task], path: Path | None = None) -> None:
    """Rewrite the whole task file from in-memory state."""
    path = path or TASKS_FILE
    content = render_tasks(tasks)
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise TaskFileError(f"Cannot write {path}: {e}") from e
    logger.debug("Saved task file %s", path)


def export_tasks(tasks: Iterable[Task], path: Path | None = None) -> None:
    """Overwrite the export file with the full list as pretty-printed JSON."""
    path = path or EXPORT_FILE
    data = [t.to_dict() for t in tasks]
    try:
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise TaskFileError(f"Cannot write {path}: {e}") from e
    logger.info("Exported %d task(s) to %s", len(data), path)
