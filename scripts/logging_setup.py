"""Logging configuration for the task list TUI.

The terminal belongs to Textual while the app runs, so records never go to
stdout/stderr. They are sent to the Textual devtools console instead
(`textual console`, then run the app with `--dev`).
"""

from __future__ import annotations

import logging

from textual.logging import TextualHandler


def setup_logging(level: int = logging.INFO) -> None:
    """Route all log records through Textual. Call once, before the app starts."""
    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = TextualHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)

    logging.captureWarnings(True)
