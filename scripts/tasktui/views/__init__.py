"""Textual views for the task list."""
