# src/taskquest/core/errors.py

from __future__ import annotations


class TaskQuestError(Exception):
    """Base class for errors surfaced to the caller of a command."""


class InvalidCategory(TaskQuestError, ValueError):
    """The task references a category that is not registered."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Unknown category: {category!r}")
        self.category = category


class DuplicateCategory(TaskQuestError, ValueError):
    """The category already exists (case-insensitive)."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Category already exists: {category!r}")
        self.category = category


class ClassifierUnavailable(TaskQuestError, RuntimeError):
    """The external classifier failed or returned unusable data."""
