# src/taskquest/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

from ..core.ports import TaskClassifier
from ..core.state import AppState
from .categories import CategoryRegistry, normalize_label
from .task_models import Priority, Schedule, Task

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY: Final = Priority.MEDIUM
DEFAULT_CATEGORY: Final = "personal"
MAX_DESCRIPTION_CHARS: Final = 500


@dataclass(slots=True, frozen=True)
class Suggestion:
    priority: Priority
    category: str
    description: str


def default_suggestion(text: str) -> Suggestion:
    return Suggestion(
        priority=DEFAULT_PRIORITY,
        category=DEFAULT_CATEGORY,
        description=text[:MAX_DESCRIPTION_CHARS],
    )


def validate_suggestion(
    raw: Mapping[str, Any] | None, text: str, categories: CategoryRegistry
) -> Suggestion:
    """
    Check a classifier reply against our own vocabularies.

    Each field falls back to its default on its own: an invalid category does
    not discard a valid priority.
    """
    if not isinstance(raw, Mapping):
        return default_suggestion(text)

    priority = Priority.parse(str(raw.get("priority") or "")) or DEFAULT_PRIORITY

    category = normalize_label(str(raw.get("category") or ""))
    if category not in categories:
        category = DEFAULT_CATEGORY

    description = str(raw.get("description") or "").strip() or text
    return Suggestion(
        priority=priority,
        category=category,
        description=description[:MAX_DESCRIPTION_CHARS],
    )


def suggest_task_fields(
    classifier: TaskClassifier, text: str, categories: CategoryRegistry
) -> Suggestion:
    """Ask the classifier for advice; any failure yields the defaults."""
    text = (text or "").strip()
    try:
        raw = classifier.classify(text, categories=categories.labels())
    except Exception:
        logger.exception("Classifier unavailable; using defaults for %r", text)
        return default_suggestion(text)
    return validate_suggestion(raw, text, categories)


def add_suggested_task(
    state: AppState, text: str, schedule: Schedule | None = None
) -> tuple[Task, Suggestion] | None:
    """Classifier-assisted add. Blank text is a no-op (returns None)."""
    text = (text or "").strip()
    if not text:
        return None

    suggestion = suggest_task_fields(state.classifier, text, state.categories)
    with state.lock:
        task = state.task_store.add(
            text,
            suggestion.category,
            suggestion.priority,
            schedule,
            description=suggestion.description if suggestion.description != text else None,
        )
    if task is None:
        return None
    return task, suggestion


_IDEAS_MORNING: Final = (
    "Review your goals for today",
    "Plan your morning routine",
    "Check important emails",
)
_IDEAS_AFTERNOON: Final = (
    "Take a 15-minute break",
    "Follow up on pending tasks",
    "Prepare for tomorrow",
)
_IDEAS_EVENING: Final = (
    "Reflect on today's achievements",
    "Plan tomorrow's priorities",
    "Wind down with a good book",
)


def daily_ideas(now: datetime) -> list[str]:
    """Canned task ideas for the time of day."""
    if now.hour < 12:
        return list(_IDEAS_MORNING)
    if now.hour < 17:
        return list(_IDEAS_AFTERNOON)
    return list(_IDEAS_EVENING)
