# tests/test_task_api.py

from __future__ import annotations

from datetime import datetime

from taskquest.core.errors import ClassifierUnavailable
from taskquest.core.state import AppState
from taskquest.tasks.categories import CategoryRegistry
from taskquest.tasks.task_api import (
    add_suggested_task,
    daily_ideas,
    suggest_task_fields,
    validate_suggestion,
)
from taskquest.tasks.task_models import Priority

from .fakes import FakeClassifier


def test_valid_suggestion_is_accepted(categories: CategoryRegistry) -> None:
    s = validate_suggestion(
        {"priority": "HIGH", "category": "Work", "description": "Prepare the Q3 deck."},
        "Q3 deck",
        categories,
    )
    assert s.priority == Priority.HIGH
    assert s.category == "work"
    assert s.description == "Prepare the Q3 deck."


def test_invalid_fields_fall_back_independently(categories: CategoryRegistry) -> None:
    s = validate_suggestion({"priority": "low", "category": "astrology"}, "Read stars", categories)
    assert s.priority == Priority.LOW
    assert s.category == "personal"
    assert s.description == "Read stars"

    s2 = validate_suggestion({"priority": "urgent", "category": "shopping"}, "Eggs", categories)
    assert s2.priority == Priority.MEDIUM
    assert s2.category == "shopping"


def test_user_categories_are_valid_targets(categories: CategoryRegistry) -> None:
    categories.add_category("fitness")
    s = validate_suggestion({"category": "fitness"}, "Run", categories)
    assert s.category == "fitness"


def test_long_description_is_capped(categories: CategoryRegistry) -> None:
    s = validate_suggestion({"description": "x" * 900}, "t", categories)
    assert len(s.description) == 500


def test_classifier_failure_yields_defaults(categories: CategoryRegistry) -> None:
    classifier = FakeClassifier(error=ClassifierUnavailable("down"))
    s = suggest_task_fields(classifier, "  Fix bike ", categories)
    assert (s.priority, s.category, s.description) == (Priority.MEDIUM, "personal", "Fix bike")


def test_classifier_receives_registry_labels(categories: CategoryRegistry) -> None:
    classifier = FakeClassifier({"priority": "low"})
    suggest_task_fields(classifier, "Nap", categories)
    assert classifier.calls == [("Nap", categories.labels())]


def test_add_suggested_task(state: AppState, classifier: FakeClassifier) -> None:
    classifier.reply = {"priority": "high", "category": "work", "description": "Ship it today."}
    result = add_suggested_task(state, "Release v2")
    assert result is not None
    task, suggestion = result
    assert task.priority == Priority.HIGH
    assert task.category == "work"
    assert task.description == "Ship it today."
    assert suggestion.category == "work"
    assert state.task_store.get(task.id) == task


def test_add_suggested_task_blank_is_noop(state: AppState, classifier: FakeClassifier) -> None:
    assert add_suggested_task(state, "   ") is None
    assert classifier.calls == []
    assert state.task_store.count_tasks() == 0


def test_daily_ideas_by_time_of_day() -> None:
    assert daily_ideas(datetime(2026, 1, 1, 8))[0] == "Review your goals for today"
    assert daily_ideas(datetime(2026, 1, 1, 14))[0] == "Take a 15-minute break"
    assert daily_ideas(datetime(2026, 1, 1, 20))[0] == "Reflect on today's achievements"
