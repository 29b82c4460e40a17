# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskquest.core.state import AppState
from taskquest.storage.record_store import MemoryRecordStore
from taskquest.tasks.categories import CategoryRegistry
from taskquest.tasks.reminder_scheduler import ReminderLedger
from taskquest.tasks.task_store import TaskStore

from .fakes import FakeClassifier, FakeClock, FakeNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskquest-test",
        data_dir=tmp_path,
        records_db_path=tmp_path / "records.sqlite3",
        reminders_enabled=True,
        reminder_interval_seconds=0.01,
        notifier="log",
        openrouter_api_key=None,
        openrouter_base_url="https://openrouter.ai/api/v1",
        llm_models=[],
        llm_timeout_seconds=1.0,
        extra_headers={},
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 18, 10, 0, 0))


@pytest.fixture()
def records() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture()
def categories(records: MemoryRecordStore) -> CategoryRegistry:
    return CategoryRegistry(records)


@pytest.fixture()
def store(records: MemoryRecordStore, categories: CategoryRegistry, clock: FakeClock) -> TaskStore:
    return TaskStore(records, categories, clock)


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    clock: FakeClock,
    records: MemoryRecordStore,
    categories: CategoryRegistry,
    store: TaskStore,
    notifier: FakeNotifier,
    classifier: FakeClassifier,
) -> AppState:
    """AppState wired with in-memory records and deterministic fakes."""
    return AppState(
        settings=settings,
        clock=clock,
        records=records,
        categories=categories,
        task_store=store,
        reminders=ReminderLedger(records),
        classifier=classifier,
        notifier=notifier,
    )
