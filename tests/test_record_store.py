# tests/test_record_store.py

from __future__ import annotations

import sqlite3
from pathlib import Path
from types import SimpleNamespace

from taskquest.cli.bootstrap import create_initial_state
from taskquest.connectors.notifiers import LogNotifier
from taskquest.llm.offline import OfflineTaskClassifier
from taskquest.storage.record_store import MemoryRecordStore, SqliteRecordStore
from taskquest.tasks.task_models import Priority

from .fakes import FakeClock


def test_sqlite_put_get_overwrite(tmp_path: Path) -> None:
    store = SqliteRecordStore(tmp_path / "records.sqlite3")
    assert store.get("tasks") is None

    store.put("tasks", [{"id": "a", "text": "é"}])
    assert store.get("tasks") == [{"id": "a", "text": "é"}]

    store.put("tasks", [])
    assert store.get("tasks") == []
    assert store.keys() == ["tasks"]

    # A second instance over the same file sees the data.
    assert SqliteRecordStore(tmp_path / "records.sqlite3").get("tasks") == []


def test_sqlite_corrupt_value_reads_as_missing(tmp_path: Path) -> None:
    db = tmp_path / "records.sqlite3"
    store = SqliteRecordStore(db)
    conn = sqlite3.connect(db)
    conn.execute("INSERT INTO records(key, value, updated_at) VALUES ('stats', '{nope', 0)")
    conn.commit()
    conn.close()

    assert store.get("stats") is None


def test_memory_store_copies_values() -> None:
    store = MemoryRecordStore()
    value = {"xp": 1}
    store.put("stats", value)
    value["xp"] = 99
    assert store.get("stats") == {"xp": 1}


def test_bootstrap_wires_sqlite_state(settings: SimpleNamespace, clock: FakeClock) -> None:
    state = create_initial_state(settings=settings, clock=clock)
    assert isinstance(state.classifier, OfflineTaskClassifier)
    assert isinstance(state.notifier, LogNotifier)

    task = state.task_store.add("Persist me", "work", Priority.HIGH)
    assert task is not None
    state.task_store.complete(task.id)
    state.categories.add_category("garden")

    again = create_initial_state(settings=settings, clock=clock)
    assert again.task_store.get(task.id) is not None
    assert again.task_store.stats.xp == 30
    assert "garden" in again.categories
