# src/taskquest/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.categories import CategoryRegistry
from ..tasks.reminder_scheduler import ReminderLedger
from ..tasks.task_store import TaskStore
from .ports import Clock, Notifier, RecordStore, TaskClassifier


@dataclass
class AppState:
    """
    Explicitly owned application state, passed to every command.

    lock serializes command handlers and reminder scans (single writer).
    """

    # Settings object (config.Settings or a SimpleNamespace in tests).
    settings: Any

    clock: Clock
    records: RecordStore
    categories: CategoryRegistry
    task_store: TaskStore
    reminders: ReminderLedger
    classifier: TaskClassifier
    notifier: Notifier

    lock: threading.RLock = field(default_factory=threading.RLock)
