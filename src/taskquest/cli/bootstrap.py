# src/taskquest/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (records/tasks/classifier/notifier).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.notifiers import build_notifier
from ..core.clock import SystemClock
from ..core.ports import Clock, TaskClassifier
from ..core.state import AppState
from ..llm.classifier import OpenRouterTaskClassifier
from ..llm.offline import OfflineTaskClassifier
from ..storage.record_store import SqliteRecordStore
from ..tasks.categories import CategoryRegistry
from ..tasks.reminder_scheduler import ReminderLedger
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.records_db_path.parent.mkdir(parents=True, exist_ok=True)


def _build_classifier(settings) -> TaskClassifier:
    if not getattr(settings, "openrouter_api_key", None):
        logger.info("No classifier API key configured; smart add uses defaults.")
        return OfflineTaskClassifier()
    try:
        return OpenRouterTaskClassifier(settings)
    except RuntimeError:
        logger.exception("Classifier misconfigured; falling back to offline mode.")
        return OfflineTaskClassifier()


def create_initial_state(*, settings=None, clock: Clock | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    if clock is None:
        clock = SystemClock()

    _ensure_local_dirs(settings)

    records = SqliteRecordStore(settings.records_db_path)
    categories = CategoryRegistry(records)

    return AppState(
        settings=settings,
        clock=clock,
        records=records,
        categories=categories,
        task_store=TaskStore(records, categories, clock),
        reminders=ReminderLedger(records),
        classifier=_build_classifier(settings),
        notifier=build_notifier(getattr(settings, "notifier", "console")),
    )
