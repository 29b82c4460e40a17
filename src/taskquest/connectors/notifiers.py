# src/taskquest/connectors/notifiers.py

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import TextIO

from ..core.ports import Notifier

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """Prints reminders into the interactive console."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def notify(self, title: str, body: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(f"\n[{_ts_local()}] 🔔 {title}\n    {body}\n")
        stream.flush()


class LogNotifier:
    """Routes reminders into the log (headless runs)."""

    def notify(self, title: str, body: str) -> None:
        logger.info("%s | %s", title, body)


def build_notifier(kind: str) -> Notifier:
    kind = (kind or "").strip().lower()
    if kind == "log":
        return LogNotifier()
    if kind != "console":
        logger.warning("Unknown notifier %r; using console.", kind)
    return ConsoleNotifier()
