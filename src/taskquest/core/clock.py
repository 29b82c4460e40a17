# src/taskquest/core/clock.py

from __future__ import annotations

from datetime import datetime


class SystemClock:
    """Local wall-clock time (timezone-aware)."""

    def now(self) -> datetime:
        return datetime.now().astimezone()
