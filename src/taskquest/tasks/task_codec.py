# src/taskquest/tasks/task_codec.py

from __future__ import annotations

"""
JSON-ready encoding of tasks and stats.

All date/time fields are ISO-8601 strings. Optional fields that are unset are
omitted from the record (never written as null) and stay unset on load.
"""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from .task_models import Priority, Task, UserStats

_DATE_FIELDS = ("start_date", "end_date")
_DATETIME_FIELDS = ("completed_at", "reminder_time")
_TEXT_FIELDS = ("description", "start_time", "end_time")


def task_to_record(task: Task) -> dict[str, Any]:
    rec: dict[str, Any] = {
        "id": task.id,
        "text": task.text,
        "completed": task.completed,
        "category": task.category,
        "priority": task.priority.value,
        "created_at": task.created_at.isoformat(),
    }
    for name in _DATETIME_FIELDS + _DATE_FIELDS:
        v = getattr(task, name)
        if v is not None:
            rec[name] = v.isoformat()
    for name in _TEXT_FIELDS:
        v = getattr(task, name)
        if v is not None:
            rec[name] = v
    return rec


def task_from_record(rec: Any) -> Task:
    """
    Decode a stored task.

    Raises ValueError/KeyError/TypeError for malformed records; the store skips those.
    """
    if not isinstance(rec, Mapping):
        raise TypeError(f"task record is not an object: {type(rec).__name__}")

    priority = Priority.parse(rec.get("priority"))
    if priority is None:
        raise ValueError(f"bad priority: {rec.get('priority')!r}")

    text = str(rec["text"]).strip()
    if not text:
        raise ValueError("empty text")

    kwargs: dict[str, Any] = {}
    for name in _DATETIME_FIELDS:
        raw = rec.get(name)
        if raw is not None:
            kwargs[name] = datetime.fromisoformat(str(raw))
    for name in _DATE_FIELDS:
        raw = rec.get(name)
        if raw is not None:
            kwargs[name] = date.fromisoformat(str(raw)[:10])
    for name in _TEXT_FIELDS:
        raw = rec.get(name)
        if raw is not None:
            kwargs[name] = str(raw)

    completed = bool(rec.get("completed", False))
    if completed and kwargs.get("completed_at") is None:
        raise ValueError("completed task without completed_at")
    if not completed:
        kwargs.pop("completed_at", None)

    return Task(
        id=str(rec["id"]),
        text=text,
        category=str(rec["category"]).strip().lower(),
        priority=priority,
        created_at=datetime.fromisoformat(str(rec["created_at"])),
        completed=completed,
        **kwargs,
    )


def stats_to_record(stats: UserStats) -> dict[str, Any]:
    return {
        "xp": stats.xp,
        "level": stats.level,
        "streak": stats.streak,
        "last_task_date": stats.last_task_date,
        "badges": list(stats.badges),
    }


def stats_from_record(rec: Any) -> UserStats:
    """Decode stats; unknown shapes fall back to zero stats. Stored level is ignored."""
    if not isinstance(rec, dict):
        return UserStats()

    def _non_negative(name: str) -> int:
        try:
            return max(0, int(rec.get(name, 0) or 0))
        except (TypeError, ValueError):
            return 0

    badges_raw = rec.get("badges") or []
    badges = tuple(str(b) for b in badges_raw) if isinstance(badges_raw, list) else ()

    return UserStats(
        xp=_non_negative("xp"),
        streak=_non_negative("streak"),
        last_task_date=str(rec.get("last_task_date") or ""),
        badges=badges,
    )
