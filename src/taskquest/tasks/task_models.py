# src/taskquest/tasks/task_models.py

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum

ALL = "all"

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, raw: str | None) -> Priority | None:
        """Case-insensitive lookup; None for anything outside the closed set."""
        if not raw:
            return None
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return None


class StatusFilter(StrEnum):
    ALL = "all"
    ONGOING = "ongoing"
    FINISHED = "finished"


@dataclass(slots=True, frozen=True)
class Schedule:
    """
    Optional scheduling metadata attached to a task.

    Fields are independent: no ordering is enforced between start and end.
    """

    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    reminder_time: datetime | None = None

    def __post_init__(self) -> None:
        for name in ("start_date", "end_date"):
            v = getattr(self, name)
            # datetime is a date subclass; a date field must hold a calendar date only.
            if v is not None and (not isinstance(v, date) or isinstance(v, datetime)):
                raise TypeError(f"{name} must be a date")
        for name in ("start_time", "end_time"):
            v = getattr(self, name)
            if v is not None and (not isinstance(v, str) or not _HHMM_RE.match(v)):
                raise TypeError(f"{name} must be an HH:MM string")
        if self.reminder_time is not None and not isinstance(self.reminder_time, datetime):
            raise TypeError("reminder_time must be a datetime")


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    text: str
    category: str
    priority: Priority
    created_at: datetime

    completed: bool = False
    completed_at: datetime | None = None

    description: str | None = None

    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    reminder_time: datetime | None = None


@dataclass(slots=True, frozen=True)
class TaskQuery:
    status: StatusFilter = StatusFilter.ALL
    category: str = ALL
    priority: Priority | str = ALL

    def __post_init__(self) -> None:
        # Frozen: normalized values are written through object.__setattr__.
        object.__setattr__(self, "category", str(self.category).strip().lower())
        raw = str(self.priority).strip().lower()
        if raw == ALL:
            object.__setattr__(self, "priority", ALL)
            return
        priority = Priority.parse(raw)
        if priority is None:
            raise ValueError(f"Unknown priority filter {self.priority!r}.")
        object.__setattr__(self, "priority", priority)

    def matches(self, task: Task) -> bool:
        if self.status == StatusFilter.ONGOING and task.completed:
            return False
        if self.status == StatusFilter.FINISHED and not task.completed:
            return False
        if self.category != ALL and task.category != self.category:
            return False
        if self.priority != ALL and task.priority != self.priority:
            return False
        return True


@dataclass(slots=True, frozen=True)
class UserStats:
    """
    Progress record for the single local user.

    level is derived from xp and cannot be set independently.
    """

    xp: int = 0
    streak: int = 0
    last_task_date: str = ""
    badges: tuple[str, ...] = field(default_factory=tuple)

    @property
    def level(self) -> int:
        return self.xp // 100 + 1


@dataclass(slots=True, frozen=True)
class ProgressDelta:
    """Outcome of one completion: what changed, for the presentation layer."""

    xp_gained: int
    new_level: int
    leveled_up: bool
    new_badges: tuple[str, ...]
    stats: UserStats


@dataclass(slots=True, frozen=True)
class Completion:
    task: Task
    delta: ProgressDelta
