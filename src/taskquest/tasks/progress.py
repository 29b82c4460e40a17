# src/taskquest/tasks/progress.py

from __future__ import annotations

"""
Progress model: XP, level, streak and badges.

Everything here is a pure function of its arguments. Streaks are driven by
calendar-day identity (ISO date strings), never by elapsed-time arithmetic,
so completing a task at 23:59 and another at 00:01 counts as two days.
"""

from datetime import date, datetime, timedelta
from typing import Final

from .task_models import Priority, ProgressDelta, UserStats

XP_PER_LEVEL: Final = 100

XP_BY_PRIORITY: Final[dict[Priority, int]] = {
    Priority.HIGH: 30,
    Priority.MEDIUM: 20,
    Priority.LOW: 10,
}

BADGE_EARLY_BIRD: Final = "Early Bird"
BADGE_WEEK_WARRIOR: Final = "Week Warrior"

EARLY_BIRD_BEFORE_HOUR: Final = 9
WEEK_WARRIOR_STREAK: Final = 7


def xp_for(priority: Priority) -> int:
    return XP_BY_PRIORITY[Priority(priority)]


def level_for(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def level_progress(stats: UserStats) -> tuple[int, int]:
    """XP earned inside the current level and the size of a level."""
    return stats.xp % XP_PER_LEVEL, XP_PER_LEVEL


def next_streak(stats: UserStats, completion_date: date) -> int:
    today = completion_date.isoformat()
    if stats.last_task_date == today:
        return stats.streak

    yesterday = (completion_date - timedelta(days=1)).isoformat()
    if stats.last_task_date == yesterday or stats.streak == 0:
        return stats.streak + 1

    return 1


def _unlocked_badges(
    stats: UserStats, new_streak: int, completed_at: datetime | None
) -> tuple[str, ...]:
    have = set(stats.badges)
    out: list[str] = []

    if (
        completed_at is not None
        and completed_at.hour < EARLY_BIRD_BEFORE_HOUR
        and BADGE_EARLY_BIRD not in have
    ):
        out.append(BADGE_EARLY_BIRD)

    if new_streak >= WEEK_WARRIOR_STREAK and BADGE_WEEK_WARRIOR not in have:
        out.append(BADGE_WEEK_WARRIOR)

    return tuple(out)


def apply_completion(
    stats: UserStats,
    priority: Priority,
    completion_date: date,
    *,
    completed_at: datetime | None = None,
) -> ProgressDelta:
    """
    Apply one task completion to the user's stats.

    completion_date is the local calendar day of the completion; completed_at
    (optional) is only used for time-of-day badges.
    """
    xp_gained = xp_for(priority)
    new_xp = stats.xp + xp_gained
    new_level = level_for(new_xp)
    new_streak = next_streak(stats, completion_date)
    new_badges = _unlocked_badges(stats, new_streak, completed_at)

    new_stats = UserStats(
        xp=new_xp,
        streak=new_streak,
        last_task_date=completion_date.isoformat(),
        badges=stats.badges + new_badges,
    )

    return ProgressDelta(
        xp_gained=xp_gained,
        new_level=new_level,
        leveled_up=new_level > stats.level,
        new_badges=new_badges,
        stats=new_stats,
    )
