# tests/test_progress.py

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from taskquest.tasks.progress import (
    BADGE_EARLY_BIRD,
    BADGE_WEEK_WARRIOR,
    apply_completion,
    level_progress,
    xp_for,
)
from taskquest.tasks.task_models import Priority, UserStats

DAY = date(2026, 10, 18)


@pytest.mark.parametrize(
    ("priority", "xp"),
    [(Priority.HIGH, 30), (Priority.MEDIUM, 20), (Priority.LOW, 10)],
)
def test_xp_for_priority(priority: Priority, xp: int) -> None:
    assert xp_for(priority) == xp
    assert xp_for(Priority(priority.value)) == xp


def test_first_completion_starts_streak() -> None:
    delta = apply_completion(UserStats(), Priority.LOW, DAY)

    assert delta.stats.streak == 1
    assert delta.stats.xp == 10
    assert delta.stats.level == 1
    assert delta.stats.last_task_date == "2026-10-18"
    assert delta.leveled_up is False


def test_same_day_repeat_keeps_streak_but_adds_xp() -> None:
    first = apply_completion(UserStats(), Priority.MEDIUM, DAY).stats
    second = apply_completion(first, Priority.HIGH, DAY).stats

    assert second.streak == first.streak == 1
    assert second.xp == 50


def test_consecutive_days_increase_streak() -> None:
    stats = UserStats()
    for i in range(3):
        stats = apply_completion(stats, Priority.LOW, DAY + timedelta(days=i)).stats
    assert stats.streak == 3


def test_gap_resets_streak_to_one() -> None:
    stats = apply_completion(UserStats(), Priority.LOW, DAY).stats
    stats = apply_completion(stats, Priority.LOW, DAY + timedelta(days=1)).stats
    assert stats.streak == 2

    stats = apply_completion(stats, Priority.LOW, DAY + timedelta(days=4)).stats
    assert stats.streak == 1


def test_zero_streak_with_stale_date_still_counts_up() -> None:
    stats = UserStats(xp=40, streak=0, last_task_date="2020-01-01")
    assert apply_completion(stats, Priority.LOW, DAY).stats.streak == 1


def test_level_tracks_xp_across_transitions() -> None:
    stats = UserStats()
    levels_seen = []
    for i in range(12):
        delta = apply_completion(stats, Priority.HIGH, DAY + timedelta(days=i))
        stats = delta.stats
        assert stats.level == stats.xp // 100 + 1
        assert delta.new_level == stats.level
        levels_seen.append(delta.leveled_up)

    assert stats.xp == 360
    assert stats.level == 4
    # 30, 60, 90, 120 -> the fourth completion is the first level-up
    assert levels_seen[:4] == [False, False, False, True]


def test_level_progress() -> None:
    assert level_progress(UserStats(xp=250)) == (50, 100)


def test_early_bird_badge_unlocks_once() -> None:
    early = datetime(2026, 10, 18, 7, 30)
    delta = apply_completion(UserStats(), Priority.LOW, early.date(), completed_at=early)
    assert delta.new_badges == (BADGE_EARLY_BIRD,)

    again = apply_completion(delta.stats, Priority.LOW, early.date(), completed_at=early)
    assert again.new_badges == ()
    assert again.stats.badges == (BADGE_EARLY_BIRD,)


def test_week_warrior_on_seventh_day() -> None:
    stats = UserStats()
    unlocked: list[tuple[str, ...]] = []
    for i in range(7):
        delta = apply_completion(stats, Priority.LOW, DAY + timedelta(days=i))
        stats = delta.stats
        unlocked.append(delta.new_badges)

    assert stats.streak == 7
    assert unlocked[-1] == (BADGE_WEEK_WARRIOR,)
    assert all(b == () for b in unlocked[:-1])
