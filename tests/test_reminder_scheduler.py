# tests/test_reminder_scheduler.py

from __future__ import annotations

import asyncio
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from taskquest.storage.record_store import MemoryRecordStore
from taskquest.tasks.reminder_scheduler import (
    ReminderLedger,
    is_due,
    reminder_scheduler,
    run_reminder_scheduler,
    scan_reminders,
    start_reminders_in_background,
)
from taskquest.tasks.task_models import Priority, Schedule
from taskquest.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeNotifier


def _remind_at(dt: datetime) -> Schedule:
    return Schedule(reminder_time=dt)


def test_past_reminder_fires_exactly_once(
    store: TaskStore, records: MemoryRecordStore, clock: FakeClock, notifier: FakeNotifier
) -> None:
    task = store.add("Call mom", "personal", Priority.HIGH, _remind_at(clock.now() - timedelta(minutes=5)))
    assert task is not None
    ledger = ReminderLedger(records)

    fired = scan_reminders(store, notifier, ledger, clock.now())
    assert [t.id for t in fired] == [task.id]
    assert len(notifier.sent) == 1
    assert "Call mom" in notifier.sent[0].title
    assert "high" in notifier.sent[0].body
    assert "personal" in notifier.sent[0].body

    clock.advance(minutes=1)
    assert scan_reminders(store, notifier, ledger, clock.now()) == []
    assert len(notifier.sent) == 1


def test_future_reminder_waits_until_due(
    store: TaskStore, records: MemoryRecordStore, clock: FakeClock, notifier: FakeNotifier
) -> None:
    store.add("Standup", "work", Priority.MEDIUM, _remind_at(clock.now() + timedelta(minutes=2)))
    ledger = ReminderLedger(records)

    assert scan_reminders(store, notifier, ledger, clock.now()) == []
    clock.advance(minutes=2)
    assert len(scan_reminders(store, notifier, ledger, clock.now())) == 1


def test_completed_task_is_never_notified(
    store: TaskStore, records: MemoryRecordStore, clock: FakeClock, notifier: FakeNotifier
) -> None:
    task = store.add("Pay bills", "personal", Priority.LOW, _remind_at(clock.now() + timedelta(minutes=1)))
    assert task is not None
    store.complete(task.id)

    clock.advance(minutes=5)
    assert scan_reminders(store, notifier, ReminderLedger(records), clock.now()) == []
    assert notifier.attempts == 0


def test_ledger_survives_restart(
    store: TaskStore, records: MemoryRecordStore, clock: FakeClock, notifier: FakeNotifier
) -> None:
    store.add("Gym", "other", Priority.LOW, _remind_at(clock.now()))
    scan_reminders(store, notifier, ReminderLedger(records), clock.now())

    assert scan_reminders(store, notifier, ReminderLedger(records), clock.now()) == []
    assert len(notifier.sent) == 1


def test_notifier_failure_does_not_stop_scan(
    store: TaskStore, records: MemoryRecordStore, clock: FakeClock
) -> None:
    past = _remind_at(clock.now() - timedelta(hours=1))
    store.add("one", "other", Priority.LOW, past)
    store.add("two", "other", Priority.LOW, past)
    failing = FakeNotifier(fail=True)
    ledger = ReminderLedger(records)

    fired = scan_reminders(store, failing, ledger, clock.now())
    assert len(fired) == 2
    assert failing.attempts == 2

    # A failed delivery still counts as the one alert for that reminder.
    scan_reminders(store, failing, ledger, clock.now())
    assert failing.attempts == 2


def test_is_due_handles_mixed_timezones(store: TaskStore, clock: FakeClock) -> None:
    task = store.add(
        "UTC reminder",
        "other",
        Priority.LOW,
        _remind_at(datetime(2000, 1, 1, tzinfo=timezone.utc)),
    )
    assert task is not None
    assert is_due(task, clock.now()) is True
    assert is_due(task, datetime(1999, 1, 1, tzinfo=timezone.utc)) is False


@pytest.mark.asyncio
async def test_scheduler_loop_notifies_once(
    store: TaskStore, records: MemoryRecordStore, clock: FakeClock, notifier: FakeNotifier
) -> None:
    store.add("ping", "other", Priority.LOW, _remind_at(clock.now() - timedelta(seconds=1)))

    runner = asyncio.create_task(
        run_reminder_scheduler(
            store,
            notifier,
            ReminderLedger(records),
            clock,
            interval_seconds=0.01,
        )
    )

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_context_manager_cancels_timer(
    store: TaskStore, records: MemoryRecordStore, clock: FakeClock, notifier: FakeNotifier
) -> None:
    async with reminder_scheduler(
        store, notifier, ReminderLedger(records), clock, interval_seconds=0.01
    ) as timer:
        await asyncio.sleep(0.03)
        assert not timer.done()

    assert timer.cancelled()


def test_background_runner_stops(
    store: TaskStore, records: MemoryRecordStore, clock: FakeClock, notifier: FakeNotifier
) -> None:
    store.add("bg", "other", Priority.LOW, _remind_at(clock.now()))
    lock = threading.RLock()

    runner = start_reminders_in_background(
        store,
        notifier,
        ReminderLedger(records),
        clock,
        interval_seconds=0.01,
        lock=lock,
    )
    assert runner is not None

    deadline = time.monotonic() + 2.0
    while not notifier.sent and time.monotonic() < deadline:
        time.sleep(0.01)

    runner.stop()
    runner.join(timeout=2.0)

    assert not runner.thread.is_alive()
    assert len(notifier.sent) == 1
