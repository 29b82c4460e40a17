# src/taskquest/tasks/reminder_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A small polling loop that:
- scans tasks whose reminder time has passed,
- notifies once per task and reminder time (a persisted ledger remembers firings),
- never lets a notifier failure stop the scan.

Per task: no reminder -> armed (reminder set, task open) -> fired | cancelled (completed).
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime
from typing import Final

from ..core.ports import Clock, Notifier, RecordStore
from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

REMINDERS_KEY: Final = "reminders"
DEFAULT_INTERVAL_SECONDS: Final = 60.0


class ReminderLedger:
    """
    Remembers which reminders have already fired.

    Keyed by task id; the value is the reminder time that fired, so a task
    whose reminder time differs from the recorded one is armed again.
    """

    def __init__(self, records: RecordStore) -> None:
        self._records = records
        self._fired: dict[str, str] = {}
        raw = records.get(REMINDERS_KEY)
        if isinstance(raw, dict):
            self._fired = {str(k): str(v) for k, v in raw.items()}

    def has_fired(self, task: Task) -> bool:
        if task.reminder_time is None:
            return False
        return self._fired.get(task.id) == task.reminder_time.isoformat()

    def mark_fired(self, task: Task) -> None:
        if task.reminder_time is None:
            return
        self._fired[task.id] = task.reminder_time.isoformat()
        try:
            self._records.put(REMINDERS_KEY, dict(self._fired))
        except Exception:
            logger.exception("Failed to persist reminder ledger.")


def _compare_key(dt: datetime, now: datetime) -> datetime:
    """Align naive/aware datetimes so reminder_time <= now is well defined."""
    if (dt.tzinfo is None) == (now.tzinfo is None):
        return dt
    if dt.tzinfo is None:
        return dt.replace(tzinfo=now.tzinfo)
    return dt.astimezone().replace(tzinfo=None)


def is_due(task: Task, now: datetime) -> bool:
    if task.completed or task.reminder_time is None:
        return False
    return _compare_key(task.reminder_time, now) <= now


def render_reminder(task: Task) -> tuple[str, str]:
    title = f"Reminder: {task.text}"
    body = f"Priority: {task.priority.value} | Category: {task.category}"
    return title, body


def scan_reminders(
    store: TaskStore,
    notifier: Notifier,
    ledger: ReminderLedger,
    now: datetime,
) -> list[Task]:
    """
    One scheduler tick. Returns the tasks that were (attempted to be) notified.

    A delivery failure is logged and the reminder still counts as fired:
    the user gets at most one alert per reminder.
    """
    fired: list[Task] = []

    for task in store.snapshot():
        if not is_due(task, now) or ledger.has_fired(task):
            continue

        title, body = render_reminder(task)
        try:
            notifier.notify(title, body)
            logger.info("Reminder sent task_id=%s", task.id)
        except Exception:
            logger.exception("Notifier failed task_id=%s", task.id)

        ledger.mark_fired(task)
        fired.append(task)

    return fired


async def run_reminder_scheduler(
    store: TaskStore,
    notifier: Notifier,
    ledger: ReminderLedger,
    clock: Clock,
    *,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    lock: threading.RLock | None = None,
) -> None:
    """
    Simple polling scheduler.

    Every interval_seconds, scan for due reminders. If a lock is given it is
    held for the duration of a scan so the scan never interleaves with a
    command mutating the store.

    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        try:
            if lock is not None:
                with lock:
                    scan_reminders(store, notifier, ledger, clock.now())
            else:
                scan_reminders(store, notifier, ledger, clock.now())
        except Exception:
            logger.exception("Reminder scan failed")

        await asyncio.sleep(sleep_s)


@contextlib.asynccontextmanager
async def reminder_scheduler(
    store: TaskStore,
    notifier: Notifier,
    ledger: ReminderLedger,
    clock: Clock,
    *,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    lock: threading.RLock | None = None,
) -> AsyncIterator[asyncio.Task[None]]:
    """Run the scheduler for the lifetime of the block; the timer is cancelled on exit."""
    task = asyncio.create_task(
        run_reminder_scheduler(
            store,
            notifier,
            ledger,
            clock,
            interval_seconds=interval_seconds,
            lock=lock,
        )
    )
    try:
        yield task
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Reminder scheduler stopped.")


@dataclass
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Reminder loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)

    def __enter__(self) -> ReminderBackgroundRunner:
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
        self.join(timeout=5.0)


def start_reminders_in_background(
    store: TaskStore,
    notifier: Notifier,
    ledger: ReminderLedger,
    clock: Clock,
    *,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    lock: threading.RLock | None = None,
) -> ReminderBackgroundRunner | None:
    """
    Start the reminder scheduler in a background thread with its own event loop
    (the console REPL blocks on input()).
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    async def _main(stop_event: asyncio.Event) -> None:
        async with reminder_scheduler(
            store,
            notifier,
            ledger,
            clock,
            interval_seconds=interval_seconds,
            lock=lock,
        ):
            await stop_event.wait()

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_main(stop_event))
        finally:
            loop.close()

    t = threading.Thread(target=runner, name="reminders", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Reminder scheduler started (interval=%.0fs).", interval_seconds)
    return ReminderBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
