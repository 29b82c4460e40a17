# src/taskquest/tasks/task_store.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from dataclasses import replace
from typing import Final

from ..core.errors import InvalidCategory
from ..core.ports import Clock, RecordStore
from .categories import CategoryRegistry, normalize_label
from .progress import apply_completion
from .task_codec import stats_from_record, stats_to_record, task_from_record, task_to_record
from .task_models import (
    Completion,
    Priority,
    Schedule,
    StatusFilter,
    Task,
    TaskQuery,
    UserStats,
)

logger = logging.getLogger(__name__)

TASKS_KEY: Final = "tasks"
STATS_KEY: Final = "stats"


class TaskView:
    """
    Lazy, restartable view over a snapshot of the store.

    Each iteration re-applies the filter to the same snapshot, so later
    mutations of the store are not visible through an existing view.
    """

    def __init__(self, snapshot: tuple[Task, ...], query: TaskQuery) -> None:
        self._snapshot = snapshot
        self.query = query

    def __iter__(self) -> Iterator[Task]:
        return (t for t in self._snapshot if self.query.matches(t))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return any(True for _ in self)


class TaskStore:
    """
    In-memory task collection synchronized to a RecordStore.

    The store is the single writer of tasks and of the user's stats. Every
    mutating command updates memory first, then persists; a failed write is
    logged and does not undo the in-memory transition.

    Ordering: most recently added first.
    """

    def __init__(
        self,
        records: RecordStore,
        categories: CategoryRegistry,
        clock: Clock,
    ) -> None:
        self._records = records
        self._categories = categories
        self._clock = clock
        self._tasks: list[Task] = []
        self._stats = UserStats()
        self._load()
        logger.info(
            "TaskStore ready total=%s xp=%s streak=%s",
            len(self._tasks),
            self._stats.xp,
            self._stats.streak,
        )

    # ---- persistence ----

    def _load(self) -> None:
        raw_tasks = self._records.get(TASKS_KEY)
        if isinstance(raw_tasks, list):
            seen: set[str] = set()
            for rec in raw_tasks:
                try:
                    task = task_from_record(rec)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping malformed task record: %s (%r)", e, rec)
                    continue
                if task.id in seen:
                    logger.warning("Skipping duplicate task id=%s", task.id)
                    continue
                seen.add(task.id)
                self._tasks.append(task)
        elif raw_tasks is not None:
            logger.warning("Stored tasks are not a list; starting empty.")

        self._stats = stats_from_record(self._records.get(STATS_KEY))

    def _persist_tasks(self) -> None:
        try:
            self._records.put(TASKS_KEY, [task_to_record(t) for t in self._tasks])
        except Exception:
            logger.exception("Failed to persist tasks.")

    def _persist_stats(self) -> None:
        try:
            self._records.put(STATS_KEY, stats_to_record(self._stats))
        except Exception:
            logger.exception("Failed to persist stats.")

    # ---- read API ----

    @property
    def stats(self) -> UserStats:
        return self._stats

    @property
    def categories(self) -> CategoryRegistry:
        return self._categories

    def count_tasks(self) -> int:
        return len(self._tasks)

    def snapshot(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def find_by_prefix(self, prefix: str) -> list[Task]:
        prefix = (prefix or "").strip().lower()
        if not prefix:
            return []
        return [t for t in self._tasks if t.id.startswith(prefix)]

    def query(self, query: TaskQuery | None = None) -> TaskView:
        return TaskView(self.snapshot(), query or TaskQuery())

    def status_counts(self) -> dict[StatusFilter, int]:
        finished = sum(1 for t in self._tasks if t.completed)
        return {
            StatusFilter.ALL: len(self._tasks),
            StatusFilter.ONGOING: len(self._tasks) - finished,
            StatusFilter.FINISHED: finished,
        }

    def category_counts(self) -> dict[str, int]:
        """Task count per registered category (zero for unused ones)."""
        out = {label: 0 for label in self._categories.labels()}
        for t in self._tasks:
            out[t.category] = out.get(t.category, 0) + 1
        return out

    # ---- commands ----

    def add(
        self,
        text: str,
        category: str,
        priority: Priority,
        schedule: Schedule | None = None,
        *,
        description: str | None = None,
    ) -> Task | None:
        """
        Create a task and put it at the top of the list.

        Blank text is a silent no-op (returns None). An unregistered category
        raises InvalidCategory.
        """
        text = (text or "").strip()
        if not text:
            return None

        if category not in self._categories:
            raise InvalidCategory(category)

        schedule = schedule or Schedule()
        description = (description or "").strip() or None

        task = Task(
            id=uuid.uuid4().hex,
            text=text,
            category=normalize_label(category),
            priority=Priority(priority),
            created_at=self._clock.now(),
            description=description,
            start_date=schedule.start_date,
            end_date=schedule.end_date,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            reminder_time=schedule.reminder_time,
        )

        self._tasks.insert(0, task)
        self._persist_tasks()
        logger.debug(
            "Task added id=%s category=%s priority=%s reminder=%s",
            task.id,
            task.category,
            task.priority.value,
            task.reminder_time,
        )
        return task

    def complete(self, task_id: str) -> Completion | None:
        """
        Mark a task completed and feed the progress model.

        Unknown ids and already-completed tasks are no-ops (returns None).
        """
        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                break
        else:
            return None

        if task.completed:
            return None

        now = self._clock.now()
        done = replace(task, completed=True, completed_at=now)
        delta = apply_completion(self._stats, task.priority, now.date(), completed_at=now)

        self._tasks[idx] = done
        self._stats = delta.stats

        self._persist_tasks()
        self._persist_stats()

        logger.info(
            "Task completed id=%s xp=+%s level=%s streak=%s",
            task_id,
            delta.xp_gained,
            delta.new_level,
            delta.stats.streak,
        )
        return Completion(task=done, delta=delta)
