# src/taskquest/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import cast

from ..core.errors import DuplicateCategory, InvalidCategory
from ..core.state import AppState
from ..tasks.progress import level_progress
from ..tasks.task_api import DEFAULT_CATEGORY, DEFAULT_PRIORITY, add_suggested_task, daily_ideas
from ..tasks.task_models import ALL, Priority, Schedule, StatusFilter, Task, TaskQuery

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8


class CommandRegistry:
    """
    Simple slash-command registry used by the console connector (/help, /add, ...).

    Handlers run under state.lock unless registered with locked=False; those
    take the lock themselves around store mutations (slow classifier calls
    must not block the reminder loop).
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._unlocked: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        *,
        locked: bool = True,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler
        if not locked:
            self._unlocked.update([key, *(a.lower() for a in aliases)])

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if name in self._unlocked:
            return self._call(handler, nparams, state, args, emit)
        with state.lock:
            return self._call(handler, nparams, state, args, emit)

    @staticmethod
    def _call(
        handler: CommandHandler,
        nparams: int,
        state: AppState,
        args: list[str],
        emit: CommandEmitter | None,
    ) -> str:
        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument parsing ----


def _parse_reminder(raw: str, now: datetime) -> datetime:
    """@2026-10-18T14:30 or @14:30 (today). Naive values take the local timezone."""
    if len(raw) <= 5 and ":" in raw:
        hh, mm = raw.split(":", 1)
        dt = now.replace(hour=int(hh), minute=int(mm), second=0, microsecond=0)
    else:
        dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None and now.tzinfo is not None:
        dt = dt.replace(tzinfo=now.tzinfo)
    return dt


def parse_add_args(args: list[str], now: datetime) -> tuple[str, str, Priority, Schedule]:
    """
    Split /add arguments into text, category, priority and schedule.

    Tokens: #category !priority @reminder from:DATE to:DATE at:HH:MM[-HH:MM].
    Everything else is task text. Raises ValueError/TypeError on bad tokens.
    """
    words: list[str] = []
    category = DEFAULT_CATEGORY
    priority = DEFAULT_PRIORITY
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    reminder: datetime | None = None

    for tok in args:
        if tok.startswith("#") and len(tok) > 1:
            category = tok[1:]
        elif tok.startswith("!") and len(tok) > 1:
            p = Priority.parse(tok[1:])
            if p is None:
                raise ValueError(f"Unknown priority {tok[1:]!r} (use high, medium or low).")
            priority = p
        elif tok.startswith("@") and len(tok) > 1:
            reminder = _parse_reminder(tok[1:], now)
        elif tok.startswith("from:"):
            start_date = date.fromisoformat(tok[5:])
        elif tok.startswith("to:"):
            end_date = date.fromisoformat(tok[3:])
        elif tok.startswith("at:"):
            start_time, _, tail = tok[3:].partition("-")
            end_time = tail or None
        else:
            words.append(tok)

    schedule = Schedule(
        start_date=start_date,
        end_date=end_date,
        start_time=start_time or None,
        end_time=end_time,
        reminder_time=reminder,
    )
    return " ".join(words), category, priority, schedule


def parse_query_args(args: list[str]) -> TaskQuery:
    status = StatusFilter.ALL
    category = ALL
    priority: Priority | str = ALL
    for tok in args:
        low = tok.lower()
        if low in (s.value for s in StatusFilter):
            status = StatusFilter(low)
        elif low.startswith("#") and len(low) > 1:
            category = low[1:]
        elif low.startswith("!") and len(low) > 1:
            p = Priority.parse(low[1:])
            if p is None:
                raise ValueError(f"Unknown priority {low[1:]!r}.")
            priority = p
        else:
            raise ValueError(f"Unknown filter {tok!r}.")
    return TaskQuery(status=status, category=category, priority=priority)


# ---- rendering ----


def render_task(task: Task) -> str:
    mark = "[x]" if task.completed else "[ ]"
    line = f"{task.id[:SHORT_ID_LEN]} {mark} ({task.priority.value}) #{task.category} {task.text}"
    extras: list[str] = []
    if task.start_date or task.end_date:
        start = task.start_date.isoformat() if task.start_date else "?"
        end = task.end_date.isoformat() if task.end_date else "?"
        extras.append(f"{start}..{end}")
    if task.start_time or task.end_time:
        extras.append(f"{task.start_time or '?'}-{task.end_time or '?'}")
    if task.reminder_time is not None and not task.completed:
        extras.append(f"remind {task.reminder_time.strftime('%Y-%m-%d %H:%M')}")
    if extras:
        line += "  <" + ", ".join(extras) + ">"
    return line


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    classifier = type(state.classifier).__name__
    return (
        "Status:\n"
        f"  Data: {getattr(settings, 'records_db_path', '?')}\n"
        f"  Reminders: every {getattr(settings, 'reminder_interval_seconds', 60):.0f}s\n"
        f"  Classifier: {classifier}"
    )


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add Buy milk #shopping !low
    /add Call mom @18:30
    /add Write report #work !high from:2026-10-01 to:2026-10-05 at:09:00-11:00
    """
    try:
        text, category, priority, schedule = parse_add_args(args, state.clock.now())
    except (TypeError, ValueError) as e:
        return f"Cannot add task: {e}"

    try:
        task = state.task_store.add(text, category, priority, schedule)
    except InvalidCategory as e:
        return f"{e}. Use /cat to list or add categories."

    if task is None:
        return "Usage: /add <text> [#category] [!priority] [@reminder] [from:DATE] [to:DATE] [at:HH:MM-HH:MM]"
    return f'Task added: "{task.text}" to your {task.category} list ({task.id[:SHORT_ID_LEN]}).'


def cmd_smart(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/smart <text> -> classifier picks priority/category/description."""
    text = " ".join(args)
    if emit and text.strip():
        emit("Asking for a suggestion...")

    result = add_suggested_task(state, text)
    if result is None:
        return "Usage: /smart <text>"

    task, suggestion = result
    return (
        f'Task added: "{task.text}" ({task.id[:SHORT_ID_LEN]})\n'
        f"  priority: {suggestion.priority.value}, category: {suggestion.category}\n"
        f"  {suggestion.description}"
    )


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <task id prefix>"

    matches = state.task_store.find_by_prefix(args[0])
    if not matches:
        return f"No task with id {args[0]!r}."
    if len(matches) > 1:
        return f"Id {args[0]!r} is ambiguous ({len(matches)} tasks). Type more characters."

    completion = state.task_store.complete(matches[0].id)
    if completion is None:
        return f'"{matches[0].text}" is already completed.'

    delta = completion.delta
    lines = [f'Task completed: "{completion.task.text}" (+{delta.xp_gained} XP)']
    if delta.leveled_up:
        lines.append(f"Level up! You reached Level {delta.new_level}!")
    for badge in delta.new_badges:
        lines.append(f"Badge unlocked: {badge}")
    lines.append(f"Streak: {delta.stats.streak} day(s)")
    return "\n".join(lines)


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                 -> everything
    /list ongoing #work   -> open work tasks
    /list finished !high  -> completed high-priority tasks
    """
    try:
        query = parse_query_args(args)
    except ValueError as e:
        return f"{e} Usage: /list [all|ongoing|finished] [#category] [!priority]"

    counts = state.task_store.status_counts()
    header = (
        f"All: {counts[StatusFilter.ALL]}  "
        f"Ongoing: {counts[StatusFilter.ONGOING]}  "
        f"Finished: {counts[StatusFilter.FINISHED]}"
    )
    lines = [render_task(t) for t in state.task_store.query(query)]
    if not lines:
        return header + "\nNo tasks found."
    return header + "\n" + "\n".join(lines)


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = state.task_store.stats
    into, per_level = level_progress(stats)
    badges = ", ".join(stats.badges) if stats.badges else "none yet"
    cats = ", ".join(f"{k}: {v}" for k, v in state.task_store.category_counts().items())
    return (
        f"Level {stats.level}  ({into}/{per_level} XP)\n"
        f"Total XP: {stats.xp}\n"
        f"Streak: {stats.streak} day(s)\n"
        f"Badges: {badges}\n"
        f"Per category: {cats}"
    )


def cmd_cat(state: AppState, args: list[str]) -> str:
    """
    /cat          -> list categories
    /cat <label>  -> add a category
    """
    if not args:
        return "Categories: " + ", ".join(state.categories.labels())

    label = " ".join(args)
    try:
        added = state.categories.add_category(label)
    except DuplicateCategory as e:
        return str(e)
    if added is None:
        return "Usage: /cat <label>"
    return f"Category added: {added}"


def cmd_ideas(state: AppState, args: list[str]) -> str:
    ideas = daily_ideas(state.clock.now())
    return "Ideas for now:\n" + "\n".join(f"  - {i}" for i in ideas)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show data path, reminder interval and classifier.")
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <text> [#category] [!high|!medium|!low] [@reminder].",
    aliases=["a"],
)
registry.register(
    "smart",
    cmd_smart,
    help_text="Add a task with suggested priority/category.",
    locked=False,
)
registry.register("done", cmd_done, help_text="Complete a task: /done <id prefix>.", aliases=["d"])
registry.register(
    "list",
    cmd_list,
    help_text="List tasks: /list [all|ongoing|finished] [#category] [!priority].",
    aliases=["ls"],
)
registry.register("stats", cmd_stats, help_text="Show level, XP, streak and badges.")
registry.register("cat", cmd_cat, help_text="List categories or add one: /cat [label].")
registry.register("ideas", cmd_ideas, help_text="Task ideas for the time of day.")
