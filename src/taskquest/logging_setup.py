# src/taskquest/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskquest.log"

# Minimum console level per taskquest logger (prefix match, longest wins).
# Background and storage chatter stays in the log file only.
CONSOLE_MIN_LEVELS: dict[str, int] = {
    "taskquest.tasks.reminder_scheduler": logging.WARNING,
    "taskquest.storage.record_store": logging.WARNING,
    "taskquest.tasks.categories": logging.WARNING,
}

# HTTP client libraries used by the classifier.
CLIENT_LOGGERS = ("httpx", "httpcore", "openai")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter for the REPL.

    taskquest loggers pass at their CONSOLE_MIN_LEVELS threshold (everything
    by default, so LogNotifier reminders always show). Other libraries and
    captured warnings only reach the console at ERROR.
    """

    def __init__(self, min_levels: dict[str, int] | None = None) -> None:
        super().__init__()
        levels = CONSOLE_MIN_LEVELS if min_levels is None else min_levels
        self._prefixes = sorted(levels.items(), key=lambda kv: len(kv[0]), reverse=True)

    def _threshold(self, name: str) -> int:
        if name != "taskquest" and not name.startswith("taskquest."):
            return logging.ERROR
        for prefix, level in self._prefixes:
            if name == prefix or name.startswith(prefix + "."):
                return level
        return logging.NOTSET

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self._threshold(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskquest",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure the root logger: a filtered stderr handler for the console and
    a full file log under log_dir. Returns the log file path.

    Call this ONCE, before the first log call.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # Request-level debug output from the classifier's HTTP stack is not useful even in the file.
    for name in CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    return log_file
