# src/taskquest/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs:
- the reminder scheduler in a background thread (optional),
- the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.reminder_scheduler import start_reminders_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    state = create_initial_state(settings=settings)

    runner = None
    if settings.reminders_enabled:
        runner = start_reminders_in_background(
            state.task_store,
            state.notifier,
            state.reminders,
            state.clock,
            interval_seconds=settings.reminder_interval_seconds,
            lock=state.lock,
        )
    else:
        logger.info("Reminders disabled via settings.")

    try:
        run_console_loop(state)
    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
