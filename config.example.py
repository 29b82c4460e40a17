# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Put them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKQUEST_APP_NAME": "App display name (default: taskquest).",
    "TASKQUEST_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "TASKQUEST_DATA_DIR": "Local data directory (default: .local/taskquest).",
    "TASKQUEST_RECORDS_DB_PATH": "Record store SQLite path (default: <data_dir>/records.sqlite3).",
    # Reminders
    "TASKQUEST_REMINDERS_ENABLED": "Run the background reminder scan (true/false, default: true).",
    "TASKQUEST_REMINDER_INTERVAL_SECONDS": "Seconds between reminder scans (default: 60).",
    "TASKQUEST_NOTIFIER": "Where reminders go: console | log (default: console).",
    # Classifier / OpenRouter
    "TASKQUEST_OPENROUTER_API_KEY": "OpenRouter API key (unset => /smart uses defaults).",
    "TASKQUEST_OPENROUTER_BASE_URL": "OpenRouter base URL (default: https://openrouter.ai/api/v1).",
    "TASKQUEST_LLM_MODELS": "Comma/space separated list of models to try in order.",
    "TASKQUEST_LLM_TIMEOUT_SECONDS": "Read timeout per classifier request (default: 20).",
    "TASKQUEST_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "TASKQUEST_APP_TITLE": "Optional OpenRouter metadata header title.",
}
