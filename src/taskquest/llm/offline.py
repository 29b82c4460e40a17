# src/taskquest/llm/offline.py

from __future__ import annotations

from typing import Any


class OfflineTaskClassifier:
    """
    Offline classifier used when no external API is configured.

    Returns an empty suggestion, so every field takes its default
    (medium priority, personal category, the task text as description).
    """

    def classify(self, text: str, *, categories: list[str]) -> dict[str, Any]:
        return {}
