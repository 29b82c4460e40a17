# src/taskquest/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/notifications/classifier providers swappable and makes testing easier.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol


class Clock(Protocol):
    """Wall-clock source. All temporal decisions go through it."""

    def now(self) -> datetime: ...


class Notifier(Protocol):
    """
    Delivers a user-visible alert.

    Implementations may raise; callers treat any failure as non-fatal.
    """

    def notify(self, title: str, body: str) -> None: ...


class RecordStore(Protocol):
    """
    Durable key-value record store.

    Values are JSON-compatible (dict/list/str/int/float/bool/None).
    get() returns None for a missing key.
    """

    def get(self, key: str) -> Any | None: ...
    def put(self, key: str, value: Any) -> None: ...


class TaskClassifier(Protocol):
    """
    Advisory task classifier (LLM-backed in production).

    Returns a raw mapping that may contain "priority", "category" and "description".
    Nothing in it is trusted: the core validates every field.
    """

    def classify(self, text: str, *, categories: list[str]) -> Mapping[str, Any]: ...
