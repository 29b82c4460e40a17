# src/taskquest/tasks/categories.py

from __future__ import annotations

import logging
from typing import Final

from ..core.errors import DuplicateCategory
from ..core.ports import RecordStore

logger = logging.getLogger(__name__)

CATEGORIES_KEY: Final = "categories"
DEFAULT_CATEGORIES: Final = ("work", "personal", "shopping", "other")


def normalize_label(label: str) -> str:
    return (label or "").strip().lower()


class CategoryRegistry:
    """
    Ordered set of category labels.

    Labels are stored trimmed and lower-cased. The default seed is always
    present and nothing is ever removed.
    """

    def __init__(self, records: RecordStore) -> None:
        self._records = records
        self._labels: list[str] = list(DEFAULT_CATEGORIES)
        self._load()

    def _load(self) -> None:
        raw = self._records.get(CATEGORIES_KEY)
        if raw is None:
            return
        if not isinstance(raw, list):
            logger.warning("Stored categories are not a list; using defaults.")
            return
        for item in raw:
            label = normalize_label(str(item))
            if label and label not in self._labels:
                self._labels.append(label)
        logger.debug("Categories loaded: %s", self._labels)

    def _persist(self) -> None:
        try:
            self._records.put(CATEGORIES_KEY, list(self._labels))
        except Exception:
            logger.exception("Failed to persist categories.")

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and normalize_label(label) in self._labels

    def __iter__(self):
        return iter(list(self._labels))

    def __len__(self) -> int:
        return len(self._labels)

    def labels(self) -> list[str]:
        return list(self._labels)

    def add_category(self, label: str) -> str | None:
        """
        Register a new label.

        Blank labels are ignored (returns None). An existing label, compared
        case-insensitively, raises DuplicateCategory.
        """
        norm = normalize_label(label)
        if not norm:
            return None
        if norm in self._labels:
            raise DuplicateCategory(norm)

        self._labels.append(norm)
        self._persist()
        logger.info("Category added: %s", norm)
        return norm
