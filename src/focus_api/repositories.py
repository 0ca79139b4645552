from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from functools import lru_cache
from threading import RLock
from typing import List, Optional

from .models import FocusEntry
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for focus entry storage backends."""

    @abstractmethod
    def save(self, entry: FocusEntry) -> FocusEntry:
        """
        Persist an entry and return the stored representation.
        - id unset: insert with a freshly assigned id and resolved created_at
        - id set: write the record under that id
        Raises ValidationError if a required field is missing.
        """

    @abstractmethod
    def find_by_id(self, entry_id: int) -> Optional[FocusEntry]:
        """Return a FocusEntry by id, or None if not found."""

    @abstractmethod
    def find_all(self) -> List[FocusEntry]:
        """Return every stored FocusEntry in id order."""

    @abstractmethod
    def count(self) -> int:
        """Return the total number of stored entries."""

    @abstractmethod
    def delete_by_id(self, entry_id: int) -> None:
        """Delete a FocusEntry by id. Absent ids are ignored."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, FocusEntry] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now()

    def save(self, entry: FocusEntry) -> FocusEntry:
        entry.ensure_valid()
        with self._lock:
            if entry.id is None:
                stored = replace(entry.on_create(self._now()), id=self._next_id)
                self._next_id += 1
            else:
                existing = self._items.get(entry.id)
                if existing is not None and entry.created_at is None:
                    stored = replace(entry, created_at=existing.created_at)
                else:
                    stored = entry.on_create(self._now())
                self._next_id = max(self._next_id, entry.id + 1)
            self._items[stored.id] = stored
            return replace(stored)

    def find_by_id(self, entry_id: int) -> Optional[FocusEntry]:
        with self._lock:
            item = self._items.get(entry_id)
            return None if item is None else replace(item)

    def find_all(self) -> List[FocusEntry]:
        with self._lock:
            # Return copies to avoid external mutation
            return [replace(self._items[k]) for k in sorted(self._items)]

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def delete_by_id(self, entry_id: int) -> None:
        with self._lock:
            self._items.pop(entry_id, None)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository backed by SQLITE_DB_PATH

    The instance is created on first use and shared by every request.
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        logger.info("Using sqlite persistence backend at %s", settings.sqlite_db_path)
        return SQLiteRepository(settings.sqlite_db_path)
    logger.info("Using in-memory persistence backend")
    return InMemoryRepository()
