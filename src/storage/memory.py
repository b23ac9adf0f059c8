"""Process-scoped in-memory store and the fallback wrapper around it."""

from __future__ import annotations

import copy
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from src.core.exceptions import DatabaseError
from src.core.logger import get_logger
from src.storage.base import KeyValueStore

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryCache(KeyValueStore):
    """In-memory key/value map living as long as the process.

    Construct one per process and pass it to every ledger that needs a
    fallback. State is lost on restart; tests call ``clear()`` between
    cases.

    Args:
        clock: Time source used for expiry checks.
    """

    def __init__(self, clock: Clock = _utcnow) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[Any, datetime | None]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        expires_at = self._clock() + ttl if ttl is not None else None
        self._entries[key] = (copy.deepcopy(value), expires_at)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class FallbackStore(KeyValueStore):
    """Route reads and writes to a primary store, falling back to memory.

    When no primary store is configured every call goes to the cache.
    When the primary raises ``DatabaseError`` the failure is logged and
    the cache serves the call instead, so the ledgers keep working at the
    cost of losing state across restarts.

    Args:
        primary: Durable store, or None when storage is unavailable.
        cache: Process-scoped memory cache.
    """

    def __init__(self, primary: KeyValueStore | None, cache: MemoryCache) -> None:
        self._primary = primary
        self._cache = cache

    @property
    def is_persistent(self) -> bool:
        """Whether a durable primary store is configured."""
        return self._primary is not None

    def get(self, key: str) -> Any | None:
        if self._primary is None:
            return self._cache.get(key)
        try:
            return self._primary.get(key)
        except DatabaseError as e:
            logger.warning("store_read_failed", key=key, error=str(e))
            return self._cache.get(key)

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        if self._primary is None:
            self._cache.set(key, value, ttl)
            return
        try:
            self._primary.set(key, value, ttl)
        except DatabaseError as e:
            logger.warning("store_write_failed", key=key, error=str(e))
            self._cache.set(key, value, ttl)

    def delete(self, key: str) -> None:
        self._cache.delete(key)
        if self._primary is None:
            return
        try:
            self._primary.delete(key)
        except DatabaseError as e:
            logger.warning("store_delete_failed", key=key, error=str(e))
