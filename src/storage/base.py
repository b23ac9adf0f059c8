"""Key/value store interface shared by both ledgers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any


class KeyValueStore(ABC):
    """Generic JSON key/value store with optional expiry.

    Values must be JSON-compatible (dicts, lists, strings, numbers).
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the stored value, or None if absent or expired.

        Args:
            key: Record key.
        """

    @abstractmethod
    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Store a value, overwriting any existing one.

        Args:
            key: Record key.
            value: JSON-compatible value.
            ttl: Time to live; None means no expiry.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a value if present.

        Args:
            key: Record key.
        """
