"""SQLAlchemy-backed key/value store with TTL-based expiration."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from src.core.database import LedgerEntryDB, session_scope
from src.core.exceptions import DatabaseError
from src.core.logger import get_logger
from src.storage.base import KeyValueStore
from src.storage.memory import Clock

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlKeyValueStore(KeyValueStore):
    """Store JSON values in the ``ledger_entries`` table.

    Expired rows are treated as absent and removed lazily on read.

    Args:
        session_factory: Session factory; defaults to the configured engine.
        clock: Time source used for expiry.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock = _utcnow,
    ) -> None:
        self._factory = session_factory
        self._clock = clock

    def get(self, key: str) -> Any | None:
        with session_scope(self._factory) as session:
            entry = session.get(LedgerEntryDB, key)
            if entry is None:
                return None
            if entry.expires_at is not None and self._clock() >= _as_utc(entry.expires_at):
                session.delete(entry)
                logger.debug("ledger_entry_expired", key=key)
                return None
            raw = entry.value
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise DatabaseError(
                f"Corrupt ledger entry: {key}",
                {"key": key, "error": str(e)},
            ) from e

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        now = self._clock()
        payload = json.dumps(value, ensure_ascii=False, default=str)
        expires_at = now + ttl if ttl is not None else None
        with session_scope(self._factory) as session:
            entry = session.get(LedgerEntryDB, key)
            if entry is None:
                session.add(LedgerEntryDB(
                    key=key,
                    value=payload,
                    expires_at=expires_at,
                    updated_at=now,
                ))
            else:
                entry.value = payload
                entry.expires_at = expires_at
                entry.updated_at = now
        logger.debug("ledger_entry_stored", key=key, ttl=str(ttl) if ttl else None)

    def delete(self, key: str) -> None:
        with session_scope(self._factory) as session:
            entry = session.get(LedgerEntryDB, key)
            if entry is not None:
                session.delete(entry)
