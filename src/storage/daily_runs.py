"""Per-day ledger of urgent items and run timestamps."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone, tzinfo

from pydantic import ValidationError

from src.core.exceptions import StorageError
from src.core.logger import get_logger
from src.core.models import DailyRunRecord, UrgentItem
from src.storage.base import KeyValueStore
from src.storage.memory import Clock

logger = get_logger(__name__)

DEFAULT_KEY_PREFIX = "research_urgent_"
DEFAULT_TTL = timedelta(days=2)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DailyRunLedger:
    """Morning/evening urgent items for the current calendar day.

    Records are keyed by date, never by run, and expire after two days, so
    the evening run only ever compares against the same day's morning run.

    Precondition (not enforced): the morning job runs before the evening
    job on the same calendar day in ``tz``. If the evening job runs first,
    ``load_morning()`` returns an empty list and nothing is suppressed.

    Args:
        store: Key/value store for the daily records.
        tz: Timezone that defines the calendar day.
        ttl: Expiry applied on every write.
        key_prefix: Prefix for the per-day store key.
        clock: Time source.
    """

    def __init__(
        self,
        store: KeyValueStore,
        tz: tzinfo = timezone.utc,
        ttl: timedelta = DEFAULT_TTL,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        clock: Clock = _utcnow,
    ) -> None:
        self._store = store
        self._tz = tz
        self._ttl = ttl
        self._key_prefix = key_prefix
        self._clock = clock

    def today(self) -> str:
        """Current calendar date (ISO) in the ledger timezone."""
        return self._clock().astimezone(self._tz).date().isoformat()

    def load(self) -> DailyRunRecord | None:
        """Return today's record, or None if no run has happened yet.

        Raises:
            StorageError: If the stored record is malformed.
        """
        key = self._key()
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            return DailyRunRecord.model_validate(raw)
        except ValidationError as e:
            raise StorageError(
                "Malformed daily run record",
                {"key": key, "error": str(e)},
            ) from e

    def save_morning(self, items: Sequence[UrgentItem]) -> DailyRunRecord:
        """Write today's morning items, keeping any evening branch."""
        existing = self.load()
        record = DailyRunRecord(
            date=self.today(),
            morning_urgent_items=list(items),
            evening_urgent_items=existing.evening_urgent_items if existing else None,
            last_morning_run=self._clock(),
            last_evening_run=existing.last_evening_run if existing else None,
        )
        self._save(record)
        logger.info("morning_urgent_items_saved", count=len(items), date=record.date)
        return record

    def load_morning(self) -> list[UrgentItem]:
        """Today's morning items; empty if the morning run has not happened."""
        record = self.load()
        return list(record.morning_urgent_items) if record else []

    def save_evening(self, items: Sequence[UrgentItem]) -> DailyRunRecord:
        """Write today's evening items, keeping the morning branch."""
        existing = self.load()
        record = DailyRunRecord(
            date=self.today(),
            morning_urgent_items=existing.morning_urgent_items if existing else [],
            evening_urgent_items=list(items),
            last_morning_run=existing.last_morning_run if existing else None,
            last_evening_run=self._clock(),
        )
        self._save(record)
        logger.info("evening_urgent_items_saved", count=len(items), date=record.date)
        return record

    def last_run_timestamps(self) -> tuple[datetime | None, datetime | None]:
        """Return ``(last_morning_run, last_evening_run)`` for today."""
        record = self.load()
        if record is None:
            return None, None
        return record.last_morning_run, record.last_evening_run

    def _key(self) -> str:
        return f"{self._key_prefix}{self.today()}"

    def _save(self, record: DailyRunRecord) -> None:
        self._store.set(self._key(), record.to_record(), ttl=self._ttl)
