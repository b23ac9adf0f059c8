"""Wire the ledgers to the configured store."""

from __future__ import annotations

from datetime import timedelta
from zoneinfo import ZoneInfo

from src.core.config import AppConfig, get_config
from src.core.database import init_db
from src.core.exceptions import DatabaseError
from src.core.logger import get_logger
from src.storage.covered_topics import CoveredTopicsLedger
from src.storage.daily_runs import DailyRunLedger
from src.storage.memory import FallbackStore, MemoryCache
from src.storage.sql_store import SqlKeyValueStore

logger = get_logger(__name__)


def build_store(cache: MemoryCache, config: AppConfig | None = None) -> FallbackStore:
    """Create the ledger store, degrading to the memory cache.

    The SQL store is used when storage is enabled and the schema can be
    created; otherwise every call is served by ``cache``.

    Args:
        cache: Process-scoped memory cache.
        config: Application config; defaults to the singleton.

    Returns:
        FallbackStore over the SQL store (or over nothing).
    """
    config = config or get_config()
    if not config.storage.enabled:
        logger.info("storage_disabled_using_memory")
        return FallbackStore(None, cache)
    try:
        init_db()
    except DatabaseError as e:
        logger.warning("storage_unavailable_using_memory", error=str(e))
        return FallbackStore(None, cache)
    return FallbackStore(SqlKeyValueStore(), cache)


def build_covered_topics_ledger(
    store: FallbackStore,
    config: AppConfig | None = None,
) -> CoveredTopicsLedger:
    config = config or get_config()
    return CoveredTopicsLedger(
        store,
        retention_days=config.storage.retention_days,
        key=config.storage.covered_topics_key,
    )


def build_daily_run_ledger(
    store: FallbackStore,
    config: AppConfig | None = None,
) -> DailyRunLedger:
    config = config or get_config()
    return DailyRunLedger(
        store,
        tz=ZoneInfo(config.schedule.timezone),
        ttl=timedelta(hours=config.storage.daily_run_ttl_hours),
        key_prefix=config.storage.daily_run_key_prefix,
    )
