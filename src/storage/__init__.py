"""Storage layer: key/value stores and the two ledgers built on them.

Usage::

    from src.storage import MemoryCache, build_store, build_covered_topics_ledger
    store = build_store(MemoryCache())
    ledger = build_covered_topics_ledger(store)
    print(ledger.summary())
"""

from src.storage.base import KeyValueStore
from src.storage.covered_topics import CoveredTopicsLedger
from src.storage.daily_runs import DailyRunLedger
from src.storage.factory import (
    build_covered_topics_ledger,
    build_daily_run_ledger,
    build_store,
)
from src.storage.memory import FallbackStore, MemoryCache
from src.storage.sql_store import SqlKeyValueStore

__all__ = [
    "KeyValueStore",
    "MemoryCache",
    "FallbackStore",
    "SqlKeyValueStore",
    "CoveredTopicsLedger",
    "DailyRunLedger",
    "build_store",
    "build_covered_topics_ledger",
    "build_daily_run_ledger",
]
