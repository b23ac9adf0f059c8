from datetime import timedelta
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.database import LedgerEntryDB, init_db, session_scope
from src.core.exceptions import DatabaseError
from src.storage.base import KeyValueStore
from src.storage.memory import FallbackStore, MemoryCache
from src.storage.sql_store import SqlKeyValueStore


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


def test_memory_cache_returns_copies(cache) -> None:
    value = {"topics": []}
    cache.set("k", value)

    cache.get("k")["topics"].append("mutated")

    assert cache.get("k") == {"topics": []}


def test_memory_cache_expires_entries(cache, clock) -> None:
    cache.set("k", 1, ttl=timedelta(minutes=5))

    clock.advance(minutes=4)
    assert cache.get("k") == 1
    clock.advance(minutes=1)
    assert cache.get("k") is None
    assert len(cache) == 0


def test_sql_store_round_trips_json(session_factory, clock) -> None:
    store = SqlKeyValueStore(session_factory, clock=clock)

    store.set("covered_topics", {"topics": [{"topic": "BAH"}]})
    store.set("covered_topics", {"topics": []})

    assert store.get("covered_topics") == {"topics": []}
    assert store.get("missing") is None


def test_sql_store_expires_entries(session_factory, clock) -> None:
    store = SqlKeyValueStore(session_factory, clock=clock)
    store.set("research_urgent_2026-10-19", {"date": "2026-10-19"}, ttl=timedelta(days=2))

    clock.advance(days=1)
    assert store.get("research_urgent_2026-10-19") == {"date": "2026-10-19"}
    clock.advance(days=1)
    assert store.get("research_urgent_2026-10-19") is None


def test_sql_store_delete(session_factory, clock) -> None:
    store = SqlKeyValueStore(session_factory, clock=clock)
    store.set("k", [1, 2])

    store.delete("k")
    store.delete("k")

    assert store.get("k") is None


def test_sql_store_corrupt_entry_raises_database_error(session_factory, clock) -> None:
    with session_scope(session_factory) as session:
        session.add(LedgerEntryDB(key="bad", value="{not json", updated_at=clock.now))

    with pytest.raises(DatabaseError):
        SqlKeyValueStore(session_factory, clock=clock).get("bad")


def test_fallback_store_without_primary_uses_cache(cache) -> None:
    store = FallbackStore(None, cache)

    store.set("k", "v")

    assert not store.is_persistent
    assert cache.get("k") == "v"
    assert store.get("k") == "v"


def test_fallback_store_falls_back_when_primary_fails(cache) -> None:
    primary = Mock(spec=KeyValueStore)
    primary.set.side_effect = DatabaseError("down")
    primary.get.side_effect = DatabaseError("down")
    store = FallbackStore(primary, cache)

    store.set("k", {"a": 1})

    assert store.is_persistent
    assert store.get("k") == {"a": 1}
    primary.set.assert_called_once()


def test_fallback_store_prefers_healthy_primary(cache) -> None:
    primary = MemoryCache()
    store = FallbackStore(primary, cache)

    store.set("k", "v")

    assert primary.get("k") == "v"
    assert cache.get("k") is None
