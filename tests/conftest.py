"""Shared fixtures: isolated config, a fresh memory cache, model builders."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from src.core.config import get_config
from src.core.models import Finding, Priority, QueryCategory, Source, UrgentItem
from src.storage.memory import MemoryCache

_SECRET_ENV = (
    "PERPLEXITY_API_KEY",
    "ANTHROPIC_API_KEY",
    "RESEND_API_KEY",
    "CRON_SECRET",
    "DATABASE_URL",
)


class FakeClock:
    """Settable time source for ledgers and stores."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch):
    """Blank out secrets so no test talks to a real service."""
    for name in _SECRET_ENV:
        monkeypatch.setenv(name, "")
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    # Monday 2026-10-19 14:00 UTC (09:00 in Chicago)
    return FakeClock(datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc))


@pytest.fixture
def cache(clock: FakeClock) -> MemoryCache:
    store = MemoryCache(clock)
    yield store
    store.clear()


@pytest.fixture
def make_finding() -> Callable[..., Finding]:
    def _make(
        insight: str = "El Paso inventory rose for the third month",
        key_findings: list[str] | None = None,
        priority: Priority = Priority.MEDIUM,
        category: QueryCategory = QueryCategory.MARKET_INTEL,
        query: str = "El Paso housing market",
        sources: list[Source] | None = None,
        **extra: Any,
    ) -> Finding:
        return Finding(
            query=query,
            category=category,
            key_findings=key_findings or [],
            most_important_insight=insight,
            priority=priority,
            sources=sources or [],
            **extra,
        )

    return _make


@pytest.fixture
def make_urgent() -> Callable[..., UrgentItem]:
    def _make(summary: str, project: str = "marina", **extra: Any) -> UrgentItem:
        return UrgentItem(project=project, summary=summary, source="https://example.com", **extra)

    return _make
