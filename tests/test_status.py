from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from src.core.models import SystemStatus
from src.storage.daily_runs import DailyRunLedger
from src.workflows import classify_status, get_system_status, verify_cron_secret

NOW = datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("age_hours", "expected"),
    [
        (1, SystemStatus.OPERATIONAL),
        (26, SystemStatus.OPERATIONAL),
        (27, SystemStatus.DEGRADED),
        (36, SystemStatus.DEGRADED),
        (37, SystemStatus.ERROR),
    ],
)
def test_classify_status_by_age(age_hours: int, expected: SystemStatus) -> None:
    assert classify_status(NOW - timedelta(hours=age_hours), NOW) == expected


def test_classify_status_without_morning_run_is_degraded() -> None:
    assert classify_status(None, NOW) == SystemStatus.DEGRADED


def test_system_status_reports_today_runs(cache, clock, make_urgent) -> None:
    ledger = DailyRunLedger(cache, tz=ZoneInfo("America/Chicago"), clock=clock)
    ledger.save_morning([make_urgent("Rates drop")])
    clock.advance(hours=8)
    ledger.save_evening([])

    report = get_system_status(ledger, now=clock.now)

    assert report.status == SystemStatus.OPERATIONAL
    assert report.last_morning_run == NOW
    assert report.last_evening_run == NOW + timedelta(hours=8)
    assert report.morning_query_count > 0
    assert report.evening_query_count > 0


def test_system_status_before_any_run(cache, clock) -> None:
    ledger = DailyRunLedger(cache, clock=clock)

    report = get_system_status(ledger, now=clock.now)

    assert report.status == SystemStatus.DEGRADED
    assert report.last_morning_run is None


def test_verify_cron_secret_open_when_unconfigured() -> None:
    assert verify_cron_secret(None, expected="")
    assert verify_cron_secret("anything", expected="")


@pytest.mark.parametrize(
    ("provided", "allowed"),
    [
        ("s3cret", True),
        ("Bearer s3cret", True),
        ("Bearer wrong", False),
        ("", False),
        (None, False),
    ],
)
def test_verify_cron_secret(provided: str | None, allowed: bool) -> None:
    assert verify_cron_secret(provided, expected="s3cret") is allowed


def test_verify_cron_secret_reads_config(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core.config import get_config

    monkeypatch.setenv("CRON_SECRET", "from-env")
    get_config.cache_clear()

    assert verify_cron_secret("Bearer from-env")
    assert not verify_cron_secret("nope")


def test_system_status_with_naive_stored_run_time(cache, clock) -> None:
    cache.set(
        "research_urgent_2026-10-19",
        {"date": "2026-10-19", "morningUrgentItems": [], "lastMorningRun": "2026-10-19T11:00:00"},
    )
    ledger = DailyRunLedger(cache, tz=ZoneInfo("America/Chicago"), clock=clock)

    report = get_system_status(ledger, now=clock.now)

    assert report.status == SystemStatus.OPERATIONAL
