from datetime import timedelta
from zoneinfo import ZoneInfo

import pytest

from src.core.exceptions import StorageError
from src.storage.daily_runs import DailyRunLedger

CHICAGO = ZoneInfo("America/Chicago")


@pytest.fixture
def ledger(cache, clock) -> DailyRunLedger:
    return DailyRunLedger(cache, tz=CHICAGO, clock=clock)


def test_load_morning_is_empty_before_the_morning_run(ledger) -> None:
    assert ledger.load() is None
    assert ledger.load_morning() == []
    assert ledger.last_run_timestamps() == (None, None)


def test_save_morning_stores_items_under_dated_key(ledger, cache, clock, make_urgent) -> None:
    ledger.save_morning([make_urgent("Rates drop")])

    stored = cache.get("research_urgent_2026-10-19")
    assert stored["date"] == "2026-10-19"
    assert stored["morningUrgentItems"][0]["summary"] == "Rates drop"
    assert "eveningUrgentItems" not in stored
    assert ledger.last_run_timestamps() == (clock.now, None)


def test_evening_run_in_local_evening_shares_the_morning_record(ledger, clock, make_urgent) -> None:
    ledger.save_morning([make_urgent("Rates drop")])
    morning_run = clock.now

    # 20:00 Chicago is already the next UTC day.
    clock.advance(hours=11)
    assert [i.summary for i in ledger.load_morning()] == ["Rates drop"]

    record = ledger.save_evening([make_urgent("Base housing update")])
    assert record.date == "2026-10-19"
    assert [i.summary for i in record.morning_urgent_items] == ["Rates drop"]
    assert ledger.last_run_timestamps() == (morning_run, clock.now)


def test_save_evening_with_no_items_still_records_the_run(ledger, clock) -> None:
    record = ledger.save_evening([])

    assert record.evening_urgent_items == []
    assert record.morning_urgent_items == []
    assert ledger.last_run_timestamps() == (None, clock.now)


def test_rerunning_morning_keeps_evening_branch(ledger, make_urgent) -> None:
    ledger.save_evening([make_urgent("Evening item")])
    ledger.save_morning([make_urgent("Morning item")])

    record = ledger.load()
    assert [i.summary for i in record.evening_urgent_items] == ["Evening item"]
    assert [i.summary for i in record.morning_urgent_items] == ["Morning item"]


def test_records_expire_after_two_days(ledger, cache, clock, make_urgent) -> None:
    ledger.save_morning([make_urgent("Rates drop")])

    clock.advance(hours=49)

    assert cache.get("research_urgent_2026-10-19") is None


def test_next_day_starts_empty(ledger, clock, make_urgent) -> None:
    ledger.save_morning([make_urgent("Rates drop")])

    clock.advance(days=1)

    assert ledger.load_morning() == []


def test_custom_ttl_and_prefix(cache, clock, make_urgent) -> None:
    ledger = DailyRunLedger(cache, ttl=timedelta(hours=1), key_prefix="runs_", clock=clock)
    ledger.save_morning([make_urgent("x")])

    assert cache.get("runs_2026-10-19") is not None
    clock.advance(hours=2)
    assert cache.get("runs_2026-10-19") is None


def test_malformed_record_raises_storage_error(ledger, cache) -> None:
    cache.set("research_urgent_2026-10-19", {"morningUrgentItems": "oops"})

    with pytest.raises(StorageError):
        ledger.load()


def test_naive_run_times_load_as_utc(ledger, cache, clock) -> None:
    cache.set(
        "research_urgent_2026-10-19",
        {"date": "2026-10-19", "morningUrgentItems": [], "lastMorningRun": "2026-10-19T11:00:00"},
    )

    last_morning, _ = ledger.last_run_timestamps()

    assert last_morning == clock.now - timedelta(hours=3)
