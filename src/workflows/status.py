"""System health derived from the daily run ledger."""

from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone

from src.core.config import get_config
from src.core.models import StatusReport, SystemStatus
from src.storage.daily_runs import DailyRunLedger

DEGRADED_AFTER = timedelta(hours=26)
ERROR_AFTER = timedelta(hours=36)


def classify_status(last_morning_run: datetime | None, now: datetime) -> SystemStatus:
    """Map the age of the last morning run to a status.

    No run recorded today counts as degraded.
    """
    if last_morning_run is None:
        return SystemStatus.DEGRADED
    age = now - last_morning_run
    if age > ERROR_AFTER:
        return SystemStatus.ERROR
    if age > DEGRADED_AFTER:
        return SystemStatus.DEGRADED
    return SystemStatus.OPERATIONAL


def get_system_status(ledger: DailyRunLedger, now: datetime | None = None) -> StatusReport:
    """Build the status report from today's run record.

    Args:
        ledger: Daily run ledger.
        now: Reference time (UTC); defaults to now.

    Returns:
        StatusReport with status, last run times and query counts.
    """
    config = get_config()
    now = now or datetime.now(timezone.utc)
    last_morning, last_evening = ledger.last_run_timestamps()
    return StatusReport(
        status=classify_status(last_morning, now),
        last_morning_run=last_morning,
        last_evening_run=last_evening,
        morning_query_count=len(config.queries.morning),
        evening_query_count=len(config.queries.evening),
        blog_url=config.queries.blog_url,
    )


def verify_cron_secret(provided: str | None, expected: str | None = None) -> bool:
    """Check a caller-supplied shared secret.

    When no secret is configured every caller is allowed. ``provided`` may
    be the bare secret or an ``Authorization`` value of the form
    ``Bearer <secret>``.
    """
    expected = get_config().cron_secret if expected is None else expected
    if not expected:
        return True
    if not provided:
        return False
    token = provided.removeprefix("Bearer ").strip()
    return hmac.compare_digest(token, expected)
