"""Send digest emails through the Resend HTTP API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from src.core.config import EmailConfig, get_config
from src.core.exceptions import PublishError
from src.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class SendResult:
    """Outcome of one email send."""

    success: bool
    message_id: str | None = None
    error: str | None = None


def _long_date(value: datetime) -> str:
    return f"{value:%A, %B} {value.day}, {value.year}"


class EmailNotifier:
    """Resend-backed notifier for the digest, alert and operational emails.

    Every ``send_*`` method returns a :class:`SendResult` and never raises.
    A failed send is retried once before giving up.

    Args:
        api_key: Resend API key; defaults to ``RESEND_API_KEY``.
        settings: Email settings; defaults to the ``email`` config section.
        session: HTTP session, replaceable in tests.
    """

    def __init__(
        self,
        api_key: str | None = None,
        settings: EmailConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        config = get_config()
        self._api_key = api_key if api_key is not None else config.resend_api_key
        self._settings = settings or config.email
        self._tz = ZoneInfo(config.schedule.timezone)
        self._app_name = config.app.name
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def send_morning_digest(self, html: str) -> SendResult:
        subject = f"Daily Research Digest - {_long_date(self._today())}"
        return self.send(subject, html)

    def send_evening_update(self, html: str, urgent_count: int) -> SendResult:
        plural = "" if urgent_count == 1 else "s"
        subject = (
            f"Evening Update: {urgent_count} new item{plural} - {_long_date(self._today())}"
        )
        return self.send(subject, html)

    def send_test_email(self, html: str) -> SendResult:
        return self.send(f"{self._app_name} - Test Email", html)

    def send_error_notification(self, job_type: str, html: str) -> SendResult:
        return self.send(f"Research System Error - {job_type}", html)

    def send(self, subject: str, html: str) -> SendResult:
        """Send one HTML email to the configured recipient.

        Args:
            subject: Email subject line.
            html: Full HTML document.

        Returns:
            SendResult; ``success`` is False when not configured or when
            both attempts fail.
        """
        if not self.configured:
            logger.warning("email_not_configured", subject=subject)
            return SendResult(success=False, error="Resend not configured")

        payload = {
            "from": self._settings.sender,
            "to": [self._settings.recipient],
            "subject": subject,
            "html": html,
        }
        try:
            body = self._post(payload)
        except (PublishError, requests.RequestException) as e:
            logger.error("email_send_failed", subject=subject, error=str(e))
            return SendResult(success=False, error=str(e))

        message_id = body.get("id")
        logger.info("email_sent", subject=subject, message_id=message_id)
        return SendResult(success=True, message_id=message_id)

    @retry(
        retry=retry_if_exception_type((PublishError, requests.RequestException)),
        stop=stop_after_attempt(2),
        wait=wait_fixed(1),
        reraise=True,
    )
    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST to Resend, retried once on any failure.

        Raises:
            PublishError: On a non-success status or a non-JSON body.
        """
        response = self._session.post(
            self._settings.api_url,
            json=payload,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=self._settings.request_timeout_sec,
        )
        if not response.ok:
            logger.warning("email_api_error", status_code=response.status_code)
            raise PublishError(
                f"Resend API error: {response.status_code}",
                {"status_code": response.status_code, "body": response.text[:500]},
            )
        try:
            return response.json()
        except ValueError as e:
            raise PublishError("Resend returned a non-JSON body", {"body": response.text[:500]}) from e

    def _today(self) -> datetime:
        return datetime.now(self._tz)
