from unittest.mock import Mock

import pytest
import requests

from src.publishers.email_notifier import EmailNotifier


def _ok(message_id: str = "msg_1") -> Mock:
    return Mock(ok=True, status_code=200, json=Mock(return_value={"id": message_id}))


def _error(status: int = 500) -> Mock:
    return Mock(ok=False, status_code=status, text="upstream failure")


@pytest.fixture
def session() -> Mock:
    return Mock(spec=requests.Session)


def test_unconfigured_notifier_reports_failure_without_calling_api(session) -> None:
    result = EmailNotifier(session=session).send("Subject", "<p>x</p>")

    assert not result.success
    assert result.error == "Resend not configured"
    session.post.assert_not_called()


def test_send_posts_to_resend(session) -> None:
    session.post.return_value = _ok()

    result = EmailNotifier(api_key="re_test", session=session).send_morning_digest("<p>digest</p>")

    assert result.success
    assert result.message_id == "msg_1"
    kwargs = session.post.call_args.kwargs
    assert session.post.call_args.args[0] == "https://api.resend.com/emails"
    assert kwargs["headers"]["Authorization"] == "Bearer re_test"
    assert kwargs["json"]["to"] == ["info@marina-ramirez.com"]
    assert kwargs["json"]["subject"].startswith("Daily Research Digest - ")
    assert kwargs["json"]["html"] == "<p>digest</p>"


@pytest.mark.parametrize(("count", "expected"), [
    (1, "Evening Update: 1 new item - "),
    (3, "Evening Update: 3 new items - "),
])
def test_evening_subject_pluralizes(session, count, expected) -> None:
    session.post.return_value = _ok()

    EmailNotifier(api_key="re_test", session=session).send_evening_update("<p/>", count)

    assert session.post.call_args.kwargs["json"]["subject"].startswith(expected)


def test_error_notification_subject(session) -> None:
    session.post.return_value = _ok()

    EmailNotifier(api_key="re_test", session=session).send_error_notification("morning-digest", "<p/>")

    assert session.post.call_args.kwargs["json"]["subject"] == "Research System Error - morning-digest"


def test_failed_send_is_retried_once(session) -> None:
    session.post.side_effect = [_error(), _ok("msg_2")]

    result = EmailNotifier(api_key="re_test", session=session).send("s", "<p/>")

    assert result.success
    assert result.message_id == "msg_2"
    assert session.post.call_count == 2


def test_send_gives_up_after_second_failure(session) -> None:
    session.post.side_effect = [requests.ConnectionError("refused"), _error(422)]

    result = EmailNotifier(api_key="re_test", session=session).send("s", "<p/>")

    assert not result.success
    assert "422" in result.error
    assert session.post.call_count == 2
