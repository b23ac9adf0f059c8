"""Render the morning digest, evening alert and operational emails as HTML."""

from __future__ import annotations

from collections.abc import Sequence

from src.core.exceptions import ContentError
from src.core.models import BlogTopic, ClaudeTask, Finding, QueryCategory, UrgentItem
from src.generators.base import BaseGenerator

_SYSTEM_PROMPT = (
    "You are a professional email writer for a real estate marketing firm. "
    "Write concise, actionable email digests. Return only HTML content, no markdown."
)


def split_by_category(findings: Sequence[Finding]) -> tuple[list[Finding], list[Finding]]:
    """Split findings into (market intel, pain points)."""
    market = [f for f in findings if f.category == QueryCategory.MARKET_INTEL]
    pain = [f for f in findings if f.category == QueryCategory.REDDIT_PAIN_POINTS]
    return market, pain


class DigestRenderer(BaseGenerator):
    """Turn findings and urgent items into complete HTML email documents.

    Claude formats the body when available; otherwise, or when the Claude
    call fails, the Jinja2 fallback templates are used. Every render
    method returns a full ``<html>`` document and never raises for a
    Claude failure.
    """

    def render_morning(
        self,
        findings: Sequence[Finding],
        urgent_items: Sequence[UrgentItem],
        blog_topics: Sequence[BlogTopic] = (),
    ) -> str:
        market_intel, pain_points = split_by_category(findings)
        new_topics = [t for t in blog_topics if not t.is_duplicate]
        duplicate_topics = [t for t in blog_topics if t.is_duplicate]
        context = {
            "market_intel": market_intel,
            "pain_points": pain_points,
            "urgent_items": list(urgent_items),
            "new_topics": new_topics,
            "duplicate_topics": duplicate_topics,
        }

        body = self._format_with_claude(
            ClaudeTask.MORNING_DIGEST, "prompts/digest_morning.j2", context,
        )
        if body is not None:
            return self._render("email/layout.html", body=body)
        return self._render("email/morning_fallback.html", **context)

    def render_evening(self, urgent_items: Sequence[UrgentItem]) -> str:
        items = list(urgent_items)
        if items:
            body = self._format_with_claude(
                ClaudeTask.EVENING_UPDATE, "prompts/digest_evening.j2", {"urgent_items": items},
            )
            if body is not None:
                return self._render("email/layout.html", body=body)
        return self._render("email/evening_fallback.html", urgent_items=items)

    def render_test_email(self) -> str:
        schedule = self._config.schedule
        return self._render(
            "email/test_email.html",
            sender=self._config.email.sender,
            recipient=self._config.email.recipient,
            morning_time=schedule.morning_digest,
            evening_time=schedule.evening_catchup,
            timezone=schedule.timezone,
        )

    def render_error_notification(self, job_type: str, errors: Sequence[str]) -> str:
        return self._render(
            "email/error_notification.html",
            job_type=job_type,
            errors=list(errors),
        )

    def _format_with_claude(
        self,
        task: ClaudeTask,
        prompt_template: str,
        context: dict,
    ) -> str | None:
        """Return Claude's HTML body, or None to signal the fallback path."""
        if not self.claude_enabled:
            self._logger.info("claude_disabled_using_fallback", task=task.value)
            return None
        try:
            prompt = self._render(prompt_template, **context)
            return self._generate_content(task, prompt, system_prompt=_SYSTEM_PROMPT)
        except ContentError as e:
            self._logger.warning("claude_formatting_failed", task=task.value, error=str(e))
            return None
