"""Morning digest workflow: research, dedupe, classify, render and send."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from zoneinfo import ZoneInfo

from src.analyzers.urgency import UrgencyClassifier
from src.collectors.blog_collector import BlogCollector
from src.collectors.research_collector import ResearchCollector
from src.core.models import BlogTopic, Finding, ResearchMode, ResearchQuery, UrgentItem
from src.dedup.blog_filter import BlogTopicDuplicateFilter
from src.dedup.findings_filter import FindingsDuplicateFilter, FindingsFilterResult
from src.generators.digest import DigestRenderer
from src.publishers.email_notifier import EmailNotifier
from src.storage.covered_topics import CoveredTopicsLedger
from src.storage.daily_runs import DailyRunLedger
from src.workflows.base import BaseWorkflow, WorkflowResult


class MorningDigestWorkflow(BaseWorkflow):
    """Orchestrate the daily morning digest.

    Steps:
        1. research (critical): run every morning query
        2. filter_covered (critical): drop findings already covered
        3. blog_topics (non-critical, blog weekday only): suggest topics
           and flag those the blog already covers
        4. save_morning (critical): persist today's urgent items
        5. render (critical): format the digest
        6. send: email the digest
        7. mark_covered (non-critical, after a successful send)
        8. notify_errors (non-critical, when errors exceed the threshold)

    The job succeeds when the digest was sent.
    """

    name = "morning-digest"

    def __init__(
        self,
        covered_topics: CoveredTopicsLedger,
        daily_runs: DailyRunLedger,
        research: ResearchCollector | None = None,
        blog: BlogCollector | None = None,
        renderer: DigestRenderer | None = None,
        notifier: EmailNotifier | None = None,
        queries: Sequence[ResearchQuery] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__()
        self.max_duration_sec = self._config.schedule.morning_max_duration_sec
        self._covered = covered_topics
        self._daily_runs = daily_runs
        self._research = research or ResearchCollector()
        self._blog = blog or BlogCollector()
        self._renderer = renderer or DigestRenderer()
        self._notifier = notifier or EmailNotifier()
        self._queries = list(queries) if queries is not None else self._config.queries.morning
        self._tz = ZoneInfo(self._config.schedule.timezone)
        self._clock = clock or (lambda: datetime.now(self._tz))

        dedup = self._config.dedup
        self._findings_filter = FindingsDuplicateFilter(
            covered_topics, threshold=dedup.covered_topic_threshold,
        )
        self._blog_filter = BlogTopicDuplicateFilter(
            threshold=dedup.blog_topic_threshold, project=self._config.app.project,
        )
        self._classifier = UrgencyClassifier()

    def execute(self) -> WorkflowResult:
        result = WorkflowResult(job_type=self.name, success=False)

        # Step 1: Research
        raw_findings: list[Finding] = self._run_step(
            "research",
            self._collect,
            critical=True,
        ) or []

        # Step 2: Drop topics covered in the last four weeks
        filtered: FindingsFilterResult = self._run_step(
            "filter_covered",
            lambda: self._findings_filter.filter(raw_findings),
            critical=True,
        )
        findings = filtered.new_findings
        result.queries_processed = len(findings)
        result.data["duplicates_filtered"] = filtered.duplicate_count

        # Step 3: Blog topics
        blog_topics: list[BlogTopic] = []
        if self._is_blog_day():
            blog_topics = self._run_step("blog_topics", self._check_blog_topics) or []
        result.data["blog_topics"] = len(blog_topics)

        # Step 4: Urgent items
        urgent_items: list[UrgentItem] = self._classifier.extract(findings)
        self._run_step(
            "save_morning",
            lambda: self._daily_runs.save_morning(urgent_items),
            critical=True,
        )
        result.urgent_items_found = len(urgent_items)

        # Step 5: Render
        html: str = self._run_step(
            "render",
            lambda: self._renderer.render_morning(findings, urgent_items, blog_topics),
            critical=True,
        )

        # Step 6: Send
        send = self._notifier.send_morning_digest(html)
        if not send.success:
            self._record_error(f"Email send error: {send.error}")
        result.email_sent = send.success
        result.success = send.success
        result.data["message_id"] = send.message_id

        # Step 7: Mark covered only once the digest is out
        if send.success and findings:
            self._run_step(
                "mark_covered",
                lambda: self._covered.mark_findings_covered(findings),
            )

        # Step 8: Escalate a noisy run
        threshold = self._config.email.error_notification_threshold
        if send.success and len(self._errors) > threshold:
            self._run_step("notify_errors", self._notify_errors)

        return result

    def _collect(self) -> list[Finding]:
        batch = self._research.collect(self._queries, ResearchMode.COMPREHENSIVE)
        for error in batch.errors:
            self._record_error(error)
        self._logger.info(
            "morning_research_done",
            queries=len(self._queries),
            findings=len(batch.findings),
            errors=len(batch.errors),
        )
        return batch.findings

    def _is_blog_day(self) -> bool:
        return self._clock().astimezone(self._tz).weekday() == self._config.schedule.blog_topics_weekday

    def _check_blog_topics(self) -> list[BlogTopic]:
        candidates = self._blog.suggest_topics()
        if not candidates:
            self._logger.info("no_blog_topics_suggested")
            return []
        existing_posts = self._blog.fetch_existing_posts()
        return self._blog_filter.check(candidates, existing_posts)

    def _notify_errors(self) -> None:
        errors = list(self._errors)
        html = self._renderer.render_error_notification(self.name, errors)
        sent = self._notifier.send_error_notification(self.name, html)
        if not sent.success:
            self._logger.warning("error_notification_failed", error=sent.error)
