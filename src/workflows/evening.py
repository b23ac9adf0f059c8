"""Evening catch-up workflow: report only urgent items the morning missed."""

from __future__ import annotations

from collections.abc import Sequence

from src.analyzers.urgency import UrgencyClassifier
from src.collectors.research_collector import ResearchCollector
from src.core.models import Finding, ResearchMode, ResearchQuery, UrgentItem
from src.dedup.cross_run import filter_new_urgent_items
from src.generators.digest import DigestRenderer
from src.publishers.email_notifier import EmailNotifier
from src.storage.daily_runs import DailyRunLedger
from src.workflows.base import BaseWorkflow, WorkflowResult


class EveningCatchupWorkflow(BaseWorkflow):
    """Orchestrate the evening urgent-news check.

    Steps:
        1. load_morning (critical): today's morning urgent items
        2. research (critical): run the evening queries, urgent-only
        3. save_evening (critical): persist the new items, even when empty
        4. send: email an alert only when new items exist

    The job succeeds whenever it completes, with or without an email.
    """

    name = "evening-catchup"

    def __init__(
        self,
        daily_runs: DailyRunLedger,
        research: ResearchCollector | None = None,
        renderer: DigestRenderer | None = None,
        notifier: EmailNotifier | None = None,
        queries: Sequence[ResearchQuery] | None = None,
    ) -> None:
        super().__init__()
        self.max_duration_sec = self._config.schedule.evening_max_duration_sec
        self._daily_runs = daily_runs
        self._research = research or ResearchCollector()
        self._renderer = renderer or DigestRenderer()
        self._notifier = notifier or EmailNotifier()
        self._queries = list(queries) if queries is not None else self._config.queries.evening
        self._threshold = self._config.dedup.cross_run_threshold
        self._classifier = UrgencyClassifier()

    def execute(self) -> WorkflowResult:
        result = WorkflowResult(job_type=self.name)

        morning_items: list[UrgentItem] = self._run_step(
            "load_morning",
            self._daily_runs.load_morning,
            critical=True,
        ) or []
        result.data["morning_items"] = len(morning_items)

        findings = self._run_step("research", self._collect, critical=True) or []
        result.queries_processed = len(findings)

        evening_items = self._classifier.extract(findings)
        new_items = filter_new_urgent_items(evening_items, morning_items, self._threshold)
        result.urgent_items_found = len(new_items)

        self._run_step(
            "save_evening",
            lambda: self._daily_runs.save_evening(new_items),
            critical=True,
        )

        if not new_items:
            self._logger.info("no_new_urgent_items", morning=len(morning_items))
            return result

        html = self._renderer.render_evening(new_items)
        send = self._notifier.send_evening_update(html, len(new_items))
        if not send.success:
            self._record_error(f"Email send error: {send.error}")
        result.email_sent = send.success
        result.data["message_id"] = send.message_id
        return result

    def _collect(self) -> list[Finding]:
        batch = self._research.collect(self._queries, ResearchMode.URGENT_ONLY)
        for error in batch.errors:
            self._record_error(error)
        return batch.findings
