"""Batched research queries against the provider, parsed into findings."""

from __future__ import annotations

import json
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.collectors.base import BaseCollector
from src.core.models import (
    Finding,
    PainPoint,
    PainPointFrequency,
    Priority,
    ResearchMode,
    ResearchQuery,
    Source,
)
from src.core.logger import get_logger
from src.core.perplexity_client import PerplexityClient
from src.core.templating import render_template

logger = get_logger(__name__)

_JSON_PATTERNS = (
    re.compile(r"```json\s*([\s\S]*?)\s*```"),
    re.compile(r"```\s*([\s\S]*?)\s*```"),
    re.compile(r"\{[\s\S]*\}"),
)

RAW_FINDING_LIMIT = 500
NO_INSIGHT = "No specific insight extracted"

_PROMPTS = {
    ResearchMode.COMPREHENSIVE: "prompts/research_morning.j2",
    ResearchMode.URGENT_ONLY: "prompts/research_evening.j2",
}


def _extract_json_object(raw: str) -> dict[str, Any]:
    """Pull the first JSON object out of a possibly fenced response."""
    for pattern in _JSON_PATTERNS:
        match = pattern.search(raw)
        if match is None:
            continue
        text = match.group(1) if match.groups() else match.group(0)
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("research_json_unparseable", snippet=text[:80])
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def _str_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(v) for v in value if v is not None]


def _dicts(value: Any) -> list[dict[str, Any]]:
    """Object entries of a JSON array; anything else is empty."""
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _text(value: Any, default: str | None) -> str | None:
    """Scalar as text; empty, missing or nested values give ``default``."""
    if value is None or isinstance(value, (dict, list)):
        return default
    return str(value) or default


def parse_research_response(
    raw: str,
    query: ResearchQuery,
    timestamp: datetime | None = None,
) -> Finding:
    """Build a Finding from a provider response, degrading to defaults.

    Unparseable or partial payloads never fail: missing key findings fall
    back to the first 500 characters of the raw text, the insight to the
    first key finding, the priority to medium and lists to empty.

    Args:
        raw: Provider response text.
        query: Query that produced the response.
        timestamp: Creation time; defaults to now.

    Returns:
        The parsed Finding.
    """
    parsed = _extract_json_object(raw)

    key_findings = _str_list(parsed.get("keyFindings"))
    if key_findings is None:
        key_findings = [raw[:RAW_FINDING_LIMIT]]

    insight = parsed.get("mostImportantInsight")
    if not isinstance(insight, str):
        insight = key_findings[0] if key_findings and key_findings[0] else NO_INSIGHT

    pain_points = []
    for pp in _dicts(parsed.get("painPoints")):
        frequency = pp.get("frequency")
        pain_points.append(PainPoint(
            description=_text(pp.get("description"), "Unknown"),
            frequency=(
                PainPointFrequency(frequency)
                if frequency in PainPointFrequency.__members__.values()
                else PainPointFrequency.OCCASIONAL
            ),
            source=_text(pp.get("source"), None),
        ))

    priority = parsed.get("priority")
    sources = [
        Source(title=_text(s.get("title"), "Unknown Source"), url=_text(s.get("url"), ""))
        for s in _dicts(parsed.get("sources"))
    ]

    return Finding(
        query=query.query,
        project=query.project,
        category=query.category,
        key_findings=key_findings,
        most_important_insight=insight,
        pain_points=pain_points,
        solution_requests=_str_list(parsed.get("solutionRequests")) or [],
        action_items=_str_list(parsed.get("actionItems")) or [],
        priority=Priority(priority) if priority in Priority.__members__.values() else Priority.MEDIUM,
        sources=sources,
        raw_response=raw,
        timestamp=timestamp or datetime.now(timezone.utc),
    )


@dataclass
class ResearchBatchResult:
    """Findings and per-query errors of one collection run.

    Attributes:
        findings: Parsed findings, in query order.
        errors: One message per failed query.
    """

    findings: list[Finding] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class ResearchProvider(ABC):
    """Answers one research query, or None on failure."""

    @abstractmethod
    def query(self, query: ResearchQuery, mode: ResearchMode) -> Finding | None:
        """Run a single query.

        Args:
            query: The research prompt.
            mode: Comprehensive (morning) or urgent-only (evening) prompt.

        Returns:
            The parsed Finding, or None if the call failed.
        """


class ResearchCollector(BaseCollector, ResearchProvider):
    """Run research queries through Perplexity in rate-limited batches.

    Queries are grouped into batches of ``batch_size``; each batch runs
    concurrently on a thread pool and batches run one after another with
    ``batch_delay_sec`` between them. A failed query is recorded as an
    error string and never aborts the batch.

    Args:
        client: Pre-built Perplexity client.
        sleep: Delay function, replaceable in tests.
    """

    def __init__(
        self,
        client: PerplexityClient | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(client)
        self._settings = self._config.research
        self._sleep = sleep

    def query(self, query: ResearchQuery, mode: ResearchMode) -> Finding | None:
        try:
            system_prompt = render_template(
                _PROMPTS[mode],
                **self._prompt_context(focus_areas=self._config.queries.research_focus),
            )
            response = self.client.chat(query.query, system_prompt=system_prompt)
        except Exception as e:
            self._logger.error(
                "research_query_failed",
                query=query.query,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
        return parse_research_response(response.content, query)

    def collect(
        self,
        queries: Sequence[ResearchQuery],
        mode: ResearchMode = ResearchMode.COMPREHENSIVE,
        provider: ResearchProvider | None = None,
    ) -> ResearchBatchResult:
        """Run every query in batches.

        Args:
            queries: Queries to run, in order.
            mode: Prompt variant for all queries.
            provider: Provider answering each query; defaults to self.

        Returns:
            ResearchBatchResult with findings and error strings.
        """
        provider = provider or self
        result = ResearchBatchResult()
        size = max(1, self._settings.batch_size)
        batches = [queries[i:i + size] for i in range(0, len(queries), size)]

        for number, batch in enumerate(batches, start=1):
            self._logger.info(
                "research_batch_started",
                batch=number,
                total_batches=len(batches),
                queries=len(batch),
            )
            with ThreadPoolExecutor(max_workers=len(batch)) as executor:
                answers = list(executor.map(
                    lambda q: self._safe_query(provider, q, mode),
                    batch,
                ))
            for query, finding in zip(batch, answers):
                if finding is not None:
                    result.findings.append(finding)
                else:
                    result.errors.append(f"Failed to process query: {query.query}")

            if number < len(batches):
                self._sleep(self._settings.batch_delay_sec)

        self._logger.info(
            "research_collection_complete",
            mode=mode.value,
            findings=len(result.findings),
            errors=len(result.errors),
        )
        return result

    def _safe_query(
        self,
        provider: ResearchProvider,
        query: ResearchQuery,
        mode: ResearchMode,
    ) -> Finding | None:
        try:
            return provider.query(query, mode)
        except Exception as e:
            self._logger.error("research_provider_error", query=query.query, error=str(e))
            return None
