"""Urgency classification of research findings."""

from __future__ import annotations

from collections.abc import Iterable

from src.core.logger import get_logger
from src.core.models import URGENT_PRIORITIES, Finding, UrgentItem

logger = get_logger(__name__)

# Providers sometimes flag a "nothing happened" answer as high priority.
NEGATION_PHRASES: tuple[str, ...] = (
    "no urgent updates",
    "no breaking news",
    "no significant developments",
    "nothing urgent",
)


def has_negation(text: str) -> bool:
    """Whether ``text`` says there is nothing urgent to report."""
    lowered = text.lower()
    return any(phrase in lowered for phrase in NEGATION_PHRASES)


def is_urgent(finding: Finding) -> bool:
    """Whether a finding counts as an actionable urgent item.

    True iff the priority is high or urgent and the most important insight
    contains none of the negation phrases (case-insensitive).
    """
    return finding.priority in URGENT_PRIORITIES and not has_negation(
        finding.most_important_insight,
    )


def to_urgent_item(finding: Finding) -> UrgentItem:
    """Project a finding onto the urgent item fields.

    The source is the first cited URL, falling back to the query text.

    Raises:
        pydantic.ValidationError: If the finding is not high or urgent.
    """
    source = finding.sources[0].url if finding.sources and finding.sources[0].url else finding.query
    return UrgentItem(
        project=finding.project,
        summary=finding.most_important_insight,
        source=source,
        priority=finding.priority,
        category=finding.category,
        timestamp=finding.timestamp,
    )


class UrgencyClassifier:
    """Select the urgent findings of a run and project them to urgent items."""

    def extract(self, findings: Iterable[Finding]) -> list[UrgentItem]:
        """Return urgent items for every finding passing ``is_urgent``.

        Args:
            findings: Findings of one run.

        Returns:
            Urgent items in input order.
        """
        findings = list(findings)
        items = [to_urgent_item(f) for f in findings if is_urgent(f)]
        logger.info("urgent_items_extracted", findings=len(findings), urgent=len(items))
        return items
