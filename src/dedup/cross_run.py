"""Suppress evening urgent items already reported in the morning."""

from __future__ import annotations

from collections.abc import Sequence

from src.core.logger import get_logger
from src.core.models import UrgentItem
from src.dedup.similarity import CROSS_RUN_THRESHOLD

logger = get_logger(__name__)


def summary_word_overlap(evening_summary: str, morning_summary: str) -> float:
    """Share of evening-summary words that also appear in the morning summary.

    Words are whitespace-split lowercase text, without stemming or
    punctuation stripping. Repeated evening words each count.

    Returns:
        Ratio in [0, 1]; 0.0 for an empty evening summary.
    """
    evening_words = evening_summary.lower().split()
    if not evening_words:
        return 0.0
    morning_words = set(morning_summary.lower().split())
    matching = sum(1 for word in evening_words if word in morning_words)
    return matching / len(evening_words)


def is_same_occurrence(
    evening: UrgentItem,
    morning: UrgentItem,
    threshold: float = CROSS_RUN_THRESHOLD,
) -> bool:
    """Whether two urgent items report the same event for the same project."""
    if evening.project != morning.project:
        return False
    return summary_word_overlap(evening.summary, morning.summary) > threshold


def filter_new_urgent_items(
    evening_items: Sequence[UrgentItem],
    morning_items: Sequence[UrgentItem],
    threshold: float = CROSS_RUN_THRESHOLD,
) -> list[UrgentItem]:
    """Keep evening items that match no morning item.

    Args:
        evening_items: Urgent items found by the evening run.
        morning_items: Urgent items saved by the same day's morning run.
        threshold: Word overlap ratio above which items are the same.

    Returns:
        Evening items not already reported, in input order.
    """
    fresh = [
        item
        for item in evening_items
        if not any(is_same_occurrence(item, m, threshold) for m in morning_items)
    ]
    logger.info(
        "cross_run_filtered",
        evening=len(evening_items),
        morning=len(morning_items),
        new=len(fresh),
    )
    return fresh
