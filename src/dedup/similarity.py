"""Keyword-overlap similarity scoring between topics."""

from __future__ import annotations

from collections.abc import Collection

from src.dedup.keywords import keyword_set

# Overlap ratio must strictly exceed these to count as a duplicate.
BLOG_TOPIC_THRESHOLD = 0.5
COVERED_TOPIC_THRESHOLD = 0.6
CROSS_RUN_THRESHOLD = 0.5

PREFIX_WINDOW = 30
PREFIX_PROBE = 20


def overlap_ratio(candidate: Collection[str], reference: Collection[str]) -> float:
    """Share of candidate keywords that match some reference keyword.

    A candidate token matches when it contains, or is contained in, any
    reference token (so "bah" matches "bahs"). The count is divided by the
    size of the smaller collection, not the union.

    Args:
        candidate: Keywords of the topic being checked.
        reference: Keywords of the already-known topic.

    Returns:
        Ratio in [0, ...]; 0.0 when either side is empty.
    """
    if not candidate or not reference:
        return 0.0
    matches = sum(
        1
        for token in candidate
        if any(ref in token or token in ref for ref in reference)
    )
    return matches / min(len(candidate), len(reference))


def prefix_match(title: str, other: str) -> bool:
    """Cheap exact-prefix check between two titles.

    Compares the first 30 lowercase characters of each title; true when
    either window contains the first 20 characters of the other.
    """
    a = title.strip().lower()[:PREFIX_WINDOW]
    b = other.strip().lower()[:PREFIX_WINDOW]
    if not a or not b:
        return False
    return b[:PREFIX_PROBE] in a or a[:PREFIX_PROBE] in b


class TopicSimilarityScorer:
    """Decide whether two topics are duplicates by keyword overlap.

    Args:
        threshold: Overlap ratio that must be exceeded for a duplicate.
    """

    def __init__(self, threshold: float = COVERED_TOPIC_THRESHOLD) -> None:
        self._threshold = threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    def is_duplicate(self, candidate: Collection[str], reference: Collection[str]) -> bool:
        """Keyword-set verdict; never a duplicate when either side is empty."""
        if not candidate or not reference:
            return False
        return overlap_ratio(candidate, reference) > self._threshold

    def is_similar_title(self, title: str, other: str) -> bool:
        """Title verdict: keyword overlap or prefix match, either suffices."""
        if self.is_duplicate(keyword_set(title), keyword_set(other)):
            return True
        return prefix_match(title, other)
