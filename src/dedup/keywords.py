"""Keyword extraction for lexical topic matching."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")

MIN_KEYWORD_LENGTH = 3

STOP_WORDS: frozenset[str] = frozenset({
    # Common English words
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "as", "is", "was", "are", "were", "been", "be", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should", "may",
    "might", "must", "shall", "can", "need", "dare", "ought", "used", "this",
    "that", "these", "those", "i", "you", "he", "she", "it", "we", "they", "what",
    "which", "who", "whom", "whose", "where", "when", "why", "how", "all", "each",
    "every", "both", "few", "more", "most", "other", "some", "such", "no", "nor",
    "not", "only", "own", "same", "so", "than", "too", "very", "just", "your",
    "about", "into", "through", "during", "before", "after", "above", "below",
    "between", "under", "again", "further", "then", "once", "here", "there",
    "any", "our", "out", "up", "down", "off", "over", "now", "new", "first",
    "also", "get", "go", "going", "know", "like", "make", "one", "way", "well",
    "even", "back", "being", "come", "look", "still", "take", "want", "think",
    "see", "time", "year", "good", "give", "day", "use", "work",
    # Filler common to headlines and SEO titles
    "best", "top", "complete", "guide", "ultimate", "tips", "things", "essential",
    "everything", "update", "updates", "latest", "recent", "today", "2025", "2026",
})


def extract_keywords(text: str) -> list[str]:
    """Normalize free text into its ordered list of keywords.

    Lowercases, strips every character that is not a letter, digit or
    whitespace, splits on whitespace, and drops short tokens and stop
    words. Duplicates are kept in order of appearance so callers can take
    the first N.

    Args:
        text: Arbitrary text.

    Returns:
        Keywords in order of appearance; empty for empty input.
    """
    cleaned = _NON_ALNUM.sub("", text.lower())
    return [
        word
        for word in cleaned.split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
    ]


def keyword_set(text: str) -> set[str]:
    """Return the distinct keywords of ``text``."""
    return set(extract_keywords(text))


def top_keywords(text: str, limit: int) -> list[str]:
    """Return the first ``limit`` distinct keywords of ``text``.

    Args:
        text: Arbitrary text.
        limit: Maximum number of keywords.

    Returns:
        Distinct keywords in order of first appearance.
    """
    seen: list[str] = []
    if limit <= 0:
        return seen
    for word in extract_keywords(text):
        if word not in seen:
            seen.append(word)
            if len(seen) >= limit:
                break
    return seen
