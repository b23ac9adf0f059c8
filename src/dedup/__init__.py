"""Lexical duplicate detection for findings, blog topics and urgent items.

Usage::

    from src.dedup import TopicSimilarityScorer, keyword_set
    scorer = TopicSimilarityScorer(0.6)
    scorer.is_duplicate(keyword_set("Fort Bliss BAH rates"), keyword_set("BAH rates at Fort Bliss"))
"""

from src.dedup.blog_filter import BlogTopicDuplicateFilter
from src.dedup.cross_run import filter_new_urgent_items
from src.dedup.findings_filter import FindingsDuplicateFilter, FindingsFilterResult
from src.dedup.keywords import STOP_WORDS, extract_keywords, keyword_set, top_keywords
from src.dedup.similarity import TopicSimilarityScorer, overlap_ratio, prefix_match

__all__ = [
    "STOP_WORDS",
    "extract_keywords",
    "keyword_set",
    "top_keywords",
    "TopicSimilarityScorer",
    "overlap_ratio",
    "prefix_match",
    "FindingsDuplicateFilter",
    "FindingsFilterResult",
    "BlogTopicDuplicateFilter",
    "filter_new_urgent_items",
]
