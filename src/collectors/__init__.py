"""Research collectors backed by the Perplexity API.

Usage::

    from src.collectors import ResearchCollector
    from src.core.config import get_config
    batch = ResearchCollector().collect(get_config().queries.morning)
"""

from src.collectors.base import BaseCollector
from src.collectors.blog_collector import BlogCollector
from src.collectors.research_collector import (
    ResearchBatchResult,
    ResearchCollector,
    ResearchProvider,
    parse_research_response,
)

__all__ = [
    "BaseCollector",
    "BlogCollector",
    "ResearchBatchResult",
    "ResearchCollector",
    "ResearchProvider",
    "parse_research_response",
]
