"""Flag candidate blog topics that repeat existing blog posts."""

from __future__ import annotations

from collections.abc import Sequence

from src.core.logger import get_logger
from src.core.models import BlogTopic, ExistingPost
from src.dedup.keywords import top_keywords
from src.dedup.similarity import BLOG_TOPIC_THRESHOLD, TopicSimilarityScorer

logger = get_logger(__name__)

TARGET_KEYWORD_LIMIT = 5


class BlogTopicDuplicateFilter:
    """Annotate candidate titles with their duplicate verdict.

    Each candidate is compared against the existing posts in order and the
    first match wins. Matching uses keyword overlap with the blog threshold
    plus the title prefix check.

    Args:
        threshold: Overlap ratio above which two titles are duplicates.
        project: Project the annotated topics belong to.
    """

    def __init__(
        self,
        threshold: float = BLOG_TOPIC_THRESHOLD,
        project: str = "marina",
    ) -> None:
        self._scorer = TopicSimilarityScorer(threshold)
        self._project = project

    def check(
        self,
        candidates: Sequence[str],
        existing_posts: Sequence[ExistingPost],
    ) -> list[BlogTopic]:
        """Annotate every candidate title.

        Args:
            candidates: Suggested blog titles.
            existing_posts: Posts already on the blog.

        Returns:
            One BlogTopic per candidate, in input order.
        """
        topics = [self._annotate(title, existing_posts) for title in candidates]
        logger.info(
            "blog_topics_checked",
            total=len(topics),
            duplicates=sum(1 for t in topics if t.is_duplicate),
            existing_posts=len(existing_posts),
        )
        return topics

    def _annotate(self, title: str, existing_posts: Sequence[ExistingPost]) -> BlogTopic:
        matched = next(
            (post for post in existing_posts if self._scorer.is_similar_title(title, post.title)),
            None,
        )
        return BlogTopic(
            title=title,
            target_keywords=top_keywords(title, TARGET_KEYWORD_LIMIT),
            project=self._project,
            is_duplicate=matched is not None,
            existing_post_title=matched.title if matched else None,
        )
