"""Ledger of topics already emailed or published, with time-windowed pruning."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from src.core.exceptions import StorageError
from src.core.logger import get_logger
from src.core.models import CoveredTopic, CoveredTopicsData, Finding, TopicSource
from src.dedup.keywords import extract_keywords, top_keywords
from src.storage.base import KeyValueStore
from src.storage.memory import Clock

logger = get_logger(__name__)

DEFAULT_RETENTION_DAYS = 28
DEFAULT_KEY = "covered_topics"
TOPIC_TEXT_LIMIT = 100
FINDING_KEYWORD_LIMIT = 10
FINDING_KEY_FINDINGS_USED = 2


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CoveredTopicsLedger:
    """Append-only log of covered topics persisted as one document.

    Topics are never deduplicated against each other on write; duplicate
    checks happen at read time in the findings filter. Every append prunes
    entries older than the retention window before saving.

    Args:
        store: Key/value store holding the document (no expiry).
        retention_days: Age after which a topic is dropped.
        key: Store key for the document.
        clock: Time source.
    """

    def __init__(
        self,
        store: KeyValueStore,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        key: str = DEFAULT_KEY,
        clock: Clock = _utcnow,
    ) -> None:
        self._store = store
        self._retention = timedelta(days=retention_days)
        self._key = key
        self._clock = clock

    def load(self) -> CoveredTopicsData:
        """Return the persisted topics, or an empty document if none exist.

        Raises:
            StorageError: If the stored document is malformed.
        """
        raw = self._store.get(self._key)
        if raw is None:
            return CoveredTopicsData(last_updated=self._clock(), topics=[])
        try:
            return CoveredTopicsData.model_validate(raw)
        except ValidationError as e:
            raise StorageError(
                "Malformed covered topics document",
                {"key": self._key, "error": str(e)},
            ) from e

    def save(self, data: CoveredTopicsData) -> None:
        """Persist the full document, stamping ``last_updated``."""
        data.last_updated = self._clock()
        self._store.set(self._key, data.to_record())

    def prune(self, topics: list[CoveredTopic]) -> list[CoveredTopic]:
        """Drop topics older than the retention window.

        Args:
            topics: Topics to filter.

        Returns:
            Topics whose ``date_added`` is after now minus the window.
        """
        cutoff = self._clock() - self._retention
        kept = [topic for topic in topics if topic.date_added > cutoff]
        removed = len(topics) - len(kept)
        if removed:
            logger.info("covered_topics_pruned", removed=removed, kept=len(kept))
        return kept

    def append(
        self,
        topic: str,
        keywords: list[str] | None = None,
        source: TopicSource = TopicSource.EMAIL,
    ) -> CoveredTopic:
        """Add one topic stamped with the current time.

        Args:
            topic: Topic text.
            keywords: Keywords to store; extracted from ``topic`` when empty.
            source: Channel the topic was covered through.

        Returns:
            The stored record.
        """
        record = self._build(topic, keywords, source)
        self._append_all([record])
        return record

    def mark_findings_covered(self, findings: Iterable[Finding]) -> int:
        """Record delivered findings so later runs skip them.

        The topic text is the insight truncated to 100 characters; keywords
        come from the insight plus the first two key findings.

        Args:
            findings: Findings that were successfully emailed.

        Returns:
            Number of topics appended.
        """
        records = []
        for finding in findings:
            text = " ".join([
                finding.most_important_insight,
                *finding.key_findings[:FINDING_KEY_FINDINGS_USED],
            ])
            records.append(self._build(
                finding.most_important_insight[:TOPIC_TEXT_LIMIT],
                top_keywords(text, FINDING_KEYWORD_LIMIT),
                TopicSource.EMAIL,
            ))
        total = self._append_all(records)
        logger.info("findings_marked_covered", count=len(records), total_topics=total)
        return len(records)

    def mark_blog_topic_covered(self, title: str, keywords: list[str]) -> CoveredTopic:
        """Record a blog title the agent chose to publish."""
        return self.append(title, keywords, TopicSource.BLOG)

    def summary(self, limit: int = 10) -> str:
        """Human-readable list of the most recently covered topics."""
        data = self.load()
        if not data.topics:
            return "No topics covered yet."
        lines = [
            f"- {t.topic} ({t.source.value}, {t.date_added.date().isoformat()})"
            for t in data.topics[-limit:]
        ]
        header = f"Recent covered topics ({len(data.topics)} total):"
        return "\n".join([header, *lines])

    def _build(
        self,
        topic: str,
        keywords: list[str] | None,
        source: TopicSource,
    ) -> CoveredTopic:
        return CoveredTopic(
            topic=topic,
            keywords=list(keywords) if keywords else extract_keywords(topic),
            date_added=self._clock(),
            source=source,
        )

    def _append_all(self, records: list[CoveredTopic]) -> int:
        data = self.load()
        data.topics.extend(records)
        data.topics = self.prune(data.topics)
        self.save(data)
        return len(data.topics)
