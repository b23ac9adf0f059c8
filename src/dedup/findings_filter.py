"""Drop findings that repeat topics already covered in earlier digests."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from src.core.logger import get_logger
from src.core.models import Finding
from src.dedup.keywords import keyword_set
from src.dedup.similarity import COVERED_TOPIC_THRESHOLD, TopicSimilarityScorer

if TYPE_CHECKING:
    from src.storage.covered_topics import CoveredTopicsLedger

logger = get_logger(__name__)


@dataclass
class FindingsFilterResult:
    """Outcome of filtering a batch of findings.

    Attributes:
        new_findings: Findings not matching any covered topic, in input order.
        duplicate_count: Number of findings dropped as already covered.
    """

    new_findings: list[Finding] = field(default_factory=list)
    duplicate_count: int = 0


def finding_text(finding: Finding) -> str:
    """Comparison text for a finding: insight plus every key finding."""
    return " ".join([finding.most_important_insight, *finding.key_findings])


class FindingsDuplicateFilter:
    """Partition findings into new vs already covered.

    Reads the ledger but never writes it; the caller marks findings as
    covered only after the digest containing them was accepted for
    delivery.

    Args:
        ledger: Covered-topics ledger to compare against.
        threshold: Overlap ratio above which a finding is a repeat.
    """

    def __init__(
        self,
        ledger: CoveredTopicsLedger,
        threshold: float = COVERED_TOPIC_THRESHOLD,
    ) -> None:
        self._ledger = ledger
        self._scorer = TopicSimilarityScorer(threshold)

    def filter(self, findings: Sequence[Finding]) -> FindingsFilterResult:
        """Split ``findings`` against the current ledger contents.

        Args:
            findings: Raw findings from the research provider.

        Returns:
            FindingsFilterResult with the new findings and duplicate count.
        """
        covered = [set(topic.keywords) for topic in self._ledger.load().topics]
        result = FindingsFilterResult()

        for finding in findings:
            keywords = keyword_set(finding_text(finding))
            if any(self._scorer.is_duplicate(keywords, ref) for ref in covered):
                result.duplicate_count += 1
                logger.debug(
                    "duplicate_finding_filtered",
                    insight=finding.most_important_insight[:50],
                )
            else:
                result.new_findings.append(finding)

        logger.info(
            "findings_filtered",
            total=len(findings),
            new=len(result.new_findings),
            duplicates=result.duplicate_count,
        )
        return result
