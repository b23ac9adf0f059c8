import pytest

from src.dedup.findings_filter import FindingsDuplicateFilter, finding_text
from src.storage.covered_topics import CoveredTopicsLedger


def test_finding_text_joins_insight_and_key_findings(make_finding) -> None:
    finding = make_finding(insight="Insight.", key_findings=["One", "Two"])

    assert finding_text(finding) == "Insight. One Two"


def test_empty_ledger_keeps_every_finding(cache, clock, make_finding) -> None:
    ledger = CoveredTopicsLedger(cache, clock=clock)
    findings = [make_finding(insight="Eastlake prices climb"), make_finding(insight="VA loan limits rise")]

    result = FindingsDuplicateFilter(ledger).filter(findings)

    assert result.new_findings == findings
    assert result.duplicate_count == 0


def test_filter_drops_covered_and_keeps_disjoint(cache, clock, make_finding) -> None:
    ledger = CoveredTopicsLedger(cache, clock=clock)
    ledger.append("Horizon City new construction prices")
    covered = make_finding(insight="New construction prices in Horizon City are climbing")
    disjoint = make_finding(insight="Westside school boundaries redrawn")

    result = FindingsDuplicateFilter(ledger).filter([covered, disjoint])

    assert result.new_findings == [disjoint]
    assert result.duplicate_count == 1


def test_filter_never_writes_the_ledger(cache, clock, make_finding) -> None:
    ledger = CoveredTopicsLedger(cache, clock=clock)

    FindingsDuplicateFilter(ledger).filter([make_finding()])

    assert cache.get("covered_topics") is None


def test_topic_with_empty_keywords_never_matches(cache, clock, make_finding) -> None:
    ledger = CoveredTopicsLedger(cache, clock=clock)
    ledger.append("the best of all")

    result = FindingsDuplicateFilter(ledger).filter([make_finding(insight="the best of all")])

    assert result.duplicate_count == 0


@pytest.mark.parametrize(
    ("first_insight", "repeat_insight"),
    [
        ("Fort Bliss BAH rates increased", "BAH rates at Fort Bliss rose 4 percent"),
        ("Fort Bliss BAH rates increased 4.2%", "BAH rates for Fort Bliss rose 4.2 percent this year"),
    ],
)
def test_bah_story_is_suppressed_on_the_next_morning_after_delivery(
    cache, clock, make_finding, first_insight, repeat_insight,
) -> None:
    ledger = CoveredTopicsLedger(cache, clock=clock)
    dedup = FindingsDuplicateFilter(ledger, threshold=0.6)

    first = make_finding(insight=first_insight)
    day_one = dedup.filter([first])
    assert day_one.new_findings == [first]
    ledger.mark_findings_covered(day_one.new_findings)

    clock.advance(days=2)
    repeat = make_finding(insight=repeat_insight)
    other = make_finding(insight="Eastlake school rankings improved")
    day_three = dedup.filter([repeat, other])

    assert day_three.new_findings == [other]
    assert day_three.duplicate_count == 1
