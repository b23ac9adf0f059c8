from datetime import timedelta

import pytest
from pydantic import ValidationError

from src.analyzers.urgency import UrgencyClassifier, has_negation, is_urgent, to_urgent_item
from src.core.models import Priority, QueryCategory, Source, UrgentItem


@pytest.mark.parametrize("priority", [Priority.HIGH, Priority.URGENT])
def test_high_and_urgent_findings_are_urgent(make_finding, priority) -> None:
    assert is_urgent(make_finding(priority=priority))


@pytest.mark.parametrize("priority", [Priority.LOW, Priority.MEDIUM])
def test_low_and_medium_findings_are_not_urgent(make_finding, priority) -> None:
    assert not is_urgent(make_finding(priority=priority))


@pytest.mark.parametrize("insight", [
    "No urgent updates for El Paso today.",
    "There is NO BREAKING NEWS this evening",
    "no significant developments in the market",
    "Nothing urgent to report.",
])
def test_negated_insight_is_not_urgent(make_finding, insight) -> None:
    assert has_negation(insight)
    assert not is_urgent(make_finding(insight=insight, priority=Priority.URGENT))


def test_to_urgent_item_uses_first_source_url(make_finding) -> None:
    finding = make_finding(
        insight="County expands down payment assistance",
        priority=Priority.URGENT,
        sources=[Source(title="County", url="https://epcounty.com/news"), Source(url="https://b.example")],
    )

    item = to_urgent_item(finding)

    assert item.summary == "County expands down payment assistance"
    assert item.source == "https://epcounty.com/news"
    assert item.priority is Priority.URGENT
    assert item.category is QueryCategory.MARKET_INTEL
    assert item.timestamp == finding.timestamp


def test_to_urgent_item_falls_back_to_query_text(make_finding) -> None:
    finding = make_finding(query="El Paso breaking real estate news", priority=Priority.HIGH)

    assert to_urgent_item(finding).source == "El Paso breaking real estate news"


def test_classifier_extract_keeps_order_and_skips_non_urgent(make_finding) -> None:
    findings = [
        make_finding(insight="A", priority=Priority.HIGH),
        make_finding(insight="B", priority=Priority.LOW),
        make_finding(insight="Nothing urgent", priority=Priority.URGENT),
        make_finding(insight="C", priority=Priority.URGENT),
    ]

    items = UrgencyClassifier().extract(findings)

    assert [i.summary for i in items] == ["A", "C"]


@pytest.mark.parametrize("priority", [Priority.LOW, Priority.MEDIUM])
def test_to_urgent_item_rejects_non_actionable_findings(make_finding, priority) -> None:
    with pytest.raises(ValidationError):
        to_urgent_item(make_finding(priority=priority))


def test_urgent_item_rejects_low_priority_records() -> None:
    with pytest.raises(ValidationError):
        UrgentItem.model_validate({"summary": "Rates drop", "priority": "low"})


def test_urgent_item_treats_naive_timestamp_as_utc() -> None:
    item = UrgentItem.model_validate({"summary": "Rates drop", "timestamp": "2026-10-19T14:00:00"})

    assert item.timestamp.utcoffset() == timedelta(0)
