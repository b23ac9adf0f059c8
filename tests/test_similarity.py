import pytest

from src.dedup.keywords import keyword_set
from src.dedup.similarity import (
    BLOG_TOPIC_THRESHOLD,
    COVERED_TOPIC_THRESHOLD,
    TopicSimilarityScorer,
    overlap_ratio,
    prefix_match,
)


def test_overlap_ratio_is_zero_when_either_side_is_empty() -> None:
    assert overlap_ratio(set(), {"bah"}) == 0.0
    assert overlap_ratio({"bah"}, set()) == 0.0


def test_overlap_ratio_divides_by_smaller_set() -> None:
    candidate = {"fort", "bliss", "bah", "rates", "rose", "percent"}
    reference = {"fort", "bliss", "bah", "rates", "increased"}

    assert overlap_ratio(candidate, reference) == pytest.approx(4 / 5)


def test_overlap_ratio_matches_substrings_in_both_directions() -> None:
    assert overlap_ratio({"bah"}, {"bahs"}) == 1.0
    assert overlap_ratio({"bahs"}, {"bah"}) == 1.0


def test_overlap_ratio_short_tokens_can_false_positive() -> None:
    # "rat" is a substring of "rates"; lexical matching accepts it.
    assert overlap_ratio({"rat"}, {"rates"}) == 1.0


def test_is_duplicate_rejects_empty_sets() -> None:
    scorer = TopicSimilarityScorer(COVERED_TOPIC_THRESHOLD)

    assert not scorer.is_duplicate(set(), set())
    assert not scorer.is_duplicate({"bah"}, set())


@pytest.mark.parametrize(
    "threshold",
    [0.0, 0.3, BLOG_TOPIC_THRESHOLD, COVERED_TOPIC_THRESHOLD, 0.9, 0.99],
)
def test_is_duplicate_for_identical_sets(threshold) -> None:
    scorer = TopicSimilarityScorer(threshold)
    keywords = keyword_set("Fort Bliss BAH rates")

    assert scorer.is_duplicate(keywords, keywords)


def test_is_duplicate_threshold_is_strict() -> None:
    scorer = TopicSimilarityScorer(0.5)

    # 1 of 2 matches: ratio exactly 0.5
    assert not scorer.is_duplicate({"bliss", "schools"}, {"bliss", "commute"})
    assert scorer.threshold == 0.5


def test_prefix_match_on_shared_opening_words() -> None:
    assert prefix_match(
        "Moving to El Paso: Neighborhoods for Families",
        "Moving to El Paso: Neighborhood Safety",
    )
    assert not prefix_match("Eastlake new builds", "Sunland Park condos")


def test_prefix_match_ignores_blank_titles() -> None:
    assert not prefix_match("", "Fort Bliss housing")
    assert not prefix_match("   ", "   ")


def test_is_similar_title_uses_keywords_or_prefix() -> None:
    scorer = TopicSimilarityScorer(BLOG_TOPIC_THRESHOLD)

    assert scorer.is_similar_title(
        "Fort Bliss PCS Guide: Buying vs Renting",
        "Buying or Renting After a Fort Bliss PCS",
    )
    assert scorer.is_similar_title(
        "Moving to El Paso: What Nobody Tells You",
        "Moving to El Paso: The Complete Checklist",
    )
    assert not scorer.is_similar_title(
        "Down Payment Assistance in Texas",
        "Eastlake Schools Ranked",
    )


def test_reworded_bah_story_is_a_duplicate() -> None:
    scorer = TopicSimilarityScorer(COVERED_TOPIC_THRESHOLD)
    covered = keyword_set("Fort Bliss BAH rates increased 4.2%")
    candidate = keyword_set("BAH rates for Fort Bliss rose 4.2 percent this year")

    assert overlap_ratio(candidate, covered) == pytest.approx(4 / 5)
    assert scorer.is_duplicate(candidate, covered)
