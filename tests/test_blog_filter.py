from src.core.models import ExistingPost
from src.dedup.blog_filter import BlogTopicDuplicateFilter


def test_check_flags_duplicate_and_names_first_matching_post() -> None:
    posts = [
        ExistingPost(title="Eastlake Market Report"),
        ExistingPost(title="Buying or Renting After a Fort Bliss PCS"),
        ExistingPost(title="Fort Bliss PCS: Buying vs Renting Explained"),
    ]

    topics = BlogTopicDuplicateFilter().check(["Fort Bliss PCS Guide: Buying vs Renting"], posts)

    assert topics[0].is_duplicate
    assert topics[0].existing_post_title == "Buying or Renting After a Fort Bliss PCS"


def test_check_keeps_new_topics_and_target_keywords() -> None:
    posts = [ExistingPost(title="Eastlake Market Report")]

    topics = BlogTopicDuplicateFilter().check(
        ["Down Payment Assistance Programs for Texas First-Time Buyers in El Paso"],
        posts,
    )

    topic = topics[0]
    assert not topic.is_duplicate
    assert topic.existing_post_title is None
    assert topic.target_keywords == ["payment", "assistance", "programs", "texas", "firsttime"]
    assert topic.project == "marina"


def test_check_without_existing_posts_marks_nothing() -> None:
    topics = BlogTopicDuplicateFilter().check(["A", "B"], [])

    assert [t.is_duplicate for t in topics] == [False, False]
    assert [t.title for t in topics] == ["A", "B"]
