from unittest.mock import Mock

from src.collectors.blog_collector import BlogCollector, parse_json_array
from src.core.exceptions import ResearchAPIError
from src.core.perplexity_client import PerplexityResponse


def _reply(content: str) -> PerplexityResponse:
    return PerplexityResponse(content=content, model="sonar-pro", prompt_tokens=0, completion_tokens=0)


def test_parse_json_array_finds_embedded_array() -> None:
    assert parse_json_array('Sure! [{"title": "A"}] Hope that helps.') == [{"title": "A"}]
    assert parse_json_array("no array here") == []
    assert parse_json_array("[not json]") == []


def test_fetch_existing_posts_maps_titles_to_posts() -> None:
    client = Mock()
    client.chat.return_value = _reply('[{"title": "Moving to El Paso"}, {"title": ""}, {"name": "x"}]')

    posts = BlogCollector(client=client).fetch_existing_posts()

    assert [p.title for p in posts] == ["Moving to El Paso"]
    assert posts[0].url == "https://www.marina-ramirez.com/en/blog"
    prompt = client.chat.call_args.args[0]
    assert "https://www.marina-ramirez.com/en/blog" in prompt


def test_fetch_existing_posts_returns_empty_on_failure() -> None:
    client = Mock()
    client.chat.side_effect = ResearchAPIError("HTTP 500")

    assert BlogCollector(client=client).fetch_existing_posts() == []


def test_suggest_topics_returns_titles() -> None:
    client = Mock()
    client.chat.return_value = _reply(
        '```json\n[{"title": "Fort Bliss PCS Checklist", "targetKeywords": ["pcs"]}]\n```'
    )

    topics = BlogCollector(client=client).suggest_topics(count=3)

    assert topics == ["Fort Bliss PCS Checklist"]
    assert "suggest 3 blog topics" in client.chat.call_args.args[0]


def test_suggest_topics_without_api_key_returns_empty() -> None:
    # No client injected and PERPLEXITY_API_KEY is blank.
    assert BlogCollector().suggest_topics() == []
