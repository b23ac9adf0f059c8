"""Existing blog posts and trending topic suggestions via the research provider."""

from __future__ import annotations

import json
import re
from typing import Any

from src.collectors.base import BaseCollector
from src.core.models import ExistingPost
from src.core.templating import render_template

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")

_SCRAPER_SYSTEM_PROMPT = (
    "You are a web scraper that extracts blog post titles. Return only valid JSON."
)
_SEO_SYSTEM_PROMPT = "You are an SEO expert for real estate content marketing."


def parse_json_array(content: str) -> list[Any]:
    """Return the first JSON array embedded in ``content``, or ``[]``."""
    match = _JSON_ARRAY.search(content)
    if match is None:
        return []
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return []
    return parsed if isinstance(parsed, list) else []


class BlogCollector(BaseCollector):
    """Look up the agent's published posts and ask for new topic ideas.

    Both operations are best-effort: any failure is logged and an empty
    list is returned so the morning digest still goes out.
    """

    def fetch_existing_posts(self) -> list[ExistingPost]:
        """List the titles currently published on the blog."""
        blog_url = self._config.queries.blog_url
        try:
            prompt = render_template("prompts/existing_posts.j2", **self._prompt_context())
            response = self.client.chat(prompt, system_prompt=_SCRAPER_SYSTEM_PROMPT)
        except Exception as e:
            self._logger.error("existing_posts_fetch_failed", error=str(e))
            return []

        posts = [
            ExistingPost(title=str(item["title"]), url=blog_url)
            for item in parse_json_array(response.content)
            if isinstance(item, dict) and item.get("title")
        ]
        self._logger.info("existing_posts_fetched", blog_url=blog_url, count=len(posts))
        return posts

    def suggest_topics(self, count: int = 5) -> list[str]:
        """Ask for ``count`` SEO blog topic titles.

        Returns:
            Suggested titles, possibly empty.
        """
        try:
            prompt = render_template(
                "prompts/blog_topics.j2",
                **self._prompt_context(count=count, focus_areas=self._config.queries.blog_focus),
            )
            response = self.client.chat(
                prompt,
                system_prompt=_SEO_SYSTEM_PROMPT,
                temperature=0.3,
                max_tokens=1500,
            )
        except Exception as e:
            self._logger.error("blog_topics_fetch_failed", error=str(e))
            return []

        titles = [
            str(item["title"])
            for item in parse_json_array(response.content)
            if isinstance(item, dict) and item.get("title")
        ]
        self._logger.info("blog_topics_suggested", count=len(titles))
        return titles
