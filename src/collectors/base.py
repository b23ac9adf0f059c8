"""Abstract base class for all research collectors."""

from __future__ import annotations

from abc import ABC
from typing import Any

from src.core.config import get_config
from src.core.logger import get_logger
from src.core.perplexity_client import PerplexityClient


class BaseCollector(ABC):
    """Base class for collectors backed by the research provider.

    Provides shared initialization for config, logging and the Perplexity
    client. The client is created lazily so a collector can be built (and
    report a clean error per call) without an API key.

    Args:
        client: Pre-built client; created on first use when omitted.
    """

    def __init__(self, client: PerplexityClient | None = None) -> None:
        self._config = get_config()
        self._client = client
        self._logger = get_logger(type(self).__name__)
        self._logger.debug("collector_initialized", collector=type(self).__name__)

    @property
    def client(self) -> PerplexityClient:
        """The Perplexity client, built on first access.

        Raises:
            ResearchAPIError: If no API key is configured.
        """
        if self._client is None:
            self._client = PerplexityClient()
        return self._client

    def _prompt_context(self, **extra: Any) -> dict[str, Any]:
        """Common template variables for provider prompts."""
        return {
            "agent_name": self._config.app.agent_name,
            "agent_full_name": self._config.app.agent_full_name,
            "blog_url": self._config.queries.blog_url,
            **extra,
        }
