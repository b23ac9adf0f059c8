"""Perplexity chat-completions client with retry logic."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import ResearchConfig, get_config
from src.core.exceptions import RateLimitError, ResearchAPIError
from src.core.logger import get_logger

logger = get_logger(__name__)


class _TransientError(Exception):
    """Retryable upstream failure (5xx)."""


@dataclass(slots=True)
class PerplexityResponse:
    """Response wrapper for a chat completion."""

    content: str
    model: str
    prompt_tokens: int
    completion_tokens: int


class PerplexityClient:
    """Thin client for the Perplexity ``/chat/completions`` endpoint.

    Example::

        client = PerplexityClient()
        response = client.chat(
            "Fort Bliss BAH rates 2026",
            system_prompt="You are a real estate market research assistant.",
        )
        print(response.content)
    """

    def __init__(
        self,
        api_key: str | None = None,
        settings: ResearchConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        config = get_config()
        self._api_key = api_key if api_key is not None else config.perplexity_api_key
        if not self._api_key:
            raise ResearchAPIError(
                "PERPLEXITY_API_KEY is not set",
                {"hint": "Set PERPLEXITY_API_KEY in your .env file"},
            )
        self._settings = settings or config.research
        self._session = session or requests.Session()

    def chat(
        self,
        user_message: str,
        system_prompt: str = "",
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> PerplexityResponse:
        """Run a single-turn completion.

        Args:
            user_message: The user message to send.
            system_prompt: Optional system prompt.
            temperature: Overrides the configured temperature.
            max_tokens: Overrides the configured max_tokens.

        Returns:
            PerplexityResponse with the generated content.

        Raises:
            ResearchAPIError: On non-success status or malformed body.
            RateLimitError: If rate limited after all retries.
        """
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_message})

        payload: dict[str, Any] = {
            "model": self._settings.model,
            "messages": messages,
            "temperature": self._settings.temperature if temperature is None else temperature,
            "max_tokens": self._settings.max_tokens if max_tokens is None else max_tokens,
        }
        try:
            body = self._post(payload)
        except _TransientError as e:
            raise ResearchAPIError(f"Perplexity API error: {e}") from e
        except requests.RequestException as e:
            raise ResearchAPIError(
                "Perplexity request failed",
                {"error": str(e)},
            ) from e

        try:
            content = body["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            content = ""
        usage = body.get("usage") or {}
        result = PerplexityResponse(
            content=content,
            model=body.get("model", self._settings.model),
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
        )
        logger.debug(
            "perplexity_response",
            model=result.model,
            prompt_tokens=result.prompt_tokens,
            completion_tokens=result.completion_tokens,
        )
        return result

    @retry(
        retry=retry_if_exception_type((
            RateLimitError,
            _TransientError,
            requests.ConnectionError,
            requests.Timeout,
        )),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        reraise=True,
    )
    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST the completion request with retry on transient failures.

        Raises:
            RateLimitError: On HTTP 429.
            ResearchAPIError: On other non-success statuses or a non-JSON body.
        """
        response = self._session.post(
            self._settings.api_url,
            json=payload,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=self._settings.request_timeout_sec,
        )
        if response.status_code == 429:
            logger.warning("perplexity_rate_limited")
            raise RateLimitError("Perplexity rate limit exceeded", {"status_code": 429})
        if response.status_code >= 500:
            logger.warning("perplexity_server_error", status_code=response.status_code)
            raise _TransientError(f"HTTP {response.status_code}")
        if not response.ok:
            raise ResearchAPIError(
                f"Perplexity API error: {response.status_code}",
                {"status_code": response.status_code, "body": response.text[:500]},
            )
        try:
            return response.json()
        except ValueError as e:
            raise ResearchAPIError(
                "Perplexity returned a non-JSON body",
                {"body": response.text[:500]},
            ) from e
