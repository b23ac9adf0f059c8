"""Claude API client used to format digests, with retry logic."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import anthropic
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import get_config
from src.core.exceptions import ClaudeAPIError
from src.core.logger import get_logger
from src.core.models import ClaudeTask

logger = get_logger(__name__)

_RETRYABLE = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,
    anthropic.InternalServerError,
)


@dataclass(slots=True)
class ClaudeResponse:
    """Response wrapper for Claude API calls."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int
    stop_reason: str


class ClaudeClient:
    """Claude API client with per-task max_tokens.

    Example::

        client = ClaudeClient()
        response = client.generate(
            ClaudeTask.MORNING_DIGEST,
            "Format these findings as an HTML email ...",
        )
        print(response.content)
    """

    def __init__(self, client: anthropic.Anthropic | None = None) -> None:
        config = get_config()
        if client is None:
            if not config.anthropic_api_key:
                raise ClaudeAPIError(
                    "ANTHROPIC_API_KEY is not set",
                    {"hint": "Set ANTHROPIC_API_KEY in your .env file"},
                )
            client = anthropic.Anthropic(api_key=config.anthropic_api_key)
        self._client = client
        self._config = config.claude
        self._retry_config = config.retry
        logger.debug("claude_client_initialized", model=self._config.model)

    def generate(
        self,
        task: ClaudeTask,
        user_message: str,
        system_prompt: str = "",
    ) -> ClaudeResponse:
        """Generate a single-turn response.

        Args:
            task: Task type selecting max_tokens.
            user_message: The user message to send.
            system_prompt: Optional system prompt.

        Returns:
            ClaudeResponse with the generated content.

        Raises:
            ClaudeAPIError: On API errors, after retries for transient ones.
        """
        kwargs: dict[str, Any] = {
            "model": self._config.model,
            "max_tokens": self._config.max_tokens.get(task.value, 4000),
            "temperature": self._config.temperature,
            "messages": [{"role": "user", "content": user_message}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        response = self._call_api(**kwargs)

        content = response.content[0].text if response.content else ""
        result = ClaudeResponse(
            content=content,
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason or "",
        )
        logger.info(
            "claude_api_response",
            task=task.value,
            model=result.model,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
            stop_reason=result.stop_reason,
        )
        return result

    def _call_api(self, **kwargs: Any) -> Any:
        """Call messages.create, retrying rate limits and 5xx/connection errors.

        Raises:
            ClaudeAPIError: For any API error once retries are exhausted.
        """
        retrying = Retrying(
            retry=retry_if_exception_type(_RETRYABLE),
            stop=stop_after_attempt(self._retry_config.max_attempts),
            wait=wait_exponential(
                multiplier=1,
                min=self._retry_config.wait_exponential_min,
                max=self._retry_config.wait_exponential_max,
            ),
            reraise=True,
        )
        try:
            return retrying(self._client.messages.create, **kwargs)
        except anthropic.APIStatusError as e:
            raise ClaudeAPIError(
                f"Claude API error: {e.status_code}",
                {"status_code": e.status_code, "message": str(e)},
            ) from e
        except anthropic.APIError as e:
            raise ClaudeAPIError("Claude request failed", {"error": str(e)}) from e
