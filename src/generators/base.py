"""Abstract base class for HTML content generators."""

from __future__ import annotations

import re
from abc import ABC
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from src.core.claude_client import ClaudeClient
from src.core.config import get_config
from src.core.exceptions import ClaudeAPIError, ContentError
from src.core.logger import get_logger
from src.core.models import ClaudeTask
from src.core.templating import render_template

_CODE_FENCE = re.compile(r"^```(?:html)?\s*|\s*```$")


class BaseGenerator(ABC):
    """Base class for generators that may format content with Claude.

    Claude is optional: when no ``ANTHROPIC_API_KEY`` is configured the
    generator reports ``claude_enabled == False`` and subclasses use their
    template fallbacks.

    Args:
        client: Pre-built Claude client. When omitted one is created if an
            API key is configured.
    """

    def __init__(self, client: ClaudeClient | None = None) -> None:
        self._config = get_config()
        self._logger = get_logger(type(self).__name__)
        self._tz = ZoneInfo(self._config.schedule.timezone)
        if client is None and self._config.anthropic_api_key:
            client = ClaudeClient()
        self._client = client
        self._logger.debug(
            "generator_initialized",
            generator=type(self).__name__,
            claude_enabled=self.claude_enabled,
        )

    @property
    def claude_enabled(self) -> bool:
        return self._client is not None

    def _now(self) -> datetime:
        """Current time in the schedule timezone."""
        return datetime.now(self._tz)

    def _render(self, template_path: str, **context: Any) -> str:
        """Render a template with the common email context added."""
        base = {
            "app_name": self._config.app.name,
            "agent_name": self._config.app.agent_name,
            "agent_full_name": self._config.app.agent_full_name,
            "now": self._now(),
            "footer": f"{self._config.app.name} · Automated market research",
        }
        return render_template(template_path, **{**base, **context})

    def _generate_content(
        self,
        task: ClaudeTask,
        user_message: str,
        system_prompt: str = "",
    ) -> str:
        """Call Claude and return the generated text without code fences.

        Raises:
            ContentError: If Claude is unavailable, fails, or returns nothing.
        """
        if self._client is None:
            raise ContentError("Claude is not configured", {"task": task.value})
        try:
            response = self._client.generate(
                task=task,
                user_message=user_message,
                system_prompt=system_prompt,
            )
        except ClaudeAPIError as e:
            raise ContentError(
                f"Content generation failed: {e.message}",
                {"task": task.value, "original_error": str(e)},
            ) from e

        content = _CODE_FENCE.sub("", response.content.strip())
        if not content:
            raise ContentError("Claude returned empty content", {"task": task.value})
        return content
