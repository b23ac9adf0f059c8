"""Custom exception hierarchy for the research digest."""

from typing import Any


class ResearchDigestError(Exception):
    """Root exception for all project-specific errors.

    Args:
        message: Human-readable error description.
        details: Optional dict with structured error context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message


class ConfigError(ResearchDigestError):
    """Configuration loading or validation error."""


class APIError(ResearchDigestError):
    """Generic external API error."""


class ResearchAPIError(APIError):
    """Research provider (Perplexity) specific error."""


class ClaudeAPIError(APIError):
    """Claude API specific error."""


class RateLimitError(APIError):
    """API rate limit exceeded."""


class ContentError(ResearchDigestError):
    """Digest rendering error."""


class PublishError(ResearchDigestError):
    """Email delivery error."""


class StorageError(ResearchDigestError):
    """Ledger storage error (unreadable or malformed records)."""


class DatabaseError(StorageError):
    """Database operation error."""


class WorkflowError(ResearchDigestError):
    """A critical workflow step failed."""
