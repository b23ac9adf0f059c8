"""Core infrastructure shared by every job.

Usage::

    from src.core import get_config, setup_logging, get_logger, PerplexityClient
    from src.core.models import Finding, UrgentItem, Priority
"""

from src.core.claude_client import ClaudeClient, ClaudeResponse
from src.core.config import (
    AppConfig,
    ClaudeModelConfig,
    DedupConfig,
    EmailConfig,
    LoggingConfig,
    ResearchConfig,
    RetryConfig,
    ScheduleConfig,
    StorageConfig,
    get_config,
)
from src.core.database import Base, LedgerEntryDB, get_engine, init_db, session_scope
from src.core.exceptions import (
    APIError,
    ClaudeAPIError,
    ConfigError,
    ContentError,
    DatabaseError,
    PublishError,
    RateLimitError,
    ResearchAPIError,
    ResearchDigestError,
    StorageError,
    WorkflowError,
)
from src.core.logger import bind_job_context, get_logger, setup_logging
from src.core.perplexity_client import PerplexityClient, PerplexityResponse

__all__ = [
    # config
    "AppConfig",
    "ClaudeModelConfig",
    "DedupConfig",
    "EmailConfig",
    "LoggingConfig",
    "ResearchConfig",
    "RetryConfig",
    "ScheduleConfig",
    "StorageConfig",
    "get_config",
    # clients
    "ClaudeClient",
    "ClaudeResponse",
    "PerplexityClient",
    "PerplexityResponse",
    # database
    "Base",
    "LedgerEntryDB",
    "get_engine",
    "init_db",
    "session_scope",
    # exceptions
    "ResearchDigestError",
    "ConfigError",
    "APIError",
    "ResearchAPIError",
    "ClaudeAPIError",
    "RateLimitError",
    "ContentError",
    "PublishError",
    "StorageError",
    "DatabaseError",
    "WorkflowError",
    # logging
    "setup_logging",
    "get_logger",
    "bind_job_context",
]
