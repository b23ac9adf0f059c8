"""Application configuration using pydantic-settings with YAML integration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.exceptions import ConfigError
from src.core.logger import get_logger
from src.core.models import ResearchQuery

logger = get_logger(__name__)

# Project root directory (src/core/config.py -> src/core -> src -> project root)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"


def _load_yaml(filename: str) -> dict[str, Any]:
    """Load a YAML file from the config directory.

    Args:
        filename: Name of the YAML file to load.

    Returns:
        Parsed YAML content as a dictionary.

    Raises:
        ConfigError: If the file cannot be loaded or parsed.
    """
    filepath = CONFIG_DIR / filename
    try:
        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data or {}
    except FileNotFoundError as e:
        raise ConfigError(
            f"Config file not found: {filepath}",
            {"file": filename},
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML: {filepath}",
            {"file": filename, "error": str(e)},
        ) from e


# ============================================================
# Sub-config models (from settings.yaml)
# ============================================================


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Realty Research Digest"
    version: str = "0.1.0"
    env: str = "development"
    project: str = "marina"
    agent_name: str = "Marina"
    agent_full_name: str = "Marina Ramirez"


class ClaudeModelConfig(BaseModel):
    """Claude model configuration for digest formatting."""

    model: str = "claude-sonnet-4-6"
    max_tokens: dict[str, int] = Field(default_factory=lambda: {
        "morning_digest": 4000,
        "evening_update": 1500,
    })
    temperature: float = 0.3


class ScheduleConfig(BaseModel):
    """Schedule configuration."""

    timezone: str = "America/Chicago"
    morning_digest: str = "06:30"
    evening_catchup: str = "20:00"
    blog_topics_weekday: int = 0  # Monday
    morning_max_duration_sec: int = 300
    evening_max_duration_sec: int = 60


class StorageConfig(BaseModel):
    """Ledger storage configuration."""

    enabled: bool = True
    url: str = "sqlite:///data/db/research_digest.db"
    echo: bool = False
    covered_topics_key: str = "covered_topics"
    daily_run_key_prefix: str = "research_urgent_"
    daily_run_ttl_hours: int = 48
    retention_days: int = 28


class ResearchConfig(BaseModel):
    """Research provider (Perplexity) configuration."""

    api_url: str = "https://api.perplexity.ai/chat/completions"
    model: str = "sonar-pro"
    temperature: float = 0.1
    max_tokens: int = 2000
    batch_size: int = 5
    batch_delay_sec: float = 2.0
    request_timeout_sec: int = 60


class DedupConfig(BaseModel):
    """Similarity thresholds."""

    covered_topic_threshold: float = 0.6
    blog_topic_threshold: float = 0.5
    cross_run_threshold: float = 0.5


class EmailConfig(BaseModel):
    """Outbound email (Resend) configuration."""

    api_url: str = "https://api.resend.com/emails"
    sender: str = "Marina Research <noreply@marina-ramirez.com>"
    recipient: str = "info@marina-ramirez.com"
    request_timeout_sec: int = 30
    error_notification_threshold: int = 5


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    file: str = "logs/app.log"


class RetryConfig(BaseModel):
    """Retry configuration."""

    max_attempts: int = 3
    wait_exponential_min: int = 1
    wait_exponential_max: int = 30


# ============================================================
# Queries config (from queries.yaml)
# ============================================================


class QueriesConfig(BaseModel):
    """Fixed research prompts and blog settings."""

    blog_url: str = ""
    morning: list[ResearchQuery] = Field(default_factory=list)
    evening: list[ResearchQuery] = Field(default_factory=list)
    blog_focus: list[str] = Field(default_factory=list)
    research_focus: list[str] = Field(default_factory=list)


# ============================================================
# Root configuration
# ============================================================


class AppConfig(BaseSettings):
    """Root application configuration.

    Loads secrets from .env file (environment variables) and
    structured settings from YAML config files.
    """

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Environment variables (from .env) ---
    perplexity_api_key: str = ""
    anthropic_api_key: str = ""
    resend_api_key: str = ""
    cron_secret: str = ""
    database_url: str = ""
    app_env: str = "development"
    log_level: str = ""

    # --- YAML-loaded sub-configs ---
    app: AppInfo = Field(default_factory=AppInfo)
    claude: ClaudeModelConfig = Field(default_factory=ClaudeModelConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    research: ResearchConfig = Field(default_factory=ResearchConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    queries: QueriesConfig = Field(default_factory=QueriesConfig)

    def model_post_init(self, __context: Any) -> None:
        """Load YAML configurations after env vars are initialized."""
        self._load_yaml_configs()

    def _load_yaml_configs(self) -> None:
        """Load all YAML configuration files into sub-config models."""
        settings = _load_yaml("settings.yaml")
        if "app" in settings:
            self.app = AppInfo(**settings["app"])
        if "claude" in settings:
            self.claude = ClaudeModelConfig(**settings["claude"])
        if "schedule" in settings:
            self.schedule = ScheduleConfig(**settings["schedule"])
        if "storage" in settings:
            self.storage = StorageConfig(**settings["storage"])
        if "research" in settings:
            self.research = ResearchConfig(**settings["research"])
        if "dedup" in settings:
            self.dedup = DedupConfig(**settings["dedup"])
        if "email" in settings:
            self.email = EmailConfig(**settings["email"])
        if "logging" in settings:
            self.logging = LoggingConfig(**settings["logging"])
        if "retry" in settings:
            self.retry = RetryConfig(**settings["retry"])

        # queries.yaml
        queries_data = _load_yaml("queries.yaml")
        self.queries = QueriesConfig(**queries_data)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Returns:
        The AppConfig singleton instance.

    Note:
        Call ``get_config.cache_clear()`` to reload configuration in tests.
    """
    config = AppConfig()
    logger.info(
        "configuration_loaded",
        app=config.app.name,
        env=config.app.env,
        morning_queries=len(config.queries.morning),
        evening_queries=len(config.queries.evening),
    )
    return config
