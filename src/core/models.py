"""Domain models and enums for the research digest."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ============================================================
# Enums
# ============================================================


class QueryCategory(StrEnum):
    """Research query category."""

    MARKET_INTEL = "market_intel"
    REDDIT_PAIN_POINTS = "reddit_pain_points"
    URGENT_NEWS = "urgent_news"


class Priority(StrEnum):
    """Finding priority, ordered low < medium < high < urgent."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        """Numeric position of this priority in the ordering."""
        return _PRIORITY_ORDER.index(self)


_PRIORITY_ORDER = (Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.URGENT)
URGENT_PRIORITIES = frozenset({Priority.URGENT, Priority.HIGH})


class PainPointFrequency(StrEnum):
    """How often a pain point shows up in community threads."""

    COMMON = "common"
    OCCASIONAL = "occasional"
    RARE = "rare"


class TopicSource(StrEnum):
    """Channel through which a topic was covered."""

    BLOG = "blog"
    EMAIL = "email"


class ResearchMode(StrEnum):
    """System prompt variant used for a research query."""

    COMPREHENSIVE = "comprehensive"
    URGENT_ONLY = "urgent_only"


class ClaudeTask(StrEnum):
    """Claude task type for max_tokens selection."""

    MORNING_DIGEST = "morning_digest"
    EVENING_UPDATE = "evening_update"


class SystemStatus(StrEnum):
    """Health indicator derived from the last run timestamps."""

    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    ERROR = "error"


# ============================================================
# Base models
# ============================================================


def _utcnow() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def _ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RecordModel(BaseModel):
    """Base for models persisted as camelCase JSON records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible persisted shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================
# Research models
# ============================================================


class ResearchQuery(BaseModel):
    """A fixed research prompt sent to the provider."""

    query: str
    project: str = "marina"
    category: QueryCategory = QueryCategory.MARKET_INTEL


class Source(BaseModel):
    """A cited source."""

    title: str = "Unknown Source"
    url: str = ""


class PainPoint(BaseModel):
    """A recurring problem raised by prospective buyers."""

    description: str = "Unknown"
    frequency: PainPointFrequency = PainPointFrequency.OCCASIONAL
    source: str | None = None


class Finding(BaseModel):
    """Structured result of one research query. Immutable."""

    model_config = ConfigDict(frozen=True)

    query: str
    project: str = "marina"
    category: QueryCategory = QueryCategory.MARKET_INTEL
    key_findings: list[str] = Field(default_factory=list)
    most_important_insight: str = ""
    pain_points: list[PainPoint] = Field(default_factory=list)
    solution_requests: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    sources: list[Source] = Field(default_factory=list)
    raw_response: str = ""
    timestamp: datetime = Field(default_factory=_utcnow)


class UrgentItem(RecordModel):
    """A finding promoted to actionable status. Priority is high or urgent."""

    project: str = "marina"
    summary: str
    source: str = ""
    priority: Priority = Priority.HIGH
    category: QueryCategory = QueryCategory.URGENT_NEWS
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("priority")
    @classmethod
    def _actionable_priority(cls, value: Priority) -> Priority:
        if value not in URGENT_PRIORITIES:
            raise ValueError(f"urgent item priority must be high or urgent, got {value}")
        return value

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: datetime) -> datetime:
        return _ensure_utc(value)


# ============================================================
# Ledger records
# ============================================================


class CoveredTopic(RecordModel):
    """A topic already emailed or published."""

    topic: str
    keywords: list[str] = Field(default_factory=list)
    date_added: datetime = Field(default_factory=_utcnow)
    source: TopicSource = TopicSource.EMAIL

    @field_validator("date_added")
    @classmethod
    def _date_added_utc(cls, value: datetime) -> datetime:
        return _ensure_utc(value)


class CoveredTopicsData(RecordModel):
    """Persisted document holding every covered topic."""

    last_updated: datetime = Field(default_factory=_utcnow)
    topics: list[CoveredTopic] = Field(default_factory=list)


class DailyRunRecord(RecordModel):
    """Per-day record of morning/evening urgent items and run times."""

    date: str
    morning_urgent_items: list[UrgentItem] = Field(default_factory=list)
    evening_urgent_items: list[UrgentItem] | None = None
    last_morning_run: datetime | None = None
    last_evening_run: datetime | None = None

    @field_validator("last_morning_run", "last_evening_run")
    @classmethod
    def _run_times_utc(cls, value: datetime | None) -> datetime | None:
        return _ensure_utc(value) if value is not None else None


# ============================================================
# Blog models
# ============================================================


class ExistingPost(BaseModel):
    """A post already published on the agent's blog."""

    title: str
    project: str = "marina"
    url: str | None = None


class BlogTopic(BaseModel):
    """A candidate blog topic annotated with its duplicate verdict."""

    title: str
    target_keywords: list[str] = Field(default_factory=list)
    project: str = "marina"
    is_duplicate: bool = False
    existing_post_title: str | None = None


# ============================================================
# Status
# ============================================================


class StatusReport(BaseModel):
    """System health summary for operators."""

    status: SystemStatus
    last_morning_run: datetime | None = None
    last_evening_run: datetime | None = None
    morning_query_count: int = 0
    evening_query_count: int = 0
    blog_url: str = ""
