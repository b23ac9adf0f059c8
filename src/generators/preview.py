"""Sample digest inputs for previewing email layouts."""

from __future__ import annotations

import yaml
from pydantic import BaseModel, Field

from src.core.config import CONFIG_DIR
from src.core.exceptions import ConfigError
from src.core.models import BlogTopic, Finding, UrgentItem

PREVIEW_FILE = CONFIG_DIR / "preview.yaml"


class PreviewSample(BaseModel):
    """Findings, urgent items and blog topics used by ``preview``."""

    findings: list[Finding] = Field(default_factory=list)
    urgent_items: list[UrgentItem] = Field(default_factory=list)
    blog_topics: list[BlogTopic] = Field(default_factory=list)


def load_preview_sample() -> PreviewSample:
    """Load ``config/preview.yaml``.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    try:
        with open(PREVIEW_FILE, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot load preview sample: {PREVIEW_FILE}", {"error": str(e)}) from e
    return PreviewSample.model_validate(data)
