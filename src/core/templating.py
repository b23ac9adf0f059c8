"""Jinja2 environment shared by prompt and email templates."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from src.core.config import PROJECT_ROOT
from src.core.exceptions import ContentError

TEMPLATES_DIR = PROJECT_ROOT / "templates"


def _filter_truncate_text(text: str, length: int = 100) -> str:
    """Truncate text to a given length with ellipsis."""
    if len(text) <= length:
        return text
    return text[: length - 3] + "..."


def _filter_long_date(value: Any) -> str:
    """Format a date like ``Sunday, October 18, 2026``."""
    return f"{value:%A, %B} {value.day}, {value.year}"


@lru_cache(maxsize=1)
def get_template_env() -> Environment:
    """Get the singleton Jinja2 environment.

    HTML templates under ``email/`` are autoescaped; prompt templates are
    rendered verbatim.

    Returns:
        Configured Jinja2 Environment.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )
    env.filters["truncate_text"] = _filter_truncate_text
    env.filters["long_date"] = _filter_long_date
    return env


def render_template(template_path: str, **context: Any) -> str:
    """Render a template relative to ``templates/``.

    Args:
        template_path: Path such as ``prompts/research_morning.j2``.
        **context: Template variables.

    Returns:
        Rendered template string.

    Raises:
        ContentError: If the template cannot be loaded.
    """
    try:
        template = get_template_env().get_template(template_path)
    except TemplateNotFound as e:
        raise ContentError(
            f"Template not found: {template_path}",
            {"template": template_path, "error": str(e)},
        ) from e
    return template.render(**context)
