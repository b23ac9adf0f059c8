"""Email content generation: Claude-formatted digests with template fallbacks."""

from src.generators.base import BaseGenerator
from src.generators.digest import DigestRenderer, split_by_category
from src.generators.preview import PreviewSample, load_preview_sample

__all__ = [
    "BaseGenerator",
    "DigestRenderer",
    "split_by_category",
    "PreviewSample",
    "load_preview_sample",
]
