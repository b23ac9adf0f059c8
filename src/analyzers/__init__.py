"""Analyzers package: urgency classification of findings."""

from src.analyzers.urgency import UrgencyClassifier, is_urgent, to_urgent_item

__all__ = ["UrgencyClassifier", "is_urgent", "to_urgent_item"]
