"""Outbound delivery of digests and alerts."""

from src.publishers.email_notifier import EmailNotifier, SendResult

__all__ = ["EmailNotifier", "SendResult"]
