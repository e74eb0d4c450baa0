"""Notification transports."""

from .base import DisabledNotifier, Notifier, NotifyError, split_message
from .telegram import TelegramNotifier, build_notifier

__all__ = [
    "Notifier",
    "NotifyError",
    "DisabledNotifier",
    "TelegramNotifier",
    "build_notifier",
    "split_message",
]
