"""Notification sinks for scan results."""

from .base import Notifier
from .console import ConsoleNotifier, LogNotifier

__all__ = ['Notifier', 'ConsoleNotifier', 'LogNotifier']
