"""Notifier interface."""
from abc import ABC, abstractmethod
from typing import List


def format_new_items(count: int, kind: str, company: str) -> str:
    """Human-readable line such as "Found 3 new jobs at Acme"."""
    return f"Found {count} new {kind} at {company}"


class Notifier(ABC):
    """Receives human-readable notification lines after a scan cycle."""

    @abstractmethod
    def notify(self, messages: List[str]) -> None:
        """Deliver notification lines.

        Args:
            messages: One line per company with new items
        """
