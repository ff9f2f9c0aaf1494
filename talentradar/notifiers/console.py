"""Console and log notification sinks."""
from typing import List, Optional
import logging

from rich.console import Console

from .base import Notifier

logger = logging.getLogger(__name__)


class ConsoleNotifier(Notifier):
    """Prints notification lines to the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def notify(self, messages: List[str]) -> None:
        if not messages:
            self.console.print("[yellow]No new jobs or hires[/yellow]")
            return
        for message in messages:
            self.console.print(f"[green]{message}[/green]")


class LogNotifier(Notifier):
    """Writes notification lines to the application log."""

    def notify(self, messages: List[str]) -> None:
        for message in messages:
            logger.info(message)
