"""Metrics collection for a scan cycle."""
import time
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Any

logger = logging.getLogger(__name__)


@dataclass
class MetricsCollector:
    """Collects counters for one scan cycle.

    One instance is created per cycle and handed to every component that
    reports events.
    """

    # Fetching
    pages_fetched: int = 0
    fetch_retries: int = 0
    fetch_errors_total: int = 0
    fetch_errors_by_type: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    # Extraction
    candidates_by_method: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    malformed_blocks: int = 0

    # Validation and reconciliation
    rejections_by_reason: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    duplicates_removed: int = 0

    start_time: float = field(default_factory=time.time)

    def record_page_fetched(self) -> None:
        self.pages_fetched += 1

    def record_retry(self, url: str) -> None:
        self.fetch_retries += 1
        logger.debug(f"Retry recorded for {url}")

    def record_fetch_error(self, error_type: str = "generic") -> None:
        """Record a fetch error.

        Args:
            error_type: Type of error (timeout, navigation, auth_required, ...)
        """
        self.fetch_errors_total += 1
        self.fetch_errors_by_type[error_type] += 1

    def record_candidates(self, method: str, count: int) -> None:
        """Record candidates produced by an extraction strategy.

        Args:
            method: Extraction method name
            count: Number of candidates produced
        """
        if count:
            self.candidates_by_method[method] += count

    def record_malformed_block(self) -> None:
        self.malformed_blocks += 1

    def record_rejection(self, reason: str) -> None:
        self.rejections_by_reason[reason] += 1

    def record_duplicates_removed(self, count: int) -> None:
        self.duplicates_removed += count

    def get_summary(self) -> Dict[str, Any]:
        """Get the collected metrics as a plain dictionary."""
        return {
            "uptime_seconds": round(time.time() - self.start_time, 2),
            "pages_fetched": self.pages_fetched,
            "fetch_retries": self.fetch_retries,
            "fetch_errors_total": self.fetch_errors_total,
            "fetch_errors_by_type": dict(self.fetch_errors_by_type),
            "candidates_by_method": dict(self.candidates_by_method),
            "malformed_blocks": self.malformed_blocks,
            "rejections_by_reason": dict(self.rejections_by_reason),
            "duplicates_removed": self.duplicates_removed,
        }
