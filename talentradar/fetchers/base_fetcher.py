"""Core page acquisition.

This module contains the Fetcher front used by the orchestrator: it wraps a
rendering backend (headless browser or plain HTTP) with the rate governor so
that every page acquisition is paced and retried the same way.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
import json
import logging
import pathlib

from ..document import Document
from ..error_handling import FetchError
from ..metrics import MetricsCollector
from ..rate_limiter import RateGovernor

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """Credentials to present when fetching a protected source.

    Attributes:
        cookies: Browser cookies (name, value, domain, path, ...)
        headers: Extra HTTP headers
    """
    cookies: List[Dict[str, Any]] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_cookie_file(cls, path: pathlib.Path) -> "AuthContext":
        """Load cookies exported from a logged-in browser session.

        Accepts either a list of cookie objects or a storage-state document
        with a ``cookies`` key.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file does not hold a cookie list
        """
        if not path.exists():
            raise FileNotFoundError(f"Cookie file not found: {path}")
        with open(path, "r") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("cookies", [])
        if not isinstance(data, list):
            raise ValueError(f"Cookie file {path} does not contain a cookie list")
        logger.info(f"Loaded {len(data)} cookies from {path}")
        return cls(cookies=data)

    def cookie_dict(self) -> Dict[str, str]:
        return {c["name"]: c["value"] for c in self.cookies if "name" in c and "value" in c}


class PageBackend(ABC):
    """A way of turning a URL into a rendered Document."""

    def open(self) -> None:
        """Acquire long-lived resources. Raises CapabilityInitError on failure."""

    def close(self) -> None:
        """Release long-lived resources."""

    @abstractmethod
    def fetch(self, url: str, auth: Optional[AuthContext] = None) -> Document:
        """Fetch and render one page.

        Raises:
            FetchError: On timeout, navigation failure or auth wall
        """


class Fetcher:
    """Paced, retried page acquisition over a backend.

    Features:
    - Randomized delay before each network call
    - Bounded retry with backoff on timeouts and navigation errors
    - Fetch error accounting
    """

    def __init__(self, backend: PageBackend, governor: RateGovernor,
                 metrics: Optional[MetricsCollector] = None) -> None:
        self.backend = backend
        self.governor = governor
        self.metrics = metrics

    def open(self) -> None:
        self.backend.open()

    def close(self) -> None:
        try:
            self.backend.close()
        except Exception as e:
            logger.warning(f"Error closing fetch backend: {e}")

    def __enter__(self) -> "Fetcher":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def acquire(self, url: str, auth: Optional[AuthContext] = None) -> Document:
        """Acquire a rendered document for a URL.

        Args:
            url: Page to fetch
            auth: Credentials for protected sources

        Returns:
            The rendered Document

        Raises:
            FetchError: When the page cannot be acquired within the retry budget
        """
        logger.info(f"Acquiring {url}")
        try:
            document = self.governor.call(url, lambda: self.backend.fetch(url, auth))
        except FetchError as e:
            if self.metrics:
                self.metrics.record_fetch_error(e.kind)
            raise
        if self.metrics:
            self.metrics.record_page_fetched()
        return document
