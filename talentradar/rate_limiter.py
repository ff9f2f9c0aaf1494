"""Randomized pacing and bounded retry for page fetches."""
import time
import random
import logging
from typing import Callable, Optional, TypeVar

from .error_handling import FetchError, RETRYABLE_FETCH_ERRORS
from .metrics import MetricsCollector

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RateGovernor:
    """Paces network calls and retries failed navigations.

    Before every network call a uniformly random delay in
    [min_delay_ms, max_delay_ms] is awaited. A call failing with a timeout or
    navigation error is attempted up to ``max_fetch_retries`` times in total,
    with a random backoff in [backoff_min_ms, backoff_max_ms] between
    attempts. The last error propagates once attempts are exhausted.
    """

    def __init__(self,
                 min_delay_ms: int = 2000,
                 max_delay_ms: int = 8000,
                 max_fetch_retries: int = 3,
                 backoff_min_ms: int = 5000,
                 backoff_max_ms: int = 10000,
                 sleep: Callable[[float], None] = time.sleep,
                 rng: Optional[random.Random] = None,
                 metrics: Optional[MetricsCollector] = None):
        """Initialize the governor.

        Args:
            min_delay_ms: Lower bound of the inter-request delay
            max_delay_ms: Upper bound of the inter-request delay
            max_fetch_retries: Total attempts per call
            backoff_min_ms: Lower bound of the pause between attempts
            backoff_max_ms: Upper bound of the pause between attempts
            sleep: Delay function taking seconds; pass a no-op in tests
            rng: Random source for delays
            metrics: Collector for retry counts
        """
        if min_delay_ms < 0 or max_delay_ms < min_delay_ms:
            raise ValueError(f"Invalid delay window [{min_delay_ms}, {max_delay_ms}]")
        if backoff_min_ms < 0 or backoff_max_ms < backoff_min_ms:
            raise ValueError(f"Invalid backoff window [{backoff_min_ms}, {backoff_max_ms}]")
        if max_fetch_retries < 1:
            raise ValueError("max_fetch_retries must be at least 1")
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self.max_fetch_retries = max_fetch_retries
        self.backoff_min_ms = backoff_min_ms
        self.backoff_max_ms = backoff_max_ms
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.metrics = metrics

    @classmethod
    def immediate(cls, max_fetch_retries: int = 3, **kwargs) -> "RateGovernor":
        """A governor that never waits, for tests and local extraction."""
        return cls(min_delay_ms=0, max_delay_ms=0, max_fetch_retries=max_fetch_retries,
                   backoff_min_ms=0, backoff_max_ms=0, sleep=lambda _seconds: None, **kwargs)

    def next_delay(self) -> float:
        """Draw the next inter-request delay, in seconds."""
        return self.rng.uniform(self.min_delay_ms, self.max_delay_ms) / 1000.0

    def next_backoff(self) -> float:
        """Draw the next pause between retry attempts, in seconds."""
        return self.rng.uniform(self.backoff_min_ms, self.backoff_max_ms) / 1000.0

    def wait(self) -> float:
        """Wait the randomized inter-request delay.

        Returns:
            The delay waited, in seconds
        """
        delay = self.next_delay()
        if delay > 0:
            logger.debug(f"Waiting {delay:.2f} seconds before next request")
        self.sleep(delay)
        return delay

    def call(self, url: str, operation: Callable[[], T]) -> T:
        """Run a network operation under pacing and bounded retry.

        Args:
            url: URL being fetched, for logging
            operation: Zero-argument callable performing the network call

        Returns:
            The operation's result

        Raises:
            FetchError: The last error once attempts are exhausted, or
                immediately for non-retryable fetch errors
        """
        attempt = 0
        while True:
            attempt += 1
            self.wait()
            try:
                return operation()
            except RETRYABLE_FETCH_ERRORS as e:
                if attempt >= self.max_fetch_retries:
                    logger.error(f"Max retries ({self.max_fetch_retries}) exceeded for {url}")
                    raise
                logger.warning(f"Attempt {attempt} failed for {url}: {e}")
                if self.metrics:
                    self.metrics.record_retry(url)
                backoff = self.next_backoff()
                logger.info(f"Applying backoff: waiting {backoff:.2f} seconds before retry")
                self.sleep(backoff)
            except FetchError as e:
                logger.warning(f"Not retrying {url}: {e}")
                raise
