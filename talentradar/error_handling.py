"""Error taxonomy for fetching, extraction and validation."""
from typing import Optional


class TalentRadarError(Exception):
    """Base class for all talent radar errors."""


class CapabilityInitError(TalentRadarError):
    """The fetch capability (browser session) could not be started.

    Fatal to the whole scan cycle.
    """


class FetchError(TalentRadarError):
    """A page could not be acquired."""

    kind = "fetch"

    def __init__(self, url: str, message: str = "", cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        super().__init__(f"{self.kind} error for {url}: {message}" if message else f"{self.kind} error for {url}")


class FetchTimeout(FetchError):
    """The page did not load within the fetch timeout."""

    kind = "timeout"


class NavigationError(FetchError):
    """Navigation failed (DNS, connection, HTTP or renderer error)."""

    kind = "navigation"


class AuthRequired(FetchError):
    """The source redirected to a login or auth wall."""

    kind = "auth_required"


class ExtractionError(TalentRadarError):
    """A document could not be processed."""


class MalformedStructuredData(ExtractionError):
    """An embedded structured-data block is not valid JSON."""

    def __init__(self, message: str, snippet: str = ""):
        self.snippet = snippet[:200]
        super().__init__(message)


class ValidationRejection(TalentRadarError):
    """A candidate failed its validation gate and is dropped."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


RETRYABLE_FETCH_ERRORS = (FetchTimeout, NavigationError)
