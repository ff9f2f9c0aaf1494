"""Plain HTTP fetching for pages that render server-side."""

from typing import Optional
import logging

import requests
from requests.exceptions import RequestException, Timeout

from ..document import Document
from ..error_handling import AuthRequired, FetchTimeout, NavigationError
from .base_fetcher import AuthContext, PageBackend
from .browser_pool import DEFAULT_USER_AGENT
from .headless import AUTH_WALL_MARKERS

logger = logging.getLogger(__name__)


class HttpFetcher(PageBackend):
    """Fetches raw HTML with requests; no JavaScript execution."""

    def __init__(self, timeout_ms: int = 30000, user_agent: str = DEFAULT_USER_AGENT) -> None:
        self.timeout_ms = timeout_ms
        self.user_agent = user_agent
        self.session: Optional[requests.Session] = None

    def open(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            self.session.headers["User-Agent"] = self.user_agent

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None

    def fetch(self, url: str, auth: Optional[AuthContext] = None) -> Document:
        """Fetch a page over HTTP.

        Raises:
            FetchTimeout: If the server does not answer within the timeout
            AuthRequired: On 401/403 or a redirect to a login wall
            NavigationError: On any other request failure
        """
        self.open()
        req_kwargs = {"timeout": self.timeout_ms / 1000.0}
        if auth:
            req_kwargs["headers"] = auth.headers
            req_kwargs["cookies"] = auth.cookie_dict()
        logger.info(f"Fetching HTML from {url}")
        try:
            response = self.session.get(url, **req_kwargs)
        except Timeout as e:
            raise FetchTimeout(url, str(e), cause=e) from e
        except RequestException as e:
            raise NavigationError(url, str(e), cause=e) from e

        if response.status_code in (401, 403):
            raise AuthRequired(url, f"HTTP {response.status_code}")
        final_url = response.url or url
        if final_url != url and any(marker in final_url.lower() for marker in AUTH_WALL_MARKERS):
            raise AuthRequired(url, f"redirected to {final_url}")
        try:
            response.raise_for_status()
        except RequestException as e:
            raise NavigationError(url, str(e), cause=e) from e
        return Document(final_url, response.text)
