"""Headless browser fetching.

This module provides the HeadlessFetcher backend which renders pages with
Playwright so that JavaScript-built career pages and social feeds expose
their content.
"""

from typing import Optional
import logging

from playwright.sync_api import Page, Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError
from playwright_stealth import Stealth

from ..document import Document
from ..error_handling import AuthRequired, FetchTimeout, NavigationError
from .base_fetcher import AuthContext, PageBackend
from .browser_pool import BrowserSession

logger = logging.getLogger(__name__)

# Path fragments of login walls on the sources we scan
AUTH_WALL_MARKERS = ("/login", "/authwall", "/checkpoint", "/signin", "/uas/")

# Resource types that never carry job or announcement content
BLOCKED_RESOURCES = {"image", "stylesheet", "font", "media"}


class HeadlessFetcher(PageBackend):
    """Renders pages in a fresh browser context per fetch."""

    def __init__(self, session: Optional[BrowserSession] = None,
                 timeout_ms: int = 30000, settle_ms: int = 2000) -> None:
        """Initialize the headless fetcher.

        Args:
            session: Browser session owned by the current scan cycle
            timeout_ms: Navigation timeout
            settle_ms: Extra wait for dynamic content after load
        """
        self.session = session or BrowserSession()
        self.timeout_ms = timeout_ms
        self.settle_ms = settle_ms
        self.stealth = Stealth()

    def open(self) -> None:
        self.session.open()

    def close(self) -> None:
        self.session.close()

    def fetch(self, url: str, auth: Optional[AuthContext] = None) -> Document:
        """Render a page and return its final HTML.

        Raises:
            FetchTimeout: If navigation exceeds the timeout
            AuthRequired: If the page redirected to a login wall
            NavigationError: On any other browser failure, including context
                and page creation
        """
        try:
            with self.session.context(auth) as context:
                page = context.new_page()
                try:
                    return self._render(page, url)
                finally:
                    _close_page(page)
        except PlaywrightTimeoutError as e:
            raise FetchTimeout(url, f"no load within {self.timeout_ms} ms", cause=e) from e
        except PlaywrightError as e:
            raise NavigationError(url, str(e), cause=e) from e

    def _render(self, page: Page, url: str) -> Document:
        self.stealth.apply_stealth_sync(page)
        page.route("**/*", _block_heavy_resources)
        logger.info(f"Navigating to {url}")
        page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
        if _is_auth_wall(page.url):
            raise AuthRequired(url, f"redirected to {page.url}")
        page.wait_for_timeout(self.settle_ms)
        return Document(page.url or url, page.content())


def _block_heavy_resources(route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCES:
        route.abort()
    else:
        route.continue_()


def _is_auth_wall(url: str) -> bool:
    lowered = (url or "").lower()
    return any(marker in lowered for marker in AUTH_WALL_MARKERS)


def _close_page(page: Page) -> None:
    try:
        page.close()
    except Exception as e:
        logger.warning(f"Error closing page: {e}")
