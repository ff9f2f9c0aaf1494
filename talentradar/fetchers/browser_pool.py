"""Browser session management for headless fetching.

This module provides the BrowserSession class which owns one Playwright
browser for the length of a scan cycle and hands out a fresh, isolated
browser context for every page fetch.
"""

from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from playwright.sync_api import sync_playwright, BrowserContext, Browser, Playwright

from ..error_handling import CapabilityInitError
from .base_fetcher import AuthContext

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class BrowserSession:
    """Owns the browser for one scan cycle.

    A session must not be shared between concurrent cycles; open one per
    cycle and close it when the cycle ends.
    """

    def __init__(self, headless: bool = True, user_agent: str = DEFAULT_USER_AGENT) -> None:
        """Initialize the session.

        Args:
            headless: Run the browser without a window
            user_agent: User agent presented by every context
        """
        self.headless = headless
        self.user_agent = user_agent
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None

    @property
    def is_open(self) -> bool:
        return self.browser is not None

    def open(self) -> None:
        """Start Playwright and launch the browser.

        Raises:
            CapabilityInitError: If the browser cannot be launched
        """
        if self.is_open:
            return
        try:
            self.playwright = sync_playwright().start()
            self.browser = self.playwright.chromium.launch(
                headless=self.headless,
                args=["--disable-blink-features=AutomationControlled", "--no-sandbox"],
            )
            logger.info("Browser session started")
        except Exception as e:
            logger.error(f"Failed to initialize browser session: {e}")
            self.close()
            raise CapabilityInitError(f"Browser launch failed: {e}") from e

    @contextmanager
    def context(self, auth: Optional[AuthContext] = None) -> Iterator[BrowserContext]:
        """Open a short-lived browser context, closed on every exit path.

        Args:
            auth: Cookies and headers to install in the context
        """
        if not self.is_open:
            raise CapabilityInitError("Browser session is not open")
        user_agent = self.user_agent
        if auth and "User-Agent" in auth.headers:
            user_agent = auth.headers["User-Agent"]
        context = self.browser.new_context(
            user_agent=user_agent,
            viewport={"width": 1366, "height": 768},
            locale="en-US",
        )
        try:
            if auth:
                extra = {k: v for k, v in auth.headers.items() if k != "User-Agent"}
                if extra:
                    context.set_extra_http_headers(extra)
                if auth.cookies:
                    context.add_cookies(auth.cookies)
                    logger.debug(f"Installed {len(auth.cookies)} cookies in context")
            yield context
        finally:
            try:
                context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")

    def close(self) -> None:
        """Clean up all browser resources."""
        try:
            if self.browser:
                self.browser.close()
            if self.playwright:
                self.playwright.stop()
            logger.info("Browser session cleanup completed")
        except Exception as e:
            logger.error(f"Error during browser session cleanup: {e}")
        finally:
            self.browser = None
            self.playwright = None
