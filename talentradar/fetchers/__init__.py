"""Page fetching functionality.

The module is organized into:
- base_fetcher: Fetcher front (pacing, retry) and the backend interface
- browser_pool: Browser session owned by one scan cycle
- headless: Playwright rendering backend
- http: Plain HTTP backend
"""

from .base_fetcher import Fetcher, AuthContext, PageBackend
from .browser_pool import BrowserSession
from .headless import HeadlessFetcher
from .http import HttpFetcher

__all__ = [
    'Fetcher',
    'AuthContext',
    'PageBackend',
    'BrowserSession',
    'HeadlessFetcher',
    'HttpFetcher',
]
