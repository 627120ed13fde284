# site_agent/delegates/page_fetcher_delegate.py
import logging
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright, Browser, Error as PlaywrightError, Page, Playwright

from .. import config
from ..errors import FetchError

logger = logging.getLogger(__name__)


class LoadedPage:
    """A page that has reached network idle. Scripts run inside the page's own context."""
    def __init__(self, page: Page, url: str):
        self._page = page
        self.url = url

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """
        Runs `script` (a JS function expression) in the page with `arg` as its only
        parameter and returns the JSON-serialisable result.
        """
        try:
            return await self._page.evaluate(script, arg)
        except PlaywrightError as e:
            logger.error("In-page script failed on %s: %s", self.url, e.message)
            raise FetchError(e.message) from e


class PageFetcherDelegate:
    """
    Owns one browser and at most one page for the duration of an `async with` block.
    Instances are never reused across requests.
    """
    def __init__(self, user_agent: str = config.USER_AGENT, viewport: Optional[Dict] = None,
                 timeout: int = config.REQUEST_TIMEOUT, headless: bool = config.HEADLESS):
        self.user_agent = user_agent
        self.viewport = viewport or config.VIEWPORT
        self.timeout = timeout
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    async def __aenter__(self):
        logger.debug("Starting Playwright and launching browser...")
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
        except PlaywrightError as e:
            await self._release()
            raise FetchError(e.message) from e
        logger.debug("Browser launched (headless=%s).", self.headless)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._release()

    async def _release(self):
        logger.debug("Closing page, browser, and stopping Playwright...")
        # Each close runs even if an earlier one failed, so nothing is left running.
        for closer in (self._close_page, self._close_browser, self._stop_playwright):
            try:
                await closer()
            except PlaywrightError as e:
                logger.warning("Error while releasing browser resources: %s", e.message)
        logger.debug("Playwright resources released.")

    async def _close_page(self):
        if self._page:
            page, self._page = self._page, None
            await page.close()

    async def _close_browser(self):
        if self._browser:
            browser, self._browser = self._browser, None
            await browser.close()

    async def _stop_playwright(self):
        if self._playwright:
            playwright, self._playwright = self._playwright, None
            await playwright.stop()

    async def fetch(self, url: str) -> LoadedPage:
        """
        Opens a page, navigates to `url` and waits for the network idle milestone.
        Raises FetchError on any navigation failure; cleanup is left to __aexit__.
        """
        if not self._browser:
            raise FetchError("Browser not launched. Use PageFetcherDelegate as an async context manager.")
        if self._page:
            raise FetchError("PageFetcherDelegate already holds a page; open a new delegate per request.")

        try:
            page = await self._browser.new_page(user_agent=self.user_agent, viewport=self.viewport)
            self._page = page
            logger.info("Navigating to: %s", url)
            await page.goto(url, wait_until="networkidle", timeout=self.timeout)
        except PlaywrightError as e:
            logger.error("Failed to load %s: %s", url, e.message)
            raise FetchError(e.message) from e

        logger.info("Network idle reached for %s.", url)
        return LoadedPage(page, url)
