"""
Direct Playwright Client
========================

Owns the automation driver and the browser it launches. Contexts and pages
are created per test (or per worker run) on top of it, so authenticated
sessions never share live cookies or navigation state.

Usage:
    from studio_tests.playwright_client import PlaywrightClient

    async with PlaywrightClient(headless=True) as client:
        context = await client.new_context(storage_state=state)
        page = await context.new_page()
"""
from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

logger = logging.getLogger(__name__)


class PlaywrightClient:
    """
    Launches Playwright in-process and hands out browser contexts.

    Resources are acquired driver -> browser and released browser -> driver.

    Example:
        async with PlaywrightClient() as client:
            context = await client.new_context()
            page = await context.new_page()
            await page.goto("https://example.com")
    """

    def __init__(
        self,
        browser_type: str = "chromium",
        headless: bool = True,
        timeout: int = 30000,
    ):
        """
        Initialize Playwright client.

        Args:
            browser_type: Browser to use (chromium, firefox, webkit)
            headless: Run in headless mode
            timeout: Default timeout in milliseconds for new contexts
        """
        self.browser_type = browser_type
        self.headless = headless
        self.timeout = timeout

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self) -> None:
        """Start the driver and launch the browser."""
        self._playwright = await async_playwright().start()

        if self.browser_type == "firefox":
            launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            launcher = self._playwright.webkit
        else:
            launcher = self._playwright.chromium
        self._browser = await launcher.launch(headless=self.headless)
        logger.debug(f"Launched {self.browser_type} (headless={self.headless})")

    async def new_context(self, **kwargs) -> BrowserContext:
        """
        Create a new isolated browser context.

        Args:
            **kwargs: Context options (storage_state, viewport, ...)

        Returns:
            BrowserContext with the client's default timeout applied
        """
        if not self._browser:
            raise RuntimeError("Client not connected. Use 'async with' or call connect()")

        context = await self._browser.new_context(**kwargs)
        context.set_default_timeout(self.timeout)
        return context

    async def close(self) -> None:
        """Close the browser, then stop the driver.

        Both steps run even if the first one fails; the first failure is
        re-raised afterwards.
        """
        error: Optional[BaseException] = None

        if self._browser:
            browser, self._browser = self._browser, None
            try:
                await browser.close()
                logger.debug("Closed browser")
            except Exception as exc:
                logger.warning(f"Error closing browser: {exc}")
                error = exc

        if self._playwright:
            playwright, self._playwright = self._playwright, None
            try:
                await playwright.stop()
                logger.debug("Stopped Playwright driver")
            except Exception as exc:
                logger.warning(f"Error stopping Playwright driver: {exc}")
                error = error or exc

        if error is not None:
            raise error

    @property
    def browser(self) -> Browser:
        """Get the browser instance."""
        if not self._browser:
            raise RuntimeError("Client not connected")
        return self._browser

    @property
    def connected(self) -> bool:
        return self._browser is not None
