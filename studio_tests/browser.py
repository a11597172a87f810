"""Thin wrapper around a Playwright page with bounded waits and typed failures."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Pattern, Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeout

from studio_tests.errors import StepTimeoutError, UIInteractionError

UrlPattern = Union[str, Pattern[str]]


@asynccontextmanager
async def _step(name: str, payload: Dict[str, Any]) -> AsyncIterator[None]:
    """Translate driver failures into the suite's error types."""
    try:
        yield
    except PlaywrightTimeout as exc:
        raise StepTimeoutError(name=name, payload=payload, message=str(exc)) from exc
    except PlaywrightError as exc:
        raise UIInteractionError(name=name, payload=payload, message=str(exc)) from exc


class Browser:
    """Convenience wrapper over a Playwright page.

    Every wait carries a bounded timeout (``timeout`` ms unless overridden).
    Timeouts raise StepTimeoutError, any other driver failure raises
    UIInteractionError.
    """

    def __init__(self, page: Page, timeout: int = 30000) -> None:
        self._page = page
        self.timeout = timeout

    @property
    def page(self) -> Page:
        return self._page

    @property
    def url(self) -> str:
        return self._page.url

    def _timeout(self, timeout: Optional[int]) -> int:
        return self.timeout if timeout is None else timeout

    async def title(self) -> str:
        async with _step("title", {"url": self.url}):
            return await self._page.title()

    async def goto(self, url: str, wait_until: str = "networkidle", timeout: Optional[int] = None) -> str:
        """Navigate to URL and return the URL the page settled on."""
        async with _step("goto", {"url": url, "wait_until": wait_until}):
            await self._page.goto(url, wait_until=wait_until, timeout=self._timeout(timeout))
        return self.url

    async def wait_for_load_state(self, state: str = "networkidle", timeout: Optional[int] = None) -> None:
        async with _step("wait_for_load_state", {"state": state, "url": self.url}):
            await self._page.wait_for_load_state(state, timeout=self._timeout(timeout))

    async def wait_visible(self, selector: str, timeout: Optional[int] = None) -> Locator:
        """Wait until the element is visible and return its locator."""
        locator = self._page.locator(selector)
        async with _step("wait_visible", {"selector": selector}):
            await locator.wait_for(state="visible", timeout=self._timeout(timeout))
        return locator

    async def fill(self, selector: str, value: str, timeout: Optional[int] = None) -> None:
        """Fill input field."""
        # Values are not echoed into the payload; password fields go through here.
        async with _step("fill", {"selector": selector}):
            await self._page.locator(selector).fill(value, timeout=self._timeout(timeout))

    async def click(self, selector: str, timeout: Optional[int] = None) -> None:
        """Click element."""
        async with _step("click", {"selector": selector}):
            await self._page.locator(selector).click(timeout=self._timeout(timeout))

    async def wait_for_url(
        self,
        pattern: UrlPattern,
        wait_until: str = "load",
        timeout: Optional[int] = None,
    ) -> str:
        """Wait for the page URL to match a glob, regex or exact string."""
        payload = {"pattern": getattr(pattern, "pattern", pattern), "url": self.url}
        async with _step("wait_for_url", payload):
            await self._page.wait_for_url(pattern, wait_until=wait_until, timeout=self._timeout(timeout))
        return self.url
