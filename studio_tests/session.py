"""Authenticated browser contexts seeded from the saved session state."""
from __future__ import annotations

import logging

from playwright.async_api import BrowserContext, Page

from studio_tests.auth_state import SessionStateStore
from studio_tests.authenticator import Authenticator
from studio_tests.browser import Browser
from studio_tests.config import StudioTestConfig
from studio_tests.errors import AuthenticationError, AuthenticationVerificationError
from studio_tests.playwright_client import PlaywrightClient

logger = logging.getLogger(__name__)

LOGIN_URL_MARKERS = ("signin", "login")


def looks_unauthenticated(url: str) -> bool:
    """True if ``url`` points at a sign-in or login page."""
    lowered = url.lower()
    return any(marker in lowered for marker in LOGIN_URL_MARKERS)


class AuthenticatedSessionFactory:
    """
    Hands out isolated contexts that share only the saved authentication.

    Each call creates a fresh BrowserContext from the stored storage state,
    so cookies and navigation made by one test never leak into another.
    The interactive login only runs when no state has been saved yet.

    Usage:
        factory = AuthenticatedSessionFactory(client, config)
        page = await factory.get_authenticated_page()
        await factory.verify(page)
    """

    def __init__(
        self,
        client: PlaywrightClient,
        config: StudioTestConfig,
        authenticator: Authenticator | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self.authenticator = authenticator or Authenticator(client, config)

    @property
    def store(self) -> SessionStateStore:
        return self.authenticator.store

    async def get_authenticated_context(self) -> BrowserContext:
        if not self.store.exists():
            await self.authenticator.ensure_authenticated()
        try:
            storage_state = self.store.read()
        except ValueError as exc:
            raise AuthenticationError(
                f"Saved session state {self.store.path} is unreadable, delete it to log in again"
            ) from exc
        return await self._client.new_context(storage_state=storage_state)

    async def get_authenticated_page(self) -> Page:
        context = await self.get_authenticated_context()
        return await context.new_page()

    async def verify(self, page: Page, path: str = "projects") -> str:
        """Check that an authenticated-only URL does not bounce to login.

        Returns:
            The URL the page settled on

        Raises:
            AuthenticationVerificationError: redirected to a signin/login URL
            StepTimeoutError: the navigation itself timed out
        """
        logger.info("Verifying authentication...")
        browser = Browser(page, timeout=self._config.timeout_ms)
        current_url = await browser.goto(self._config.url(path))
        logger.info(f"Current URL: {current_url}")

        if looks_unauthenticated(current_url):
            raise AuthenticationVerificationError(current_url)

        logger.info("Authentication verified successfully")
        return current_url


async def prepare_suite_session(config: StudioTestConfig, client: PlaywrightClient | None = None) -> SessionStateStore:
    """Log in once for a whole test run and return the store holding the session.

    Reuses a saved session when one exists. The client is connected for the
    login only and closed again before returning.
    """
    client = client or PlaywrightClient(
        browser_type=config.browser_type,
        headless=config.headless,
        timeout=config.timeout_ms,
    )
    async with client:
        authenticator = Authenticator(client, config)
        await authenticator.ensure_authenticated()
    return authenticator.store


def finish_suite_session(config: StudioTestConfig, store: SessionStateStore) -> bool:
    """Drop the saved session at the end of a run if configured to.

    Returns:
        True if the session file was removed
    """
    if not config.cleanup_auth_state:
        logger.info(f"Keeping auth state for later runs: {store.path}")
        return False
    store.delete()
    return True
