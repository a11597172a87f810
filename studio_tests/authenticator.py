"""
Interactive login for Integration Studio.

Runs the login flow at most once per missing session entry:

1. Navigate to the base URL and wait for network idle
2. Fill email and password, submit
3. Wait for the tenant button matching the configured tenant, click it
4. Wait for the redirect into Integration Studio (``**/projects``)
5. Save the browser storage state into the SessionStateStore

Any failed step aborts the sequence, captures a screenshot best-effort and
raises AuthenticationError. Nothing is retried.
"""
from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import BrowserContext, Page

from studio_tests.auth_state import SessionStateStore
from studio_tests.browser import Browser
from studio_tests.config import StudioTestConfig
from studio_tests.diagnostics import capture_screenshot
from studio_tests.errors import AuthenticationError, UIInteractionError
from studio_tests.playwright_client import PlaywrightClient

logger = logging.getLogger(__name__)

EMAIL_INPUT = "input[name='email']"
PASSWORD_INPUT = "input[name='password']"
SUBMIT_BUTTON = "button[type='submit']"


class Authenticator:
    """Creates the saved session the rest of the suite runs on."""

    def __init__(
        self,
        client: PlaywrightClient,
        config: StudioTestConfig,
        store: Optional[SessionStateStore] = None,
    ) -> None:
        self._client = client
        self._config = config
        self.store = store or SessionStateStore(config.auth_state_path)

    async def ensure_authenticated(self, force: bool = False) -> bool:
        """Make sure a session entry exists, logging in only when needed.

        Args:
            force: Delete any saved entry first and always log in

        Returns:
            True if a login was performed, False if the saved state was reused
        """
        if force:
            if self.store.exists():
                logger.info("Deleting old authentication state...")
            self.store.delete()
        elif self.store.exists():
            logger.info(f"✓ Using saved authentication state ({self.store.path})")
            return False

        await self.login()
        return True

    async def login(self) -> None:
        """Run the interactive login in a throwaway context and save its state."""
        creds = self._config.credentials
        logger.info(
            f"Starting authentication process as {creds.username} / "
            f"{'*' * len(creds.password)} (tenant={creds.tenant})"
        )

        context: Optional[BrowserContext] = None
        page: Optional[Page] = None
        try:
            context = await self._client.new_context()
            page = await context.new_page()
            browser = Browser(page, timeout=self._config.timeout_ms)

            await browser.goto(self._config.base_url)
            logger.info("Loaded login page")

            await browser.fill(EMAIL_INPUT, creds.username)
            await browser.fill(PASSWORD_INPUT, creds.password)
            await browser.click(SUBMIT_BUTTON)
            logger.info("Submitted credentials")

            tenant_button = self._config.tenant_selector
            await browser.wait_visible(tenant_button)
            logger.info(f"Found tenant button: {creds.tenant}")
            await browser.click(tenant_button)

            await browser.wait_for_url(self._config.post_login_url_pattern)
            await browser.wait_for_load_state("networkidle")
            logger.info(f"Redirected to projects page: {browser.url}")

            expected_title = self._config.expected_title
            if expected_title:
                title = await browser.title()
                if expected_title not in title:
                    raise AuthenticationError(
                        f"Unexpected page title after login: {title!r} (expected {expected_title!r})"
                    )

            self.store.write(await context.storage_state())
        except AuthenticationError:
            await self._on_failure(page)
            raise
        except (UIInteractionError, PlaywrightError, OSError) as exc:
            await self._on_failure(page)
            raise AuthenticationError(f"Authentication failed: {exc}") from exc
        finally:
            await self._close_login_context(context, page)

    async def _on_failure(self, page: Optional[Page]) -> None:
        logger.error("Authentication failed, no session state saved")
        await capture_screenshot(page, "auth-error", self._config.screenshot_dir)
        try:
            self.store.delete()
        except OSError as exc:
            logger.warning(f"Could not remove session state {self.store.path}: {exc}")

    async def _close_login_context(self, context: Optional[BrowserContext], page: Optional[Page]) -> None:
        for resource in (page, context):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as exc:
                logger.warning(f"Error closing login {type(resource).__name__}: {exc}")
