"""Fixtures for the live Integration Studio regression tests.

These tests drive the real application and need the credentials file
(config/CoreFunctionalTestsConfig.json or STUDIO_CONFIG_FILE). Without it the
whole directory is skipped.
"""
import asyncio

import pytest
import pytest_asyncio
from playwright.async_api import expect

from studio_tests.browser import Browser
from studio_tests.config import get_config_path, load_config
from studio_tests.playwright_client import PlaywrightClient
from studio_tests.session import AuthenticatedSessionFactory, finish_suite_session, prepare_suite_session


@pytest.fixture(scope="session")
def studio_config():
    """Configuration object for the run, built once."""
    path = get_config_path()
    if not path.exists():
        pytest.skip(f"Integration Studio credentials not found: {path}")
    return load_config(path)


@pytest.fixture(scope="session", autouse=True)
def authenticated_state(studio_config):
    """Log in once per suite so tests never race on auth.json.

    Reuses an existing auth.json. Deletes it at teardown when
    STUDIO_CLEANUP_AUTH_STATE is set.
    """
    store = asyncio.run(prepare_suite_session(studio_config))
    yield store
    finish_suite_session(studio_config, store)


@pytest_asyncio.fixture()
async def playwright_client(studio_config):
    """Create a Playwright client instance."""
    async with PlaywrightClient(
        browser_type=studio_config.browser_type,
        headless=studio_config.headless,
        timeout=studio_config.timeout_ms,
    ) as client:
        yield client


@pytest_asyncio.fixture()
async def session_factory(playwright_client, studio_config):
    return AuthenticatedSessionFactory(playwright_client, studio_config)


@pytest_asyncio.fixture()
async def studio_page(session_factory, studio_config):
    """Authenticated page already sitting on the Integration Studio landing page."""
    page = await session_factory.get_authenticated_page()
    browser = Browser(page, timeout=studio_config.timeout_ms)
    await browser.goto(studio_config.app())
    yield page
    await page.context.close()


@pytest_asyncio.fixture()
async def open_menu(studio_page):
    """Landing page with the suite menu opened."""
    menu_button = studio_page.locator("[aria-label='Open menu']:visible").first
    await expect(menu_button).to_be_visible()
    await menu_button.click()
    await expect(studio_page.locator("section.mdc-suite-menu.mdc-menu-surface--open")).to_be_visible()
    return studio_page
