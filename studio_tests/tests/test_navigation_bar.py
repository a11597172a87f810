"""
Integration Studio navigation bar regression tests.

Every test gets its own authenticated context (see conftest.studio_page), so
logging out in one test does not affect the others.
"""
import re

import pytest
from playwright.async_api import expect

pytestmark = [pytest.mark.asyncio, pytest.mark.live]

SIGNIN_URL = re.compile(r"https://signin\.dev-connect\.aveva\.com/.*login.*")


async def test_dashboard_title(studio_page, studio_config):
    await studio_page.goto(studio_config.url("projects"))

    assert "Integration Studio" in await studio_page.title()
    await studio_page.screenshot(path=str(studio_config.screenshot_dir / "IntegrationStudio-home.png"))


async def test_notifications_button_opens_and_closes_panel(studio_page):
    notif_button = studio_page.locator("[aria-label='Notifications']").first
    await expect(notif_button).to_be_visible()

    await notif_button.click()
    panel = studio_page.locator("#notifyHub:visible")
    await expect(panel).to_be_visible()

    await studio_page.locator("#notifyHeader [data-testid='CloseIcon']").click()
    await expect(studio_page.locator("#notifyHub:visible")).to_have_count(0)


async def test_help_button_opens_documentation_in_new_tab(studio_page):
    help_button = studio_page.locator("[aria-label='Help']").first
    await expect(help_button).to_be_visible()

    async with studio_page.expect_popup() as popup_info:
        await help_button.click()
    help_page = await popup_info.value

    await help_page.wait_for_load_state("networkidle")
    assert "AVEVA™ Documentation" in await help_page.title()


async def test_open_menu_displays_menu(open_menu):
    # open_menu already asserted the menu surface is visible
    await expect(open_menu.locator("section.mdc-suite-menu.mdc-menu-surface--open")).to_be_visible()


async def test_open_menu_contains_tenant_name(open_menu, studio_config):
    await expect(open_menu.locator(f"text={studio_config.credentials.tenant}")).to_be_visible()


async def test_open_menu_contains_network_speed_test(open_menu):
    await expect(open_menu.locator("text=Network Speed Test")).to_be_visible()


async def test_open_menu_contains_logout(open_menu):
    await expect(open_menu.locator("text=Log Out")).to_be_visible()


async def test_network_speed_test_opens_speed_test_window(open_menu, studio_config):
    speed_test_button = open_menu.locator("[title='Network Speed Test']:visible")

    async with open_menu.expect_popup() as popup_info:
        await speed_test_button.click()
    speed_test_page = await popup_info.value

    await speed_test_page.wait_for_load_state("networkidle")
    await expect(speed_test_page).to_have_url(studio_config.app("speedtest"))


# Keep last: logging out ends the server-side session behind auth.json.
async def test_logout_lands_on_signin_page(open_menu, authenticated_state):
    logout_button = open_menu.locator("[title='Log Out']:visible")
    await logout_button.click()

    await open_menu.wait_for_url(SIGNIN_URL)
    await expect(open_menu).to_have_url(SIGNIN_URL)

    authenticated_state.delete()
