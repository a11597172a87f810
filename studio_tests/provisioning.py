"""
Bulk provisioning worker.

Clones a template project into many named instances through the UI, one
after the other::

    INIT -> AUTHENTICATING -> NAVIGATING
         -> (SELECT_TEMPLATE -> FILL_NAME -> LAUNCH -> WAIT_SETTLED)*
         -> DONE

Any failure moves the worker to FAILED and aborts the run. Instances created
before the failure stay in the application; there is no rollback. To resume,
run again with ``starting_index`` set to the last completed index + 1 (the
worker logs this hint).

Browser resources are acquired driver -> browser -> context -> page and are
always released page -> context -> browser -> driver.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

import anyio
from playwright.async_api import BrowserContext, Page

from studio_tests.authenticator import Authenticator
from studio_tests.browser import Browser
from studio_tests.config import StudioTestConfig
from studio_tests.diagnostics import capture_screenshot
from studio_tests.playwright_client import PlaywrightClient
from studio_tests.session import AuthenticatedSessionFactory

logger = logging.getLogger(__name__)

PROJECTS_PATH = "projects"
TEMPLATE_ROW = "tr.project-table-row:has-text('{name}')"
MORE_BUTTON = "button.project-more-icon"
NEW_INSTANCE_ITEM = "li#project-menu-newsession"
INSTANCE_NAME_INPUT = "input#textbox-session-name-enter[name='instanceAlias']"
LAUNCH_BUTTON = "button#create-session-confirm:has-text('Launch instance')"


class WorkerState(str, Enum):
    INIT = "init"
    AUTHENTICATING = "authenticating"
    NAVIGATING = "navigating"
    SELECT_TEMPLATE = "select_template"
    FILL_NAME = "fill_name"
    LAUNCH = "launch"
    WAIT_SETTLED = "wait_settled"
    DONE = "done"
    FAILED = "failed"


def instance_name(index: int, suffix: str) -> str:
    return f"instanceno{index}-{suffix}"


@dataclass(frozen=True)
class ProvisioningRequest:
    """What to clone and how many times.

    Indices run from ``starting_index`` to ``number_of_instances`` inclusive,
    so ``ProvisioningRequest("t", 56, 56)`` creates exactly one instance.
    """

    template_name: str
    number_of_instances: int
    starting_index: int = 1

    def __post_init__(self) -> None:
        if not self.template_name:
            raise ValueError("template_name must not be empty")
        if self.number_of_instances < 1:
            raise ValueError(f"number_of_instances must be >= 1, got {self.number_of_instances}")
        if self.starting_index < 1:
            raise ValueError(f"starting_index must be >= 1, got {self.starting_index}")

    def indices(self) -> range:
        return range(self.starting_index, self.number_of_instances + 1)

    def instance_names(self, suffix: str) -> List[str]:
        return [instance_name(i, suffix) for i in self.indices()]


class BulkProvisioningWorker:
    """Sequentially creates instances from a template.

    Args:
        config: Suite configuration (credentials, URLs, delay, suffix)
        client: Playwright client to drive; a new one is built from
            ``config`` when omitted. The worker connects and closes it.
        force_reauth: Delete any saved session and log in again before
            starting (the default, a stale session fails late otherwise)
        sleep: Awaitable used for the pause between instances
    """

    def __init__(
        self,
        config: StudioTestConfig,
        client: Optional[PlaywrightClient] = None,
        force_reauth: bool = True,
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
    ) -> None:
        self._config = config
        self._client = client or PlaywrightClient(
            browser_type=config.browser_type,
            headless=config.headless,
            timeout=config.timeout_ms,
        )
        self._force_reauth = force_reauth
        self._sleep = sleep

        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._browser: Optional[Browser] = None

        self.state = WorkerState.INIT
        self.history: List[WorkerState] = [WorkerState.INIT]
        self.completed: List[str] = []
        self.failed_state: Optional[WorkerState] = None

    def _transition(self, state: WorkerState) -> None:
        logger.debug(f"Worker state {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    async def run(self, request: ProvisioningRequest) -> List[str]:
        """Create every instance named by ``request``.

        Returns:
            Names of the created instances, in creation order

        Raises:
            Whatever step failed first, after cleanup. Instances already
            created are listed in ``self.completed``.
        """
        if self.state is not WorkerState.INIT:
            raise RuntimeError("BulkProvisioningWorker instances are single-use")

        total = max(0, request.number_of_instances - request.starting_index + 1)
        if total == 0:
            logger.info(
                f"Nothing to create: starting_index={request.starting_index} is past "
                f"number_of_instances={request.number_of_instances}"
            )
            self._transition(WorkerState.DONE)
            return []

        try:
            self._transition(WorkerState.AUTHENTICATING)
            await self._client.connect()
            authenticator = Authenticator(self._client, self._config)
            await authenticator.ensure_authenticated(force=self._force_reauth)

            factory = AuthenticatedSessionFactory(self._client, self._config, authenticator)
            self._context = await factory.get_authenticated_context()
            self._page = await self._context.new_page()
            self._browser = Browser(self._page, timeout=self._config.timeout_ms)
            await factory.verify(self._page, PROJECTS_PATH)

            self._transition(WorkerState.NAVIGATING)
            await self._browser.goto(self._config.url(PROJECTS_PATH))
            logger.info("Navigated to Projects page")

            for index in request.indices():
                logger.info(f"Creating instance {index} of {request.number_of_instances}...")
                name = instance_name(index, self._config.instance_suffix)
                await self._create_instance(request.template_name, name)
                self.completed.append(name)
                logger.info(f"Instance '{name}' created successfully.")

                if index < request.number_of_instances:
                    delay = self._config.instance_delay
                    logger.info(f"Waiting {delay:g} seconds before creating next instance...")
                    await self._sleep(delay)

            self._transition(WorkerState.DONE)
            logger.info(f"All {total} instances created successfully.")
            return list(self.completed)
        except Exception as exc:
            self.failed_state = self.state
            self._transition(WorkerState.FAILED)
            logger.exception(f"Error occurred during {self.failed_state.value}: {exc}")
            if self.completed:
                next_index = request.starting_index + len(self.completed)
                logger.error(
                    f"{len(self.completed)} of {total} instances were created before the failure "
                    f"and were left in place; resume with starting_index={next_index}"
                )
            await capture_screenshot(self._page, "error-screenshot", self._config.screenshot_dir)
            raise
        finally:
            await self._release()

    async def _create_instance(self, template_name: str, name: str) -> None:
        browser = self._browser

        self._transition(WorkerState.SELECT_TEMPLATE)
        logger.info(f"Selecting template: {template_name}")
        row = TEMPLATE_ROW.format(name=template_name)
        await browser.wait_visible(row)
        await browser.click(f"{row} >> {MORE_BUTTON}")
        await browser.wait_visible(NEW_INSTANCE_ITEM)
        await browser.click(NEW_INSTANCE_ITEM)
        await browser.wait_for_load_state("networkidle")

        self._transition(WorkerState.FILL_NAME)
        await browser.wait_visible(INSTANCE_NAME_INPUT)
        await browser.fill(INSTANCE_NAME_INPUT, name)
        logger.info(f"Filled instance name: {name}")

        self._transition(WorkerState.LAUNCH)
        await browser.click(LAUNCH_BUTTON)

        self._transition(WorkerState.WAIT_SETTLED)
        await browser.wait_for_load_state("networkidle")
        await browser.wait_for_url(self._config.url(PROJECTS_PATH), wait_until="networkidle")

    async def _release(self) -> None:
        """Close page, context, then browser and driver, whatever happened."""
        page, self._page = self._page, None
        context, self._context = self._context, None
        self._browser = None

        for label, resource in (("page", page), ("context", context)):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as exc:
                logger.warning(f"Error closing {label}: {exc}")

        try:
            await self._client.close()
        except Exception as exc:
            logger.warning(f"Error closing Playwright client: {exc}")
