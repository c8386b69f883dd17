"""
Browser Driver
==============

Launches Playwright browsers and runs a test routine against each one. The
routine races the browser's ``disconnected`` event, and the browser is closed
exactly once on every exit path.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from playwright.async_api import Browser, Playwright, async_playwright

from tls_smoke.config.logging import BROWSER_COMPONENT, get_logger
from tls_smoke.config.settings import Settings, get_settings
from tls_smoke.models.schemas import LaunchConfiguration

logger = get_logger(__name__)

T = TypeVar("T")


class BrowserLaunchError(Exception):
    """Exception raised when a browser cannot be launched."""

    pass


class BrowserDisconnectedError(Exception):
    """Exception raised when the browser disconnects before the routine finishes."""

    pass


def _discard_outcome(task: "asyncio.Future[Any]") -> None:
    # The race was lost; retrieve the outcome so it is not reported as unhandled
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Discarded routine outcome", error=str(task.exception()))


async def race_disconnect(browser: Browser, routine: Awaitable[T]) -> T:
    """
    Await ``routine`` unless the browser disconnects first.

    The losing branch is not cancelled; its result is discarded.

    Raises:
        BrowserDisconnectedError: If the browser disconnects first
    """
    loop = asyncio.get_running_loop()
    disconnected: "asyncio.Future[None]" = loop.create_future()

    def on_disconnected(_: Any = None) -> None:
        if not disconnected.done():
            disconnected.set_result(None)

    browser.once("disconnected", on_disconnected)
    routine_task = asyncio.ensure_future(routine)

    try:
        done, _ = await asyncio.wait(
            {routine_task, disconnected}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        browser.remove_listener("disconnected", on_disconnected)

    if disconnected in done:
        if not routine_task.done():
            routine_task.add_done_callback(_discard_outcome)
        else:
            _discard_outcome(routine_task)
        raise BrowserDisconnectedError("disconnected early")

    disconnected.cancel()
    return routine_task.result()


class BrowserDriver:
    """Owns the Playwright runtime and launches one browser per test run."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._playwright: Optional[Playwright] = None
        self.logger: Any = logger.bind(component=BROWSER_COMPONENT)  # structlog.BoundLoggerBase

    async def initialize(self) -> None:
        """Start the Playwright runtime."""
        if self._playwright is None:
            self._playwright = await async_playwright().start()

    async def close(self) -> None:
        """Stop the Playwright runtime."""
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def launch(self, launch_config: LaunchConfiguration) -> Browser:
        if self._playwright is None:
            raise BrowserLaunchError("Playwright not initialized")

        self.logger.info(f"Launch {launch_config.model_dump_json()}")
        try:
            return await self._playwright.chromium.launch(**launch_config.launch_options())
        except Exception as e:
            self.logger.error("Browser launch failed", error=str(e))
            raise BrowserLaunchError(f"Browser launch failed: {e}") from e

    async def using_browser(
        self,
        launch_config: LaunchConfiguration,
        routine: Callable[[Browser], Awaitable[T]],
    ) -> T:
        """
        Launch a browser and run ``routine`` against it.

        Args:
            launch_config: Headless flag and extra arguments
            routine: Test routine receiving the launched browser

        Returns:
            Whatever the routine returns

        Raises:
            BrowserLaunchError: If the browser cannot be launched
            BrowserDisconnectedError: If the browser disconnects before the routine finishes
        """
        browser = await self.launch(launch_config)
        try:
            return await race_disconnect(browser, routine(browser))
        finally:
            await browser.close()
