"""
Test Scenario
=============

One page load against the test server: log request traffic, read the rendered
body markup and compare it with the expected fragment. A mismatch is logged as
FAILED and returned, never raised.
"""

from typing import Any, Optional

from playwright.async_api import Browser, Page, Request

from tls_smoke.config.logging import BROWSER_COMPONENT, get_logger
from tls_smoke.config.settings import Settings, get_settings
from tls_smoke.models.schemas import ScenarioResult

logger = get_logger(__name__)

READ_BODY_SCRIPT = "() => document.body.innerHTML"


def attach_request_observers(page: Page, scenario_logger: Any) -> None:
    """Log request started, failed and finished events."""

    def on_request(request: Request) -> None:
        scenario_logger.info(f"request {request.url}")

    def on_request_failed(request: Request) -> None:
        scenario_logger.info(f"requestfailed {request.url} {request.failure}")

    def on_request_finished(request: Request) -> None:
        scenario_logger.info(f"requestfinished {request.url}")

    page.on("request", on_request)
    page.on("requestfailed", on_request_failed)
    page.on("requestfinished", on_request_finished)


async def run_test(
    browser: Browser,
    url: str,
    settings: Optional[Settings] = None,
    headless: Optional[bool] = None,
) -> ScenarioResult:
    """
    Load ``url`` and check the rendered body.

    Args:
        browser: Launched browser
        url: Test server URL
        settings: Expected markup, timeout and certificate handling
        headless: Launch mode, recorded on the result

    Returns:
        ScenarioResult with the rendered and expected markup
    """
    settings = settings or get_settings()
    scenario_logger: Any = logger.bind(component=BROWSER_COMPONENT)

    page = await browser.new_page(ignore_https_errors=settings.ignore_https_errors)
    page.set_default_timeout(settings.playwright_timeout)
    attach_request_observers(page, scenario_logger)

    await page.goto(url, wait_until="load")
    html = await page.evaluate(READ_BODY_SCRIPT)

    result = ScenarioResult(
        url=url,
        rendered=html,
        expected=settings.expected_html,
        headless=headless,
    )

    if result.passed:
        scenario_logger.info("PASSED")
    else:
        scenario_logger.info(
            f'FAILED rendered "{result.rendered}" but expected "{result.expected}"'
        )

    return result
