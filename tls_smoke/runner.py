"""
Smoke Test Runner
=================

Orchestrates the smoke test: certificate, HTTPS server, then one scenario run
per launch configuration (headful, then headless). The server is always shut
down, whatever the outcome of the browser runs.

Usage:
    python -m tls_smoke [--port PORT] [--headless-only] [--negotiate-encoding]
"""

import argparse
import asyncio
import sys
from functools import partial
from typing import Any, Dict, List, Optional

from tls_smoke.config.logging import get_logger, setup_logging
from tls_smoke.config.settings import Settings, build_target_url, get_settings
from tls_smoke.core.browser.driver import BrowserDriver
from tls_smoke.core.browser.scenario import run_test
from tls_smoke.core.server.static_server import start_server
from tls_smoke.core.tls.certificates import create_cert
from tls_smoke.models.schemas import CompressionPolicy, ScenarioResult

logger = get_logger(__name__)


async def run_smoke_test(settings: Optional[Settings] = None) -> List[ScenarioResult]:
    """
    Run the scenario once per configured launch mode against a fresh server.

    Returns:
        One ScenarioResult per browser run, in launch order
    """
    settings = settings or get_settings()
    results: List[ScenarioResult] = []

    server = await start_server(create_cert(), settings)
    try:
        url = build_target_url(settings.public_host, server.port)
        driver = BrowserDriver(settings)
        await driver.initialize()
        try:
            for launch_config in settings.launch_configurations():
                result = await driver.using_browser(
                    launch_config,
                    partial(run_test, url=url, settings=settings, headless=launch_config.headless),
                )
                results.append(result)
        finally:
            await driver.close()
    finally:
        await server.close()

    return results


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="HTTPS + brotli browser smoke test")
    parser.add_argument("--port", type=int, help="Test server port (0 picks a free port)")
    parser.add_argument("--log-level", help="Logging level")
    parser.add_argument(
        "--headless-only", action="store_true", help="Skip the headful browser run"
    )
    parser.add_argument(
        "--negotiate-encoding",
        action="store_true",
        help="Only brotli-compress the script when the client accepts br",
    )
    parser.add_argument(
        "--fail-on-mismatch",
        action="store_true",
        help="Exit with status 1 when a rendered page does not match",
    )
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Apply command line overrides on top of the environment settings."""
    base = base or get_settings()
    overrides: Dict[str, Any] = {}

    if args.port is not None:
        overrides["server_port"] = args.port
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if args.headless_only:
        overrides["run_headful"] = False
    if args.negotiate_encoding:
        overrides["compression_policy"] = CompressionPolicy.NEGOTIATE
    if args.fail_on_mismatch:
        overrides["fail_on_mismatch"] = True

    if not overrides:
        return base
    return Settings.model_validate({**base.model_dump(), **overrides})


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""
    settings = settings_from_args(parse_args(argv))
    setup_logging(settings)

    results = asyncio.run(run_smoke_test(settings))

    failed = [result for result in results if not result.passed]
    if failed and settings.fail_on_mismatch:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
