"""
Browser Automation
==================

- driver: Playwright browser lifecycle with disconnect detection
- scenario: the page load and body check
"""

from .driver import BrowserDisconnectedError, BrowserDriver, BrowserLaunchError
from .scenario import run_test

__all__ = ["BrowserDisconnectedError", "BrowserDriver", "BrowserLaunchError", "run_test"]
