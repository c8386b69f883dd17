"""
Test Suite
==========

Test suite matching the tls_smoke/ package structure.

Test Categories:
- unit: Unit tests for individual components, browser and network mocked
- integration: Real HTTPS server exercised with an HTTP client
- e2e: Real Chromium driven through Playwright
"""
