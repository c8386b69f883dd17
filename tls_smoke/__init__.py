"""
TLS Smoke Test
==============

End-to-end smoke test that serves a small static site over HTTPS with a
self-signed certificate and checks that a real browser renders it.

This package provides:
- Ephemeral self-signed certificate generation
- A minimal FastAPI/uvicorn HTTPS server with brotli content-encoding
- Browser automation with Playwright
- The smoke test scenario and its orchestrator
"""

__version__ = "1.0.0"
__author__ = "TLS Smoke Test Team"
