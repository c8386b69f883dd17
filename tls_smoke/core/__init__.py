"""
Core Components
===============

- tls: self-signed certificate generation
- server: static HTTPS test server
- browser: Playwright browser driver and the smoke test scenario
"""
