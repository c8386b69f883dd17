"""
Test Server
===========

- app: FastAPI routes for the static site
- encoding: brotli compression policy
- static_server: uvicorn HTTPS lifecycle (start, closed signal, close)
"""

from .app import create_app, create_asgi_app
from .static_server import ServerHandle, ServerStartupError, start_server

__all__ = ["create_app", "create_asgi_app", "ServerHandle", "ServerStartupError", "start_server"]
