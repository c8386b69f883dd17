"""
TLS
===

Self-signed certificate generation for the test server.
"""

from .certificates import create_cert

__all__ = ["create_cert"]
