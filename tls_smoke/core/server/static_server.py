"""
Static Test Server
==================

HTTPS listener for the smoke test site, run by uvicorn inside the current
event loop. ``start_server`` returns only once the listener is accepting
connections; ``ServerHandle.close`` returns only once it has stopped.
"""

import asyncio
import shutil
import socket
import tempfile
from pathlib import Path
from typing import Any, List, Optional

import uvicorn

from tls_smoke.config.logging import SERVER_COMPONENT, get_logger
from tls_smoke.config.settings import Settings, get_settings
from tls_smoke.core.server.app import create_asgi_app
from tls_smoke.models.schemas import CertificateBundle

logger = get_logger(__name__)


class ServerStartupError(Exception):
    """Exception raised when the test server stops or fails before listening."""

    pass


class SignallingServer(uvicorn.Server):
    """uvicorn server that sets an event once its listeners are up."""

    def __init__(self, config: uvicorn.Config):
        super().__init__(config)
        self.listening = asyncio.Event()

    async def startup(self, sockets: Optional[List[socket.socket]] = None) -> None:
        await super().startup(sockets=sockets)
        if not self.should_exit:
            self.listening.set()


class ServerHandle:
    """Running test server: the ``closed`` signal plus a ``close`` operation."""

    def __init__(
        self,
        server: SignallingServer,
        closed: "asyncio.Task[None]",
        sock: socket.socket,
        port: int,
        cert_dir: Path,
    ):
        self._server = server
        self._sock = sock
        self._cert_dir = cert_dir
        self.closed = closed
        self.port = port
        self.logger: Any = logger.bind(component=SERVER_COMPONENT)

    async def close(self) -> None:
        """Request shutdown and wait for the closed signal to settle."""
        self._server.should_exit = True
        try:
            await self.closed
        finally:
            self._sock.close()
            shutil.rmtree(self._cert_dir, ignore_errors=True)
            self.logger.info(f"closed port {self.port}")


def write_cert_files(bundle: CertificateBundle) -> Path:
    """Write the PEM bundle where uvicorn's TLS setup can load it."""
    cert_dir = Path(tempfile.mkdtemp(prefix="tls_smoke_"))
    (cert_dir / "key.pem").write_bytes(bundle.key)
    (cert_dir / "cert.pem").write_bytes(bundle.cert)
    return cert_dir


def bind_socket(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family=family, type=socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


async def start_server(
    bundle: CertificateBundle, settings: Optional[Settings] = None
) -> ServerHandle:
    """
    Start the HTTPS test server.

    Args:
        bundle: Key and certificate for the TLS context
        settings: Host, port, fixtures and compression settings

    Returns:
        ServerHandle for a server that is accepting connections

    Raises:
        ServerStartupError: If the port cannot be bound or the server stops
            before it is listening
    """
    settings = settings or get_settings()
    server_logger: Any = logger.bind(component=SERVER_COMPONENT)

    try:
        sock = bind_socket(settings.server_host, settings.server_port)
    except OSError as e:
        server_logger.error("bind failed", port=settings.server_port, error=str(e))
        raise ServerStartupError(
            f"Cannot bind {settings.server_host}:{settings.server_port}: {e}"
        ) from e

    port = sock.getsockname()[1]
    cert_dir = write_cert_files(bundle)

    config = uvicorn.Config(
        create_asgi_app(settings),
        ssl_keyfile=str(cert_dir / "key.pem"),
        ssl_certfile=str(cert_dir / "cert.pem"),
        log_config=None,
        access_log=False,
        lifespan="off",
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
    server = SignallingServer(config)
    closed = asyncio.create_task(server.serve(sockets=[sock]))
    listening = asyncio.create_task(server.listening.wait())

    # Race "listening" against the server task finishing early
    try:
        await asyncio.wait({closed, listening}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        listening.cancel()

    if not server.listening.is_set():
        sock.close()
        shutil.rmtree(cert_dir, ignore_errors=True)
        error = closed.exception() if not closed.cancelled() else None
        server_logger.error("closed early", error=str(error) if error else None)
        raise ServerStartupError("closed early") from error

    server_logger.info(f"listening on port {port}")
    return ServerHandle(server, closed, sock, port, cert_dir)
