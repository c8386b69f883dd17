"""
Static Site Application
=======================

FastAPI application serving the smoke test site: the index page, the
brotli-compressed script and an empty 404 for everything else. Fixtures are
read from disk on every request.
"""

from pathlib import Path
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from tls_smoke.config.logging import SERVER_COMPONENT, get_logger
from tls_smoke.config.settings import Settings, get_settings
from tls_smoke.core.server.encoding import IDENTITY, encode_body
from tls_smoke.models.schemas import CompressionPolicy

logger = get_logger(__name__)

INDEX_HTML = "index.html"
INDEX_JS = "index.js"
HTML_CONTENT_TYPE = "text/html"
SCRIPT_CONTENT_TYPE = "text/javascript;charset=utf8"
SCRIPT_PATH = "/index.js"

# Routes answer regardless of the request method
ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def read_fixture(fixtures_dir: Path, name: str) -> bytes:
    return (fixtures_dir / name).read_bytes()


def fixture_response(request: Request, body: bytes, headers: Dict[str, str]) -> Response:
    """Response with an explicit content-length; HEAD gets the headers only."""
    headers = {"content-length": str(len(body)), **headers}
    if request.method == "HEAD":
        body = b""
    return Response(content=body, headers=headers)


class DropFailedResponses:
    """
    Raw ASGI wrapper that leaves a failed request without a completed response.

    Response messages are held until the application returns. When it raises
    instead, the error page rendered by the framework is discarded: only its
    start message is forwarded before the exception propagates, so the server
    closes the connection with the declared body unsent.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        held: List[Message] = []

        async def hold(message: Message) -> None:
            held.append(message)

        try:
            await self.app(scope, receive, hold)
        except Exception:
            start = next((m for m in held if m["type"] == "http.response.start"), None)
            if start is not None:
                await send(start)
            raise

        for message in held:
            await send(message)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory for the static test site.

    Args:
        settings: Settings providing the fixtures directory and compression policy

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()
    server_logger = logger.bind(component=SERVER_COMPONENT)

    app = FastAPI(
        title=settings.app_name,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.settings = settings

    # Request logging middleware
    @app.middleware("http")
    async def log_request(request: Request, call_next) -> Response:  # type: ignore
        """Log one line per handled request."""
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"

        try:
            response = await call_next(request)  # type: ignore
        except Exception as e:
            server_logger.error("request failed", url=url, error=str(e), exc_info=True)
            raise

        if request.url.path == SCRIPT_PATH:
            server_logger.info(
                f"{response.status_code} {url} accept-encoding: "
                f"{request.headers.get('accept-encoding')}"
            )
        else:
            server_logger.info(f"{response.status_code} {url}")

        return response  # type: ignore

    # Unknown paths get a bare status with an empty body
    @app.exception_handler(StarletteHTTPException)
    async def empty_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        return Response(status_code=exc.status_code)

    @app.api_route("/", methods=ROUTE_METHODS)
    @app.api_route("/index.html", methods=ROUTE_METHODS)
    async def index(request: Request) -> Response:
        """Serve the index page."""
        body = read_fixture(settings.fixtures_dir, INDEX_HTML)
        return fixture_response(request, body, {"content-type": HTML_CONTENT_TYPE})

    @app.api_route(SCRIPT_PATH, methods=ROUTE_METHODS)
    async def script(request: Request) -> Response:
        """Serve the script, brotli-compressed according to the compression policy."""
        body, coding = encode_body(
            read_fixture(settings.fixtures_dir, INDEX_JS),
            settings.compression_policy,
            request.headers.get("accept-encoding"),
            quality=settings.brotli_quality,
        )

        headers = {"content-type": SCRIPT_CONTENT_TYPE}
        if coding != IDENTITY:
            headers["content-encoding"] = coding
        if settings.compression_policy is CompressionPolicy.NEGOTIATE:
            headers["vary"] = "accept-encoding"

        return fixture_response(request, body, headers)

    return app


def create_asgi_app(settings: Optional[Settings] = None) -> DropFailedResponses:
    """The application as served: failed requests get no completed response."""
    return DropFailedResponses(create_app(settings))
