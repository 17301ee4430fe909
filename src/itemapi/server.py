"""
=============================================================================
HOST RUNTIME
=============================================================================

Puts the application on the network. Accepting connections and parsing
raw HTTP is left to the standard library's ThreadingHTTPServer; this
module only adapts between its request handler and our HTTPRequest /
HTTPResponse types.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ThreadingHTTPServer        one thread per connection              │
    │          │                                                          │
    │          ▼                                                          │
    │   _RequestHandler            read body, build HTTPRequest           │
    │          │                                                          │
    │          ▼                                                          │
    │   app(request)               Dispatcher: middleware → handler       │
    │          │                                                          │
    │          ▼                                                          │
    │   _RequestHandler            status line, headers, body             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No error escapes a request thread: anything the application raises is
logged with its traceback and answered with a 500.

=============================================================================
USAGE
=============================================================================

    server = ItemServer(ServerConfig(port=8080))
    server.serve_forever()        # blocks, Ctrl+C to stop

    # Tests: serve from a background thread on a free port
    server = ItemServer(ServerConfig(port=0))
    host, port = server.start()
    ...
    server.shutdown()

=============================================================================
"""

from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, Tuple
import logging
import threading

from .app import create_app
from .config import ServerConfig
from .core.store import ItemStore
from .http.dispatcher import Dispatcher
from .http.request import HTTPRequest
from .http.response import HTTPResponse, ResponseBuilder


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Responses that never carry Content-Length (RFC 7230 section 3.3.2)
_NO_LENGTH_STATUSES = frozenset({HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED})


def configure_logging(config: ServerConfig) -> None:
    """Configure the root logger and the itemapi logger level."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    logging.getLogger("itemapi").setLevel(level)


def _error_response(status: HTTPStatus, message: str) -> HTTPResponse:
    return ResponseBuilder().status(status).json({"error": message}).build()


class _RequestHandler(BaseHTTPRequestHandler):
    """Adapter from http.server to the application. One per connection."""

    server: "_ThreadingServer"

    def setup(self):
        config = self.server.config
        self.timeout = config.timeout
        self.protocol_version = "HTTP/1.1" if config.keep_alive else "HTTP/1.0"
        super().setup()

    def version_string(self) -> str:
        return self.server.config.server_name

    def log_message(self, format, *args):
        # The access log comes from LoggingMiddleware; keep these quiet
        logger.debug(f"{self.address_string()} {format % args}")

    def _handle(self):
        try:
            length = int(self.headers.get("Content-Length") or 0)
            if length < 0:
                raise ValueError(length)
        except ValueError:
            self.close_connection = True
            self._send(_error_response(HTTPStatus.BAD_REQUEST, "invalid Content-Length"))
            return

        body = self.rfile.read(length) if length else b""

        request = HTTPRequest.from_target(
            method=self.command,
            target=self.path,
            headers=dict(self.headers.items()),
            body=body,
            client_address=tuple(self.client_address[:2]),
            version=self.request_version,
        )

        try:
            response = self.server.app(request)
        except Exception as e:
            logger.exception(f"Unhandled error for {request.method} {request.path}: {e}")
            response = _error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "internal server error")

        self._send(response)

    def _send(self, response: HTTPResponse):
        status = HTTPStatus(response.status)
        headers = dict(response.headers)
        if status not in _NO_LENGTH_STATUSES:
            headers.setdefault("Content-Length", str(len(response.body)))

        self.send_response(status)
        for name, value in headers.items():
            self.send_header(name, value)
        self.end_headers()

        if self.command != "HEAD" and response.body and status not in _NO_LENGTH_STATUSES:
            self.wfile.write(response.body)

    do_GET = _handle
    do_HEAD = _handle
    do_POST = _handle
    do_PUT = _handle
    do_PATCH = _handle
    do_DELETE = _handle
    do_OPTIONS = _handle


class _ThreadingServer(ThreadingHTTPServer):
    """ThreadingHTTPServer that carries the app and config for handlers."""

    daemon_threads = True

    def __init__(self, address: Tuple[str, int], app: Dispatcher, config: ServerConfig):
        self.app = app
        self.config = config
        super().__init__(address, _RequestHandler)

    def handle_error(self, request, client_address):
        # Default implementation prints to stderr
        logger.exception(f"Connection error from {client_address[0]}")


class ItemServer:
    """
    The item API on a socket.

    Args:
        config: Server configuration (validated here, fail-fast).
        app: A prebuilt application. Defaults to create_app(store, config).
        store: Store for the default application.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        app: Optional[Dispatcher] = None,
        store: Optional[ItemStore] = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        self.app = app or create_app(store, self.config)

        self._httpd: Optional[_ThreadingServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        """
        Bound (host, port).

        Raises:
            RuntimeError: The server is not listening.
        """
        if self._httpd is None:
            raise RuntimeError("Server is not bound")
        host, port = self._httpd.server_address[:2]
        return host, port

    def _bind(self) -> _ThreadingServer:
        if self._httpd is None:
            self._httpd = _ThreadingServer(
                (self.config.host, self.config.port), self.app, self.config
            )
            # No more routes or middleware from here on
            self.app.freeze()
            host, port = self._httpd.server_address[:2]
            logger.info(f"Listening on http://{host}:{port}")
        return self._httpd

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def serve_forever(self) -> None:
        """Serve in the calling thread until Ctrl+C."""
        httpd = self._bind()
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._close()

    def start(self) -> Tuple[str, int]:
        """
        Serve from a daemon thread.

        Returns:
            The bound (host, port), ready for connections.
        """
        if self._thread is not None:
            raise RuntimeError("Server already started")
        httpd = self._bind()
        self._thread = threading.Thread(
            target=httpd.serve_forever,
            name="itemapi-server",
            daemon=True,
        )
        self._thread.start()
        return self.address

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        """Stop a server started with start() and release the socket."""
        if self._thread is not None and self._thread.is_alive():
            self._httpd.shutdown()
            self._thread.join(timeout)
        self._thread = None
        self._close()

    def _close(self) -> None:
        if self._httpd is not None:
            logger.info("Shutting down server...")
            self._httpd.server_close()
            self._httpd = None
            logger.info("Server stopped")

    def __enter__(self) -> "ItemServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
