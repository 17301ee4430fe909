"""
=============================================================================
DISPATCHER
=============================================================================

Runs one request through the whole pipeline:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   HTTPRequest                                                       │
    │       │                                                             │
    │       ▼                                                             │
    │   middleware chain  (may short-circuit, e.g. CORS preflight)        │
    │       │                                                             │
    │       ▼                                                             │
    │   router.match()  ── no match ──► Failure 404 / 405                 │
    │       │                                                             │
    │       ▼  request.path_params = {"id": "7"}                          │
    │   handler(request, writer)                                          │
    │       │                                                             │
    │       ├── Success / Failure ──► translator writes it                │
    │       ├── None (wrote itself) ──► nothing more to do                │
    │       └── raised ──► untagged Failure (500)                         │
    │       │                                                             │
    │       ▼                                                             │
    │   HTTPResponse                                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The translator is the only place that turns outcomes into statuses. An
exception escaping a handler is converted into a Failure right here, so
it ends up there too.

The one thing that is NOT contained is a double write
(ResponseAlreadyWrittenError): that is a broken handler and it propagates
to the host, which logs it.

=============================================================================
"""

from typing import Any, Callable, Optional
import logging
import threading

from .errors import NotFound, MethodNotAllowed, ResponseAlreadyWrittenError
from .outcome import Failure, failure
from .request import HTTPRequest
from .response import HTTPResponse, ResponseWriter
from .router import Router, Handler
from .translator import ResponseTranslator
from ..middleware.base import Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


class Dispatcher:
    """
    The application object: routes, middleware and translation in one.

        app = Dispatcher()
        app.use(LoggingMiddleware()).use(CORSMiddleware())

        @app.get("/items")
        def list_items(request, writer):
            return ok(store.get_all())

        response = app(HTTPRequest(method="GET", path="/items"))

    Routes and middleware are registered at startup. The first request
    freezes both; registering anything afterwards raises RuntimeError.
    A Dispatcher is safe to call from many threads at once after that.
    """

    def __init__(
        self,
        router: Optional[Router] = None,
        translator: Optional[ResponseTranslator] = None,
    ):
        self._router = router or Router()
        self._translator = translator or ResponseTranslator()
        self._middleware = MiddlewarePipeline()

        # middleware.wrap(self.dispatch), built once on freeze
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None
        self._freeze_lock = threading.Lock()

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    @property
    def router(self) -> Router:
        return self._router

    @property
    def translator(self) -> ResponseTranslator:
        return self._translator

    @property
    def middleware(self) -> MiddlewarePipeline:
        return self._middleware

    def use(self, middleware: Middleware) -> "Dispatcher":
        """Add middleware; first added runs first (outermost)."""
        if self._handler is not None:
            raise RuntimeError("Middleware cannot be added after the dispatcher is frozen")
        self._middleware.add(middleware)
        return self

    def route(self, path: str, method: Optional[str] = None, **kwargs):
        return self._router.route(path, method, **kwargs)

    def get(self, path: str, **kwargs):
        return self._router.get(path, **kwargs)

    def post(self, path: str, **kwargs):
        return self._router.post(path, **kwargs)

    def put(self, path: str, **kwargs):
        return self._router.put(path, **kwargs)

    def delete(self, path: str, **kwargs):
        return self._router.delete(path, **kwargs)

    def group(self, prefix: str) -> Router:
        return self._router.group(prefix)

    def freeze(self) -> None:
        """
        Lock routes and middleware and build the handler chain.

        Called automatically on the first request; the host calls it at
        startup so route listing shows up in the logs before traffic.
        """
        with self._freeze_lock:
            if self._handler is not None:
                return
            self._router.freeze()
            self._handler = self._middleware.wrap(self.dispatch)
            for line in self._router.describe():
                logger.debug(f"Route: {line}")

    @property
    def frozen(self) -> bool:
        return self._handler is not None

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        """Handle a request through middleware, router and translator."""
        if self._handler is None:
            self.freeze()
        return self._handler(request)

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Innermost stage: route, run the handler, translate its outcome.

        Middleware is not applied here; call the dispatcher itself for that.

        Raises:
            ResponseAlreadyWrittenError: A handler wrote twice, or wrote a
                response and also returned an outcome.
        """
        writer = ResponseWriter()

        match = self._router.match(request.method, request.raw_path)
        if match is None:
            self._translator.write(self._routing_miss(request), writer)
            return writer.response

        request.path_params = match.params
        outcome = self._run_handler(match.route.handler, request, writer)

        if outcome is None:
            if not writer.written:
                # Handler neither wrote nor returned anything
                self._translator.write(failure(RuntimeError(
                    f"handler {match.route.path} returned no outcome and wrote no response"
                )), writer)
            return writer.response

        self._translator.write(outcome, writer)
        return writer.response

    def _run_handler(
        self,
        handler: Handler,
        request: HTTPRequest,
        writer: ResponseWriter,
    ) -> Any:
        try:
            return handler(request, writer)
        except ResponseAlreadyWrittenError:
            # Double writes propagate to the host
            raise
        except Exception as e:
            if writer.written:
                # Too late for an error response: keep what was written
                logger.exception(f"Handler {request.method} {request.path} failed after writing")
                return None
            return failure(e)

    def _routing_miss(self, request: HTTPRequest) -> Failure:
        allowed = self._router.allowed_methods(request.raw_path)
        if allowed:
            return failure(MethodNotAllowed(allowed))
        return failure(NotFound("route not found"))
