"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Defines the middleware protocol and the pipeline that chains middleware
around the dispatcher.

Every middleware has the same shape:

    def __call__(self, request, next) -> HTTPResponse

It may:
    - inspect or modify the request, then call next(request)
    - look at (or change) the response next() returned
    - SHORT-CIRCUIT: return its own response without calling next()

=============================================================================
PIPELINE STRUCTURE
=============================================================================

The first middleware added is the outermost layer:

    pipeline.add(LoggingMiddleware())
    pipeline.add(CORSMiddleware())

        ┌───────────────────────────────────────────────────────┐
        │  LoggingMiddleware                                    │
        │  ┌─────────────────────────────────────────────────┐  │
        │  │  CORSMiddleware                                 │  │
        │  │  ┌───────────────────────────────────────────┐  │  │
        │  │  │  route → handler → translator             │  │  │
        │  │  └───────────────────────────────────────────┘  │  │
        │  └─────────────────────────────────────────────────┘  │
        └───────────────────────────────────────────────────────┘

Request flows inward (Logging, CORS, handler), the response flows back
out (CORS adds headers, Logging records the status).

Middleware objects are shared by all request threads. Keep per-request
state in local variables, not on self.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator, List, Optional
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# The next stage in the chain: another middleware or the dispatcher itself
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class AddHeader(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.set_header("X-Processed-By", "AddHeader")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Call next(request) to continue the chain, or return a response
        directly to stop it here.
        """

    @property
    def name(self) -> str:
        """Middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered list of middleware that can wrap a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.use(LoggingMiddleware(), CORSMiddleware())
        handler = pipeline.wrap(dispatcher.dispatch)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append middleware (inside everything added before it)."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """Append several middleware at once, in order."""
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain around `handler`.

        Given [A, B, C] the result calls A → B → C → handler. Wrapping
        happens in reverse so the first-added middleware ends up outermost.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middleware)


# =============================================================================
# FUNCTION MIDDLEWARE
# =============================================================================

class FunctionMiddleware(Middleware):
    """
    Wraps a plain (request, next) function as middleware.

        def add_header(request, next):
            response = next(request)
            response.set_header("X-Custom", "value")
            return response

        pipeline.add(FunctionMiddleware(add_header))
    """

    def __init__(
        self,
        func: Callable[[HTTPRequest, NextHandler], HTTPResponse],
        name: Optional[str] = None
    ):
        self._func = func
        self._name = name or func.__name__

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        return self._func(request, next)

    @property
    def name(self) -> str:
        return self._name


def function_middleware(
    func: Callable[[HTTPRequest, NextHandler], HTTPResponse]
) -> FunctionMiddleware:
    """
    Decorator form of FunctionMiddleware.

        @function_middleware
        def timing(request, next):
            ...
    """
    return FunctionMiddleware(func)
