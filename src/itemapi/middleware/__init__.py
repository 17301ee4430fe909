"""
=============================================================================
MIDDLEWARE
=============================================================================

Interceptors that wrap the dispatcher, for concerns that apply to every
route rather than to one handler.

LoggingMiddleware:
    Access log line per request, X-Request-ID header.

CORSMiddleware:
    Answers OPTIONS preflights itself; adds Access-Control-* headers to
    everything else.

Write your own by subclassing Middleware, or wrap a plain function with
FunctionMiddleware / @function_middleware.

=============================================================================
"""

from .base import (
    Middleware,
    MiddlewarePipeline,
    NextHandler,
    FunctionMiddleware,
    function_middleware,
)
from .logging import LoggingMiddleware
from .cors import CORSMiddleware, CORSConfig

__all__ = [
    # Base classes
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "FunctionMiddleware",
    "function_middleware",

    # Built-in middleware
    "LoggingMiddleware",
    "CORSMiddleware",
    "CORSConfig",
]
