"""
=============================================================================
CORS MIDDLEWARE
=============================================================================

Cross-Origin Resource Sharing lets a browser page served from one origin
call this API on another.

=============================================================================
TWO KINDS OF REQUESTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   PREFLIGHT (OPTIONS)                                               │
    │   Browser: "may I send PUT with Content-Type from app.example?"     │
    │   We answer right here with 204 + Access-Control-* headers.         │
    │   The router and handlers never see the request.                    │
    │                                                                      │
    │   ACTUAL REQUEST (GET, POST, ...)                                   │
    │   Passed down the chain as usual. On the way back we add            │
    │   Access-Control-Allow-Origin (and Vary: Origin) to the response.   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
RESPONSE HEADERS
=============================================================================

    Access-Control-Allow-Origin       which origin may read the response
    Access-Control-Allow-Methods      (preflight) methods allowed
    Access-Control-Allow-Headers      (preflight) request headers allowed
    Access-Control-Max-Age            (preflight) cache time in seconds
    Access-Control-Allow-Credentials  "true" if cookies/auth are allowed
    Access-Control-Expose-Headers     extra headers scripts may read

With credentials enabled the browser refuses "*", so the request's own
origin is echoed back instead.

=============================================================================
"""

from typing import Optional, List
from dataclasses import dataclass
from http import HTTPStatus

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder


@dataclass
class CORSConfig:
    """
    CORS configuration.

        CORSConfig()                                   # allow any origin
        CORSConfig(allow_origins=["https://app.example"],
                   allow_credentials=True)
    """

    allow_origins: List[str] = None
    allow_methods: List[str] = None
    allow_headers: List[str] = None
    expose_headers: List[str] = None

    # Cannot be combined with a literal "*" origin in the browser
    allow_credentials: bool = False

    # How long browsers may cache a preflight answer (seconds)
    max_age: int = 86400

    def __post_init__(self):
        if self.allow_origins is None:
            self.allow_origins = ["*"]
        if self.allow_methods is None:
            self.allow_methods = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
        if self.allow_headers is None:
            self.allow_headers = ["Content-Type", "Authorization", "X-Requested-With"]
        if self.expose_headers is None:
            self.expose_headers = []


class CORSMiddleware(Middleware):
    """
    Answers preflight requests and decorates all other responses with
    CORS headers.

    Place it after LoggingMiddleware (so preflights are still logged) and
    before anything that could reject the request, such as auth: a
    preflight carries no credentials and must succeed on its own.
    """

    def __init__(self, config: Optional[CORSConfig] = None):
        self.config = config or CORSConfig()

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        origin = request.headers.get("origin", "")

        if request.method == "OPTIONS":
            return self._handle_preflight(request, origin)

        response = next(request)
        self._add_cors_headers(response, origin)
        return response

    def _handle_preflight(self, request: HTTPRequest, origin: str) -> HTTPResponse:
        """Build the 204 preflight answer. Downstream is not called."""
        response = ResponseBuilder().status(HTTPStatus.NO_CONTENT).build()

        if not self._add_cors_headers(response, origin):
            # Origin not allowed: a bare 204 makes the browser block the call
            return response

        response.headers["Access-Control-Allow-Methods"] = ", ".join(self.config.allow_methods)

        # Echo what the browser asked for when no explicit list is configured
        requested_headers = request.headers.get("access-control-request-headers", "")
        if self.config.allow_headers:
            response.headers["Access-Control-Allow-Headers"] = ", ".join(self.config.allow_headers)
        elif requested_headers:
            response.headers["Access-Control-Allow-Headers"] = requested_headers

        response.headers["Access-Control-Max-Age"] = str(self.config.max_age)
        return response

    def _add_cors_headers(self, response: HTTPResponse, origin: str) -> bool:
        """
        Add the common CORS headers.

        Returns:
            False if the origin is not allowed (no headers added).
        """
        if "*" in self.config.allow_origins:
            if self.config.allow_credentials:
                allowed_origin = origin if origin else "*"
            else:
                allowed_origin = "*"
        elif origin in self.config.allow_origins:
            allowed_origin = origin
        else:
            return False

        response.headers["Access-Control-Allow-Origin"] = allowed_origin

        if self.config.allow_credentials:
            response.headers["Access-Control-Allow-Credentials"] = "true"

        if self.config.expose_headers:
            response.headers["Access-Control-Expose-Headers"] = ", ".join(
                self.config.expose_headers
            )

        # Responses differ per Origin whenever we echo it back
        if allowed_origin != "*":
            vary = response.headers.get("Vary", "")
            if "Origin" not in vary:
                response.headers["Vary"] = f"{vary}, Origin".lstrip(", ")

        return True
