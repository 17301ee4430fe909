"""
=============================================================================
HTTP LAYER
=============================================================================

Everything between "a request arrived" and "here is the response":

    request.py      HTTPRequest
    response.py     HTTPResponse, ResponseBuilder, ResponseWriter
    errors.py       HTTPError and friends (errors tagged with a status)
    outcome.py      Success / Failure values returned by handlers
    router.py       Router: (method, pattern) → handler, path params
    translator.py   ResponseTranslator: outcome → status + JSON body
    dispatcher.py   Dispatcher: middleware + router + handler + translator

dispatcher.py is imported explicitly (itemapi.http.dispatcher) because it
depends on the middleware package, which in turn depends on this one.

=============================================================================
"""

from http import HTTPStatus

from .request import HTTPRequest
from .response import HTTPResponse, ResponseBuilder, ResponseWriter
from .errors import (
    HTTPError,
    BadRequest,
    NotFound,
    MethodNotAllowed,
    ResponseAlreadyWrittenError,
)
from .outcome import (
    Success,
    Failure,
    Outcome,
    ok,
    created,
    no_content,
    failure,
    bad_request,
    not_found,
)
from .router import Router, Route, RouteMatch, Handler
from .translator import ResponseTranslator

__all__ = [
    "HTTPStatus",

    # Request / response
    "HTTPRequest",
    "HTTPResponse",
    "ResponseBuilder",
    "ResponseWriter",

    # Errors
    "HTTPError",
    "BadRequest",
    "NotFound",
    "MethodNotAllowed",
    "ResponseAlreadyWrittenError",

    # Outcomes
    "Success",
    "Failure",
    "Outcome",
    "ok",
    "created",
    "no_content",
    "failure",
    "bad_request",
    "not_found",

    # Routing and translation
    "Router",
    "Route",
    "RouteMatch",
    "Handler",
    "ResponseTranslator",
]
