"""
HTTP error types.

HTTPError carries the status the client should see. Handlers do not raise
these across the routing boundary; they catch them (or build them) and
return them inside a Failure outcome, see outcome.py.

    HTTPError(message, status)
    ├── BadRequest          400  malformed id, invalid JSON, bad fields
    ├── NotFound            404  unknown route or unknown item
    └── MethodNotAllowed    405  path exists, method does not (sets Allow)

ResponseAlreadyWrittenError is different: it marks a programming error
(a second write to the same response) and is meant to propagate.
"""

from http import HTTPStatus
from typing import Dict, Iterable, Optional


class HTTPError(Exception):
    """
    An error with an explicit HTTP status attached.

    The message is sent to the client as {"error": message}, so it must
    not contain internal details.
    """

    status = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status: Optional[HTTPStatus] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = HTTPStatus(status)
        self.headers: Dict[str, str] = dict(headers or {})


class BadRequest(HTTPError):
    status = HTTPStatus.BAD_REQUEST


class NotFound(HTTPError):
    status = HTTPStatus.NOT_FOUND

    def __init__(self, message: str = "not found", **kwargs):
        super().__init__(message, **kwargs)


class MethodNotAllowed(HTTPError):
    """405, with the Allow header RFC 7231 asks for."""

    status = HTTPStatus.METHOD_NOT_ALLOWED

    def __init__(self, allowed_methods: Iterable[str], message: str = "method not allowed"):
        self.allowed_methods = sorted(allowed_methods)
        super().__init__(message, headers={"Allow": ", ".join(self.allowed_methods)})


class ResponseAlreadyWrittenError(RuntimeError):
    """
    A response was written twice.

    Each request gets exactly one status and one body. A handler that
    writes through its ResponseWriter and then also returns an outcome
    triggers this. It is a bug in the handler, not something to recover
    from, so it is raised rather than ignored.
    """
