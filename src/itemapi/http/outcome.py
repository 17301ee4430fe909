"""
=============================================================================
HANDLER OUTCOMES
=============================================================================

Handlers do not build HTTP responses. They return one of two values and
leave the wire format to the ResponseTranslator:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Success(payload, status)     payload → JSON body                  │
    │   Success(None, status)        status only, empty body              │
    │                                                                      │
    │   Failure(error, status)       {"error": message} with status       │
    │   Failure(error)               untagged → 500, generic message      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The status of a Failure comes from an explicit tag, never from the text of
the message. failure() reads the tag off an HTTPError; any other exception
stays untagged and becomes a 500.

Shortcuts mirror the usual status helpers:

    return ok(item)
    return created(item, location=f"/items/{item.id}")
    return no_content()
    return not_found()
    return bad_request("invalid ID: 'abc'")

=============================================================================
"""

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Optional, Union

from .errors import HTTPError, BadRequest, NotFound


GENERIC_ERROR_MESSAGE = "internal server error"


@dataclass(frozen=True)
class Success:
    """A handler succeeded. `payload` of None means "no body"."""

    payload: Any = None
    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def has_body(self) -> bool:
        return self.payload is not None


@dataclass(frozen=True)
class Failure:
    """
    A handler failed.

    `status` is the explicit tag. When it is None the failure is treated
    as an internal error: 500, and the client only sees a generic message.
    """

    error: Exception
    status: Optional[HTTPStatus] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def tagged(self) -> bool:
        return self.status is not None

    @property
    def status_code(self) -> HTTPStatus:
        return self.status if self.status is not None else HTTPStatus.INTERNAL_SERVER_ERROR

    @property
    def message(self) -> str:
        """Client-facing text. Untagged errors never leak their details."""
        if not self.tagged:
            return GENERIC_ERROR_MESSAGE
        if isinstance(self.error, HTTPError):
            return self.error.message
        return str(self.error)


Outcome = Union[Success, Failure]


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================

def ok(payload: Any) -> Success:
    """200 OK with a JSON body."""
    return Success(payload, HTTPStatus.OK)


def created(payload: Any, location: Optional[str] = None) -> Success:
    """201 Created, optionally pointing at the new resource."""
    headers = {"Location": location} if location else {}
    return Success(payload, HTTPStatus.CREATED, headers)


def no_content() -> Success:
    """204 No Content."""
    return Success(None, HTTPStatus.NO_CONTENT)


def failure(error: Exception) -> Failure:
    """
    Wrap an exception as a Failure.

    HTTPError instances keep their status and headers. Anything else is
    left untagged (500).
    """
    if isinstance(error, HTTPError):
        return Failure(error, error.status, dict(error.headers))
    return Failure(error)


def bad_request(message: str) -> Failure:
    return failure(BadRequest(message))


def not_found(message: str = "not found") -> Failure:
    return failure(NotFound(message))
