"""
=============================================================================
RESPONSE TRANSLATOR
=============================================================================

The one place where handler outcomes become HTTP status codes and bodies.

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ Outcome              │ Written response                             │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ Success(payload, s)  │ s, JSON body                                 │
    │ Success(None, s)     │ s, empty body                                │
    │ Failure(e, s)        │ s, {"error": e.message}                      │
    │ Failure(e)           │ 500, {"error": "internal server error"}      │
    │ payload not JSON     │ 500, {"error": "internal server error"}      │
    └──────────────────────┴──────────────────────────────────────────────┘

Untagged failures are logged with their traceback here, since this is the
last point where the original exception is still at hand.

=============================================================================
"""

from dataclasses import asdict, is_dataclass
from http import HTTPStatus
from typing import Any
import logging

from .outcome import Outcome, Success, Failure, failure
from .response import HTTPResponse, ResponseBuilder, ResponseWriter


logger = logging.getLogger(__name__)

# Statuses that must not carry a body (RFC 7230 section 3.3.3)
BODYLESS_STATUSES = frozenset({HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED})


def to_jsonable(value: Any) -> Any:
    """
    json.dumps hook for payload objects.

    Objects exposing to_dict() are asked for it; other dataclasses are
    converted with asdict(). Anything else is not serializable.
    """
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class ResponseTranslator:
    """
    Converts outcomes into responses.

    Args:
        pretty: Indent JSON bodies (useful when poking at the API by hand).
    """

    def __init__(self, pretty: bool = False):
        self.pretty = pretty

    def write(self, outcome: Outcome, writer: ResponseWriter) -> HTTPResponse:
        """
        Write `outcome` into `writer`.

        Raises:
            ResponseAlreadyWrittenError: The writer was already used.
        """
        # Build first, then write once. A serialization error must not leave
        # a half-written response behind.
        response = self.translate(outcome)
        return writer.write_response(response)

    def translate(self, outcome: Outcome) -> HTTPResponse:
        """Build the response for `outcome` without writing it anywhere."""
        if isinstance(outcome, Success):
            try:
                return self._success(outcome)
            except (TypeError, ValueError, RecursionError) as e:
                # An object json can't encode, or a payload that contains itself
                return self._failure(failure(e))
        if isinstance(outcome, Failure):
            return self._failure(outcome)
        return self._failure(failure(
            TypeError(f"handler returned {type(outcome).__name__}, expected an outcome")
        ))

    def _success(self, outcome: Success) -> HTTPResponse:
        builder = ResponseBuilder().status(outcome.status).headers(outcome.headers)
        if outcome.has_body and outcome.status not in BODYLESS_STATUSES:
            builder.json(self._encode(outcome.payload), pretty=self.pretty)
        return builder.build()

    def _failure(self, outcome: Failure) -> HTTPResponse:
        if not outcome.tagged:
            logger.error(
                f"Unhandled error: {type(outcome.error).__name__}: {outcome.error}",
                exc_info=(type(outcome.error), outcome.error, outcome.error.__traceback__),
            )
        return (ResponseBuilder()
            .status(outcome.status_code)
            .headers(outcome.headers)
            .json({"error": outcome.message})
            .build())

    def _encode(self, payload: Any) -> Any:
        # Nested payload objects → plain dict/list/scalar
        if isinstance(payload, (list, tuple)):
            return [self._encode(value) for value in payload]
        if isinstance(payload, dict):
            return {key: self._encode(value) for key, value in payload.items()}
        if payload is None or isinstance(payload, (str, int, float, bool)):
            return payload
        return self._encode(to_jsonable(payload))
