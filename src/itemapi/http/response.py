"""
=============================================================================
HTTP RESPONSE
=============================================================================

Three pieces live here:

    HTTPResponse     - plain data: status, headers, body
    ResponseBuilder  - fluent construction (used by middleware and the
                       translator)
    ResponseWriter   - the write-once capability handed to handlers

=============================================================================
WRITE-ONCE
=============================================================================

A request is answered with exactly one status and one body:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   handler writes via writer ──► writer.written = True               │
    │            │                                                        │
    │            └─ returns None        ──► translator does nothing       │
    │            └─ returns an outcome  ──► translator writes again       │
    │                                        ──► ResponseAlreadyWritten   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Headers are not covered by the rule. Middleware adds headers after the
handler has finished (CORS, X-Request-ID), which is fine.

=============================================================================
"""

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Optional, Dict, Any, Union
import json

from .errors import ResponseAlreadyWrittenError


JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response.

    The host runtime turns this into bytes on the socket; it adds Date,
    Server and Content-Length itself.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header. Returns self for chaining."""
        self.headers[name] = value
        return self

    @property
    def json(self) -> Any:
        """Decode the body as JSON (handy in tests)."""
        return json.loads(self.body.decode("utf-8")) if self.body else None


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.CREATED)
            .header("Location", "/items/4")
            .json({"id": 4, "title": "x", "completed": False})
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Raw body; strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def json(self, data: Any, pretty: bool = False) -> "ResponseBuilder":
        """
        Serialize `data` as the JSON body and set Content-Type.

        Raises:
            TypeError: `data` is not JSON serializable.
        """
        indent = 2 if pretty else None
        self._body = json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = JSON_CONTENT_TYPE
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


class ResponseWriter:
    """
    Write-once access to the response for one request.

    Created by the dispatcher for every request and passed to the handler.
    Most handlers never touch it and return an outcome instead; handlers
    that want full control write here and return None.
    """

    def __init__(self):
        self._response = HTTPResponse()
        self._written = False

    @property
    def headers(self) -> Dict[str, str]:
        """Response headers. May be changed before and after the write."""
        return self._response.headers

    @property
    def written(self) -> bool:
        return self._written

    @property
    def response(self) -> HTTPResponse:
        return self._response

    def write(
        self,
        status: HTTPStatus,
        body: bytes = b"",
        content_type: Optional[str] = None,
    ) -> HTTPResponse:
        """
        Write the status and body. Allowed once per request.

        Raises:
            ResponseAlreadyWrittenError: Something already wrote a response.
        """
        if self._written:
            raise ResponseAlreadyWrittenError(
                f"response already written with status {int(self._response.status)}"
            )
        self._written = True
        self._response.status = HTTPStatus(status)
        self._response.body = body
        if content_type:
            self._response.headers["Content-Type"] = content_type
        return self._response

    def write_status(self, status: HTTPStatus) -> HTTPResponse:
        """Write a bare status with an empty body (e.g. 204 No Content)."""
        return self.write(status)

    def write_json(self, data: Any, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
        """Serialize `data` as JSON and write it with `status`."""
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        return self.write(status, body, JSON_CONTENT_TYPE)

    def write_response(self, response: HTTPResponse) -> HTTPResponse:
        """Copy a prebuilt response (status, body, headers) into the writer."""
        self.headers.update(response.headers)
        return self.write(response.status, response.body)
