"""
=============================================================================
HTTP REQUEST
=============================================================================

The request object handed to middleware and handlers.

The host runtime (itemapi.server) does the byte-level parsing. By the time
a request gets here it is already split into method, path, headers and
body; this module only gives those parts a convenient shape.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      HTTPRequest ATTRIBUTES                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   method          "PUT"                                             │
    │   path            "/items/7"          (no query string)             │
    │   headers         {"content-type": "application/json", ...}         │
    │                   keys are lowercase (headers are case-insensitive) │
    │   query_params    {"page": ["2"]}                                   │
    │   body            b'{"title": "x", "completed": true}'              │
    │   path_params     {"id": "7"}         (filled in by the router)     │
    │   client_address  ("127.0.0.1", 53122)                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple
from urllib.parse import parse_qs, urlparse, unquote
import json

from .errors import BadRequest


@dataclass
class HTTPRequest:
    """
    Represents an incoming HTTP request.

    Path parameters are always strings. Converting them (for example an
    item id to int) is the handler's job.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    # Set by the dispatcher after a route matches
    path_params: Dict[str, str] = field(default_factory=dict)

    client_address: Tuple[str, int] = ("", 0)

    # Path as sent, still percent-encoded. Routing matches on this so an
    # encoded "/" stays inside its segment. Defaults to `path`.
    raw_path: Optional[str] = None

    _body_json: Optional[Any] = field(default=None, repr=False)

    def __post_init__(self):
        if self.raw_path is None:
            self.raw_path = self.path

    @classmethod
    def from_target(
        cls,
        method: str,
        target: str,
        headers: Optional[Dict[str, str]] = None,
        body: bytes = b"",
        client_address: Tuple[str, int] = ("", 0),
        version: str = "HTTP/1.1",
    ) -> "HTTPRequest":
        """
        Build a request from a raw request target ("/items/1?x=y").

        Splits off the query string and lowercases header names. `path` is
        percent-decoded; `raw_path` keeps the encoded form for routing.
        """
        parsed = urlparse(target)
        return cls(
            method=method.upper(),
            path=unquote(parsed.path) or "/",
            raw_path=parsed.path or "/",
            version=version,
            headers={name.lower(): value for name, value in (headers or {}).items()},
            query_params=parse_qs(parsed.query, keep_blank_values=True),
            body=body,
            client_address=client_address,
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def content_type(self) -> Optional[str]:
        """Content-Type without parameters ("application/json")."""
        ct = self.headers.get("content-type", "")
        return ct.split(";")[0].strip().lower() or None

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_json(self) -> bool:
        return self.content_type == "application/json"

    @property
    def json(self) -> Any:
        """
        The body decoded as JSON (parsed once, then cached).

        Raises:
            BadRequest: The body is empty or not valid UTF-8 JSON.
        """
        if self._body_json is None:
            if not self.body.strip():
                raise BadRequest("request body is empty")
            try:
                self._body_json = json.loads(self.body.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise BadRequest(f"invalid JSON body: {e}")
        return self._body_json

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of a query parameter."""
        values = self.query_params.get(name, [])
        return values[0] if values else default
