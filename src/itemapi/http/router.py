"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) pairs to handler functions and extracts path
parameters. The router only matches; running the handler is the
dispatcher's job (see dispatcher.py). That keeps route tables easy to
build and test without any business logic attached.

=============================================================================
PATH PATTERNS
=============================================================================

    Pattern            Path              Params
    ─────────────────  ────────────────  ─────────────────
    /items             /items            {}
    /items/{id}        /items/42         {"id": "42"}
    /items/:id         /items/abc        {"id": "abc"}
    /items/{id}        /items            no match
    /items/{id}        /items/4/x        no match

Literal segments must match exactly. A parameter segment, written {name}
or :name, matches any one non-empty segment and captures its text. No
type conversion happens here: "42" stays a string.

Trailing slashes are ignored on both sides: /items/ matches /items.

Matching runs on the still-encoded path, so /items/%2F is one segment
(id "/") and never collapses into /items. Captured values are decoded.

=============================================================================
MATCHING ORDER
=============================================================================

Routes are tried in registration order and the first match wins, so
register /items/summary before /items/{id}. Groups (sub-routers) are
tried after the router's own routes.

If nothing matches for the request method but the path matches routes
registered for other methods, allowed_methods() lists them. The
dispatcher uses this to answer 405 instead of 404.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, Any, List, Tuple
from urllib.parse import unquote
import re

from .request import HTTPRequest
from .response import ResponseWriter


# Handler: takes the request and a response writer, returns an outcome
# (or None after writing the response itself)
Handler = Callable[[HTTPRequest, ResponseWriter], Any]

_PARAM_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class Route:
    """
    A registered route: pattern + method + handler.

        Route(
            path="/items/{id}",
            method="GET",
            handler=get_item,
            _pattern=re.compile(r"^/items/(?P<id>[^/]+)$"),
            _param_names=["id"],
        )
    """

    path: str
    method: Optional[str]            # None = any method
    handler: Handler
    name: Optional[str] = None

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """The matched route plus the captured path parameters."""
    route: Route
    params: Dict[str, str]


def normalize_path(path: str) -> str:
    """Ensure a leading slash and drop trailing ones ("/items/" → "/items")."""
    return "/" + path.strip("/") if path != "/" else "/"


def compile_pattern(path: str) -> Tuple[re.Pattern, List[str]]:
    """
    Compile a path pattern into an anchored regex.

        "/items/{id}"  →  ^/items/(?P<id>[^/]+)$,  ["id"]

    Raises:
        ValueError: A parameter name is not a valid identifier or is used
            twice in the same pattern.
    """
    param_names: List[str] = []
    regex_parts = ["^"]

    for segment in path.split("/"):
        if not segment:
            continue

        regex_parts.append("/")

        if segment.startswith(":"):
            param_name = segment[1:]
        elif segment.startswith("{") and segment.endswith("}"):
            param_name = segment[1:-1]
        else:
            # Static segment: exact match
            regex_parts.append(re.escape(segment))
            continue

        if not _PARAM_NAME.match(param_name):
            raise ValueError(f"Invalid parameter name {param_name!r} in pattern {path!r}")
        if param_name in param_names:
            raise ValueError(f"Duplicate parameter {param_name!r} in pattern {path!r}")

        # One non-empty segment, captured under its name
        param_names.append(param_name)
        regex_parts.append(f"(?P<{param_name}>[^/]+)")

    if len(regex_parts) == 1:
        regex_parts.append("/")  # Root pattern
    regex_parts.append("$")

    return re.compile("".join(regex_parts)), param_names


class Router:
    """
    HTTP request router with named path parameters.

        router = Router()

        @router.get("/items")
        def list_items(request, writer):
            return ok(store.get_all())

        items = router.group("/items")

        @items.get("/{id}")
        def get_item(request, writer):
            item_id = request.path_params["id"]   # still a string
            ...

    Once frozen (the dispatcher freezes it before serving the first
    request) the table is read-only, so lookups need no locking.
    """

    def __init__(self, prefix: str = ""):
        self.prefix = prefix.rstrip("/")
        self._routes: List[Route] = []
        self._sub_routers: List[Tuple[str, "Router"]] = []
        self._frozen = False

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: Pattern relative to this router's prefix ("" for the
                  prefix itself)
            handler: Callable taking (request, writer)
            method: HTTP method, or None for any method
            name: Optional route name (shows up in logs and routes())

        Raises:
            RuntimeError: The router is frozen.
        """
        self._check_not_frozen()

        full_path = normalize_path(self.prefix + path)
        pattern, param_names = compile_pattern(full_path)

        route = Route(
            path=full_path,
            method=method.upper() if method else None,
            handler=handler,
            name=name,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)
        return route

    def route(
        self,
        path: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of add_route(). Returns the handler unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET", name)

    def post(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST", name)

    def put(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a PUT route."""
        return self.route(path, "PUT", name)

    def delete(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a DELETE route."""
        return self.route(path, "DELETE", name)

    def group(self, prefix: str) -> "Router":
        """
        Create a sub-router whose routes all live under `prefix`.

            items = router.group("/items")
            items.get("")(list_items)        # GET /items
            items.get("/{id}")(get_item)     # GET /items/{id}
        """
        self._check_not_frozen()
        sub_router = Router(self.prefix + prefix)
        self._sub_routers.append((prefix, sub_router))
        return sub_router

    # =========================================================================
    # FREEZING
    # =========================================================================

    def freeze(self) -> None:
        """Make this router and its groups read-only."""
        self._frozen = True
        for _, sub_router in self._sub_routers:
            sub_router.freeze()

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_not_frozen(self) -> None:
        if self._frozen:
            raise RuntimeError("Routes cannot be added after the router is frozen")

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching `method` and `path`.

        `path` is the request path as sent (percent-encoded). Segments are
        split before decoding, so "%2F" never acts as a separator; captured
        parameters are decoded afterwards.

        Returns:
            RouteMatch with captured params, or None.
        """
        path = normalize_path(path)
        method = method.upper()

        for route in self._routes:
            if route.method and route.method != method:
                continue
            if route._pattern:
                found = route._pattern.match(path)
                if found:
                    params = {name: unquote(value) for name, value in found.groupdict().items()}
                    return RouteMatch(route=route, params=params)

        for _, sub_router in self._sub_routers:
            result = sub_router.match(method, path)
            if result:
                return result

        return None

    def allowed_methods(self, path: str) -> List[str]:
        """
        Methods registered for `path`, sorted.

        Empty when no route matches the path at all.
        """
        path = normalize_path(path)
        methods = set()

        for route in self.routes():
            if route._pattern and route._pattern.match(path):
                if route.method is None:
                    return ["DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"]
                methods.add(route.method)

        return sorted(methods)

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def routes(self) -> List[Route]:
        """All routes, including those of groups, in matching order."""
        all_routes = list(self._routes)
        for _, sub_router in self._sub_routers:
            all_routes.extend(sub_router.routes())
        return all_routes

    def describe(self) -> List[str]:
        """One "METHOD  /path" line per route, for startup logs."""
        return [f"{route.method or 'ANY':8} {route.path}" for route in self.routes()]
