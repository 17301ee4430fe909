"""
Unit tests for URL router.
"""

import pytest

from itemapi.http.router import Router, compile_pattern, normalize_path
from itemapi.http.outcome import ok


def dummy_handler(request, writer):
    """Dummy handler for testing."""
    return ok({"path": request.path})


class TestCompilePattern:
    """Tests for pattern compilation."""

    def test_brace_and_colon_params(self):
        """Test both parameter syntaxes."""
        pattern, names = compile_pattern("/items/{id}")
        assert names == ["id"]
        assert pattern.match("/items/7").groupdict() == {"id": "7"}

        pattern, names = compile_pattern("/items/:id")
        assert names == ["id"]
        assert pattern.match("/items/abc").groupdict() == {"id": "abc"}

    def test_param_matches_single_segment(self):
        """Test that a parameter never spans a slash or matches empty."""
        pattern, _ = compile_pattern("/items/{id}")
        assert pattern.match("/items/1/2") is None
        assert pattern.match("/items/") is None

    def test_root_pattern(self):
        """Test that "/" compiles to the root only."""
        pattern, names = compile_pattern("/")
        assert names == []
        assert pattern.match("/")
        assert pattern.match("/items") is None

    def test_invalid_param_name(self):
        """Test that parameter names must be identifiers."""
        with pytest.raises(ValueError):
            compile_pattern("/items/{1d}")

    def test_duplicate_param_name(self):
        """Test that a name may appear once per pattern."""
        with pytest.raises(ValueError):
            compile_pattern("/a/{id}/b/{id}")

    def test_normalize_path(self):
        """Test leading and trailing slash handling."""
        assert normalize_path("items/") == "/items"
        assert normalize_path("/items") == "/items"
        assert normalize_path("/") == "/"


class TestRouter:
    """Tests for Router class."""

    def test_add_route(self):
        """Test adding routes."""
        router = Router()
        route = router.add_route("/items", dummy_handler, method="get", name="list")

        assert route.path == "/items"
        assert route.method == "GET"
        assert route.name == "list"
        assert router.routes() == [route]

    def test_match_with_method(self):
        """Test method-based routing."""
        router = Router()
        router.add_route("/items", dummy_handler, method="GET")
        router.add_route("/items", dummy_handler, method="POST")

        assert router.match("GET", "/items").route.method == "GET"
        assert router.match("POST", "/items").route.method == "POST"
        assert router.match("DELETE", "/items") is None

    def test_match_dynamic_params(self):
        """Test that parameters are captured as strings."""
        router = Router()
        router.add_route("/items/{id}", dummy_handler, method="GET")
        router.add_route("/users/:user_id/posts/:post_id", dummy_handler, method="GET")

        assert router.match("GET", "/items/123").params == {"id": "123"}
        assert router.match("GET", "/users/4/posts/9").params == {
            "user_id": "4",
            "post_id": "9",
        }

    def test_trailing_slash_is_ignored(self):
        """Test that /items/ matches /items."""
        router = Router()
        router.add_route("/items", dummy_handler, method="GET")
        assert router.match("GET", "/items/") is not None

    def test_first_match_wins(self):
        """Test registration order decides between overlapping routes."""
        router = Router()

        @router.get("/items/latest", name="latest")
        def latest(request, writer):
            return ok(None)

        router.add_route("/items/{id}", dummy_handler, method="GET", name="by_id")

        assert router.match("GET", "/items/latest").route.name == "latest"
        assert router.match("GET", "/items/5").route.name == "by_id"

    def test_any_method_route(self):
        """Test that method=None matches every method."""
        router = Router()
        router.add_route("/anything", dummy_handler)

        assert router.match("PATCH", "/anything") is not None
        assert router.match("GET", "/anything") is not None

    def test_decorator_returns_handler(self):
        """Test that route decorators leave the function usable."""
        router = Router()

        @router.post("/items")
        def create(request, writer):
            return ok(None)

        assert callable(create)
        assert router.match("POST", "/items").route.handler is create

    def test_no_match(self):
        """Test unknown paths."""
        router = Router()
        router.add_route("/items", dummy_handler, method="GET")
        assert router.match("GET", "/nothing") is None

    def test_encoded_slash_stays_in_segment(self):
        """Test that %2F is captured, not treated as a separator."""
        router = Router()
        router.add_route("/items", dummy_handler, method="GET", name="list")
        router.add_route("/items/{id}", dummy_handler, method="GET", name="one")

        match = router.match("GET", "/items/%2F")

        assert match.route.name == "one"
        assert match.params == {"id": "/"}

    def test_params_are_decoded(self):
        """Test that captured values are percent-decoded."""
        router = Router()
        router.add_route("/items/{id}", dummy_handler, method="GET")

        assert router.match("GET", "/items/a%20b").params == {"id": "a b"}


class TestRouterGroups:
    """Tests for route groups."""

    def test_group_prefix(self):
        """Test that group routes live under the prefix."""
        router = Router()
        items = router.group("/items")
        items.get("")(dummy_handler)
        items.get("/{id}")(dummy_handler)

        assert router.match("GET", "/items") is not None
        assert router.match("GET", "/items/3").params == {"id": "3"}
        assert [route.path for route in router.routes()] == ["/items", "/items/{id}"]

    def test_nested_groups(self):
        """Test groups inside groups."""
        router = Router()
        v1 = router.group("/api/v1")
        items = v1.group("/items")
        items.delete("/{id}")(dummy_handler)

        match = router.match("DELETE", "/api/v1/items/9")
        assert match is not None
        assert match.route.path == "/api/v1/items/{id}"

    def test_allowed_methods(self):
        """Test the method list used for 405 answers."""
        router = Router()
        items = router.group("/items")
        items.get("")(dummy_handler)
        items.post("")(dummy_handler)
        items.put("/{id}")(dummy_handler)
        items.delete("/{id}")(dummy_handler)

        assert router.allowed_methods("/items") == ["GET", "POST"]
        assert router.allowed_methods("/items/1") == ["DELETE", "PUT"]
        assert router.allowed_methods("/missing") == []

    def test_describe(self):
        """Test the startup route listing."""
        router = Router()
        router.get("/items")(dummy_handler)
        assert router.describe() == ["GET      /items"]


class TestRouterFreeze:
    """Tests for freezing."""

    def test_frozen_router_rejects_routes(self):
        """Test that registration after freeze raises."""
        router = Router()
        items = router.group("/items")
        router.freeze()

        assert router.frozen
        assert items.frozen
        with pytest.raises(RuntimeError):
            router.add_route("/late", dummy_handler)
        with pytest.raises(RuntimeError):
            items.get("/late")(dummy_handler)
        with pytest.raises(RuntimeError):
            router.group("/late")

    def test_frozen_router_still_matches(self):
        """Test that lookups work after freezing."""
        router = Router()
        router.get("/items")(dummy_handler)
        router.freeze()
        assert router.match("GET", "/items") is not None
