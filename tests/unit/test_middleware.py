"""
Unit tests for the middleware chain, CORS and access logging.
"""

from http import HTTPStatus
import json
import logging

import pytest

from itemapi.http.request import HTTPRequest
from itemapi.http.response import HTTPResponse, ResponseBuilder
from itemapi.middleware import (
    CORSConfig,
    CORSMiddleware,
    FunctionMiddleware,
    LoggingMiddleware,
    Middleware,
    MiddlewarePipeline,
    function_middleware,
)


def make_request(method: str = "GET", path: str = "/items", headers=None) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest.from_target(method, path, headers=headers,
                                   client_address=("10.0.0.1", 1234))


class CountingHandler:
    """Final handler that records how often it ran."""

    def __init__(self):
        self.calls = 0

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        self.calls += 1
        return ResponseBuilder().json({"ok": True}).build()


class Recorder(Middleware):
    """Appends its tag before and after calling next."""

    def __init__(self, tag: str, trace: list):
        self.tag = tag
        self.trace = trace

    def __call__(self, request, next):
        self.trace.append(f"{self.tag}:in")
        response = next(request)
        self.trace.append(f"{self.tag}:out")
        return response


class TestMiddlewarePipeline:
    """Tests for MiddlewarePipeline."""

    def test_empty_pipeline_calls_handler(self):
        """Test that no middleware means the handler itself."""
        handler = CountingHandler()
        wrapped = MiddlewarePipeline().wrap(handler)

        wrapped(make_request())

        assert handler.calls == 1

    def test_first_added_runs_outermost(self):
        """Test A → B → handler → B → A."""
        trace = []
        pipeline = MiddlewarePipeline()
        pipeline.use(Recorder("a", trace), Recorder("b", trace))

        pipeline.wrap(CountingHandler())(make_request())

        assert trace == ["a:in", "b:in", "b:out", "a:out"]
        assert len(pipeline) == 2
        assert [mw.tag for mw in pipeline] == ["a", "b"]

    def test_short_circuit(self):
        """Test that a middleware not calling next stops the chain."""
        handler = CountingHandler()

        @function_middleware
        def deny(request, next):
            return ResponseBuilder().status(HTTPStatus.FORBIDDEN).build()

        wrapped = MiddlewarePipeline().add(deny).wrap(handler)
        response = wrapped(make_request())

        assert response.status == HTTPStatus.FORBIDDEN
        assert handler.calls == 0

    def test_function_middleware_name(self):
        """Test names used in debug logs."""
        def add_header(request, next):
            response = next(request)
            response.set_header("X-Test", "1")
            return response

        mw = FunctionMiddleware(add_header)
        assert mw.name == "add_header"
        assert FunctionMiddleware(add_header, name="custom").name == "custom"

        response = MiddlewarePipeline().add(mw).wrap(CountingHandler())(make_request())
        assert response.headers["X-Test"] == "1"


class TestCORSMiddleware:
    """Tests for CORSMiddleware."""

    def test_preflight_short_circuits(self):
        """Test that OPTIONS is answered without reaching the handler."""
        handler = CountingHandler()
        wrapped = MiddlewarePipeline().add(CORSMiddleware()).wrap(handler)

        response = wrapped(make_request("OPTIONS", "/items", headers={
            "Origin": "https://app.example",
            "Access-Control-Request-Method": "POST",
        }))

        assert handler.calls == 0
        assert response.status == HTTPStatus.NO_CONTENT
        assert response.body == b""
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "POST" in response.headers["Access-Control-Allow-Methods"]
        assert response.headers["Access-Control-Max-Age"] == "86400"

    def test_preflight_for_unknown_path(self):
        """Test that preflights do not depend on routing."""
        handler = CountingHandler()
        wrapped = MiddlewarePipeline().add(CORSMiddleware()).wrap(handler)

        response = wrapped(make_request("OPTIONS", "/does/not/exist"))

        assert response.status == HTTPStatus.NO_CONTENT
        assert handler.calls == 0

    def test_simple_request_gets_headers(self):
        """Test that non-preflight responses are decorated."""
        handler = CountingHandler()
        wrapped = MiddlewarePipeline().add(CORSMiddleware()).wrap(handler)

        response = wrapped(make_request("GET", "/items", headers={"Origin": "https://x.example"}))

        assert handler.calls == 1
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "Vary" not in response.headers

    def test_specific_origin(self):
        """Test an allow-list: allowed origins are echoed with Vary."""
        cors = CORSMiddleware(CORSConfig(allow_origins=["https://app.example"]))
        wrapped = MiddlewarePipeline().add(cors).wrap(CountingHandler())

        allowed = wrapped(make_request(headers={"Origin": "https://app.example"}))
        denied = wrapped(make_request(headers={"Origin": "https://evil.example"}))

        assert allowed.headers["Access-Control-Allow-Origin"] == "https://app.example"
        assert allowed.headers["Vary"] == "Origin"
        assert "Access-Control-Allow-Origin" not in denied.headers

    def test_preflight_denied_origin(self):
        """Test that a disallowed preflight gets a bare 204."""
        cors = CORSMiddleware(CORSConfig(allow_origins=["https://app.example"]))
        handler = CountingHandler()
        wrapped = MiddlewarePipeline().add(cors).wrap(handler)

        response = wrapped(make_request("OPTIONS", headers={"Origin": "https://evil.example"}))

        assert response.status == HTTPStatus.NO_CONTENT
        assert "Access-Control-Allow-Methods" not in response.headers
        assert handler.calls == 0

    def test_echo_requested_headers(self):
        """Test that an empty allow_headers list echoes the request."""
        cors = CORSMiddleware(CORSConfig(allow_headers=[]))
        response = cors(
            make_request("OPTIONS", headers={"Access-Control-Request-Headers": "X-Custom"}),
            CountingHandler(),
        )
        assert response.headers["Access-Control-Allow-Headers"] == "X-Custom"

    def test_credentials(self):
        """Test that credentials echo the origin instead of "*"."""
        cors = CORSMiddleware(CORSConfig(allow_credentials=True))
        response = cors(make_request(headers={"Origin": "https://a.example"}), CountingHandler())

        assert response.headers["Access-Control-Allow-Origin"] == "https://a.example"
        assert response.headers["Access-Control-Allow-Credentials"] == "true"


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    def test_text_log_line(self, caplog):
        """Test the Apache-style access line and request id."""
        middleware = LoggingMiddleware()

        with caplog.at_level(logging.INFO, logger="itemapi.access"):
            response = middleware(make_request("GET", "/items"), CountingHandler())

        assert len(response.headers["X-Request-ID"]) == 8
        assert '"GET /items" 200' in caplog.text
        assert "10.0.0.1" in caplog.text

    def test_json_log_line(self, caplog):
        """Test structured output."""
        middleware = LoggingMiddleware(log_format="json")

        with caplog.at_level(logging.INFO, logger="itemapi.access"):
            middleware(make_request("GET", "/items"), CountingHandler())

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["method"] == "GET"
        assert entry["path"] == "/items"
        assert entry["status_code"] == 200

    def test_skip_paths(self, caplog):
        """Test paths excluded from the access log."""
        middleware = LoggingMiddleware(skip_paths=["/items"])

        with caplog.at_level(logging.INFO, logger="itemapi.access"):
            middleware(make_request("GET", "/items"), CountingHandler())

        assert caplog.records == []

    def test_exception_is_logged_and_reraised(self, caplog):
        """Test that failures propagate to the host."""
        def broken(request):
            raise RuntimeError("boom")

        middleware = LoggingMiddleware()
        with caplog.at_level(logging.ERROR, logger="itemapi.access"):
            with pytest.raises(RuntimeError):
                middleware(make_request(), broken)

        assert "Request failed" in caplog.text

    def test_unknown_format(self):
        """Test that a typo in the format fails early."""
        with pytest.raises(ValueError):
            LoggingMiddleware(log_format="xml")
