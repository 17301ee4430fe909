"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One log line per request, emitted on the "itemapi.access" logger so it can
be routed separately from application logs:

    logging.getLogger("itemapi.access").addHandler(file_handler)

Two formats:

    text   127.0.0.1 - - [18/Oct/2026:10:04:11 +0000] "POST /items" 201 47 0.41ms
    json   {"request_id": "3f2a9c1e", "method": "POST", "path": "/items", ...}

Every response also gets an X-Request-ID header so a client can quote it
when reporting a problem.

=============================================================================
"""

import time
import json
import uuid
import logging
from typing import Optional
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("itemapi.access")


@dataclass
class RequestLog:
    """Structured access-log entry."""

    request_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Apache-style line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware. Add it first so it sees every request,
    including preflights answered by CORSMiddleware.

    Args:
        log_format: "text" or "json"
        include_request_id: Add X-Request-ID to responses
        log_level: Level used for access lines
        skip_paths: Paths not to log
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {log_format!r}")
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = uuid.uuid4().hex[:8]
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            # Logged here, handled (and answered) by the host
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        if self.include_request_id:
            response.headers["X-Request-ID"] = request_id

        if request.path in self.skip_paths:
            return response

        log_entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
