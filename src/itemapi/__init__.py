"""
=============================================================================
ITEMAPI - In-Memory Items CRUD Server
=============================================================================

A small JSON API over a thread-safe in-memory store:

    GET /items   GET /items/{id}   POST /items   PUT /items/{id}   DELETE /items/{id}

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    itemapi/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m itemapi)
    ├── app.py               # create_app(): middleware + routes
    ├── server.py            # ItemServer on ThreadingHTTPServer
    ├── config.py            # ServerConfig dataclass
    ├── core/                # State
    │   ├── locks.py         # Readers-writer lock
    │   └── store.py         # Item, ItemStore
    ├── http/                # Request/response plumbing
    │   ├── request.py       # HTTPRequest
    │   ├── response.py      # HTTPResponse, ResponseBuilder, ResponseWriter
    │   ├── errors.py        # HTTPError and status-tagged subclasses
    │   ├── outcome.py       # Success / Failure handler results
    │   ├── translator.py    # Outcome → HTTP response
    │   ├── router.py        # Route table and groups
    │   └── dispatcher.py    # Route → middleware → handler → translator
    ├── middleware/
    │   ├── base.py          # Middleware, MiddlewarePipeline
    │   ├── cors.py          # CORS and preflight
    │   └── logging.py       # Access log
    └── handlers/
        └── items.py         # /items handlers

=============================================================================
QUICK START
=============================================================================

    from itemapi import ItemServer, ServerConfig

    ItemServer(ServerConfig(port=8080)).serve_forever()

    # In-process, no socket:
    from itemapi import create_app
    from itemapi.http import HTTPRequest

    app = create_app()
    response = app(HTTPRequest.from_target("GET", "/items/1"))

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .core.store import Item, ItemStore
from .http.dispatcher import Dispatcher
from .app import create_app
from .server import ItemServer, configure_logging

__all__ = [
    "__version__",
    "ServerConfig",
    "Item",
    "ItemStore",
    "Dispatcher",
    "create_app",
    "ItemServer",
    "configure_logging",
]
