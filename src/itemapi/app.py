"""
Application factory.

Builds the Dispatcher with its middleware and routes:

    LoggingMiddleware  →  CORSMiddleware  →  router  →  ItemHandlers

    app = create_app()                       # seeded store, default config
    app = create_app(store=ItemStore())      # bring your own store
    response = app(HTTPRequest(method="GET", path="/items"))
"""

from typing import Optional

from .config import ServerConfig
from .core.store import ItemStore
from .handlers.items import ItemHandlers
from .http.dispatcher import Dispatcher
from .middleware import LoggingMiddleware, CORSMiddleware, CORSConfig


def create_app(
    store: Optional[ItemStore] = None,
    config: Optional[ServerConfig] = None,
) -> Dispatcher:
    """
    Create the item API application.

    Args:
        store: The store the handlers use. When omitted a new one is made,
               seeded with sample items if config.seed is set.
        config: Server configuration (access log format, CORS origins).

    Returns:
        A Dispatcher, callable as app(request) -> HTTPResponse.
    """
    config = config or ServerConfig()
    if store is None:
        store = ItemStore.with_samples() if config.seed else ItemStore()

    app = Dispatcher()
    app.use(LoggingMiddleware(log_format=config.log_format))
    app.use(CORSMiddleware(CORSConfig(allow_origins=list(config.cors_origins))))

    ItemHandlers(store).register(app.router)
    return app
