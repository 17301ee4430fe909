"""
pytest configuration and fixtures.
"""

from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from itemapi import ItemServer, ItemStore, ServerConfig, create_app
from itemapi.http.dispatcher import Dispatcher


@pytest.fixture
def store() -> ItemStore:
    """Empty store."""
    return ItemStore()


@pytest.fixture
def seeded_store() -> ItemStore:
    """Store with the three sample items (ids 1-3)."""
    return ItemStore.with_samples()


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        log_level="WARNING",
        seed=False,
    )


@pytest.fixture
def app(store: ItemStore, config: ServerConfig) -> Dispatcher:
    """Application bound to the empty `store` fixture."""
    return create_app(store=store, config=config)


@pytest.fixture
def live_server(config: ServerConfig) -> Generator[ItemServer, None, None]:
    """A real server on a free port, seeded with the sample items."""
    server = ItemServer(config, store=ItemStore.with_samples())
    server.start()

    yield server

    server.shutdown()
