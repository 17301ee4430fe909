"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Settings for the process around the core: where to listen, how long to
wait on a slow client, how to log, which origins may call the API.

Three ways to build one:

    ServerConfig()                          # development defaults
    ServerConfig(port=3000, seed=False)     # in code
    ServerConfig.from_env()                 # 12-factor style

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    HTTP_HOST           bind address              (127.0.0.1)
    HTTP_PORT           listen port, 0 = any free (8080)
    HTTP_TIMEOUT        socket timeout, seconds   (15)
    HTTP_KEEP_ALIVE     reuse connections         (true)
    HTTP_LOG_LEVEL      DEBUG/INFO/WARNING/ERROR  (INFO)
    HTTP_LOG_FORMAT     access log: text or json  (text)
    HTTP_CORS_ORIGINS   comma separated origins   (*)
    HTTP_SEED           start with sample items   (true)

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if value is None:
        return list(default)
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class ServerConfig:
    """
    Configuration for the item server.

    Development:
        ServerConfig(log_level="DEBUG")

    Container:
        ServerConfig(host="0.0.0.0", cors_origins=["https://app.example"])
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Bind address. "0.0.0.0" listens on every interface."""

    port: int = 8080
    """Listen port. 0 lets the OS pick a free one (tests use this)."""

    timeout: Optional[float] = 15.0
    """
    Socket timeout in seconds for reading a request and writing the
    response. None disables it (a slow client could then hold a thread
    forever).
    """

    keep_alive: bool = True
    """Speak HTTP/1.1 and keep connections open between requests."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: "text" (Apache-like) or "json"."""

    # ─────────────────────────────────────────────────────────────────────
    # APPLICATION
    # ─────────────────────────────────────────────────────────────────────

    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    """Origins allowed to call the API from a browser."""

    seed: bool = True
    """Start with a few sample items instead of an empty store."""

    server_name: str = "ItemAPI/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create configuration from HTTP_* environment variables."""
        timeout = os.getenv("HTTP_TIMEOUT", "15")
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            timeout=float(timeout) if timeout.lower() != "none" else None,
            keep_alive=_env_bool("HTTP_KEEP_ALIVE", True),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text").lower(),
            cors_origins=_env_list("HTTP_CORS_ORIGINS", ["*"]),
            seed=_env_bool("HTTP_SEED", True),
        )

    def validate(self) -> None:
        """
        Check the values before anything is started.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0 (or None)")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log format: {self.log_format}. Use 'text' or 'json'.")

        if not self.cors_origins:
            raise ValueError("cors_origins must list at least one origin (or '*')")
