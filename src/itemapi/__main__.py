"""
=============================================================================
ITEM API CLI ENTRY POINT
=============================================================================

Command-line interface for running the item API server.

=============================================================================
USAGE
=============================================================================

    # Run with defaults (localhost:8080, sample items)
    python -m itemapi

    # Custom port, empty store
    python -m itemapi --port 3000 --no-seed

    # Listen on all interfaces (for containers)
    python -m itemapi --host 0.0.0.0

    # Only one browser origin, JSON access log
    python -m itemapi --cors-origin https://app.example --log-format json

Defaults come from HTTP_* environment variables (see itemapi.config);
flags given on the command line win.

=============================================================================
"""

import argparse
import logging
import sys

from . import __version__
from .config import ServerConfig, LOG_LEVELS, LOG_FORMATS
from .server import ItemServer, configure_logging


logger = logging.getLogger("itemapi")


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="itemapi",
        description="In-memory items CRUD server with a JSON API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m itemapi                           # Run with defaults
  python -m itemapi --port 3000               # Custom port
  python -m itemapi --host 0.0.0.0            # Listen on all interfaces
  python -m itemapi --no-seed                 # Start with an empty store
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host}, use 0.0.0.0 for containers)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.timeout,
        help=f"Socket timeout in seconds (default: {defaults.timeout})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level,
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # APPLICATION ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--cors-origin",
        dest="cors_origins",
        action="append",
        default=None,
        metavar="ORIGIN",
        help="Origin allowed by CORS, repeatable (default: %s)" % ",".join(defaults.cors_origins)
    )

    parser.add_argument(
        "--no-seed",
        dest="seed",
        action="store_false",
        default=defaults.seed,
        help="Start with an empty store instead of sample items"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"itemapi {__version__}"
    )

    return parser


def config_from_args(argv=None) -> ServerConfig:
    """Parse argv on top of the environment defaults."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        keep_alive=defaults.keep_alive,
        log_level=args.log_level,
        log_format=args.log_format,
        cors_origins=args.cors_origins or defaults.cors_origins,
        seed=args.seed,
    )


def main(argv=None) -> int:
    """Main CLI entry point."""
    try:
        config = config_from_args(argv)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config)

    try:
        server = ItemServer(config)
        server.serve_forever()
    except OSError as e:
        logger.error(f"Could not start server: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
