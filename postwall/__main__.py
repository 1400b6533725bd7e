"""
PostWall - Main entry point.

Usage:
    python -m postwall [--host HOST] [--port PORT] [--reload]

Configuration is entirely via environment variables (or a .env file).
See config.py for all available settings.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from .config import Settings
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="postwall", description="Run the PostWall HTTP server")
    parser.add_argument("--host", help="Bind host (overrides HOST)")
    parser.add_argument("--port", type=int, help="Bind port (overrides PORT)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    settings = Settings()
    setup_logging(settings)

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info(f"Starting PostWall on {host}:{port} (database {settings.db_endpoint})")

    uvicorn.run(
        "postwall.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
