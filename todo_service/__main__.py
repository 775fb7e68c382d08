"""Entry point for running the Todo Service."""

import argparse
import logging
import sys

import uvicorn

from .config import LOG_LEVELS, get_settings

logger = logging.getLogger(__name__)


def create_arg_parser() -> argparse.ArgumentParser:
    """Command line flags; each one overrides its TODO_SERVICE_* variable."""
    parser = argparse.ArgumentParser(
        description="Todo Service - SQLite-backed todo list API"
    )
    parser.add_argument("--db", help="SQLite database path, or ':memory:'")
    parser.add_argument("--pool-size", type=int, help="Number of pooled connections")
    parser.add_argument(
        "--pool-timeout",
        type=float,
        help="Seconds to wait for a free connection",
    )
    parser.add_argument("--host", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to run on")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Logging level",
    )
    return parser


def main(argv=None):
    args = create_arg_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    if args.db is not None:
        settings.db_path = args.db
    if args.pool_size is not None:
        settings.pool_size = args.pool_size
    if args.pool_timeout is not None:
        settings.pool_timeout = args.pool_timeout
    if args.host is not None:
        settings.host = args.host
    if args.port is not None:
        settings.port = args.port
    if args.log_level is not None:
        settings.log_level = args.log_level

    if settings.pool_size < 1:
        print("Invalid configuration: pool size must be at least 1", file=sys.stderr)
        sys.exit(2)
    if settings.pool_timeout <= 0:
        print("Invalid configuration: pool timeout must be positive", file=sys.stderr)
        sys.exit(2)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Import here so logging is configured first
    from .server import create_app

    app = create_app(settings)
    logger.info(f"Starting Todo Service on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
