"""
Main entry point for the ShipTrack application.

Usage:
    shiptrack init-db
    shiptrack serve --host 0.0.0.0 --port 3000
    shiptrack generate-id
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from shiptrack.utils.config import get_config

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for command-line runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def cmd_init_db(args) -> int:
    """Create database tables."""
    from shiptrack.services.database import configure_database, init_database

    try:
        engine = configure_database(get_config().database_url)
        init_database(engine)
        print(f"Database initialized: {get_config().database_url}")
        return 0
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        return 1


def cmd_serve(args) -> int:
    """Run the API server."""
    from shiptrack.web import create_app

    config = get_config()
    if not config.admin_password:
        logger.warning("SHIPTRACK_ADMIN_PASSWORD not set - admin sign-in is disabled")

    try:
        app = create_app(config)
    except Exception as e:
        logger.error(f"Failed to start application: {e}")
        return 1

    print(f"{config.app_name} v{config.app_version} ({config.environment})")
    print(f"API: http://{args.host}:{args.port}/api")
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


def cmd_generate_id(args) -> int:
    """Print a fresh tracking ID."""
    from shiptrack.services.tracking_id import generate_tracking_id

    print(generate_tracking_id(args.prefix or get_config().tracking_prefix))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shiptrack", description="Shipment tracking service"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init-db", help="Create database tables")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=3000, help="Port (default: 3000)")
    serve_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")

    id_parser = subparsers.add_parser("generate-id", help="Print a new tracking ID")
    id_parser.add_argument("--prefix", help="Tracking ID prefix (default from config)")

    return parser


def main(argv=None) -> int:
    """Parse arguments and dispatch to a command."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(get_config().log_level)

    commands = {
        "init-db": cmd_init_db,
        "serve": cmd_serve,
        "generate-id": cmd_generate_id,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
