"""
=============================================================================
SIMPLEHTTP CLI ENTRY POINT
=============================================================================

    # Serve ./www on port 8080
    python -m simplehttp

    # Custom port and document root
    python -m simplehttp --port 3000 --root ./public

    # Write a sample website into the document root, then exit
    python -m simplehttp --setup --root ./public

    # JSON access log for a log aggregator
    python -m simplehttp --log-format json

Defaults come from the environment (SIMPLEHTTP_PORT, SIMPLEHTTP_ROOT, ...,
see ServerConfig.from_env); command-line flags override them.

Exit status:
    0   --help, --version, --setup, or a signal-initiated shutdown
    1   the listening socket could not be bound, or --setup failed
    2   bad command-line arguments (argparse)

=============================================================================
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig, LOG_LEVELS, LOG_FORMATS
from .server import HTTPServer
from .sample_site import create_sample_site


logger = logging.getLogger("simplehttp")


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simplehttp",
        description="Minimal HTTP/1.1 static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m simplehttp                       # Serve ./www on port 8080
  python -m simplehttp -p 3000 -r ./public   # Custom port and root
  python -m simplehttp --setup               # Create a sample website
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # SERVER ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Document root to serve files from (default: ./www)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        type=str.upper,
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # ACTIONS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--setup",
        action="store_true",
        help="Create a sample website in the document root and exit"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"SimpleHTTP {__version__}"
    )

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment defaults, overridden by whatever flags were given."""
    overrides = {
        "port": args.port,
        "document_root": args.root,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return dataclasses.replace(ServerConfig.from_env(), **overrides)


def configure_logging(config: ServerConfig):
    """Configure the root logger, then the package logger level."""
    level = config.log_level_value

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("simplehttp").setLevel(level)


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Args:
        argv: Arguments without the program name. Defaults to sys.argv[1:].

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config)

    if args.setup:
        try:
            create_sample_site(config.document_root, server_name=config.server_name)
        except OSError:
            return 1
        print(f"Sample website created in {config.document_root}")
        return 0

    server = HTTPServer(config)
    try:
        server.start()
    except OSError as e:
        logger.error(f"Server failed to start: {e}")
        return 1

    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    sys.exit(main())
