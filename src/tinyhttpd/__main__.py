"""
=============================================================================
TINYHTTPD CLI ENTRY POINT
=============================================================================

    # Defaults (127.0.0.1:4221, no file routes)
    python -m tinyhttpd

    # Serve /files/ from a directory
    python -m tinyhttpd --directory /tmp/data

    # Byte-compatible with clients of the old server
    python -m tinyhttpd --body-read-mode buffered --legacy-header-endings

Flags override the TINYHTTPD_* environment variables, which override the
built-in defaults.

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .server import HTTPServer
from .config import ServerConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Minimal HTTP/1.1 server with echo, user-agent and file routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttpd                           # Run with defaults
  python -m tinyhttpd --directory /tmp/data     # Enable /files/
  python -m tinyhttpd --port 8080 --host 0.0.0.0
  python -m tinyhttpd --log-format json         # JSON access log
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Per-connection socket timeout (default: none)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        metavar="DIR",
        help="Base directory for GET/POST /files/<name>"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PROTOCOL ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--body-read-mode",
        choices=["exact", "buffered"],
        default=None,
        help="exact: read Content-Length bytes; buffered: take what has arrived (default: exact)"
    )

    parser.add_argument(
        "--legacy-header-endings",
        action="store_true",
        default=None,
        help="End Content-Type/Content-Length with a bare LF instead of CRLF"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then every flag the user actually passed."""
    overrides = {
        name: value
        for name, value in (
            ("host", args.host),
            ("port", args.port),
            ("timeout", args.timeout),
            ("directory", args.directory),
            ("body_read_mode", args.body_read_mode),
            ("legacy_header_endings", args.legacy_header_endings),
            ("log_level", args.log_level),
            ("log_format", args.log_format),
        )
        if value is not None
    }
    return ServerConfig.from_env(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        logging.getLogger("tinyhttpd").error(f"Server failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
