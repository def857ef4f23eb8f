"""
=============================================================================
WEB SERVER CLI ENTRY POINT
=============================================================================

USAGE
-----

    # Defaults (port 8080, ./wwwroot)
    python -m webserver

    # Custom port and web root
    python -m webserver 9000 ./public

    # Localhost only, with a read timeout for slow clients
    python -m webserver 9000 ./public --host 127.0.0.1 --timeout 30

Environment variables (HTTP_PORT, HTTP_WEB_ROOT, HTTP_HOST, HTTP_TIMEOUT,
HTTP_LOG_LEVEL) provide defaults; command-line arguments win.

EXIT CODES
----------

    0   Stopped normally (Ctrl+C / SIGTERM)
    1   Could not bind the port
    2   Invalid configuration (e.g. port <= 1024)

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig, ConfigurationError
from .server import WebServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webserver",
        description="Threaded HTTP/1.0 static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webserver                        # Port 8080, ./wwwroot
  python -m webserver 9000                   # Custom port
  python -m webserver 9000 ./public          # Custom port and web root
  python -m webserver --host 127.0.0.1       # Localhost only
        """
    )

    parser.add_argument(
        "port",
        nargs="?",
        type=int,
        default=None,
        help="Port to listen on, must be > 1024 (default: 8080)"
    )

    parser.add_argument(
        "web_root",
        nargs="?",
        default=None,
        help="Directory to serve (default: wwwroot)"
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Address to bind to (default: 0.0.0.0, all interfaces)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Client read timeout in seconds (default: none)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webserver {__version__}"
    )

    return parser


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)

    try:
        config = ServerConfig.from_env()

        # CLI arguments override the environment
        if args.port is not None:
            config.port = args.port
        if args.web_root is not None:
            config.web_root = args.web_root
        if args.host is not None:
            config.host = args.host
        if args.timeout is not None:
            config.timeout = args.timeout
        if args.log_level is not None:
            config.log_level = args.log_level

        server = WebServer(config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.start()  # Blocks until Ctrl+C / SIGTERM
    except OSError as e:
        print(f"Error: could not start server on port {config.port}: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
