"""
=============================================================================
MINIHTTP CLI ENTRY POINT
=============================================================================

    # Defaults (127.0.0.1:8080, ./static)
    python -m minihttp

    # Custom port, all interfaces
    python -m minihttp --host 0.0.0.0 --port 3000

    # Serve another directory with more warm workers
    python -m minihttp --static ./public --workers 8

    # JSON access log, verbose diagnostics
    python -m minihttp --log-format json --log-level DEBUG

Flags override HTTP_* environment variables, which override the defaults
(see ServerConfig.from_env).

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import LOG_FORMATS, ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal threaded HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                      # Run with defaults
  python -m minihttp --port 3000          # Custom port
  python -m minihttp --host 0.0.0.0       # Listen on all interfaces
  python -m minihttp --static ./public    # Serve another directory
        """,
    )

    # Defaults are None so unset flags fall through to the environment
    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on, 0 for any free port (default: 8080)",
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Worker threads kept ready (default: 4)",
    )
    parser.add_argument(
        "--static", "-s",
        default=None,
        help="Directory served under /static/ (default: ./static)",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace, base: Optional[ServerConfig] = None) -> ServerConfig:
    """Layer parsed CLI arguments over a base config (the environment by default)."""
    config = base or ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.min_workers = args.workers
    if args.static is not None:
        config.static_dir = args.static
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
