"""
=============================================================================
CLI ENTRY POINT
=============================================================================

Run the file server from the command line:

    python -m fileserver                          # uses ./config.json
    python -m fileserver --config site.json
    python -m fileserver --root /srv/www --port 8080
    fileserver --root . --strict-paths            # console script

Configuration precedence, lowest to highest:

    defaults  <  config file  <  command-line flags

=============================================================================
"""

import argparse
import os
import sys
from typing import List, Optional

from . import __version__
from .config import ConfigError, LOG_FORMATS, LOG_LEVELS, ServerConfig
from .server import FileServer


DEFAULT_CONFIG_FILE = "config.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fileserver",
        description="Serve files, directory listings and rendered markdown over HTTP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fileserver                               # Read ./config.json
  fileserver --config site.json            # Explicit config file
  fileserver --root /srv/www --port 8080   # No config file needed
  fileserver --root . --strict-paths       # Reject symlinks leaving the root
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--config", "-c",
        default=None,
        help=f"JSON config file (default: ./{DEFAULT_CONFIG_FILE} if present)",
    )
    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Document root; overrides root_directory from the config file",
    )
    parser.add_argument(
        "--strict-paths",
        action="store_true",
        default=None,
        help="Also reject paths whose real location is outside the root",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", default=None, help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port to listen on (default: 3000)")
    parser.add_argument(
        "--max-connections",
        type=int,
        default=None,
        help="Limit connections handled at once (default: unbounded)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)",
    )

    parser.add_argument("--version", "-v", action="version", version=f"fileserver {__version__}")
    return parser


def load_config(args: argparse.Namespace) -> ServerConfig:
    """
    Build the effective configuration from a config file and CLI flags.

    Raises:
        ConfigError: If the config file is unreadable or a value is invalid.
    """
    config_path = args.config
    if config_path is None and os.path.isfile(DEFAULT_CONFIG_FILE):
        config_path = DEFAULT_CONFIG_FILE

    if config_path is not None:
        config = ServerConfig.from_json_file(config_path)
    elif args.root is None:
        raise ConfigError(
            f"no {DEFAULT_CONFIG_FILE} found; pass --config FILE or --root DIR"
        )
    else:
        config = ServerConfig()

    root = os.path.abspath(args.root) if args.root is not None else None
    config = config.with_overrides(
        root_directory=root,
        host=args.host,
        port=args.port,
        strict_paths=args.strict_paths,
        max_connections=args.max_connections,
        log_level=args.log_level,
        log_format=args.log_format,
    )
    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
        server = FileServer(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
