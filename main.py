"""Command line entry point for the static file server."""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from staticserver import ConfigError, Settings, __version__, configure_logging, get_settings
from staticserver.config import parse_blacklist
from staticserver.server import build_server

LOGGER = logging.getLogger(__name__)


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simplewebserver",
        description="A very simple web server for hosting html files.",
    )
    parser.add_argument(
        "bindto",
        nargs="?",
        default=defaults.bind_address,
        help=f"Bind IP address (default: {defaults.bind_address})",
    )
    parser.add_argument(
        "port",
        nargs="?",
        type=int,
        default=defaults.port,
        help=f"Bind port (default: {defaults.port})",
    )
    parser.add_argument(
        "-r",
        "--ratelimit",
        type=int,
        default=defaults.rate_limit_requests,
        help="Maximum requests per minute before rate-limiting. 0 to disable",
    )
    parser.add_argument(
        "-d",
        "--timeout",
        type=int,
        default=defaults.penalty_seconds,
        help="Timeout in seconds after exceeding ratelimit",
    )
    parser.add_argument(
        "-b",
        "--blacklist",
        action="append",
        default=[],
        metavar="NAME",
        help="File name to never serve. Repeat or comma separate for several.",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=defaults.root,
        help="Directory to serve (default: current directory)",
    )
    parser.add_argument(
        "--log-file", default=defaults.log_file, help="Also write logs to this file"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--zerologs",
        action="store_true",
        default=defaults.quiet,
        help="Disable logging. For operators who must not store logs.",
    )
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=defaults.verbose,
        help="Use verbose output",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def settings_from_args(argv: Optional[List[str]] = None) -> Settings:
    """Overlay command line flags on the environment-derived settings."""

    defaults = get_settings()
    args = build_parser(defaults).parse_args(argv)
    blacklist = defaults.blacklist | parse_blacklist(args.blacklist)
    return dataclasses.replace(
        defaults,
        bind_address=args.bindto,
        port=args.port,
        rate_limit_requests=args.ratelimit,
        penalty_seconds=args.timeout,
        blacklist=blacklist,
        root=args.root,
        log_file=args.log_file,
        quiet=args.zerologs,
        verbose=args.verbose and not args.zerologs,
    )


def run(argv: Optional[List[str]] = None) -> int:
    try:
        settings = settings_from_args(argv)
    except ConfigError as exc:
        configure_logging()
        LOGGER.critical("invalid configuration: %s", exc)
        return 1

    configure_logging(verbose=settings.verbose, quiet=settings.quiet, log_file=settings.log_file)
    try:
        server = build_server(settings)
    except (ConfigError, OSError) as exc:
        LOGGER.critical("failed to start server: %s", exc)
        return 1

    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            LOGGER.info("shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(run())
