"""
Infisical service CLI: entry point for all operations.

Usage:
    infisicalservice serve          # Start the HTTP service
    infisicalservice health         # Query a running service's /health
    infisicalservice version        # Show version
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys


def _configure_logging(level: str) -> None:
    from infisicalservice.api.middleware import CorrelationIdFilter

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(correlation_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(CorrelationIdFilter())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="infisicalservice",
        description="Infisical secrets management service with semantic action support.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 8093)")
    serve_parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")

    # health
    health_parser = subparsers.add_parser("health", help="Check a running service")
    health_parser.add_argument("--url", default=None, help="Service base URL")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from infisicalservice import __version__

        print(f"infisicalservice {__version__}")
        return 0

    if args.command == "serve":
        return _cmd_serve(args)
    elif args.command == "health":
        return _cmd_health(args)

    parser.print_help()
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    from infisicalservice.api import server
    from infisicalservice.config import get_config

    config = get_config()
    config = dataclasses.replace(
        config,
        host=args.host or config.host,
        port=args.port or config.port,
        log_level=(args.log_level or config.log_level).upper(),
    )
    _configure_logging(config.log_level)
    server.serve(config)
    return 0


def _cmd_health(args: argparse.Namespace) -> int:
    import httpx

    from infisicalservice.config import get_config

    base = (args.url or get_config().public_url).rstrip("/")
    try:
        r = httpx.get(f"{base}/health", timeout=5.0)
    except httpx.HTTPError as e:
        print(f"{base}/health unreachable: {e}", file=sys.stderr)
        return 1

    try:
        print(json.dumps(r.json(), indent=2))
    except ValueError:
        print(r.text)
    return 0 if r.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
