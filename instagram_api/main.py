#!/usr/bin/env python3
"""
Instagram API client - command line entry point.

Credentials come from the environment:
    INSTAGRAM_CLIENT_ID, INSTAGRAM_CLIENT_SECRET, INSTAGRAM_REDIRECT_URI,
    INSTAGRAM_SCOPE, INSTAGRAM_ACCESS_TOKEN

Usage:
    python -m instagram_api.main <command> [options]

Examples:
    python -m instagram_api.main login-url --scope likes comments
    python -m instagram_api.main exchange <code>
    python -m instagram_api.main user self
    python -m instagram_api.main tag-media sunset --limit 20 --pages 3
"""

import argparse
import json
import logging
import sys
from typing import Any, Optional

from .client import InstagramClient
from .config import ClientConfig, TransportConfig
from .exceptions import InstagramError


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    # Reduce noise from httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def key_value(pair: str) -> tuple[str, str]:
    """Parse a KEY=VALUE command line parameter."""
    key, sep, value = pair.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {pair!r}")
    return key, value


def collect_pages(
    client: InstagramClient,
    envelope: Any,
    pages: int,
    limit: Optional[int] = None,
) -> list[Any]:
    """Return the first envelope plus up to ``pages - 1`` following pages."""
    results = [envelope]
    if pages > 1:
        results.extend(client.iter_pages(envelope, limit=limit, max_pages=pages - 1))
    return results


def run_command(client: InstagramClient, args: argparse.Namespace) -> Any:
    """Dispatch a parsed command to the client."""
    if args.command == "login-url":
        return client.get_login_url(scope=args.scope, state=args.state)

    if args.command == "exchange":
        return client.get_oauth_token(args.code).model_dump()

    if args.command == "user":
        user_id = None if args.user_id == "self" else args.user_id
        return client.get_user(user_id)

    if args.command == "call":
        params = dict(args.param)
        envelope = client.call(args.path, args.auth, params, args.method)
    elif args.command == "user-media":
        envelope = client.get_user_media(args.user_id, limit=args.limit)
    elif args.command == "tag-media":
        envelope = client.get_tag_media(args.tag, limit=args.limit)
    elif args.command == "search-user":
        envelope = client.search_user(args.query, limit=args.limit)
    elif args.command == "search-location":
        envelope = client.search_location(args.lat, args.lng, distance=args.distance)
    else:
        raise ValueError(f"Unknown command: {args.command}")

    if args.pages > 1:
        return collect_pages(client, envelope, args.pages, args.limit)
    return envelope


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Call the Instagram v1 API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m instagram_api.main login-url --state xyz
    python -m instagram_api.main user-media 1574083 --limit 10
    python -m instagram_api.main call users/self/feed --auth --param count=5
        """,
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Overall request timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Disable TLS certificate verification (test servers only)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login-url", help="Print the OAuth login URL")
    login.add_argument("--scope", nargs="*", default=None)
    login.add_argument("--state", default=None)

    exchange = sub.add_parser("exchange", help="Exchange an OAuth code for a token")
    exchange.add_argument("code")

    user = sub.add_parser("user", help="Get a user (or 'self')")
    user.add_argument("user_id", nargs="?", default="self")

    paged = argparse.ArgumentParser(add_help=False)
    paged.add_argument("--limit", type=int, default=None, help="Page size")
    paged.add_argument("--pages", type=int, default=1, help="Number of pages to fetch")

    call = sub.add_parser("call", parents=[paged], help="Call any resource path")
    call.add_argument("path")
    call.add_argument("--method", default="GET", choices=["GET", "POST", "DELETE"])
    call.add_argument("--auth", action="store_true", help="Send the access token")
    call.add_argument(
        "--param", action="append", default=[], type=key_value, metavar="KEY=VALUE"
    )

    media = sub.add_parser("user-media", parents=[paged], help="Recent media of a user")
    media.add_argument("user_id", nargs="?", default="self")

    tag = sub.add_parser("tag-media", parents=[paged], help="Recent media for a tag")
    tag.add_argument("tag")

    search = sub.add_parser("search-user", parents=[paged], help="Search users")
    search.add_argument("query")

    location = sub.add_parser("search-location", parents=[paged], help="Search locations")
    location.add_argument("lat", type=float)
    location.add_argument("lng", type=float)
    location.add_argument("--distance", type=int, default=1000)

    return parser


def main(argv: Optional[list[str]] = None):
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    # Setup logging
    setup_logging(args.verbose)

    transport_config = TransportConfig(
        request_timeout=args.timeout,
        verify_tls=not args.insecure,
    )

    try:
        config = ClientConfig.from_env()
        with InstagramClient(config, transport_config=transport_config) as client:
            result = run_command(client, args)

    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        sys.exit(130)

    except InstagramError as e:
        logging.error(f"Request failed: {e}")
        sys.exit(1)

    if isinstance(result, str):
        print(result)
    else:
        json.dump(result, sys.stdout, indent=2, ensure_ascii=False)
        print()


if __name__ == "__main__":
    main()
