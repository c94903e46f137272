from __future__ import annotations

import argparse
import asyncio
import json
import sys

from board_client.config import AppSettings, ConfigurationError
from board_client.logging_utils import configure_logging
from board_client.services import build_client


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="board_client",
        description="Send one request to the board API and print the {error, result} pair.",
    )
    parser.add_argument("method", choices=["GET", "POST", "PUT", "PATCH", "DELETE"], type=str.upper)
    parser.add_argument("path", help="endpoint path, e.g. /posts/top10")
    parser.add_argument("--auth", action="store_true", help="the endpoint requires a signed-in session")
    parser.add_argument("--body", help="JSON request body")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, settings: AppSettings) -> int:
    service = build_client(settings)
    body = json.loads(args.body) if args.body else None
    outcome = await service.client.request(args.path, method=args.method, body=body, requires_auth=args.auth)
    print(json.dumps({"error": outcome.error, "result": outcome.result}, indent=2, ensure_ascii=False))
    return 0 if outcome.ok else 1


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        settings = AppSettings.from_env()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
