from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from box_estimator.config import Settings
from box_estimator.db import apply_schema
from box_estimator.errors import ServiceError
from box_estimator.service import build_service, parse_pack_request


def load_body(value: str) -> str:
    """Request body given inline, as @path, or - for stdin."""
    if value == "-":
        return sys.stdin.read()
    if value.startswith("@"):
        return Path(value[1:]).read_text(encoding="utf-8")
    return value


def cmd_pack(args: argparse.Namespace) -> int:
    body = load_body(args.body)
    service = build_service(Settings.from_env())

    print("<<< In:")
    print(body)
    print()

    try:
        request = parse_pack_request(body)
        response = asyncio.run(service.estimate(request))
    except ServiceError as e:
        print(f">>> Out ({e.status_code}):")
        print(json.dumps({"message": e.message}))
        return 1

    print(">>> Out (200):")
    print(json.dumps(response.model_dump()))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("box_estimator.api:app", host=args.host, port=args.port)
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    if not settings.database_url:
        print("DATABASE_URL not found. Check .env at repo root.", file=sys.stderr)
        return 1
    tables = apply_schema(settings.database_url)
    print("Tables now:", tables)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="box-estimator", description="Shipping box estimator")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_pack = sub.add_parser("pack", help="Run one pack request and print the transcript")
    p_pack.add_argument("body", help='JSON body, @file or - for stdin, e.g. \'{"products": [...]}\'')
    p_pack.set_defaults(func=cmd_pack)

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.set_defaults(func=cmd_serve)

    p_init = sub.add_parser("init-db", help="Create the packaging table in DATABASE_URL")
    p_init.set_defaults(func=cmd_init_db)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
