"""CLI entry point: python -m movers <command>

Commands:
  serve     Start the HTTP API (host/port from config).
  fetch     Print one movers list as JSON: fetch {gainers,losers} YYYY-MM-DD.
"""

from __future__ import annotations

import argparse
import json
import sys

from movers.config import get_config
from movers.errors import MoversError, ValidationError
from movers.sources import MoverList
from movers.utils.logging import configure_logging, get_logger


def _cmd_serve(args: argparse.Namespace) -> None:
    config = get_config()
    configure_logging(config.log_level, config.log_format)

    from movers.orchestrator import build_getter
    from movers.server import serve_forever

    serve_forever(build_getter(config), host=config.host, port=config.port)


def _cmd_fetch(args: argparse.Namespace) -> None:
    config = get_config()
    configure_logging(config.log_level, config.log_format)
    log = get_logger()

    from movers.dates import parse_date
    from movers.orchestrator import build_getter

    getter = build_getter(config)
    try:
        stocks = getter.get(MoverList(args.list), parse_date(args.date))
    except ValidationError as exc:
        log.error("invalid_request", error=str(exc))
        sys.exit(2)
    except MoversError as exc:
        log.error("fetch_failed", error=str(exc), error_type=type(exc).__name__)
        sys.exit(1)
    finally:
        getter.fetcher.close()

    json.dump([s.to_dict() for s in stocks], sys.stdout, indent=2)
    print()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="movers",
        description="Daily top stock gainers and losers",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    sub.add_parser("serve", help="Start the HTTP API")

    # fetch
    p_fetch = sub.add_parser("fetch", help="Fetch one movers list and print it as JSON")
    p_fetch.add_argument("list", choices=[m.value for m in MoverList])
    p_fetch.add_argument("date", help="Trading date (YYYY-MM-DD)")

    args = parser.parse_args(argv)

    dispatch = {
        "serve": _cmd_serve,
        "fetch": _cmd_fetch,
    }
    dispatch[args.command](args)


if __name__ == "__main__":
    main()
