"""Command line interface for maintaining and querying the rate cache."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from eurofx import EuroFx
from eurofx.config import Settings
from eurofx.exceptions import EuroFxError
from eurofx.utils.date_range import parse_date
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["build_parser", "parse_args", "main"]


def _date_arg(value: str):  # type: ignore[no-untyped-def]
    try:
        return parse_date(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"{value} is in an invalid date format, date must be in the format %Y-%m-%d"
        ) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="eurofx", description=__doc__)
    parser.add_argument("--db", dest="db_path", help="Snapshot database path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("update", help="Bootstrap or reconcile the store once")

    serve = subparsers.add_parser("serve", help="Keep the store current on a fixed interval")
    serve.add_argument("--interval", type=float, help="Seconds between update ticks")

    latest = subparsers.add_parser("latest", help="Print the most recent rates")
    day = subparsers.add_parser("day", help="Print the rates for one day")
    day.add_argument("date", type=_date_arg, help="Date (YYYY-MM-DD)")
    history = subparsers.add_parser("history", help="Print the rates within a window")
    history.add_argument("--from", dest="start", type=_date_arg, required=True, help="Start date")
    history.add_argument("--to", dest="end", type=_date_arg, required=True, help="End date")

    for query in (latest, day, history):
        query.add_argument("--base", help="Base currency (defaults to EUR)")
        query.add_argument("--symbols", help="Comma separated currency codes to include")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


async def _serve(fx: EuroFx, interval: float) -> None:
    from eurofx.scheduler import run_periodic
    from eurofx.service import RateService

    async with RateService(fx) as service:
        await run_periodic(service, interval)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = Settings.from_env().with_overrides(
            db_location=Path(args.db_path) if args.db_path else None,
            update_interval=getattr(args, "interval", None),
        )
    except ValueError as exc:
        print(f"invalid configuration: {exc}", file=sys.stderr)
        return 2
    with EuroFx(settings) as fx:
        try:
            if args.command == "update":
                result = fx.update()
                _emit(
                    {
                        "status": result.status.value,
                        "previous": result.previous.isoformat(),
                        "current": result.current.isoformat(),
                        "committed": result.committed,
                    }
                )
            elif args.command == "serve":
                try:
                    asyncio.run(_serve(fx, settings.update_interval))
                except KeyboardInterrupt:
                    LOGGER.info("Stopped by user")
            elif args.command == "latest":
                _emit(fx.rate(base=args.base, symbols=args.symbols))
            elif args.command == "day":
                payload = fx.rate(args.date, base=args.base, symbols=args.symbols)
                if payload is None:
                    print(f"no currencies found for date {args.date.isoformat()}", file=sys.stderr)
                    return 1
                _emit(payload)
            elif args.command == "history":
                _emit(fx.history(args.start, args.end, base=args.base, symbols=args.symbols))
        except ValueError as exc:
            print(str(exc), file=sys.stderr)
            return 2
        except EuroFxError as exc:
            LOGGER.error("%s failed: %s", args.command, exc)
            return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
