"""Command line interface: load trade files and query summaries."""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Sequence
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .finder import Finder
from .processor import Processor
from .repository import SqlTradeRepository, TradeRepository, database_url_from_env

_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_TIMEZONE = "America/Sao_Paulo"


class Application:
    """The processor and finder wired to one repository."""

    def __init__(self, repo: TradeRepository) -> None:
        self.repo = repo
        self.processor = Processor(repo)
        self.finder = Finder(repo)

    @classmethod
    def from_env(cls) -> Application:
        """Open the database named by ``DATABASE_URL`` and ensure its schema."""
        repo = SqlTradeRepository(database_url_from_env())
        repo.create_schema()
        return cls(repo)


def parse_from_date(value: str | None) -> datetime | None:
    """Turn "YYYY-MM-DD" into midnight in São Paulo; None or "" gives None."""
    if not value:
        return None
    if not _DATE_PATTERN.fullmatch(value):
        raise ValueError(f"invalid date format: {value!r}, expected YYYY-MM-DD")
    try:
        day = date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"invalid date format: {exc}") from exc
    try:
        zone = ZoneInfo(_TIMEZONE)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"failed to load timezone: {exc}") from exc
    return datetime(day.year, day.month, day.day, tzinfo=zone)


def _split_files(values: Sequence[str]) -> list[str]:
    return [part.strip() for value in values for part in value.split(",") if part.strip()]


def _run_process(args: argparse.Namespace) -> int:
    files = _split_files(args.file)
    app = Application.from_env()
    print(f"Processing files: [{' '.join(files)}]")
    app.processor.process_files(files)
    return 0


def _run_query(args: argparse.Namespace) -> int:
    from_date = parse_from_date(args.date)
    app = Application.from_env()
    print(f"Querying data for ticker: {args.ticker}, starting from: {from_date}")
    summary = app.finder.get_summary(args.ticker, from_date)
    print(
        "Summary Trade Result:\n"
        f" Ticker: {summary.ticker}\n"
        f" Max Range Value: {summary.max_range_value:.2f}\n"
        f" Max Daily Volume: {summary.max_daily_volume}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the ``process`` and ``query`` commands."""
    parser = argparse.ArgumentParser(
        prog="b3-processor",
        description="Processes B3 CSV files and allows data queries via CLI",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    process = commands.add_parser("process", help="Processes one or more B3 CSV files")
    process.add_argument(
        "-f",
        "--file",
        action="append",
        required=True,
        help="Path(s) to CSV files to process",
    )
    process.set_defaults(handler=_run_process)

    query = commands.add_parser(
        "query", help="Query aggregated data by ticker and optional start date"
    )
    query.add_argument("--ticker", required=True, help="Ticker symbol to query")
    query.add_argument("--date", default="", help="Optional start date (format: YYYY-MM-DD)")
    query.set_defaults(handler=_run_query)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the exit status."""
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except Exception as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())