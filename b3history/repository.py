"""Storage of trades and the summary query over them."""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timezone

from .models import TradeRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS trade (
    id TEXT PRIMARY KEY, close_time TEXT, trade_date TEXT,
    instrument_code TEXT NOT NULL, trade_price TEXT, trade_quantity INTEGER,
    created_at TEXT, updated_at TEXT, deleted INTEGER NOT NULL DEFAULT 0
)
"""

_INSERT = (
    "INSERT INTO trade (id, close_time, trade_date, instrument_code, trade_price,"
    " trade_quantity, created_at, updated_at, deleted)"
    " VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0)"
)

_SUMMARY_QUERY = """
SELECT
    (SELECT MAX(CAST(trade_price AS REAL)) FROM trade
     WHERE instrument_code = :ticker {date_filter}),
    (SELECT MAX(volume) FROM (
        SELECT SUM(trade_quantity) AS volume FROM trade
        WHERE instrument_code = :ticker {date_filter}
        GROUP BY trade_date))
"""


@dataclass(frozen=True)
class TradeSummary:
    """Aggregated figures for one ticker as read from storage."""

    ticker: str
    max_range_value: float
    max_daily_volume: int


class TradeRepository(ABC):
    """Where trades are written and summaries are read."""

    @abstractmethod
    def connection(self):
        """Context manager that lends a connection for ``save_batch``."""

    @abstractmethod
    def save_batch(self, conn, trades: Sequence[TradeRecord]) -> None:
        """Write ``trades`` through ``conn``."""

    @abstractmethod
    def find_summary(self, ticker: str, from_date: date | None) -> TradeSummary:
        """Return the summary of ``ticker``, from ``from_date`` on if given."""


def database_url_from_env() -> str:
    """Return the ``DATABASE_URL`` environment variable, or an empty string."""
    return os.environ.get("DATABASE_URL", "")


def _sqlite_path(database_url: str) -> str:
    if not database_url:
        raise ValueError("database URL is empty")
    for prefix in ("sqlite:///", "sqlite://"):
        if database_url.startswith(prefix):
            return database_url[len(prefix):] or ":memory:"
    if "://" in database_url:
        raise ValueError(f"unsupported database URL: {database_url!r}")
    return database_url


def _timestamp(value: date) -> str:
    """Render a date or time as a sortable UTC timestamp string."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")


class SqlTradeRepository(TradeRepository):
    """Trade repository backed by an SQLite database."""

    def __init__(self, database_url: str) -> None:
        self._path = _sqlite_path(database_url)
        self._lock = threading.RLock()
        self._shared = (
            sqlite3.connect(":memory:", check_same_thread=False)
            if self._path == ":memory:"
            else None
        )

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Lend a connection; it is released when the block ends."""
        if self._shared is not None:
            with self._lock:
                yield self._shared
            return
        try:
            conn = sqlite3.connect(self._path, timeout=30.0)
        except sqlite3.Error:
            logger.error("Failed to acquire DB connection", exc_info=True)
            raise
        try:
            yield conn
        finally:
            conn.close()

    def create_schema(self) -> None:
        """Create the ``trade`` table if it does not exist."""
        with self.connection() as conn, conn:
            conn.execute(_SCHEMA)

    def save_batch(self, conn: sqlite3.Connection, trades: Sequence[TradeRecord]) -> None:
        """Insert ``trades`` in one transaction, all marked as not deleted."""
        rows = [
            (
                str(t.id), t.close_time, _timestamp(t.trade_date), t.instrument_code,
                str(t.trade_price), t.trade_quantity,
                _timestamp(t.created_at), _timestamp(t.updated_at),
            )
            for t in trades
        ]
        with conn:
            conn.executemany(_INSERT, rows)

    def find_summary(self, ticker: str, from_date: date | None) -> TradeSummary:
        """Return the highest price and highest daily volume of ``ticker``.

        Raises LookupError when no trade of the ticker matches.
        """
        params = {"ticker": ticker}
        date_filter = ""
        if from_date is not None:
            date_filter = "AND trade_date >= :from_date"
            params["from_date"] = _timestamp(from_date)

        with self.connection() as conn:
            max_price, max_volume = conn.execute(
                _SUMMARY_QUERY.format(date_filter=date_filter), params
            ).fetchone()

        if max_price is None or max_volume is None:
            logger.warning("No data found for ticker %s", ticker)
            raise LookupError(f"no trades found for ticker {ticker!r}")
        logger.info("Successfully retrieved trade summary for %s", ticker)
        return TradeSummary(ticker, float(max_price), int(max_volume))