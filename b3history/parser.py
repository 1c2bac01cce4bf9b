"""Reading of B3 trade files into trade records."""

from __future__ import annotations

import csv
import logging
import math
import re
import threading
import uuid
from collections.abc import Iterator, Sequence
from datetime import date, datetime, timezone
from decimal import Decimal

from .env import get_env_bool, get_env_char
from .models import TradeRecord

logger = logging.getLogger(__name__)

_INT = re.compile(r"[+-]?[0-9]+")
_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class RecordError(ValueError):
    """A line of a trade file that does not describe a valid trade."""


def _price(text: str) -> Decimal:
    normalized = text.replace(",", ".")
    try:
        if normalized != normalized.strip() or "_" in normalized:
            raise ValueError
        value = float(normalized)
        if not math.isfinite(value):
            raise ValueError
    except ValueError:
        raise RecordError(f"invalid trade price {text!r}") from None
    return Decimal(format(Decimal(repr(value)), "f"))


def _quantity(text: str) -> int:
    if not _INT.fullmatch(text) or not -(2**31) <= int(text) < 2**31:
        raise RecordError(f"invalid trade quantity {text!r}")
    return int(text)


def _trade_date(text: str) -> datetime:
    try:
        if not _DATE.fullmatch(text):
            raise ValueError
        day = date.fromisoformat(text)
    except ValueError:
        raise RecordError(f"invalid trade date {text!r}") from None
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def map_record(record: Sequence[str], now: datetime) -> TradeRecord:
    """Build a trade from one line's fields; raise RecordError if they are invalid.

    Fields used: 1 instrument code, 3 price (decimal comma), 4 quantity,
    5 closing time, 8 trade date (YYYY-MM-DD).
    """
    if len(record) < 9:
        raise RecordError(f"record has {len(record)} fields, expected at least 9")
    return TradeRecord(
        id=uuid.uuid4(),
        close_time=record[5],
        trade_date=_trade_date(record[8]),
        instrument_code=record[1],
        trade_price=_price(record[3]),
        trade_quantity=_quantity(record[4]),
        created_at=now,
        updated_at=now,
    )


def _rows(reader: Iterator[list[str]], path: str) -> Iterator[list[str]]:
    """Yield the non-empty rows of ``reader``, skipping malformed ones."""
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            logger.warning("Error reading CSV record in %s: %s", path, exc)
            continue
        if row:
            yield row


def parse_txt_file(
    path: str, now: datetime, stop: threading.Event | None = None
) -> Iterator[TradeRecord]:
    """Yield the valid trades of the file at ``path``.

    The delimiter comes from ``CSV_DELIMITER`` (default ";") and the first line
    is skipped unless ``SKIP_HEADER`` says otherwise. Bad lines are logged and
    skipped; iteration ends once ``stop`` is set. Raises OSError if the file
    cannot be opened.
    """
    delimiter = get_env_char("CSV_DELIMITER", ";")
    skip_header = get_env_bool("SKIP_HEADER", True)
    try:
        handle = open(path, encoding="utf-8", errors="replace", newline="")
    except OSError:
        logger.error("Failed to open file %s", path, exc_info=True)
        raise

    count = 0
    with handle:
        records = _rows(csv.reader(handle, delimiter=delimiter, strict=True), path)
        width = None
        if skip_header:
            header = next(records, None)
            width = None if header is None else len(header)
        for record in records:
            width = len(record) if width is None else width
            if len(record) != width:
                logger.warning("Error reading CSV record in %s: wrong number of fields", path)
                continue
            try:
                trade = map_record(record, now)
            except RecordError as exc:
                logger.warning("Error parsing trade record %s: %s", record, exc)
                continue
            if stop is not None and stop.is_set():
                logger.warning("Parsing of %s stopped before the end", path)
                return
            yield trade
            count += 1
            if count % 10000 == 0:
                logger.info("Processed %d records from %s", count, path)
    logger.info("Finished reading %s: %d records", path, count)