"""Data types shared across the trade processing and query code."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class TradeRecord:
    """One trade as stored in the ``trade`` table."""

    id: uuid.UUID
    close_time: str
    trade_date: datetime
    instrument_code: str
    trade_price: Decimal
    trade_quantity: int
    created_at: datetime
    updated_at: datetime
    deleted: bool = False


@dataclass(frozen=True)
class Summary:
    """Highest price and highest daily volume of one ticker."""

    ticker: str
    max_range_value: float
    max_daily_volume: int


@dataclass
class ProcessRequest:
    """A request to process one or more trade files."""

    file_paths: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.file_paths = list(self.file_paths)
        if not self.file_paths:
            raise ValueError("file_paths is required")
        for path in self.file_paths:
            if not isinstance(path, str) or not path:
                raise ValueError(f"file path is required, got {path!r}")