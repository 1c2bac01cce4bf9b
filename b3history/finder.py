"""Query side: summaries of trades per ticker."""

from __future__ import annotations

from datetime import date

from .models import Summary
from .repository import TradeRepository


class Finder:
    """Looks up trade summaries through a repository."""

    def __init__(self, repo: TradeRepository) -> None:
        self._repo = repo

    def get_summary(self, ticker: str, from_date: date | None) -> Summary:
        """Return the summary of ``ticker``; repository errors propagate."""
        found = self._repo.find_summary(ticker, from_date)
        return Summary(
            ticker=found.ticker,
            max_range_value=found.max_range_value,
            max_daily_volume=found.max_daily_volume,
        )