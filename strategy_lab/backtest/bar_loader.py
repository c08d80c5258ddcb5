"""Bar loader implementations for backtesting."""

import csv
from collections.abc import Iterable, Mapping
from datetime import date
from pathlib import Path
from typing import Any, Protocol

from strategy_lab.backtest.models import Bar


class BarLoader(Protocol):
    """Protocol for loading historical daily bars."""

    async def load(self, symbol: str, start_date: date, end_date: date) -> list[Bar]:
        """Load bars for symbol within date range.

        Args:
            symbol: Ticker symbol to load (e.g., "AAPL").
            start_date: Start of date range (inclusive).
            end_date: End of date range (inclusive).

        Returns:
            List of Bar objects sorted strictly ascending by date.
        """
        ...


def select_range(bars: Iterable[Bar], start_date: date, end_date: date) -> list[Bar]:
    """Filter bars to [start_date, end_date], sort by date and drop duplicate dates.

    When a date occurs more than once the last bar seen wins.
    """
    by_date: dict[date, Bar] = {}
    for bar in bars:
        if start_date <= bar.date <= end_date:
            by_date[bar.date] = bar
    return [by_date[day] for day in sorted(by_date)]


class CSVBarLoader:
    """Loads bars from a CSV file.

    Expected CSV format:
    date,symbol,open,high,low,close,volume
    2025-01-02,AAPL,150.00,152.00,149.00,151.00,1000000

    The date must be ISO 8601 (YYYY-MM-DD). Symbol matching is case-insensitive.
    """

    def __init__(self, csv_path: Path | str) -> None:
        """Initialize the loader with path to CSV file.

        Args:
            csv_path: Path to the CSV file containing bar data.
        """
        self._csv_path = Path(csv_path)

    async def load(self, symbol: str, start_date: date, end_date: date) -> list[Bar]:
        """Load bars for symbol within date range, sorted ascending by date.

        Returns:
            List of Bar objects. Empty if symbol not found or no bars in range.

        Raises:
            FileNotFoundError: If the CSV file does not exist.
            ValueError: If a matching row is malformed.
        """
        wanted = symbol.upper()
        bars: list[Bar] = []

        with open(self._csv_path, newline="") as csvfile:
            reader = csv.DictReader(csvfile)
            for row in reader:
                # Skip rows for different symbols
                if (row.get("symbol") or "").upper() != wanted:
                    continue
                bars.append(Bar.from_row(row, symbol=wanted))

        return select_range(bars, start_date, end_date)


class InMemoryBarLoader:
    """Serves bars from a mapping of ticker to rows or Bar objects.

    Useful when the caller already holds the data (e.g., a batch request
    that ships bars inline) and in tests.
    """

    def __init__(self, data: Mapping[str, Iterable[Bar | Mapping[str, Any]]]) -> None:
        """Initialize the loader.

        Args:
            data: Ticker -> bars. Rows are converted with Bar.from_row.
        """
        self._bars: dict[str, list[Bar]] = {
            ticker.upper(): [
                item if isinstance(item, Bar) else Bar.from_row(item, symbol=ticker.upper())
                for item in items
            ]
            for ticker, items in data.items()
        }

    async def load(self, symbol: str, start_date: date, end_date: date) -> list[Bar]:
        """Return the stored bars for symbol within range; empty if unknown."""
        return select_range(self._bars.get(symbol.upper(), []), start_date, end_date)
