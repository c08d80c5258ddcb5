"""Backtest data models."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from strategy_lab.schemas.backtest import BacktestResultSchema, BatchResponse


def _to_float(row: Mapping[str, Any], key: str) -> float:
    try:
        return float(row[key])
    except KeyError as e:
        raise ValueError(f"Bar row is missing '{key}'") from e
    except (TypeError, ValueError) as e:
        raise ValueError(f"Bar field '{key}' is not numeric: {row[key]!r}") from e


@dataclass(frozen=True)
class Bar:
    """One daily OHLCV record for one instrument.

    The close is the only price the simulator uses; open/high/low are carried
    for completeness.

    Attributes:
        date: Trading day. Sequences are strictly ascending by date.
        open: Opening price.
        high: Highest price of the day.
        low: Lowest price of the day.
        close: Closing price. Must be positive.
        volume: Traded volume. Must be non-negative.
        symbol: Ticker symbol, empty when the caller does not track it.
    """

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float
    symbol: str = ""

    def __post_init__(self) -> None:
        """Reject non-finite prices, non-positive closes and negative volume."""
        for name in ("open", "high", "low", "close", "volume"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"Bar {self.date} has non-finite {name}: {value}")
        if self.close <= 0:
            raise ValueError(f"Bar {self.date} has non-positive close: {self.close}")
        if self.volume < 0:
            raise ValueError(f"Bar {self.date} has negative volume: {self.volume}")

    @classmethod
    def from_row(cls, row: Mapping[str, Any], symbol: str = "") -> Bar:
        """Build a Bar from a loosely typed row.

        Expected row format:
            {"date": "2024-01-02", "open": 100, "high": 105, "low": 95,
             "close": 102, "volume": 1000}

        Args:
            row: Mapping with an ISO 8601 date (YYYY-MM-DD) or a date object,
                and numeric OHLCV values (numeric strings are accepted).
            symbol: Fallback symbol when the row has no "symbol"/"ticker" field.

        Raises:
            ValueError: If a field is missing or malformed.
        """
        raw_date = row.get("date")
        if isinstance(raw_date, date):
            bar_date = raw_date
        elif isinstance(raw_date, str):
            bar_date = date.fromisoformat(raw_date.strip()[:10])
        else:
            raise ValueError(f"Bar row has no usable date: {raw_date!r}")

        return cls(
            date=bar_date,
            open=_to_float(row, "open"),
            high=_to_float(row, "high"),
            low=_to_float(row, "low"),
            close=_to_float(row, "close"),
            volume=_to_float(row, "volume"),
            symbol=str(row.get("symbol") or row.get("ticker") or symbol),
        )


@dataclass(frozen=True)
class Trade:
    """One completed round trip.

    Attributes:
        entry_index: Bar index where the position was opened.
        exit_index: Bar index where it was closed, always > entry_index.
        entry_price: Close of the entry bar.
        exit_price: Close of the exit bar.
        pnl: Fractional return, (exit_price - entry_price) / entry_price.
    """

    entry_index: int
    exit_index: int
    entry_price: float
    exit_price: float
    pnl: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "entryIdx": self.entry_index,
            "exitIdx": self.exit_index,
            "entryPrice": self.entry_price,
            "exitPrice": self.exit_price,
            "pnl": self.pnl,
        }


@dataclass(frozen=True)
class Stats:
    """Summary statistics of one backtest.

    Attributes:
        total_return_pct: (final equity - 1) * 100, open position included.
        trade_count: Number of closed trades.
        win_rate_pct: Share of closed trades with pnl > 0, in percent.
        avg_trade_pct: Mean closed-trade pnl, in percent.
    """

    total_return_pct: float = 0.0
    trade_count: int = 0
    win_rate_pct: float = 0.0
    avg_trade_pct: float = 0.0

    def to_dict(self) -> dict[str, float | int]:
        """Wire format, keyed by the names aggregated in batch summaries."""
        return {
            "totalReturnPct": self.total_return_pct,
            "trades": self.trade_count,
            "winRatePct": self.win_rate_pct,
            "avgTradePct": self.avg_trade_pct,
        }


@dataclass(frozen=True)
class BacktestResult:
    """Outcome of evaluating one strategy against one bar sequence.

    Attributes:
        name: Strategy name.
        trades: Closed trades in time order.
        equity: Cumulative multiplicative return per bar, marked to market.
            Same length as the bars; starts at 1.0 when non-empty.
        stats: Summary statistics.
    """

    name: str
    trades: tuple[Trade, ...]
    equity: tuple[float, ...]
    stats: Stats

    def to_response(self) -> BacktestResultSchema:
        from strategy_lab.schemas.backtest import BacktestResultSchema

        return BacktestResultSchema.from_result(self)


@dataclass(frozen=True)
class TickerResult:
    """Per-instrument entry of a batch run.

    Attributes:
        ticker: Upper-cased ticker symbol.
        stats: Statistics for this ticker.
        trades: Closed trades for this ticker.
        bar_count: Number of bars evaluated (0 when no data was available).
    """

    ticker: str
    stats: Stats
    trades: tuple[Trade, ...]
    bar_count: int = 0


@dataclass
class BatchResult:
    """Outcome of evaluating one strategy across several instruments.

    Attributes:
        strategy_name: Name of the normalized strategy.
        summary: Equal-weighted mean of each numeric stats field.
        per_ticker: Per-instrument results, in request order.
        logs: Human-readable notes (missing data, loader failures).
    """

    strategy_name: str
    summary: dict[str, float]
    per_ticker: list[TickerResult]
    logs: list[str] = field(default_factory=list)

    def to_response(self) -> BatchResponse:
        from strategy_lab.schemas.backtest import BatchResponse

        return BatchResponse.from_result(self)
