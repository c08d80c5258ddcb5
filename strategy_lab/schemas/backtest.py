# strategy_lab/schemas/backtest.py
"""Response schemas for backtest results.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON consumed by the dashboard:

    {
        "summary": {"totalReturnPct": 4.0, "trades": 1.5, ...},
        "perTicker": [
            {"ticker": "AAPL",
             "stats": {"totalReturnPct": ..., "trades": ..., "winRatePct": ..., "avgTradePct": ...},
             "trades": [{"entryIdx": 3, "exitIdx": 9, "entryPrice": ..., "exitPrice": ..., "pnl": ...}]}
        ],
        "logs": []
    }

Use model_dump(by_alias=True) or model_dump_json(by_alias=True) to produce it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from strategy_lab.backtest.models import BacktestResult, BatchResult, Stats, Trade


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, population by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TradeSchema(CamelModel):
    entry_idx: int
    exit_idx: int
    entry_price: float
    exit_price: float
    pnl: float

    @classmethod
    def from_trade(cls, trade: Trade) -> TradeSchema:
        return cls(
            entry_idx=trade.entry_index,
            exit_idx=trade.exit_index,
            entry_price=trade.entry_price,
            exit_price=trade.exit_price,
            pnl=trade.pnl,
        )


class StatsSchema(CamelModel):
    total_return_pct: float
    trades: int
    win_rate_pct: float
    avg_trade_pct: float

    @classmethod
    def from_stats(cls, stats: Stats) -> StatsSchema:
        return cls(
            total_return_pct=stats.total_return_pct,
            trades=stats.trade_count,
            win_rate_pct=stats.win_rate_pct,
            avg_trade_pct=stats.avg_trade_pct,
        )


class TickerResultSchema(CamelModel):
    ticker: str
    stats: StatsSchema
    trades: list[TradeSchema] = Field(default_factory=list)


class BatchResponse(CamelModel):
    """Multi-instrument run result."""

    summary: dict[str, float] = Field(default_factory=dict)
    per_ticker: list[TickerResultSchema] = Field(default_factory=list)
    logs: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: BatchResult) -> BatchResponse:
        return cls(
            summary=dict(result.summary),
            per_ticker=[
                TickerResultSchema(
                    ticker=entry.ticker,
                    stats=StatsSchema.from_stats(entry.stats),
                    trades=[TradeSchema.from_trade(trade) for trade in entry.trades],
                )
                for entry in result.per_ticker
            ],
            logs=list(result.logs),
        )


class BacktestResultSchema(CamelModel):
    """Single-instrument run result, including the equity curve."""

    name: str
    trades: list[TradeSchema] = Field(default_factory=list)
    equity: list[float] = Field(default_factory=list)
    stats: StatsSchema

    @classmethod
    def from_result(cls, result: BacktestResult) -> BacktestResultSchema:
        return cls(
            name=result.name,
            trades=[TradeSchema.from_trade(trade) for trade in result.trades],
            equity=list(result.equity),
            stats=StatsSchema.from_stats(result.stats),
        )
