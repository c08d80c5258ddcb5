from strategy_lab.schemas.backtest import (
    BacktestResultSchema,
    BatchResponse,
    StatsSchema,
    TickerResultSchema,
    TradeSchema,
)

__all__ = [
    "BacktestResultSchema",
    "BatchResponse",
    "StatsSchema",
    "TickerResultSchema",
    "TradeSchema",
]
