# strategy_lab/strategies/indicators/__init__.py
"""Technical indicators package for strategy calculations.

Every indicator takes a sequence of closing prices and returns a series of
the same length, with None marking the warmup period.

Available Indicators:
- sma: Simple Moving Average
- ema: Exponential Moving Average (simple-mean seed)
- rsi: Relative Strength Index (Wilder smoothing)
- macd: MACD line, signal line and histogram

IndicatorCache memoizes single-period series for one backtest run.
"""

from strategy_lab.strategies.indicators.base import IndicatorSeries, normalize_period
from strategy_lab.strategies.indicators.cache import IndicatorCache, IndicatorKey, IndicatorKind
from strategy_lab.strategies.indicators.momentum import MACDResult, macd, macd_from_emas, rsi
from strategy_lab.strategies.indicators.moving_average import ema, sma

__all__: list[str] = [
    "IndicatorCache",
    "IndicatorKey",
    "IndicatorKind",
    "IndicatorSeries",
    "MACDResult",
    "ema",
    "macd",
    "macd_from_emas",
    "normalize_period",
    "rsi",
    "sma",
]
