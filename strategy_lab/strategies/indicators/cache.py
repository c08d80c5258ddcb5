# strategy_lab/strategies/indicators/cache.py
"""Per-run memoization of indicator series.

A cache is created for one close-price sequence and dropped when the run
finishes. Rules that reference the same (kind, period) share one series.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from strategy_lab.strategies.indicators.base import IndicatorSeries, normalize_period
from strategy_lab.strategies.indicators.momentum import rsi
from strategy_lab.strategies.indicators.moving_average import ema, sma

logger = logging.getLogger(__name__)


class IndicatorKind(str, Enum):
    """Single-period indicators that can be cached."""

    SMA = "sma"
    EMA = "ema"
    RSI = "rsi"


@dataclass(frozen=True)
class IndicatorKey:
    """Cache key: indicator kind plus its normalized period."""

    kind: IndicatorKind
    period: int


_CALCULATORS: dict[IndicatorKind, Callable[[Sequence[float], int], IndicatorSeries]] = {
    IndicatorKind.SMA: sma,
    IndicatorKind.EMA: ema,
    IndicatorKind.RSI: rsi,
}


class IndicatorCache:
    """Computes each (kind, period) series at most once for a close sequence.

    Example:
        >>> cache = IndicatorCache([100.0, 101.0, 103.0])
        >>> fast = cache.get(IndicatorKind.SMA, 2)
        >>> cache.get(IndicatorKind.SMA, 2.0) is fast
        True
    """

    def __init__(self, closes: Sequence[float]) -> None:
        """Initialize the cache.

        Args:
            closes: Close prices, oldest first. Copied on construction.
        """
        self._closes: tuple[float, ...] = tuple(closes)
        self._series: dict[IndicatorKey, IndicatorSeries] = {}

    @property
    def closes(self) -> tuple[float, ...]:
        """Close prices the cache computes over."""
        return self._closes

    def get(self, kind: IndicatorKind, period: float | int) -> IndicatorSeries:
        """Return the series for (kind, period), computing it on first use."""
        key = IndicatorKey(kind=kind, period=normalize_period(period))
        series = self._series.get(key)
        if series is None:
            logger.debug("Computing %s(%d) over %d bars", kind.value, key.period, len(self._closes))
            series = _CALCULATORS[kind](self._closes, key.period)
            self._series[key] = series
        return series

    def __contains__(self, key: object) -> bool:
        return key in self._series

    def __len__(self) -> int:
        return len(self._series)
