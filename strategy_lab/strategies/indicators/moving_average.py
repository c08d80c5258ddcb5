# strategy_lab/strategies/indicators/moving_average.py
"""Moving-average indicators.

Implements:
- SMA: sma_n[t] = mean(price[t-n+1 .. t])
- EMA: ema_n[t] = alpha * price[t] + (1 - alpha) * ema_n[t-1], alpha = 2 / (n + 1),
  seeded with the simple mean of the first n prices.
"""

from collections.abc import Sequence

from strategy_lab.strategies.indicators.base import (
    IndicatorSeries,
    empty_series,
    normalize_period,
)


def sma(closes: Sequence[float], period: float | int) -> IndicatorSeries:
    """Simple moving average.

    Example:
        >>> sma([100, 102, 104], 3)
        [None, None, 102.0]

    Args:
        closes: Close prices, oldest first.
        period: Window length. Rounded and clamped to >= 1.

    Returns:
        Series of len(closes); None for indices before period - 1.
    """
    period = normalize_period(period)
    out: IndicatorSeries = []
    window_sum = 0.0
    for i, close in enumerate(closes):
        window_sum += close
        if i >= period:
            window_sum -= closes[i - period]
        out.append(window_sum / period if i >= period - 1 else None)
    return out


def ema(values: Sequence[float], period: float | int) -> IndicatorSeries:
    """Exponential moving average seeded with a simple mean.

    Args:
        values: Input values, oldest first. Must not contain None.
        period: Smoothing period. Rounded and clamped to >= 1.

    Returns:
        Series of len(values); None for indices before period - 1.
        A period longer than the input yields an all-None series.
    """
    period = normalize_period(period)
    out = empty_series(len(values))
    if len(values) < period:
        return out

    alpha = 2.0 / (period + 1)
    current = sum(values[:period]) / period
    out[period - 1] = current
    for i in range(period, len(values)):
        current = alpha * values[i] + (1.0 - alpha) * current
        out[i] = current
    return out
