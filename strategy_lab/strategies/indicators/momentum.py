# strategy_lab/strategies/indicators/momentum.py
"""Momentum oscillators.

Implements:
- RSI (Wilder): rsi[t] = 100 - 100 / (1 + avg_gain[t] / avg_loss[t])
- MACD: macd[t] = ema_fast[t] - ema_slow[t], signal = EMA(macd), histogram = macd - signal
"""

from collections.abc import Sequence
from dataclasses import dataclass

from strategy_lab.strategies.indicators.base import (
    IndicatorSeries,
    empty_series,
    normalize_period,
    realign,
)
from strategy_lab.strategies.indicators.moving_average import ema


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def rsi(closes: Sequence[float], period: float | int = 14) -> IndicatorSeries:
    """Relative Strength Index with Wilder smoothing.

    The first value appears at index `period`, seeded with the simple average
    of the first `period` gains and losses. After that:

        avg = (avg * (period - 1) + new_value) / period

    A zero average loss yields 100 (a flat series included).

    Args:
        closes: Close prices, oldest first.
        period: Smoothing period, default 14. Rounded and clamped to >= 1.

    Returns:
        Series of len(closes) with values in [0, 100] or None. Index 0 is
        always None.
    """
    period = normalize_period(period)
    out = empty_series(len(closes))
    if len(closes) <= period:
        return out

    gain_sum = 0.0
    loss_sum = 0.0
    for i in range(1, period + 1):
        change = closes[i] - closes[i - 1]
        gain_sum += max(change, 0.0)
        loss_sum += max(-change, 0.0)

    avg_gain = gain_sum / period
    avg_loss = loss_sum / period
    out[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period + 1, len(closes)):
        change = closes[i] - closes[i - 1]
        avg_gain = (avg_gain * (period - 1) + max(change, 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + max(-change, 0.0)) / period
        out[i] = _rsi_value(avg_gain, avg_loss)

    return out


@dataclass(frozen=True)
class MACDResult:
    """MACD line, signal line and histogram, each aligned with the input.

    Attributes:
        macd: ema_fast - ema_slow where both are defined.
        signal: EMA of the defined macd values; None wherever macd is None.
        histogram: macd - signal where both are defined.
    """

    macd: IndicatorSeries
    signal: IndicatorSeries
    histogram: IndicatorSeries


def macd_from_emas(
    ema_fast: Sequence[float | None],
    ema_slow: Sequence[float | None],
    signal_period: float | int = 9,
) -> MACDResult:
    """Build MACD from already computed fast and slow EMA series.

    The signal EMA runs over the defined macd values only and is scattered
    back onto the full index, so a bar without a macd value never carries a
    signal value.

    Raises:
        ValueError: If the two EMA series differ in length.
    """
    if len(ema_fast) != len(ema_slow):
        raise ValueError(
            f"EMA series length mismatch: fast={len(ema_fast)}, slow={len(ema_slow)}"
        )

    length = len(ema_fast)
    macd_line: IndicatorSeries = [
        fast - slow if fast is not None and slow is not None else None
        for fast, slow in zip(ema_fast, ema_slow)
    ]

    defined = [i for i, value in enumerate(macd_line) if value is not None]
    compact_signal = ema([macd_line[i] for i in defined], signal_period)
    signal_line = realign(defined, compact_signal, length)

    histogram: IndicatorSeries = [
        m - s if m is not None and s is not None else None
        for m, s in zip(macd_line, signal_line)
    ]
    return MACDResult(macd=macd_line, signal=signal_line, histogram=histogram)


def macd(
    closes: Sequence[float],
    fast: float | int = 12,
    slow: float | int = 26,
    signal_period: float | int = 9,
) -> MACDResult:
    """Moving Average Convergence Divergence.

    Example:
        >>> result = macd(closes, fast=12, slow=26, signal_period=9)
        >>> result.macd[-1], result.signal[-1]

    Args:
        closes: Close prices, oldest first.
        fast: Fast EMA period.
        slow: Slow EMA period.
        signal_period: EMA period applied to the macd line.

    Returns:
        MACDResult with three series of len(closes).
    """
    return macd_from_emas(ema(closes, fast), ema(closes, slow), signal_period)
