# strategy_lab/strategies/indicators/base.py
"""Shared helpers for series-based technical indicators.

All indicators in this package follow the same conventions:
- Input is a sequence of closing prices, oldest first.
- Output is a list aligned 1:1 with the input.
- Entries inside the warmup period are None, never a sentinel such as 0.
- Degenerate inputs (short history, zero division) resolve to None or a
  defined boundary value instead of raising.
"""

import math
from collections.abc import Sequence

IndicatorSeries = list[float | None]


def normalize_period(period: float | int) -> int:
    """Round and clamp an indicator period to a usable integer.

    Args:
        period: Requested lookback, possibly fractional or non-positive.

    Returns:
        round(period) clamped to >= 1. Non-numeric or non-finite input
        returns 1.
    """
    try:
        value = float(period)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(value):
        return 1
    return max(int(round(value)), 1)


def empty_series(length: int) -> IndicatorSeries:
    """Series of the given length with every value absent."""
    return [None] * length


def realign(
    positions: Sequence[int], values: Sequence[float | None], length: int
) -> IndicatorSeries:
    """Scatter values computed on a compacted subsequence back onto a full series.

    Args:
        positions: Index in the full series of each compacted value.
        values: Values computed on the compacted subsequence.
        length: Length of the full series.

    Returns:
        Series of `length` where positions not listed stay None.
    """
    out = empty_series(length)
    for index, value in zip(positions, values):
        out[index] = value
    return out
