"""Shared fixtures for strategy_lab tests."""

from collections.abc import Callable, Sequence
from datetime import date, timedelta

import pytest
from strategy_lab.backtest.models import Bar


def make_bars(closes: Sequence[float], symbol: str = "TEST", start: date = date(2024, 1, 1)) -> list[Bar]:
    """Build consecutive daily bars whose OHLC all equal the given closes."""
    return [
        Bar(
            date=start + timedelta(days=i),
            open=close,
            high=close,
            low=close,
            close=close,
            volume=1000.0,
            symbol=symbol,
        )
        for i, close in enumerate(closes)
    ]


@pytest.fixture
def bar_factory() -> Callable[..., list[Bar]]:
    """Factory for daily bar sequences built from close prices."""
    return make_bars
