"""Backtest engine for evaluating rule-based strategies on daily bars."""

from strategy_lab.backtest.bar_loader import BarLoader, CSVBarLoader, InMemoryBarLoader, select_range
from strategy_lab.backtest.engine import BacktestEngine, normalize_tickers, run_backtest
from strategy_lab.backtest.metrics import MetricsCalculator
from strategy_lab.backtest.models import BacktestResult, Bar, BatchResult, Stats, TickerResult, Trade
from strategy_lab.backtest.simulator import simulate

__all__ = [
    "BacktestEngine",
    "BacktestResult",
    "Bar",
    "BarLoader",
    "BatchResult",
    "CSVBarLoader",
    "InMemoryBarLoader",
    "MetricsCalculator",
    "Stats",
    "TickerResult",
    "Trade",
    "normalize_tickers",
    "run_backtest",
    "select_range",
    "simulate",
]
