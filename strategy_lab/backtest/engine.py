"""Backtest engine for running strategies over one or more instruments."""

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from strategy_lab.backtest.bar_loader import BarLoader
from strategy_lab.backtest.metrics import MetricsCalculator
from strategy_lab.backtest.models import BacktestResult, Bar, BatchResult, Stats, TickerResult
from strategy_lab.backtest.simulator import simulate
from strategy_lab.config import Settings, get_settings
from strategy_lab.strategies.dsl import StrategyDSL, normalise_dsl
from strategy_lab.strategies.indicators import IndicatorCache
from strategy_lab.strategies.signals import generate_signals

logger = logging.getLogger(__name__)


def run_backtest(dsl: StrategyDSL | Mapping[str, Any], bars: Sequence[Bar]) -> BacktestResult:
    """Evaluate one strategy against one instrument's bars.

    The run owns its indicator cache; nothing is shared between calls, so
    runs for different instruments can execute concurrently.

    Args:
        dsl: Normalized strategy, or a raw document to normalize first.
        bars: Bars sorted strictly ascending by date.

    Returns:
        BacktestResult with trades, marked-to-market equity and stats.
        Empty bars give no trades, an empty equity curve and zeroed stats.

    Raises:
        StrategyValidationError: If a raw document fails normalization.
    """
    strategy = normalise_dsl(dsl)
    closes = [bar.close for bar in bars]

    cache = IndicatorCache(closes)
    signals = generate_signals(strategy, closes, cache)
    trades, equity = simulate(bars, signals.enter, signals.exit)
    stats = MetricsCalculator.compute(trades, equity)

    return BacktestResult(
        name=strategy.name,
        trades=tuple(trades),
        equity=tuple(equity),
        stats=stats,
    )


def normalize_tickers(tickers: Iterable[str]) -> list[str]:
    """Strip, upper-case and de-duplicate tickers, keeping first occurrence order."""
    seen: list[str] = []
    for raw in tickers:
        ticker = raw.strip().upper()
        if ticker and ticker not in seen:
            seen.append(ticker)
    return seen


class BacktestEngine:
    """Orchestrates a strategy run across several instruments.

    Each ticker is loaded and evaluated independently:
    1. The strategy document is normalized once, before any data is read.
    2. Bars are loaded per ticker through the BarLoader.
    3. run_backtest() evaluates each ticker in isolation on a worker thread,
       so evaluation does not block the event loop. Loads and evaluations
       together are bounded by settings.max_concurrency.
    4. The per-ticker stats are folded into an equal-weighted summary.

    A ticker whose bars are missing or whose loader raises (any exception)
    yields an empty result and a log line; it never aborts the batch.
    """

    def __init__(self, bar_loader: BarLoader, settings: Settings | None = None) -> None:
        """Initialize the backtest engine.

        Args:
            bar_loader: Loader for historical bar data.
            settings: Batch limits; defaults to the process settings.
        """
        self._bar_loader = bar_loader
        self._settings = settings or get_settings()

    async def run_batch(
        self,
        dsl: StrategyDSL | Mapping[str, Any],
        tickers: Iterable[str],
        start_date: date,
        end_date: date,
    ) -> BatchResult:
        """Run a strategy over every ticker and aggregate the results.

        Args:
            dsl: Normalized strategy or raw strategy document.
            tickers: Requested ticker symbols.
            start_date: First bar date (inclusive).
            end_date: Last bar date (inclusive).

        Returns:
            BatchResult with per-ticker results in request order.

        Raises:
            StrategyValidationError: If the strategy document is invalid.
            ValueError: If no tickers are given or more than
                settings.max_instruments are requested.
        """
        strategy = normalise_dsl(dsl)

        symbols = normalize_tickers(tickers)
        if not symbols:
            raise ValueError("At least one ticker is required")
        if len(symbols) > self._settings.max_instruments:
            raise ValueError(
                f"Too many tickers: {len(symbols)} requested, "
                f"limit is {self._settings.max_instruments}"
            )

        logger.info(
            "Running batch backtest: strategy=%s, tickers=%d, period=%s to %s",
            strategy.name,
            len(symbols),
            start_date,
            end_date,
        )

        semaphore = asyncio.Semaphore(max(self._settings.max_concurrency, 1))

        async def run_one(ticker: str) -> tuple[TickerResult, list[str]]:
            async with semaphore:
                return await self._run_ticker(strategy, ticker, start_date, end_date)

        outcomes = await asyncio.gather(*(run_one(ticker) for ticker in symbols))

        per_ticker = [result for result, _ in outcomes]
        logs = [line for _, ticker_logs in outcomes for line in ticker_logs]
        summary = MetricsCalculator.aggregate([result.stats.to_dict() for result in per_ticker])

        logger.info(
            "Batch backtest complete: strategy=%s, tickers=%d, empty=%d",
            strategy.name,
            len(per_ticker),
            sum(1 for result in per_ticker if result.bar_count == 0),
        )

        return BatchResult(
            strategy_name=strategy.name,
            summary=summary,
            per_ticker=per_ticker,
            logs=logs,
        )

    async def _run_ticker(
        self,
        strategy: StrategyDSL,
        ticker: str,
        start_date: date,
        end_date: date,
    ) -> tuple[TickerResult, list[str]]:
        """Load and evaluate a single ticker, converting data problems into log lines."""
        logs: list[str] = []
        try:
            bars = await self._bar_loader.load(ticker, start_date, end_date)
        except Exception as e:
            logger.exception("Failed to load bars for %s: %s", ticker, e)
            logs.append(f"{ticker}: failed to load bars ({e})")
            bars = []

        if not bars:
            if not logs:
                logs.append(f"{ticker}: no bars in range")
            return TickerResult(ticker=ticker, stats=Stats(), trades=(), bar_count=0), logs

        result = await asyncio.to_thread(run_backtest, strategy, bars)
        logger.debug(
            "%s: %d bars, %d trades, total return %.2f%%",
            ticker,
            len(bars),
            result.stats.trade_count,
            result.stats.total_return_pct,
        )
        return (
            TickerResult(
                ticker=ticker,
                stats=result.stats,
                trades=result.trades,
                bar_count=len(bars),
            ),
            logs,
        )
