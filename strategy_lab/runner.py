# strategy_lab/runner.py
"""Command-line batch runner.

Loads a strategy file, evaluates it over daily bars from a CSV file and
writes the batch response as JSON to stdout. Logs go to stderr so stdout
stays machine-readable.

Usage:
    python -m strategy_lab.runner --strategy strategies/trend.yml \\
        --tickers AAPL MSFT --start 2025-01-01 --end 2025-06-30 > result.json
"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from datetime import date
from typing import Any

from strategy_lab.backtest.bar_loader import CSVBarLoader
from strategy_lab.backtest.engine import BacktestEngine
from strategy_lab.config import configure_logging, get_settings
from strategy_lab.strategies.loader import StrategyLoader, StrategyLoadError

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {value}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Backtest a rule-based strategy over daily bars")
    parser.add_argument("--strategy", required=True, help="Path to a YAML or JSON strategy file")
    parser.add_argument("--tickers", required=True, nargs="+", help="Ticker symbols to evaluate")
    parser.add_argument("--start", required=True, type=_parse_date, help="First bar date (inclusive)")
    parser.add_argument("--end", required=True, type=_parse_date, help="Last bar date (inclusive)")
    parser.add_argument("--csv", default=None, help="Bar CSV file (defaults to STRATEGY_LAB_BARS_CSV_PATH)")
    return parser


def run(argv: Sequence[str] | None = None) -> tuple[int, dict[str, Any]]:
    """Run a batch from command-line arguments.

    Returns:
        Tuple of (exit code, JSON-compatible payload). The payload is the
        batch response on success, or {"error": ...} on failure.
    """
    args = build_parser().parse_args(argv)
    settings = get_settings()

    try:
        dsl = StrategyLoader().load_file(args.strategy)
    except (FileNotFoundError, StrategyLoadError) as e:
        logger.error("Could not load strategy: %s", e)
        return 1, {"error": str(e)}

    engine = BacktestEngine(CSVBarLoader(args.csv or settings.bars_csv_path), settings)
    try:
        result = asyncio.run(engine.run_batch(dsl, args.tickers, args.start, args.end))
    except ValueError as e:
        logger.error("Batch rejected: %s", e)
        return 2, {"error": str(e)}

    return 0, result.to_response().model_dump(mode="json", by_alias=True)


def main() -> None:
    """Main entry point for the batch runner."""
    configure_logging()
    code, payload = run()
    print(json.dumps(payload))
    sys.exit(code)


if __name__ == "__main__":
    main()
