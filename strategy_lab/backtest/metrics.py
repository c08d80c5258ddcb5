"""Performance metrics for backtest results."""

from collections.abc import Mapping, Sequence
from typing import Any

from strategy_lab.backtest.models import Stats, Trade


class MetricsCalculator:
    """Computes summary statistics from trades and equity curves."""

    @staticmethod
    def compute(trades: Sequence[Trade], equity: Sequence[float]) -> Stats:
        """Compute all summary metrics.

        Args:
            trades: Closed trades of one backtest.
            equity: Marked-to-market equity curve of the same backtest.

        Returns:
            Stats with:
              - total_return_pct: (equity[-1] - 1) * 100, or 0 for an empty curve.
                Includes the unrealized result of a position left open.
              - trade_count: len(trades)
              - win_rate_pct: 100 * winners / trade_count (0 if no trades)
              - avg_trade_pct: 100 * mean(pnl) (0 if no trades)
        """
        total_return_pct = (equity[-1] - 1.0) * 100.0 if equity else 0.0
        win_rate_pct, avg_trade_pct = MetricsCalculator._compute_trade_metrics(trades)

        return Stats(
            total_return_pct=total_return_pct,
            trade_count=len(trades),
            win_rate_pct=win_rate_pct,
            avg_trade_pct=avg_trade_pct,
        )

    @staticmethod
    def _compute_trade_metrics(trades: Sequence[Trade]) -> tuple[float, float]:
        """Compute win rate and average trade return, both in percent.

        A trade is a winner when its pnl is strictly positive.
        """
        if not trades:
            return 0.0, 0.0

        winners = sum(1 for trade in trades if trade.pnl > 0)
        win_rate_pct = 100.0 * winners / len(trades)
        avg_trade_pct = 100.0 * sum(trade.pnl for trade in trades) / len(trades)
        return win_rate_pct, avg_trade_pct

    @staticmethod
    def aggregate(stats: Sequence[Mapping[str, Any]]) -> dict[str, float]:
        """Equal-weighted mean of every numeric field across instruments.

        The field set is the union of keys whose value is numeric in at least
        one entry. An entry that lacks a field, or holds a non-numeric value
        for it, counts as 0 for that field.

        Example:
            >>> MetricsCalculator.aggregate([
            ...     {"totalReturnPct": 10},
            ...     {"totalReturnPct": -2, "trades": 3},
            ... ])
            {'totalReturnPct': 4.0, 'trades': 1.5}

        Args:
            stats: Per-instrument stats in wire format (see Stats.to_dict).

        Returns:
            Mapping of field name to mean. Empty when there are no entries.
        """
        if not stats:
            return {}

        fields: list[str] = []
        for entry in stats:
            for key, value in entry.items():
                if _is_number(value) and key not in fields:
                    fields.append(key)

        count = len(stats)
        return {
            key: sum(
                float(entry[key]) if _is_number(entry.get(key)) else 0.0 for entry in stats
            )
            / count
            for key in fields
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
