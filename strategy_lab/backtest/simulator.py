"""Single-position trade simulation.

The simulator is a two-state machine evaluated bar by bar:

    flat    + enter[i]                     -> holding (entry at bar i)
    holding + exit[i] and i > entry index  -> flat    (trade closed at bar i)

Constraints (long-only, one position, close-to-close):
- At most one open position; entries while holding are ignored.
- An exit on the entry bar is ignored, so every trade lasts at least one bar.
- A position still open on the last bar is not closed into a Trade. It only
  shows up in the equity curve through its mark-to-market value.
"""

from collections.abc import Sequence

from strategy_lab.backtest.models import Bar, Trade


def simulate(
    bars: Sequence[Bar],
    sig_enter: Sequence[bool],
    sig_exit: Sequence[bool],
) -> tuple[list[Trade], list[float]]:
    """Run the position state machine over bars and signals.

    Equity starts at 1. `realized` is the product of (1 + pnl) over closed
    trades; while holding from entry bar e, equity[i] = realized * close[i] / close[e],
    otherwise equity[i] = realized.

    Args:
        bars: Bars sorted ascending by date.
        sig_enter: Entry flags aligned with bars.
        sig_exit: Exit flags aligned with bars.

    Returns:
        Tuple of (trades, equity). equity has len(bars) values.

    Raises:
        ValueError: If the signal sequences do not match the bar count.
    """
    if not len(bars) == len(sig_enter) == len(sig_exit):
        raise ValueError(
            f"Signal length mismatch: bars={len(bars)}, "
            f"enter={len(sig_enter)}, exit={len(sig_exit)}"
        )

    trades: list[Trade] = []
    equity: list[float] = []
    holding = False
    entry_index = -1
    realized = 1.0

    for i, bar in enumerate(bars):
        if not holding and sig_enter[i]:
            holding = True
            entry_index = i
        elif holding and sig_exit[i] and i > entry_index:
            entry_price = bars[entry_index].close
            exit_price = bar.close
            pnl = (exit_price - entry_price) / entry_price
            realized *= 1.0 + pnl
            trades.append(
                Trade(
                    entry_index=entry_index,
                    exit_index=i,
                    entry_price=entry_price,
                    exit_price=exit_price,
                    pnl=pnl,
                )
            )
            holding = False

        if holding:
            equity.append(realized * bar.close / bars[entry_index].close)
        else:
            equity.append(realized)

    return trades, equity
