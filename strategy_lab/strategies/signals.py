# strategy_lab/strategies/signals.py
"""Entry/exit signal generation from strategy rules.

Each rule produces two boolean sequences aligned with the bars: whether the
rule alone calls for an entry or an exit on that bar. A strategy's signals are
the element-wise OR across all of its rules.

Crossovers compare two consecutive bars. `a` crosses up through `b` at bar i
when a[i-1] <= b[i-1] and a[i] > b[i]; it crosses down when a[i-1] >= b[i-1]
and a[i] < b[i]. A cross needs all four values; an absent value never
produces a signal.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from strategy_lab.strategies.dsl import (
    CrossDirection,
    EmaCrossRule,
    MacdCrossRule,
    MacdDirection,
    RsiDirection,
    RsiThresholdRule,
    Rule,
    SmaCrossRule,
    StrategyDSL,
)
from strategy_lab.strategies.indicators import IndicatorCache, IndicatorKind, macd_from_emas


@dataclass(frozen=True)
class SignalSet:
    """Per-bar entry and exit flags.

    Attributes:
        enter: True where an entry is signalled.
        exit: True where an exit is signalled.
    """

    enter: tuple[bool, ...]
    exit: tuple[bool, ...]

    def __post_init__(self) -> None:
        if len(self.enter) != len(self.exit):
            raise ValueError(
                f"enter/exit length mismatch: {len(self.enter)} != {len(self.exit)}"
            )

    @classmethod
    def empty(cls, length: int) -> "SignalSet":
        return cls(enter=(False,) * length, exit=(False,) * length)

    def __or__(self, other: "SignalSet") -> "SignalSet":
        return SignalSet(
            enter=tuple(a or b for a, b in zip(self.enter, other.enter, strict=True)),
            exit=tuple(a or b for a, b in zip(self.exit, other.exit, strict=True)),
        )

    def __len__(self) -> int:
        return len(self.enter)


def cross_up(a: Sequence[float | None], b: Sequence[float | None]) -> list[bool]:
    """True at i when a moves from <= b on bar i-1 to > b on bar i."""
    out = [False] * len(a)
    for i in range(1, len(a)):
        prev_a, prev_b, cur_a, cur_b = a[i - 1], b[i - 1], a[i], b[i]
        if prev_a is None or prev_b is None or cur_a is None or cur_b is None:
            continue
        out[i] = prev_a <= prev_b and cur_a > cur_b
    return out


def cross_down(a: Sequence[float | None], b: Sequence[float | None]) -> list[bool]:
    """True at i when a moves from >= b on bar i-1 to < b on bar i."""
    out = [False] * len(a)
    for i in range(1, len(a)):
        prev_a, prev_b, cur_a, cur_b = a[i - 1], b[i - 1], a[i], b[i]
        if prev_a is None or prev_b is None or cur_a is None or cur_b is None:
            continue
        out[i] = prev_a >= prev_b and cur_a < cur_b
    return out


def _macd_signals(rule: MacdCrossRule, cache: IndicatorCache) -> SignalSet:
    params = rule.params
    result = macd_from_emas(
        cache.get(IndicatorKind.EMA, params.fast),
        cache.get(IndicatorKind.EMA, params.slow),
        params.signal,
    )
    crosses = {
        MacdDirection.BULL: cross_up(result.macd, result.signal),
        MacdDirection.BEAR: cross_down(result.macd, result.signal),
    }
    return SignalSet(
        enter=tuple(crosses[rule.enter_direction]),
        exit=tuple(crosses[rule.exit_direction]),
    )


def _rsi_signals(rule: RsiThresholdRule, cache: IndicatorCache) -> SignalSet:
    params = rule.params
    values = cache.get(IndicatorKind.RSI, params.period)
    oversold = tuple(v is not None and v <= params.low for v in values)
    overbought = tuple(v is not None and v >= params.high for v in values)

    enter = oversold if rule.enter_direction is RsiDirection.LONG else overbought
    exit_ = overbought if rule.exit_direction is RsiDirection.LONG else oversold
    return SignalSet(enter=enter, exit=exit_)


def _moving_average_signals(
    rule: SmaCrossRule | EmaCrossRule, cache: IndicatorCache
) -> SignalSet:
    kind = IndicatorKind.SMA if isinstance(rule, SmaCrossRule) else IndicatorKind.EMA
    fast = cache.get(kind, rule.params.fast)
    slow = cache.get(kind, rule.params.slow)
    crosses = {
        CrossDirection.FAST_ABOVE: cross_up(fast, slow),
        CrossDirection.FAST_BELOW: cross_down(fast, slow),
    }
    return SignalSet(
        enter=tuple(crosses[rule.enter_direction]),
        exit=tuple(crosses[rule.exit_direction]),
    )


_RULE_HANDLERS: dict[type, Callable[..., SignalSet]] = {
    MacdCrossRule: _macd_signals,
    RsiThresholdRule: _rsi_signals,
    SmaCrossRule: _moving_average_signals,
    EmaCrossRule: _moving_average_signals,
}


def generate_rule_signals(rule: Rule, cache: IndicatorCache) -> SignalSet:
    """Signals for a single rule over the cache's close prices.

    Raises:
        TypeError: If the rule is not one of the supported variants.
    """
    handler = _RULE_HANDLERS.get(type(rule))
    if handler is None:
        raise TypeError(f"Unsupported rule: {type(rule).__name__}")
    return handler(rule, cache)


def generate_signals(
    dsl: StrategyDSL,
    closes: Sequence[float],
    cache: IndicatorCache | None = None,
) -> SignalSet:
    """OR-combined signals of every rule in the strategy.

    Args:
        dsl: Normalized strategy.
        closes: Close prices, oldest first.
        cache: Indicator cache for `closes`. A fresh one is created when
            omitted; pass one in to share series across calls in one run.

    Returns:
        SignalSet of len(closes).
    """
    if cache is None:
        cache = IndicatorCache(closes)
    combined = SignalSet.empty(len(cache.closes))
    for rule in dsl.rules:
        combined = combined | generate_rule_signals(rule, cache)
    return combined
