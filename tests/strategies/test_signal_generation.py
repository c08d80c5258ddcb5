"""Tests for rule signal generation."""

import pytest
from strategy_lab.strategies.dsl import normalise_dsl
from strategy_lab.strategies.indicators import IndicatorCache, IndicatorKey, IndicatorKind, macd
from strategy_lab.strategies.signals import (
    SignalSet,
    cross_down,
    cross_up,
    generate_rule_signals,
    generate_signals,
)

# fast SMA(2) crosses above SMA(3) on bar 4 and back below on bar 7
# (bar 6 is a tie: both equal 11)
CROSS_CLOSES = [10.0, 9.0, 8.0, 9.0, 11.0, 12.0, 10.0, 8.0, 7.0]

# RSI(2): 0 on bar 2, 60 on bar 3, 86.67 on bar 4
RSI_CLOSES = [10.0, 9.0, 8.0, 9.5, 12.0]


def _rule(document: dict):
    return normalise_dsl({"rules": [document]}).rules[0]


class TestCrossDetection:
    """Tests for crossover helpers."""

    def test_cross_up_requires_strict_move_above(self) -> None:
        a = [1.0, 2.0, 3.0]
        b = [2.0, 2.0, 2.0]

        # bar 1: 1 <= 2 then 2 > 2 is false; bar 2: 2 <= 2 then 3 > 2
        assert cross_up(a, b) == [False, False, True]

    def test_cross_down_tie_on_previous_bar_counts(self) -> None:
        a = [3.0, 2.0, 1.0]
        b = [2.0, 2.0, 2.0]

        assert cross_down(a, b) == [False, False, True]

    def test_absent_values_never_cross(self) -> None:
        a = [None, 1.0, 3.0, None, 5.0]
        b = [None, 2.0, 2.0, 2.0, 2.0]

        assert cross_up(a, b) == [False, False, True, False, False]

    def test_first_bar_never_crosses(self) -> None:
        assert cross_up([5.0], [1.0]) == [False]
        assert cross_down([], []) == []


class TestSignalSet:
    """Tests for SignalSet."""

    def test_or_combination(self) -> None:
        left = SignalSet(enter=(True, False, False), exit=(False, False, True))
        right = SignalSet(enter=(False, True, False), exit=(False, False, False))

        combined = left | right

        assert combined.enter == (True, True, False)
        assert combined.exit == (False, False, True)

    def test_length_mismatch_rejected(self) -> None:
        with pytest.raises(ValueError, match="length mismatch"):
            SignalSet(enter=(True,), exit=())

    def test_empty(self) -> None:
        signals = SignalSet.empty(3)

        assert len(signals) == 3
        assert not any(signals.enter) and not any(signals.exit)


class TestMovingAverageCrossRules:
    """Tests for sma_cross / ema_cross rules."""

    def test_sma_cross_defaults(self) -> None:
        rule = _rule({"type": "sma_cross", "params": {"fast": 2, "slow": 3}})

        signals = generate_rule_signals(rule, IndicatorCache(CROSS_CLOSES))

        assert [i for i, flag in enumerate(signals.enter) if flag] == [4]
        assert [i for i, flag in enumerate(signals.exit) if flag] == [7]

    def test_sma_cross_inverted_directions(self) -> None:
        rule = _rule(
            {"type": "sma_cross", "params": {"fast": 2, "slow": 3}, "enter": "fast_below", "exit": "fast_above"}
        )

        signals = generate_rule_signals(rule, IndicatorCache(CROSS_CLOSES))

        assert [i for i, flag in enumerate(signals.enter) if flag] == [7]
        assert [i for i, flag in enumerate(signals.exit) if flag] == [4]

    def test_ema_cross_uses_ema_series(self) -> None:
        rule = _rule({"type": "ema_cross", "params": {"fast": 2, "slow": 3}})
        cache = IndicatorCache(CROSS_CLOSES)

        signals = generate_rule_signals(rule, cache)

        fast = cache.get(IndicatorKind.EMA, 2)
        slow = cache.get(IndicatorKind.EMA, 3)
        assert list(signals.enter) == cross_up(fast, slow)
        assert list(signals.exit) == cross_down(fast, slow)
        assert IndicatorKey(IndicatorKind.SMA, 2) not in cache


class TestRsiThresholdRule:
    """Tests for rsi_threshold rules."""

    def test_long_enters_oversold_exits_overbought(self) -> None:
        rule = _rule({"type": "rsi_threshold", "params": {"period": 2, "low": 30, "high": 70}})

        signals = generate_rule_signals(rule, IndicatorCache(RSI_CLOSES))

        assert signals.enter == (False, False, True, False, False)
        assert signals.exit == (False, False, False, False, True)

    def test_short_inverts_thresholds(self) -> None:
        rule = _rule(
            {"type": "rsi_threshold", "params": {"period": 2}, "enter": "short", "exit": "short"}
        )

        signals = generate_rule_signals(rule, IndicatorCache(RSI_CLOSES))

        assert signals.enter == (False, False, False, False, True)
        assert signals.exit == (False, False, True, False, False)

    def test_absent_rsi_never_fires(self) -> None:
        rule = _rule({"type": "rsi_threshold", "params": {"period": 14, "low": 100, "high": 0}})

        signals = generate_rule_signals(rule, IndicatorCache(RSI_CLOSES))

        assert not any(signals.enter)
        assert not any(signals.exit)


class TestMacdCrossRule:
    """Tests for macd_cross rules."""

    PRICES = [100.0, 98.0, 97.0, 99.0, 103.0, 106.0, 104.0, 100.0, 96.0, 95.0, 97.0, 101.0]

    def test_default_bull_enter_bear_exit(self) -> None:
        rule = _rule({"type": "macd_cross", "params": {"fast": 2, "slow": 4, "signal": 2}})

        signals = generate_rule_signals(rule, IndicatorCache(self.PRICES))

        expected = macd(self.PRICES, 2, 4, 2)
        assert list(signals.enter) == cross_up(expected.macd, expected.signal)
        assert list(signals.exit) == cross_down(expected.macd, expected.signal)
        assert any(signals.enter)
        assert any(signals.exit)

    def test_bear_enter_override(self) -> None:
        rule = _rule({"type": "macd_cross", "params": {"fast": 2, "slow": 4, "signal": 2}, "enter": "bear"})

        signals = generate_rule_signals(rule, IndicatorCache(self.PRICES))

        expected = macd(self.PRICES, 2, 4, 2)
        assert list(signals.enter) == cross_down(expected.macd, expected.signal)

    def test_macd_reuses_cached_emas(self) -> None:
        cache = IndicatorCache(self.PRICES)
        rule = _rule({"type": "macd_cross", "params": {"fast": 2, "slow": 4, "signal": 2}})

        generate_rule_signals(rule, cache)

        assert IndicatorKey(IndicatorKind.EMA, 2) in cache
        assert IndicatorKey(IndicatorKind.EMA, 4) in cache
        assert len(cache) == 2


class TestGenerateSignals:
    """Tests for OR-combination across rules."""

    def test_rules_are_or_combined(self) -> None:
        dsl = normalise_dsl(
            {
                "rules": [
                    {"type": "sma_cross", "params": {"fast": 2, "slow": 3}},
                    {"type": "sma_cross", "params": {"fast": 2, "slow": 3}, "enter": "fast_below"},
                ]
            }
        )

        signals = generate_signals(dsl, CROSS_CLOSES)

        assert [i for i, flag in enumerate(signals.enter) if flag] == [4, 7]
        assert [i for i, flag in enumerate(signals.exit) if flag] == [7]

    def test_shared_series_computed_once(self) -> None:
        dsl = normalise_dsl(
            {
                "rules": [
                    {"type": "sma_cross", "params": {"fast": 2, "slow": 3}},
                    {"type": "sma_cross", "params": {"fast": 3, "slow": 5}},
                    {"type": "ema_cross", "params": {"fast": 2, "slow": 3}},
                    {"type": "macd_cross", "params": {"fast": 2, "slow": 3, "signal": 2}},
                ]
            }
        )
        cache = IndicatorCache(CROSS_CLOSES)

        generate_signals(dsl, CROSS_CLOSES, cache)

        # sma 2, 3, 5 and ema 2, 3 (shared with the MACD rule)
        assert len(cache) == 5

    def test_empty_closes(self) -> None:
        dsl = normalise_dsl({"rules": [{"type": "macd_cross"}, {"type": "rsi_threshold"}]})

        signals = generate_signals(dsl, [])

        assert signals.enter == ()
        assert signals.exit == ()
