"""Strategy DSL, signal generation and indicators."""

from strategy_lab.strategies.dsl import (
    DEFAULT_STRATEGY_NAME,
    CrossDirection,
    EmaCrossRule,
    MacdCrossRule,
    MacdDirection,
    Rule,
    RsiDirection,
    RsiThresholdRule,
    SmaCrossRule,
    StrategyDSL,
    StrategyValidationError,
    normalise_dsl,
)
from strategy_lab.strategies.loader import StrategyLoader, StrategyLoadError
from strategy_lab.strategies.signals import SignalSet, generate_rule_signals, generate_signals

__all__ = [
    "DEFAULT_STRATEGY_NAME",
    "CrossDirection",
    "EmaCrossRule",
    "MacdCrossRule",
    "MacdDirection",
    "Rule",
    "RsiDirection",
    "RsiThresholdRule",
    "SignalSet",
    "SmaCrossRule",
    "StrategyDSL",
    "StrategyLoadError",
    "StrategyLoader",
    "StrategyValidationError",
    "generate_rule_signals",
    "generate_signals",
    "normalise_dsl",
]
