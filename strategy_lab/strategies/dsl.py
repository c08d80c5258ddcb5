# strategy_lab/strategies/dsl.py
"""Strategy DSL models and normalization.

A strategy document is a loosely typed mapping, usually parsed from JSON:

    {
        "name": "Trend follower",
        "rules": [
            {"type": "sma_cross", "params": {"fast": 10, "slow": 20}, "enter": "fast_above"},
            {"type": "rsi_threshold", "params": {"period": 14, "low": 30, "high": 70}}
        ]
    }

normalise_dsl() coerces such a document into a StrategyDSL: a frozen model
whose rules form a closed tagged union over the four supported rule kinds,
each carrying only its own parameter record with defaults filled in.

Classes:
    StrategyValidationError: Raised when a document cannot be normalized
    MacdCrossRule, RsiThresholdRule, SmaCrossRule, EmaCrossRule: Rule variants
    StrategyDSL: Canonical strategy document
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY_NAME = "Custom Strategy"


class StrategyValidationError(ValueError):
    """Raised when a strategy document is rejected.

    Attributes:
        message: Human-readable reason, suitable for a 4xx response body.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DSLBaseModel(BaseModel):
    """Base model for DSL entities: immutable, no unknown fields."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class MacdDirection(str, Enum):
    """Which MACD/signal crossover a MACD rule reacts to."""

    BULL = "bull"
    BEAR = "bear"


class RsiDirection(str, Enum):
    """LONG: enter oversold, exit overbought. SHORT inverts both."""

    LONG = "long"
    SHORT = "short"


class CrossDirection(str, Enum):
    """Which fast/slow crossover a moving-average rule reacts to."""

    FAST_ABOVE = "fast_above"
    FAST_BELOW = "fast_below"


class MacdParams(DSLBaseModel):
    fast: FiniteFloat = 12.0
    slow: FiniteFloat = 26.0
    signal: FiniteFloat = 9.0


class RsiParams(DSLBaseModel):
    period: FiniteFloat = 14.0
    low: FiniteFloat = 30.0
    high: FiniteFloat = 70.0


class CrossParams(DSLBaseModel):
    fast: FiniteFloat = 10.0
    slow: FiniteFloat = 20.0


class MacdCrossRule(DSLBaseModel):
    """Enter/exit on MACD line crossing its signal line.

    Defaults: enter on a bullish cross, exit on a bearish cross.
    """

    type: Literal["macd_cross"] = "macd_cross"
    params: MacdParams = Field(default_factory=MacdParams)
    enter: MacdDirection | None = None
    exit: MacdDirection | None = None

    @property
    def enter_direction(self) -> MacdDirection:
        return self.enter or MacdDirection.BULL

    @property
    def exit_direction(self) -> MacdDirection:
        return self.exit or MacdDirection.BEAR


class RsiThresholdRule(DSLBaseModel):
    """Enter/exit when RSI reaches the low or high threshold.

    Defaults: long on both sides (enter at rsi <= low, exit at rsi >= high).
    """

    type: Literal["rsi_threshold"] = "rsi_threshold"
    params: RsiParams = Field(default_factory=RsiParams)
    enter: RsiDirection | None = None
    exit: RsiDirection | None = None

    @property
    def enter_direction(self) -> RsiDirection:
        return self.enter or RsiDirection.LONG

    @property
    def exit_direction(self) -> RsiDirection:
        return self.exit or RsiDirection.LONG


class _MovingAverageCrossRule(DSLBaseModel):
    params: CrossParams = Field(default_factory=CrossParams)
    enter: CrossDirection | None = None
    exit: CrossDirection | None = None

    @property
    def enter_direction(self) -> CrossDirection:
        return self.enter or CrossDirection.FAST_ABOVE

    @property
    def exit_direction(self) -> CrossDirection:
        return self.exit or CrossDirection.FAST_BELOW


class SmaCrossRule(_MovingAverageCrossRule):
    """Fast SMA crossing the slow SMA."""

    type: Literal["sma_cross"] = "sma_cross"


class EmaCrossRule(_MovingAverageCrossRule):
    """Fast EMA crossing the slow EMA."""

    type: Literal["ema_cross"] = "ema_cross"


Rule = Annotated[
    Union[MacdCrossRule, RsiThresholdRule, SmaCrossRule, EmaCrossRule],
    Field(discriminator="type"),
]


class StrategyDSL(DSLBaseModel):
    """A named, ordered, non-empty set of rules.

    Attributes:
        name: Display name of the strategy.
        rules: Rules in document order. Their signals are OR-combined.
    """

    name: str = DEFAULT_STRATEGY_NAME
    rules: tuple[Rule, ...] = Field(min_length=1)

    def to_document(self) -> dict[str, Any]:
        """Plain JSON-compatible form. normalise_dsl() maps it back to an equal model."""
        return self.model_dump(mode="json", exclude_none=True)


RULE_TYPES: tuple[str, ...] = ("macd_cross", "rsi_threshold", "sma_cross", "ema_cross")


def _to_number(value: Any) -> float:
    """Coerce numbers and numeric strings to float; anything else is NaN."""
    if isinstance(value, bool):
        return math.nan
    try:
        if isinstance(value, (int, float, Decimal)):
            return float(value)
        if isinstance(value, str) and value.strip():
            return float(value.strip())
    except (OverflowError, ValueError):
        return math.nan
    return math.nan


def _number_or(value: Any, fallback: float) -> float:
    number = _to_number(value)
    return number if math.isfinite(number) else fallback


def _direction(value: Any, choices: Mapping[str, Enum]) -> Any:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return choices.get(value)
    return None


_MACD_DIRECTIONS: dict[str, MacdDirection] = {d.value: d for d in MacdDirection}
_RSI_DIRECTIONS: dict[str, RsiDirection] = {d.value: d for d in RsiDirection}
_CROSS_DIRECTIONS: dict[str, CrossDirection] = {
    **{d.value: d for d in CrossDirection},
    "long": CrossDirection.FAST_ABOVE,
    "short": CrossDirection.FAST_BELOW,
}


def _normalise_rule(rule_type: str, raw: Mapping[str, Any]) -> Rule:
    params = raw.get("params")
    if not isinstance(params, Mapping):
        params = {}

    # Direction tags may sit inside params or next to them; a non-null params tag wins.
    enter_tag = params.get("enter")
    if enter_tag is None:
        enter_tag = raw.get("enter")
    exit_tag = params.get("exit")
    if exit_tag is None:
        exit_tag = raw.get("exit")

    if rule_type == "macd_cross":
        return MacdCrossRule(
            params=MacdParams(
                fast=_number_or(params.get("fast"), 12.0),
                slow=_number_or(params.get("slow"), 26.0),
                signal=_number_or(params.get("signal"), 9.0),
            ),
            enter=_direction(enter_tag, _MACD_DIRECTIONS),
            exit=_direction(exit_tag, _MACD_DIRECTIONS),
        )
    if rule_type == "rsi_threshold":
        return RsiThresholdRule(
            params=RsiParams(
                period=_number_or(params.get("period"), 14.0),
                low=_number_or(params.get("low"), 30.0),
                high=_number_or(params.get("high"), 70.0),
            ),
            enter=_direction(enter_tag, _RSI_DIRECTIONS),
            exit=_direction(exit_tag, _RSI_DIRECTIONS),
        )

    rule_cls = SmaCrossRule if rule_type == "sma_cross" else EmaCrossRule
    return rule_cls(
        params=CrossParams(
            fast=_number_or(params.get("fast"), 10.0),
            slow=_number_or(params.get("slow"), 20.0),
        ),
        enter=_direction(enter_tag, _CROSS_DIRECTIONS),
        exit=_direction(exit_tag, _CROSS_DIRECTIONS),
    )


def normalise_dsl(candidate: Any) -> StrategyDSL:
    """Validate and coerce a strategy document into a StrategyDSL.

    Unknown rule kinds are dropped. Parameters fall back to per-kind
    defaults when missing or not numeric; unknown direction tags become
    None so the rule's own default direction applies.

    Args:
        candidate: Parsed strategy document, or an existing StrategyDSL.

    Returns:
        Canonical StrategyDSL.

    Raises:
        StrategyValidationError: If the candidate is not a mapping, or no
            rule of a supported kind remains.
    """
    if isinstance(candidate, StrategyDSL):
        return candidate
    if not isinstance(candidate, Mapping):
        raise StrategyValidationError("Strategy DSL must be an object")

    raw_name = candidate.get("name")
    name = raw_name.strip() if isinstance(raw_name, str) and raw_name.strip() else DEFAULT_STRATEGY_NAME

    raw_rules = candidate.get("rules")
    if not isinstance(raw_rules, (list, tuple)):
        raw_rules = []

    rules: list[Rule] = []
    for position, raw in enumerate(raw_rules):
        rule_type = raw.get("type") if isinstance(raw, Mapping) else None
        if rule_type not in RULE_TYPES:
            logger.warning("Dropping rule %d of %r: unsupported type %r", position, name, rule_type)
            continue
        rules.append(_normalise_rule(rule_type, raw))

    if not rules:
        raise StrategyValidationError("Strategy contains no usable rules")

    return StrategyDSL(name=name, rules=tuple(rules))
