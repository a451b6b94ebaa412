"""Signal decision engine."""

from .engine import (
    DEFAULT_MIN_BARS,
    DecisionThresholds,
    classify,
    decide,
    decide_from_ohlc,
    price_decimals,
    risk_distance,
    round_price,
)

__all__ = [
    "DEFAULT_MIN_BARS",
    "DecisionThresholds",
    "classify",
    "decide",
    "decide_from_ohlc",
    "price_decimals",
    "risk_distance",
    "round_price",
]
