"""Symbol and timeframe resolution from free-form text."""

from .symbols import (
    ALIAS_TABLE,
    asset_class_for,
    display_symbol,
    normalize_symbol,
    ohlc_symbol,
)
from .text import normalize_text
from .timeframes import coarser_timeframes, parse_timeframe, resolve_timeframe

__all__ = [
    "ALIAS_TABLE",
    "asset_class_for",
    "coarser_timeframes",
    "display_symbol",
    "normalize_symbol",
    "normalize_text",
    "ohlc_symbol",
    "parse_timeframe",
    "resolve_timeframe",
]
