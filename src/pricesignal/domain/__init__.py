"""Domain models and error types."""

from .errors import (
    ConfigError,
    NoDataForTimeframeError,
    PriceSignalError,
    ProviderTransportError,
    SymbolNotFoundError,
)
from .models import (
    AssetClass,
    Candle,
    CandleSeries,
    Decision,
    IndicatorSet,
    MacdValue,
    OhlcResult,
    PriceQuote,
    ResolvedSymbol,
    SignalResult,
    Timeframe,
)

__all__ = [
    "AssetClass",
    "Candle",
    "CandleSeries",
    "ConfigError",
    "Decision",
    "IndicatorSet",
    "MacdValue",
    "NoDataForTimeframeError",
    "OhlcResult",
    "PriceQuote",
    "PriceSignalError",
    "ProviderTransportError",
    "ResolvedSymbol",
    "SignalResult",
    "SymbolNotFoundError",
    "Timeframe",
]
