"""OHLC provider implementations and the fallback gateway."""

from .base import HttpProvider, OhlcProvider, ProviderResponse
from .binance import BinanceProvider
from .fcs import FcsProvider
from .fmp import FmpProvider
from .gateway import OhlcGateway, freshness, select_candidate
from .yfinance_data import YahooProvider

__all__ = [
    "BinanceProvider",
    "FcsProvider",
    "FmpProvider",
    "HttpProvider",
    "OhlcGateway",
    "OhlcProvider",
    "ProviderResponse",
    "YahooProvider",
    "freshness",
    "select_candidate",
]
