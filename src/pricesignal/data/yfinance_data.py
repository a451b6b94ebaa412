"""Yahoo Finance candle provider via yfinance."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from pricesignal.data.base import ProviderResponse
from pricesignal.data.rows import YahooBar
from pricesignal.domain.errors import ProviderTransportError
from pricesignal.domain.models import ResolvedSymbol, Timeframe
from pricesignal.normalize.symbols import ohlc_symbol

_YAHOO_TICKERS = {
    "XAUUSD": "GC=F",
    "XAGUSD": "SI=F",
    "XTIUSD": "CL=F",
    "XBRUSD": "BZ=F",
}

# yfinance has no 4h bars.
_YAHOO_INTERVALS = {
    Timeframe.M1: "1m",
    Timeframe.M5: "5m",
    Timeframe.M15: "15m",
    Timeframe.M30: "30m",
    Timeframe.H1: "60m",
    Timeframe.D1: "1d",
}


class YahooProvider:
    """Fetch candles from Yahoo Finance; metals map to front-month futures."""

    name = "yahoo"

    def __init__(self) -> None:
        self.logger = logging.getLogger("pricesignal.data.yahoo")

    def fetch(self, symbol: ResolvedSymbol, timeframe: Timeframe, limit: int) -> ProviderResponse | None:
        interval = _YAHOO_INTERVALS.get(timeframe)
        if interval is None:
            return None
        try:
            import yfinance as yf
        except ImportError as exc:
            raise ProviderTransportError(self.name, "yfinance is not installed") from exc

        ticker = self.to_wire_symbol(symbol)
        try:
            history = yf.Ticker(ticker).history(
                period=self._period_for_interval(interval),
                interval=interval,
                auto_adjust=False,
                actions=False,
            )
        except Exception as exc:
            raise ProviderTransportError(self.name, f"{ticker}: {exc}") from exc

        frame = self._normalize_history(history)
        if frame.empty:
            return None
        frame = frame.tail(limit)
        rows = [
            YahooBar(index=index, open=row["open"], high=row["high"], low=row["low"], close=row["close"])
            for index, row in frame.iterrows()
        ]
        return ProviderResponse(provider=self.name, provider_symbol=ticker, rows=rows)

    @staticmethod
    def _normalize_history(history: Any) -> pd.DataFrame:
        if history is None:
            return pd.DataFrame(columns=["open", "high", "low", "close"])
        frame = pd.DataFrame(history).copy()
        if frame.empty:
            return pd.DataFrame(columns=["open", "high", "low", "close"])
        frame.columns = [str(column).strip().lower() for column in frame.columns]
        missing = [column for column in ("open", "high", "low", "close") if column not in frame.columns]
        if missing:
            raise ProviderTransportError("yahoo", f"payload missing columns {missing}")
        normalized = frame[["open", "high", "low", "close"]].apply(pd.to_numeric, errors="coerce")
        normalized.index = pd.to_datetime(frame.index, utc=True)
        return normalized.sort_index().dropna()

    @staticmethod
    def _period_for_interval(interval: str) -> str:
        if interval == "1m":
            return "7d"
        if interval in {"5m", "15m", "30m", "60m"}:
            return "60d"
        return "2y"

    @staticmethod
    def to_wire_symbol(symbol: ResolvedSymbol) -> str:
        compact = ohlc_symbol(symbol.symbol)
        if compact in _YAHOO_TICKERS:
            return _YAHOO_TICKERS[compact]
        if symbol.is_crypto:
            base = compact[:-4] if compact.endswith("USDT") else compact[:-3]
            return f"{base}-USD"
        return f"{compact}=X"
