"""Financial Modeling Prep historical-chart provider (forex and crypto)."""

from __future__ import annotations

import requests

from pricesignal.data.base import DEFAULT_TIMEOUT_SECONDS, HttpProvider, ProviderResponse
from pricesignal.data.rows import FmpRow
from pricesignal.domain.models import ResolvedSymbol, Timeframe
from pricesignal.normalize.symbols import ohlc_symbol

FMP_BASE_URL = "https://financialmodelingprep.com/api/v3"

_FMP_INTERVALS = {
    Timeframe.M1: "1min",
    Timeframe.M5: "5min",
    Timeframe.M15: "15min",
    Timeframe.M30: "30min",
    Timeframe.H1: "1hour",
    Timeframe.H4: "4hour",
    Timeframe.D1: "1day",
}


class FmpProvider(HttpProvider):
    """Fetch candles from FMP; symbols go on the wire bare (``XAUUSD``, ``BTCUSD``)."""

    name = "fmp"

    def __init__(
        self,
        api_key: str,
        base_url: str = FMP_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, session=session)
        self.api_key = api_key

    def fetch(self, symbol: ResolvedSymbol, timeframe: Timeframe, limit: int) -> ProviderResponse | None:
        if not self.api_key:
            self.logger.debug("fmp skipped | no api key configured")
            return None
        wire_symbol = self.to_wire_symbol(symbol)
        payload = self._get_json(
            f"/historical-chart/{self.to_wire_interval(timeframe)}/{wire_symbol}",
            params={"apikey": self.api_key},
        )
        if isinstance(payload, dict) and payload.get("Error Message"):
            self.logger.warning("fmp rejected request | %s", payload["Error Message"])
            return None
        if not isinstance(payload, list) or not payload:
            return None
        # Newest first on the wire.
        rows = [FmpRow.from_payload(row) for row in reversed(payload) if isinstance(row, dict)]
        return ProviderResponse(provider=self.name, provider_symbol=wire_symbol, rows=rows)

    @staticmethod
    def to_wire_symbol(symbol: ResolvedSymbol) -> str:
        compact = ohlc_symbol(symbol.symbol)
        if symbol.is_crypto and compact.endswith("USDT"):
            return f"{compact[:-4]}USD"
        return compact

    @staticmethod
    def to_wire_interval(timeframe: Timeframe) -> str:
        return _FMP_INTERVALS[timeframe]
