"""Binance public klines provider (crypto only, no credentials)."""

from __future__ import annotations

import requests

from pricesignal.data.base import DEFAULT_TIMEOUT_SECONDS, HttpProvider, ProviderResponse
from pricesignal.data.rows import BinanceKline
from pricesignal.domain.models import ResolvedSymbol, Timeframe
from pricesignal.normalize.symbols import ohlc_symbol

BINANCE_BASE_URL = "https://api.binance.com"
MAX_KLINES = 1000


class BinanceProvider(HttpProvider):
    """Fetch klines from Binance; timestamps arrive in epoch milliseconds."""

    name = "binance"

    def __init__(
        self,
        base_url: str = BINANCE_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, session=session)

    def fetch(self, symbol: ResolvedSymbol, timeframe: Timeframe, limit: int) -> ProviderResponse | None:
        if not symbol.is_crypto:
            return None
        wire_symbol = self.to_wire_symbol(symbol)
        payload = self._get_json(
            "/api/v3/klines",
            params={
                "symbol": wire_symbol,
                "interval": timeframe.value,
                "limit": str(max(1, min(limit, MAX_KLINES))),
            },
        )
        if not isinstance(payload, list) or not payload:
            return None
        rows = [BinanceKline.from_payload(row) for row in payload if isinstance(row, list)]
        return ProviderResponse(provider=self.name, provider_symbol=wire_symbol, rows=rows)

    @staticmethod
    def to_wire_symbol(symbol: ResolvedSymbol) -> str:
        compact = ohlc_symbol(symbol.symbol)
        if compact.endswith("USD") and not compact.endswith("USDT"):
            return f"{compact}T"
        return compact
