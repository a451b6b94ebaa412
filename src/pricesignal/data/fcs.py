"""FCS API candle provider (forex, metals and crypto pairs)."""

from __future__ import annotations

from collections.abc import Callable
from time import time

import requests

from pricesignal.data.base import DEFAULT_TIMEOUT_SECONDS, HttpProvider, ProviderResponse
from pricesignal.data.rows import FcsQuoteRow, FcsRow
from pricesignal.domain.models import ResolvedSymbol, Timeframe
from pricesignal.normalize.symbols import display_symbol

FCS_BASE_URL = "https://fcsapi.com/api-v3"

_FCS_PERIODS = {
    Timeframe.M1: "1m",
    Timeframe.M5: "5m",
    Timeframe.M15: "15m",
    Timeframe.M30: "30m",
    Timeframe.H1: "1h",
    Timeframe.H4: "4h",
    Timeframe.D1: "1d",
}


class FcsProvider(HttpProvider):
    """Fetch candles from FCS; pairs go on the wire with a slash (``XAU/USD``)."""

    name = "fcs"

    def __init__(
        self,
        api_key: str,
        base_url: str = FCS_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, session=session)
        self.api_key = api_key
        self.clock = clock

    def fetch(self, symbol: ResolvedSymbol, timeframe: Timeframe, limit: int) -> ProviderResponse | None:
        if not self.api_key:
            self.logger.debug("fcs skipped | no api key configured")
            return None
        pair = self.to_wire_symbol(symbol)
        now = int(self.clock())
        lookback = timeframe.seconds * max(limit + 20, 240)
        path = "/crypto/candle" if symbol.is_crypto else "/forex/candle"
        payload = self._get_json(
            path,
            params={
                "symbol": pair,
                "period": self.to_wire_period(timeframe),
                "from": str(now - lookback),
                "to": str(now),
                "access_key": self.api_key,
            },
        )
        rows = self._extract_rows(payload)
        if not rows:
            return None
        return ProviderResponse(
            provider=self.name,
            provider_symbol=pair,
            rows=[FcsRow.from_payload(row) for row in rows if isinstance(row, dict)],
        )

    def latest_quote(self, symbol: ResolvedSymbol) -> FcsQuoteRow | None:
        """Read the latest price row from ``/forex/latest`` or ``/crypto/latest``."""
        if not self.api_key:
            return None
        pair = self.to_wire_symbol(symbol)
        path = "/crypto/latest" if symbol.is_crypto else "/forex/latest"
        payload = self._get_json(path, params={"symbol": pair, "access_key": self.api_key})
        rows = [row for row in self._extract_rows(payload) if isinstance(row, dict)]
        if not rows:
            return None
        quote = FcsQuoteRow.from_payload(rows[0])
        return quote if quote.price_value() is not None else None

    def _extract_rows(self, payload: object) -> list:
        if not isinstance(payload, dict):
            return []
        if payload.get("status") is False:
            self.logger.warning("fcs rejected request | %s", payload.get("msg", "no message"))
            return []
        raw = payload.get("response")
        if raw is None:
            raw = payload.get("candles", payload.get("data"))
        if isinstance(raw, dict):
            return list(raw.values())
        if isinstance(raw, list):
            return raw
        return []

    @staticmethod
    def to_wire_symbol(symbol: ResolvedSymbol) -> str:
        return display_symbol(symbol.symbol)

    @staticmethod
    def to_wire_period(timeframe: Timeframe) -> str:
        return _FCS_PERIODS[timeframe]
