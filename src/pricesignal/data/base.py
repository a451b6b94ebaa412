"""OHLC provider contract and shared HTTP plumbing."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import requests

from pricesignal.data.rows import FcsQuoteRow, ProviderRow
from pricesignal.domain.errors import ProviderTransportError
from pricesignal.domain.models import ResolvedSymbol, Timeframe

DEFAULT_TIMEOUT_SECONDS = 9.0
USER_AGENT = "Mozilla/5.0 (pricesignal)"


@dataclass(frozen=True)
class ProviderResponse:
    """Raw rows returned by one provider call, before normalization."""

    provider: str
    provider_symbol: str
    rows: Sequence[ProviderRow | None]


class OhlcProvider(Protocol):
    """Interface for candle retrieval from one external source."""

    name: str

    def fetch(self, symbol: ResolvedSymbol, timeframe: Timeframe, limit: int) -> ProviderResponse | None:
        """Return provider rows, None for "no data", or raise ProviderTransportError."""


@runtime_checkable
class LiveQuoteProvider(Protocol):
    """A provider that can also answer with a single latest-price row."""

    name: str

    def latest_quote(self, symbol: ResolvedSymbol) -> FcsQuoteRow | None:
        """Return the latest price row, None for "no quote", or raise ProviderTransportError."""


class HttpProvider:
    """Base for JSON-over-HTTP providers with a bounded per-call timeout.

    A provider is never retried within a request; the gateway substitutes the
    next provider instead.
    """

    name = "http"

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        self.logger = logging.getLogger(f"pricesignal.data.{self.name}")

    def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any | None:
        """GET ``path`` and decode JSON; 404 means no data for the instrument."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderTransportError(self.name, type(exc).__name__) from exc
        if response.status_code == 404:
            self.logger.info("%s returned 404 for %s", self.name, path)
            return None
        if response.status_code >= 400:
            detail = (response.text or "").strip()[:200] or "No response body"
            raise ProviderTransportError(self.name, detail, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderTransportError(self.name, "invalid JSON payload") from exc
