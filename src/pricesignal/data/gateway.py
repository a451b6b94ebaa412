"""Provider-fallback OHLC retrieval with freshness accounting."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime
from time import time
from types import MappingProxyType

from pricesignal.data.base import LiveQuoteProvider, OhlcProvider, ProviderResponse
from pricesignal.data.rows import build_series, to_price
from pricesignal.domain.errors import NoDataForTimeframeError, ProviderTransportError
from pricesignal.domain.models import (
    AssetClass,
    OhlcResult,
    PriceQuote,
    ResolvedSymbol,
    Timeframe,
)
from pricesignal.normalize.symbols import display_symbol

MIN_PREFERRED_CANDLES = 30
MIN_STALE_SECONDS = 5 * 60
TOO_OLD_SECONDS = 24 * 60 * 60
MAX_LIMIT = 1000
LIVE_QUOTE_MAX_AGE_SECONDS = 120


def freshness(last_timestamp: int, timeframe: Timeframe, now: float) -> tuple[int, bool, bool]:
    """Return ``(age_seconds, is_stale, is_too_old)`` for the newest candle."""
    age = max(0, int(now) - int(last_timestamp))
    stale_after = max(MIN_STALE_SECONDS, 2 * timeframe.seconds)
    return age, age > stale_after, age > TOO_OLD_SECONDS


def format_epoch(timestamp: int) -> str:
    try:
        return datetime.fromtimestamp(timestamp, tz=UTC).isoformat()
    except (OverflowError, OSError, ValueError):
        return str(timestamp)


def select_candidate(
    candidates: Sequence[OhlcResult],
    provider_order: Sequence[str],
) -> OhlcResult | None:
    """Pick the candidate to return from the accumulated pool.

    Too-old candidates are only considered when nothing fresher exists. Among
    the rest, the highest-priority provider with at least 30 candles wins,
    then any candidate with 30, then the first one encountered.
    """
    if not candidates:
        return None
    usable = [candidate for candidate in candidates if not candidate.is_too_old]
    pool = usable or list(candidates)
    for provider in provider_order:
        sufficient = [
            candidate
            for candidate in pool
            if candidate.provider == provider and len(candidate.candles) >= MIN_PREFERRED_CANDLES
        ]
        if sufficient:
            return max(sufficient, key=lambda candidate: len(candidate.candles))
    for candidate in pool:
        if len(candidate.candles) >= MIN_PREFERRED_CANDLES:
            return candidate
    return pool[0]


def quote_from_candles(result: OhlcResult) -> PriceQuote:
    """Price quote from the close of the newest selected candle."""
    last = result.last_candle
    return PriceQuote(
        symbol=display_symbol(result.symbol),
        price=last.close,
        timestamp=last.timestamp,
        provider=result.provider,
        stale=result.is_stale,
    )


class OhlcGateway:
    """Query providers in asset-class priority order and select one candle series."""

    def __init__(
        self,
        providers: Mapping[AssetClass, Sequence[OhlcProvider]],
        default_limit: int = 200,
        clock: Callable[[], float] = time,
    ) -> None:
        self.providers = MappingProxyType(
            {asset_class: tuple(chain) for asset_class, chain in providers.items()}
        )
        self.default_limit = default_limit
        self.clock = clock
        self.logger = logging.getLogger("pricesignal.data.gateway")

    def provider_order(self, asset_class: AssetClass) -> tuple[str, ...]:
        return tuple(provider.name for provider in self.providers.get(asset_class, ()))

    def fetch_candles(
        self,
        symbol: ResolvedSymbol,
        timeframe: Timeframe,
        limit: int | None = None,
    ) -> OhlcResult:
        """Return the selected candles or raise NoDataForTimeframeError."""
        safe_limit = self._clamp_limit(limit)
        chain = self.providers.get(symbol.asset_class, ())
        candidates: list[OhlcResult] = []
        failures: list[str] = []

        for provider in chain:
            try:
                response = provider.fetch(symbol, timeframe, safe_limit)
            except ProviderTransportError as exc:
                self.logger.warning("provider failed | %s", exc)
                failures.append(provider.name)
                continue
            if response is None:
                self.logger.info(
                    "provider empty | provider=%s symbol=%s tf=%s",
                    provider.name,
                    symbol.symbol,
                    timeframe.value,
                )
                continue
            candidate = self._build_candidate(symbol, timeframe, response, safe_limit)
            if candidate is None:
                continue
            candidates.append(candidate)
            if len(candidate.candles) >= MIN_PREFERRED_CANDLES and not candidate.is_stale:
                break

        chosen = select_candidate(candidates, [provider.name for provider in chain])
        if chosen is None:
            reason = "all providers failed" if failures and len(failures) == len(chain) else "no candles"
            raise NoDataForTimeframeError(symbol.symbol, timeframe.value, reason)
        if chosen.is_too_old:
            raise NoDataForTimeframeError(
                symbol.symbol,
                timeframe.value,
                f"latest candle is {chosen.age_seconds}s old",
            )
        return chosen

    def latest_price(self, symbol: ResolvedSymbol, timeframe: Timeframe = Timeframe.M1) -> PriceQuote:
        """Live quote when a provider has a fresh one, else the newest candle close."""
        quote = self.live_quote(symbol)
        if quote is not None:
            return quote
        return quote_from_candles(self.fetch_candles(symbol, timeframe, limit=MIN_PREFERRED_CANDLES))

    def live_quote(self, symbol: ResolvedSymbol) -> PriceQuote | None:
        """First quote younger than two minutes from a provider's latest-price endpoint.

        Returns None when no provider has a usable fresh quote.
        """
        for provider in self.providers.get(symbol.asset_class, ()):
            if not isinstance(provider, LiveQuoteProvider):
                continue
            try:
                row = provider.latest_quote(symbol)
            except ProviderTransportError as exc:
                self.logger.warning("live quote failed | %s", exc)
                continue
            price = row.price_value() if row is not None else None
            if price is None:
                continue
            now = int(self.clock())
            timestamp = row.epoch_seconds() or now
            age = max(0, now - timestamp)
            if age > LIVE_QUOTE_MAX_AGE_SECONDS:
                self.logger.info(
                    "live quote stale | provider=%s symbol=%s age=%ss",
                    provider.name,
                    symbol.symbol,
                    age,
                )
                continue
            return PriceQuote(
                symbol=display_symbol(symbol.symbol),
                price=price,
                timestamp=timestamp,
                provider=provider.name,
                bid=to_price(row.bid),
                ask=to_price(row.ask),
                live=True,
            )
        return None

    def _build_candidate(
        self,
        symbol: ResolvedSymbol,
        timeframe: Timeframe,
        response: ProviderResponse,
        limit: int,
    ) -> OhlcResult | None:
        candles = build_series(response.rows, limit)
        if not candles:
            self.logger.info("provider returned no parsable rows | provider=%s", response.provider)
            return None
        inconsistent = sum(1 for candle in candles if not candle.is_consistent)
        if inconsistent:
            self.logger.warning(
                "data quality | provider=%s symbol=%s inconsistent_bars=%s",
                response.provider,
                symbol.symbol,
                inconsistent,
            )
        age, is_stale, is_too_old = freshness(candles[-1].timestamp, timeframe, self.clock())
        self.logger.info(
            "candidate | provider=%s symbol=%s wire=%s tf=%s bars=%s last=%s age=%ss stale=%s too_old=%s",
            response.provider,
            symbol.symbol,
            response.provider_symbol,
            timeframe.value,
            len(candles),
            format_epoch(candles[-1].timestamp),
            age,
            is_stale,
            is_too_old,
        )
        return OhlcResult(
            symbol=symbol.symbol,
            timeframe=timeframe,
            candles=candles,
            provider=response.provider,
            provider_symbol=response.provider_symbol,
            age_seconds=age,
            is_stale=is_stale,
            is_too_old=is_too_old,
        )

    def _clamp_limit(self, limit: int | None) -> int:
        value = self.default_limit if limit is None else int(limit)
        return max(1, min(value, MAX_LIMIT))
