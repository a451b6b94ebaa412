"""Runtime wiring: provider construction and request orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from pricesignal.config import Settings
from pricesignal.data.base import OhlcProvider
from pricesignal.data.binance import BinanceProvider
from pricesignal.data.fcs import FcsProvider
from pricesignal.data.fmp import FmpProvider
from pricesignal.data.gateway import MIN_PREFERRED_CANDLES, OhlcGateway, quote_from_candles
from pricesignal.data.yfinance_data import YahooProvider
from pricesignal.domain.errors import NoDataForTimeframeError
from pricesignal.domain.models import (
    AssetClass,
    OhlcResult,
    PivotLevels,
    PriceQuote,
    ResolvedSymbol,
    SignalResult,
    Timeframe,
)
from pricesignal.formatting import format_signal
from pricesignal.indicators import pivot_levels
from pricesignal.normalize.symbols import display_symbol, normalize_symbol
from pricesignal.normalize.timeframes import coarser_timeframes, resolve_timeframe
from pricesignal.signals.engine import decide_from_ohlc

logger = logging.getLogger("pricesignal.runtime")


@dataclass(frozen=True)
class SignalReport:
    """Everything produced for one signal request."""

    symbol: ResolvedSymbol
    requested_timeframe: Timeframe
    ohlc: OhlcResult
    signal: SignalResult

    @property
    def timeframe(self) -> Timeframe:
        return self.ohlc.timeframe

    @property
    def pivots(self) -> PivotLevels | None:
        return pivot_levels(self.ohlc.candles)

    def render(self) -> str:
        return format_signal(self.signal, display_symbol(self.symbol.symbol), self.timeframe)


def build_provider(name: str, settings: Settings, session: requests.Session | None = None) -> OhlcProvider:
    """Create one provider client by its configured name."""
    if name == "fcs":
        return FcsProvider(
            api_key=settings.fcs_api_key,
            base_url=settings.fcs_base_url,
            timeout=settings.request_timeout_seconds,
            session=session,
        )
    if name == "fmp":
        return FmpProvider(
            api_key=settings.fmp_api_key,
            base_url=settings.fmp_base_url,
            timeout=settings.request_timeout_seconds,
            session=session,
        )
    if name == "binance":
        return BinanceProvider(
            base_url=settings.binance_base_url,
            timeout=settings.request_timeout_seconds,
            session=session,
        )
    if name == "yahoo":
        return YahooProvider()
    raise ValueError(f"Unknown provider '{name}'")


def build_gateway(settings: Settings, session: requests.Session | None = None) -> OhlcGateway:
    """Wire provider chains per asset class from settings."""
    clients: dict[str, OhlcProvider] = {}

    def client(name: str) -> OhlcProvider:
        if name not in clients:
            clients[name] = build_provider(name, settings, session)
        return clients[name]

    return OhlcGateway(
        providers={
            AssetClass.CRYPTO: [client(name) for name in settings.crypto_providers],
            AssetClass.FOREX_METAL: [client(name) for name in settings.forex_providers],
        },
        default_limit=settings.ohlc_limit,
    )


def _timeframe_chain(timeframe: Timeframe) -> list[Timeframe]:
    return [timeframe, *coarser_timeframes(timeframe)]


def fetch_with_fallback(
    gateway: OhlcGateway,
    symbol: ResolvedSymbol,
    timeframe: Timeframe,
    limit: int | None = None,
) -> OhlcResult:
    """Fetch ``timeframe``, stepping to coarser ones while no data is available."""
    chain = _timeframe_chain(timeframe)
    reason = "no candles"
    for candidate in chain:
        try:
            return gateway.fetch_candles(symbol, candidate, limit)
        except NoDataForTimeframeError as exc:
            logger.info("no data | symbol=%s tf=%s reason=%s", symbol.symbol, candidate.value, exc.reason)
            reason = exc.reason
    raise NoDataForTimeframeError(symbol.symbol, chain[-1].value, reason)


def analyze_signal(
    settings: Settings,
    text: str,
    timeframe_text: str | None = None,
    gateway: OhlcGateway | None = None,
    min_bars: int | None = None,
    limit: int | None = None,
) -> SignalReport:
    """Resolve the instrument and timeframe from free text and run the decision engine.

    The timeframe comes from ``timeframe_text`` when given, otherwise from the
    request text itself, defaulting to the configured signal timeframe.
    """
    symbol = normalize_symbol(text)
    source = timeframe_text if timeframe_text and timeframe_text.strip() else text
    timeframe = resolve_timeframe(source, settings.signal_timeframe)
    active_gateway = gateway or build_gateway(settings)
    ohlc = fetch_with_fallback(active_gateway, symbol, timeframe, limit)
    signal = decide_from_ohlc(ohlc, min_bars=settings.min_signal_bars if min_bars is None else min_bars)
    logger.info(
        "analysis | symbol=%s requested=%s used=%s provider=%s decision=%s",
        symbol.symbol,
        timeframe.value,
        ohlc.timeframe.value,
        ohlc.provider,
        signal.decision,
    )
    return SignalReport(symbol=symbol, requested_timeframe=timeframe, ohlc=ohlc, signal=signal)


def quote_price(
    settings: Settings,
    text: str,
    timeframe_text: str | None = None,
    gateway: OhlcGateway | None = None,
) -> PriceQuote:
    """Latest price for the instrument named in ``text``.

    A fresh live quote wins; otherwise the newest candle close is used, with the
    same coarser-timeframe fallback as signals.
    """
    symbol = normalize_symbol(text)
    timeframe = resolve_timeframe(timeframe_text, settings.price_timeframe)
    active_gateway = gateway or build_gateway(settings)
    quote = active_gateway.live_quote(symbol)
    if quote is not None:
        return quote
    return quote_from_candles(fetch_with_fallback(active_gateway, symbol, timeframe, MIN_PREFERRED_CANDLES))
