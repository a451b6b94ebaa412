"""Fixed text contracts for signal and price replies.

Labels and line order are consumed verbatim by the messaging layer and do not
change with the user's language.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime

from pricesignal.domain.models import Decision, PriceQuote, SignalResult, Timeframe
from pricesignal.signals.engine import price_decimals

MISSING = "N/A"
PRICE_NOTE = "latest CLOSED price"


def format_time_utc(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=UTC).strftime("%H:%M")


def format_value(value: float | None) -> str:
    """Render a price-like value with magnitude-dependent precision."""
    if value is None or not math.isfinite(value):
        return MISSING
    return f"{value:.{price_decimals(value)}f}"


def format_rsi(value: float | None) -> str:
    if value is None or not math.isfinite(value):
        return MISSING
    return f"{value:.2f}"


def format_signal(signal: SignalResult, symbol: str, timeframe: Timeframe | str) -> str:
    """Render the signal block; the levels line appears only for BUY/SELL."""
    indicators = signal.indicators
    interval = timeframe.value if isinstance(timeframe, Timeframe) else str(timeframe)
    lines = [
        f"Time (UTC): {format_time_utc(signal.as_of)}",
        f"Symbol: {symbol}",
        f"Interval: {interval}",
        f"Close: {format_value(signal.close)}",
        f"EMA20: {format_value(indicators.ema20)}",
        f"EMA50: {format_value(indicators.ema50)}",
        f"RSI14: {format_rsi(indicators.rsi14)}",
        (
            f"MACD(12,26,9): {format_value(indicators.macd_line)} / "
            f"{format_value(indicators.macd_signal)} (hist {format_value(indicators.macd_hist)})"
        ),
        f"ATR14: {format_value(indicators.atr14)}",
        f"SIGNAL: {signal.decision.value}",
    ]
    if signal.decision is not Decision.NEUTRAL:
        lines.append(
            f"Entry: {format_value(signal.entry)}  SL: {format_value(signal.stop_loss)}  "
            f"TP1: {format_value(signal.take_profit1)}  TP2: {format_value(signal.take_profit2)}"
        )
    return "\n".join(lines)


def format_price(quote: PriceQuote) -> str:
    """Render the 4-line price-only block."""
    return "\n".join(
        [
            f"Time (UTC): {format_time_utc(quote.timestamp)}",
            f"Symbol: {quote.symbol}",
            f"Price: {format_value(quote.price)}",
            f"Note: {PRICE_NOTE}",
        ]
    )
