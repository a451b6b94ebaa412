"""Provider-native row shapes and their mapping into Candle.

Each provider answers with a differently keyed row. The dataclasses below keep
those shapes inside the data layer; only Candle values leave it.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import pandas as pd

from pricesignal.domain.models import Candle, CandleSeries

# Epoch values at or above this are milliseconds (year 2286 in seconds).
MILLISECOND_THRESHOLD = 10_000_000_000
# 9999-12-31T23:59:59Z, the last second datetime can represent.
MAX_EPOCH_SECONDS = 253_402_300_799


class ProviderRow(Protocol):
    """A provider row that knows how to become a Candle."""

    def to_candle(self) -> Candle | None:
        """Return the normalized candle, or None when a required field is unusable."""


def to_epoch_seconds(value: Any) -> int | None:
    """Parse epoch seconds, epoch milliseconds or an ISO-8601 string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _epoch_from_number(float(value))
    text = str(value).strip()
    if not text:
        return None
    try:
        return _epoch_from_number(float(text))
    except ValueError:
        pass
    try:
        stamp = pd.Timestamp(text)
    except (ValueError, TypeError):
        return None
    if stamp is pd.NaT:
        return None
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return int(stamp.timestamp())


def _epoch_from_number(number: float) -> int | None:
    if not math.isfinite(number) or number <= 0:
        return None
    if number >= MILLISECOND_THRESHOLD:
        number //= 1000
    if number > MAX_EPOCH_SECONDS:
        return None
    return int(number)


def to_price(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _build(timestamp: int | None, *prices: float | None) -> Candle | None:
    if timestamp is None or any(price is None for price in prices):
        return None
    open_, high, low, close = prices
    return Candle(timestamp=timestamp, open=open_, high=high, low=low, close=close)


@dataclass(frozen=True)
class FcsRow:
    """FCS candle row: ``{t|tm|timestamp|date, o, h, l, c}``."""

    time: Any
    open: Any
    high: Any
    low: Any
    close: Any

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> FcsRow:
        numeric = next(
            (row[key] for key in ("t", "tm", "timestamp") if row.get(key) not in (None, "")),
            None,
        )
        if to_epoch_seconds(numeric) is None:
            numeric = next(
                (row[key] for key in ("date", "time", "datetime") if row.get(key)),
                numeric,
            )
        return cls(
            time=numeric,
            open=row.get("o", row.get("open")),
            high=row.get("h", row.get("high")),
            low=row.get("l", row.get("low")),
            close=row.get("c", row.get("close")),
        )

    def to_candle(self) -> Candle | None:
        return _build(
            to_epoch_seconds(self.time),
            to_price(self.open),
            to_price(self.high),
            to_price(self.low),
            to_price(self.close),
        )


@dataclass(frozen=True)
class FcsQuoteRow:
    """FCS latest-price row: ``{price|bid|ask|c, bid, ask, t|tm|date}``."""

    price: Any
    bid: Any
    ask: Any
    time: Any

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> FcsQuoteRow:
        price = next(
            (row[key] for key in ("price", "bid", "ask", "c", "close") if to_price(row.get(key))),
            None,
        )
        stamp = next(
            (row[key] for key in ("t", "tm", "date") if to_epoch_seconds(row.get(key)) is not None),
            None,
        )
        return cls(price=price, bid=row.get("bid"), ask=row.get("ask"), time=stamp)

    def price_value(self) -> float | None:
        return to_price(self.price)

    def epoch_seconds(self) -> int | None:
        return to_epoch_seconds(self.time)


@dataclass(frozen=True)
class FmpRow:
    """FMP historical-chart row: ``{date, open, high, low, close}``."""

    date: Any
    open: Any
    high: Any
    low: Any
    close: Any

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> FmpRow:
        return cls(
            date=row.get("date", row.get("datetime", row.get("time"))),
            open=row.get("open"),
            high=row.get("high"),
            low=row.get("low"),
            close=row.get("close"),
        )

    def to_candle(self) -> Candle | None:
        return _build(
            to_epoch_seconds(self.date),
            to_price(self.open),
            to_price(self.high),
            to_price(self.low),
            to_price(self.close),
        )


@dataclass(frozen=True)
class BinanceKline:
    """Binance kline array: ``[open_time_ms, open, high, low, close, volume, ...]``."""

    open_time: Any
    open: Any
    high: Any
    low: Any
    close: Any

    @classmethod
    def from_payload(cls, row: Sequence[Any]) -> BinanceKline | None:
        if len(row) < 5:
            return None
        return cls(open_time=row[0], open=row[1], high=row[2], low=row[3], close=row[4])

    def to_candle(self) -> Candle | None:
        return _build(
            to_epoch_seconds(self.open_time),
            to_price(self.open),
            to_price(self.high),
            to_price(self.low),
            to_price(self.close),
        )


@dataclass(frozen=True)
class YahooBar:
    """One row of a yfinance history frame."""

    index: Any
    open: Any
    high: Any
    low: Any
    close: Any

    def to_candle(self) -> Candle | None:
        stamp = self.index
        if isinstance(stamp, pd.Timestamp):
            stamp = stamp.tz_localize("UTC") if stamp.tzinfo is None else stamp
            stamp = int(stamp.timestamp())
        return _build(
            to_epoch_seconds(stamp),
            to_price(self.open),
            to_price(self.high),
            to_price(self.low),
            to_price(self.close),
        )


def build_series(rows: Iterable[ProviderRow | None], limit: int) -> CandleSeries:
    """Map rows to candles, drop unusable ones, sort, dedupe (last wins) and keep ``limit``."""
    by_timestamp: dict[int, Candle] = {}
    for row in rows:
        if row is None:
            continue
        candle = row.to_candle()
        if candle is None:
            continue
        by_timestamp[candle.timestamp] = candle
    ordered = [by_timestamp[timestamp] for timestamp in sorted(by_timestamp)]
    if limit > 0:
        ordered = ordered[-limit:]
    return tuple(ordered)
