"""Core market-data and signal domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


class AssetClass(StrEnum):
    """Instrument families that drive provider routing."""

    CRYPTO = "crypto"
    FOREX_METAL = "forex_metal"


class Timeframe(StrEnum):
    """Supported candle intervals, ordered by duration."""

    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"

    @property
    def seconds(self) -> int:
        return _TIMEFRAME_SECONDS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Timeframe):
            return NotImplemented
        return self.seconds < other.seconds

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Timeframe):
            return NotImplemented
        return self.seconds <= other.seconds

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Timeframe):
            return NotImplemented
        return self.seconds > other.seconds

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Timeframe):
            return NotImplemented
        return self.seconds >= other.seconds


_TIMEFRAME_SECONDS = {
    Timeframe.M1: 60,
    Timeframe.M5: 5 * 60,
    Timeframe.M15: 15 * 60,
    Timeframe.M30: 30 * 60,
    Timeframe.H1: 60 * 60,
    Timeframe.H4: 4 * 60 * 60,
    Timeframe.D1: 24 * 60 * 60,
}


class Decision(StrEnum):
    """Directional outcome of the signal engine."""

    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class ResolvedSymbol:
    """Canonical ticker plus the asset class it routes through."""

    symbol: str
    asset_class: AssetClass

    @property
    def is_crypto(self) -> bool:
        return self.asset_class is AssetClass.CRYPTO


@dataclass(frozen=True)
class Candle:
    """One OHLC bar keyed by its opening time in Unix seconds."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float

    @property
    def is_consistent(self) -> bool:
        """Whether high/low bracket the open and close."""
        return self.high >= max(self.open, self.close) and self.low <= min(self.open, self.close)

    @property
    def time(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=UTC)


CandleSeries = tuple[Candle, ...]


@dataclass(frozen=True)
class OhlcResult:
    """Candles selected from one provider plus their freshness at fetch time."""

    symbol: str
    timeframe: Timeframe
    candles: CandleSeries
    provider: str
    provider_symbol: str
    age_seconds: int
    is_stale: bool
    is_too_old: bool

    def __post_init__(self) -> None:
        if not self.candles:
            raise ValueError("OhlcResult requires at least one candle")

    @property
    def last_candle(self) -> Candle:
        return self.candles[-1]

    @property
    def closes(self) -> list[float]:
        return [candle.close for candle in self.candles]

    @property
    def highs(self) -> list[float]:
        return [candle.high for candle in self.candles]

    @property
    def lows(self) -> list[float]:
        return [candle.low for candle in self.candles]


@dataclass(frozen=True)
class MacdValue:
    """MACD line, signal line and histogram at the latest bar."""

    line: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class IndicatorSet:
    """Latest indicator readings; None means not enough history."""

    ema20: float | None = None
    ema50: float | None = None
    rsi14: float | None = None
    macd_line: float | None = None
    macd_signal: float | None = None
    macd_hist: float | None = None
    atr14: float | None = None


@dataclass(frozen=True)
class PivotLevels:
    """Classic floor-trader pivot with two support and resistance levels."""

    pivot: float
    r1: float
    r2: float
    s1: float
    s2: float


@dataclass(frozen=True)
class SignalResult:
    """Decision with risk levels; levels are None for NEUTRAL."""

    decision: Decision
    close: float
    as_of: int
    entry: float | None = None
    stop_loss: float | None = None
    take_profit1: float | None = None
    take_profit2: float | None = None
    indicators: IndicatorSet = field(default_factory=IndicatorSet)
    stale: bool = False

    def __post_init__(self) -> None:
        levels = (self.entry, self.stop_loss, self.take_profit1, self.take_profit2)
        if self.decision is Decision.NEUTRAL:
            if any(level is not None for level in levels):
                raise ValueError("NEUTRAL signals carry no levels")
        elif any(level is None for level in levels):
            raise ValueError(f"{self.decision} signals require entry, stop and targets")


@dataclass(frozen=True)
class PriceQuote:
    """Latest price for the short price-only reply.

    ``live`` marks a quote read from a provider's latest-price endpoint; otherwise
    the price is the close of the newest candle.
    """

    symbol: str
    price: float
    timestamp: int
    provider: str
    stale: bool = False
    bid: float | None = None
    ask: float | None = None
    live: bool = False
