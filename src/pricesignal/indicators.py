"""Technical indicators over chronological price series.

All functions are pure. When history is too short they return None rather
than a number, so callers can tell "unknown" from zero.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from pricesignal.domain.models import Candle, IndicatorSet, MacdValue, PivotLevels

RSI_ZERO_LOSS = 1e-12


def _as_array(values: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.asarray(values, dtype=float)


def _finite_or_none(value: float) -> float | None:
    return float(value) if math.isfinite(value) else None


def ema_series(values: Sequence[float] | np.ndarray, period: int) -> np.ndarray:
    """EMA for every bar; NaN until the SMA seed at index ``period - 1``."""
    if period <= 0:
        raise ValueError("period must be positive")
    data = _as_array(values)
    result = np.full(len(data), np.nan)
    if len(data) < period:
        return result
    k = 2.0 / (period + 1)
    result[period - 1] = data[:period].mean()
    for i in range(period, len(data)):
        result[i] = data[i] * k + result[i - 1] * (1.0 - k)
    return result


def ema(values: Sequence[float] | np.ndarray, period: int) -> float | None:
    if len(values) < period:
        return None
    return _finite_or_none(ema_series(values, period)[-1])


def rsi(values: Sequence[float] | np.ndarray, period: int = 14) -> float | None:
    """Wilder RSI; a zero average loss saturates near 100 instead of dividing by zero."""
    data = _as_array(values)
    if period <= 0:
        raise ValueError("period must be positive")
    if len(data) <= period:
        return None
    deltas = np.diff(data)
    gains = np.clip(deltas, 0.0, None)
    losses = np.clip(-deltas, 0.0, None)
    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
    if avg_loss == 0:
        avg_loss = RSI_ZERO_LOSS
    rs = avg_gain / avg_loss
    return _finite_or_none(100.0 - 100.0 / (1.0 + rs))


def macd(
    values: Sequence[float] | np.ndarray,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MacdValue | None:
    """MACD line from full EMA series, signal line as EMA of the defined line."""
    if fast >= slow:
        raise ValueError("fast period must be shorter than slow period")
    data = _as_array(values)
    if len(data) < slow:
        return None
    line = ema_series(data, fast) - ema_series(data, slow)
    defined = line[slow - 1 :]
    if len(defined) < signal:
        return None
    signal_line = ema_series(defined, signal)
    latest_line = float(line[-1])
    latest_signal = float(signal_line[-1])
    if not (math.isfinite(latest_line) and math.isfinite(latest_signal)):
        return None
    return MacdValue(
        line=latest_line,
        signal=latest_signal,
        histogram=latest_line - latest_signal,
    )


def true_range(
    highs: Sequence[float] | np.ndarray,
    lows: Sequence[float] | np.ndarray,
    closes: Sequence[float] | np.ndarray,
) -> np.ndarray:
    """True range for bars 1..n-1 (the first bar has no previous close)."""
    high = _as_array(highs)
    low = _as_array(lows)
    close = _as_array(closes)
    if not (len(high) == len(low) == len(close)):
        raise ValueError("highs, lows and closes must have equal length")
    if len(close) < 2:
        return np.array([], dtype=float)
    previous_close = close[:-1]
    return np.maximum.reduce(
        [
            high[1:] - low[1:],
            np.abs(high[1:] - previous_close),
            np.abs(low[1:] - previous_close),
        ]
    )


def atr(
    highs: Sequence[float] | np.ndarray,
    lows: Sequence[float] | np.ndarray,
    closes: Sequence[float] | np.ndarray,
    period: int = 14,
) -> float | None:
    """Average true range: SMA seed over the first ``period`` ranges, then Wilder."""
    if period <= 0:
        raise ValueError("period must be positive")
    ranges = true_range(highs, lows, closes)
    if len(ranges) < period:
        return None
    value = ranges[:period].mean()
    for current in ranges[period:]:
        value = (value * (period - 1) + current) / period
    return _finite_or_none(value)


def compute_indicators(candles: Sequence[Candle]) -> IndicatorSet:
    """Compute the full indicator set for a candle series."""
    closes = [candle.close for candle in candles]
    highs = [candle.high for candle in candles]
    lows = [candle.low for candle in candles]
    macd_value = macd(closes)
    return IndicatorSet(
        ema20=ema(closes, 20),
        ema50=ema(closes, 50),
        rsi14=rsi(closes, 14),
        macd_line=macd_value.line if macd_value else None,
        macd_signal=macd_value.signal if macd_value else None,
        macd_hist=macd_value.histogram if macd_value else None,
        atr14=atr(highs, lows, closes, 14),
    )


def pivot_levels(candles: Sequence[Candle]) -> PivotLevels | None:
    """Classic pivot, R1/R2 and S1/S2 from the previous candle.

    The newest candle is treated as still forming, so at least two are needed.
    """
    if len(candles) < 2:
        return None
    previous = candles[-2]
    high, low = previous.high, previous.low
    pivot = (high + low + previous.close) / 3
    span = high - low
    return PivotLevels(
        pivot=pivot,
        r1=2 * pivot - low,
        r2=pivot + span,
        s1=2 * pivot - high,
        s2=pivot - span,
    )
