"""EMA/RSI/MACD decision gate with ATR-based risk levels."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from pricesignal.domain.models import (
    Candle,
    Decision,
    IndicatorSet,
    OhlcResult,
    SignalResult,
    Timeframe,
)
from pricesignal.indicators import compute_indicators

logger = logging.getLogger("pricesignal.signals")

MIN_BARS_FLOOR = 25
MIN_BARS_CEILING = 60
DEFAULT_MIN_BARS = 60
FALLBACK_RISK_FRACTION = 0.0015
MACD_REL_TOLERANCE = 1e-9
MACD_ABS_TOLERANCE = 1e-12


@dataclass(frozen=True)
class DecisionThresholds:
    """RSI bands for the directional gate."""

    rsi_buy: float = 55.0
    rsi_sell: float = 45.0


def price_decimals(value: float) -> int:
    """Decimal places by magnitude: 2 above 100, 4 from 1 to 100, else 6."""
    magnitude = abs(value)
    if magnitude >= 100:
        return 2
    if magnitude >= 1:
        return 4
    return 6


def round_price(value: float) -> float:
    return round(value, price_decimals(value))


def validate_min_bars(min_bars: int) -> int:
    if not MIN_BARS_FLOOR <= min_bars <= MIN_BARS_CEILING:
        raise ValueError(f"min_bars must be between {MIN_BARS_FLOOR} and {MIN_BARS_CEILING}")
    return min_bars


def _macd_confirms(line: float, signal: float, direction: float) -> bool:
    """Line beyond its signal in ``direction``.

    In a steady trend the line rides on its signal; there the line's own sign
    decides.
    """
    if math.isclose(line, signal, rel_tol=MACD_REL_TOLERANCE, abs_tol=MACD_ABS_TOLERANCE):
        return direction * line > MACD_ABS_TOLERANCE
    return direction * (line - signal) > 0


def classify(indicators: IndicatorSet, thresholds: DecisionThresholds = DecisionThresholds()) -> Decision:
    """Apply the EMA20/EMA50, RSI14 and MACD gate; missing readings give NEUTRAL."""
    fast = indicators.ema20
    slow = indicators.ema50
    strength = indicators.rsi14
    line = indicators.macd_line
    signal = indicators.macd_signal
    if fast is None or slow is None or strength is None or line is None or signal is None:
        return Decision.NEUTRAL
    if fast > slow and strength >= thresholds.rsi_buy and _macd_confirms(line, signal, 1.0):
        return Decision.BUY
    if fast < slow and strength <= thresholds.rsi_sell and _macd_confirms(line, signal, -1.0):
        return Decision.SELL
    return Decision.NEUTRAL


def risk_distance(atr_value: float | None, last_close: float, previous_close: float) -> float:
    """ATR when usable, otherwise the larger of 0.15% of price and the last bar's move."""
    if atr_value is not None and math.isfinite(atr_value) and atr_value > 0:
        return atr_value
    return max(FALLBACK_RISK_FRACTION * abs(last_close), abs(last_close - previous_close))


def decide(
    candles: Sequence[Candle],
    timeframe: Timeframe,
    stale: bool = False,
    min_bars: int = DEFAULT_MIN_BARS,
    thresholds: DecisionThresholds = DecisionThresholds(),
) -> SignalResult:
    """Derive a decision and risk levels from a chronological candle series.

    Series shorter than ``min_bars`` are always NEUTRAL. ``stale`` is passed
    through untouched; stale data still produces a full result.
    """
    validate_min_bars(min_bars)
    if not candles:
        raise ValueError("decide requires at least one candle")
    last = candles[-1]
    previous = candles[-2] if len(candles) > 1 else last
    indicators = compute_indicators(candles)

    if len(candles) < min_bars:
        decision = Decision.NEUTRAL
        logger.info(
            "signal | tf=%s bars=%s below minimum %s, forcing NEUTRAL",
            timeframe.value,
            len(candles),
            min_bars,
        )
    else:
        decision = classify(indicators, thresholds)

    if decision is Decision.NEUTRAL:
        result = SignalResult(
            decision=decision,
            close=last.close,
            as_of=last.timestamp,
            indicators=indicators,
            stale=stale,
        )
    else:
        entry = last.close
        # At least one displayed tick so rounding never collapses SL/TP onto entry.
        risk = max(
            risk_distance(indicators.atr14, last.close, previous.close),
            10.0 ** -price_decimals(entry),
        )
        direction = 1.0 if decision is Decision.BUY else -1.0
        result = SignalResult(
            decision=decision,
            close=last.close,
            as_of=last.timestamp,
            entry=round_price(entry),
            stop_loss=round_price(entry - direction * risk),
            take_profit1=round_price(entry + direction * risk),
            take_profit2=round_price(entry + direction * 2.0 * risk),
            indicators=indicators,
            stale=stale,
        )

    logger.info(
        "signal | tf=%s bars=%s decision=%s stale=%s",
        timeframe.value,
        len(candles),
        result.decision,
        result.stale,
    )
    return result


def decide_from_ohlc(result: OhlcResult, min_bars: int = DEFAULT_MIN_BARS) -> SignalResult:
    """Run ``decide`` on a gateway result, carrying its staleness flag."""
    return decide(result.candles, result.timeframe, stale=result.is_stale, min_bars=min_bars)
