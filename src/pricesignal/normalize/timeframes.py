"""Map Arabic/English temporal expressions to canonical timeframes."""

from __future__ import annotations

import re

from pricesignal.domain.models import Timeframe
from pricesignal.normalize.text import normalize_text

# Bare unit words ("minute", "ساعه") must not follow a digit or spelled count,
# otherwise "15 minute" or "four hour" would land in the 1m / 1h buckets first.
_SPELLED_COUNTS = (
    "one",
    "two",
    "three",
    "four",
    "five",
    "ten",
    "fifteen",
    "thirty",
    "sixty",
    "ثلاث",
    "ثلاثه",
    "اربع",
    "اربعه",
    "خمس",
    "خمسه",
    "عشر",
    "عشره",
)
_NO_COUNT = r"(?<!\d)(?<!\d\s)" + "".join(rf"(?<!{word}\s)" for word in _SPELLED_COUNTS)

# Patterns run against normalize_text output: lower-case, ASCII digits,
# ta marbuta folded to ha, hamza-alef folded to alef.
_TIMEFRAME_PATTERNS: tuple[tuple[Timeframe, tuple[str, ...]], ...] = (
    (
        Timeframe.M1,
        (
            r"(?<!\d)1\s*(?:m|min|mins|minutes?)\b",
            r"\bm1\b",
            r"\bone\s+minute\b",
            _NO_COUNT + r"\bminute(?:ly)?\b",
            r"(?<!\d)1\s*دقيقه\b",
            _NO_COUNT + r"\b(?:عال|على\s*ال|ال)?دقيقه\b",
        ),
    ),
    (
        Timeframe.M5,
        (
            r"(?<!\d)5\s*(?:m|min|mins|minutes?|دقائق|دقايق|دقيقه)\b",
            r"\bm5\b",
            r"\bfive\s+minutes?\b",
            r"\bخمس(?:ه)?\s+(?:دقائق|دقايق|دقيقه)\b",
        ),
    ),
    (
        Timeframe.M15,
        (
            r"(?<!\d)15\s*(?:m|min|mins|minutes?|دقيقه|دقائق|دقايق)?\b",
            r"\bm15\b",
            r"\bfifteen\s+minutes?\b",
            r"\bquarter\s+(?:of\s+an\s+)?hour\b",
            r"\bربع(?:\s+ساعه)?\b",
        ),
    ),
    (
        Timeframe.M30,
        (
            r"(?<!\d)30\s*(?:m|min|mins|minutes?|دقيقه|دقائق|دقايق)?\b",
            r"\bm30\b",
            r"\bthirty\s+minutes?\b",
            r"\bhalf\s+(?:an\s+)?hour\b",
            r"\bنص(?:ف)?\s+ساعه\b",
        ),
    ),
    (
        Timeframe.H1,
        (
            r"(?<!\d)1\s*(?:h|hr|hrs|hours?)\b",
            r"(?<!\d)60\s*(?:m|min|mins|minutes?)\b",
            r"\bh1\b",
            r"\bone\s+hours?\b",
            r"\bsixty\s+minutes?\b",
            r"\bhourly\b",
            _NO_COUNT + r"\bhour\b",
            r"(?<!\d)1\s*ساعه\b",
            _NO_COUNT + r"\b(?:عال|على\s*ال|ال)?ساعه\b",
        ),
    ),
    (
        Timeframe.H4,
        (
            r"(?<!\d)4\s*(?:h|hr|hrs|hours?|ساعات|ساعه|س)\b",
            r"(?<!\d)240\s*(?:m|min)\b",
            r"\bh4\b",
            r"\bfour\s+hours?\b",
            r"\bاربع(?:ه)?\s+(?:ساعات|ساعه)\b",
        ),
    ),
    (
        Timeframe.D1,
        (
            r"(?<!\d)1\s*(?:d|day)\b",
            r"\bd1\b",
            r"\bdaily\b",
            r"\bday\b",
            r"\b(?:عال|على\s*ال|ال)?يومي?\b",
        ),
    ),
)

_COMPILED = tuple(
    (timeframe, tuple(re.compile(pattern) for pattern in patterns))
    for timeframe, patterns in _TIMEFRAME_PATTERNS
)

_TIMEFRAME_CODES = {
    "1m": Timeframe.M1,
    "1min": Timeframe.M1,
    "5m": Timeframe.M5,
    "5min": Timeframe.M5,
    "15m": Timeframe.M15,
    "15min": Timeframe.M15,
    "30m": Timeframe.M30,
    "30min": Timeframe.M30,
    "1h": Timeframe.H1,
    "60m": Timeframe.H1,
    "1hour": Timeframe.H1,
    "4h": Timeframe.H4,
    "4hour": Timeframe.H4,
    "1d": Timeframe.D1,
    "1day": Timeframe.D1,
    "day": Timeframe.D1,
    "daily": Timeframe.D1,
}

_COARSER = {
    Timeframe.M1: (Timeframe.M5, Timeframe.M15),
    Timeframe.M5: (Timeframe.M15,),
    Timeframe.M15: (Timeframe.M30, Timeframe.H1),
    Timeframe.M30: (Timeframe.H1, Timeframe.H4),
    Timeframe.H1: (Timeframe.H4, Timeframe.D1),
    Timeframe.H4: (Timeframe.D1,),
    Timeframe.D1: (),
}


def resolve_timeframe(raw_text: str | None, fallback: Timeframe) -> Timeframe:
    """Return the first matching bucket in 1m..1d priority order, else ``fallback``."""
    text = normalize_text(raw_text)
    if not text:
        return fallback
    for timeframe, patterns in _COMPILED:
        if any(pattern.search(text) for pattern in patterns):
            return timeframe
    return fallback


def parse_timeframe(value: str | Timeframe) -> Timeframe:
    """Parse a code such as ``15m``, ``1hour`` or ``daily`` from config or CLI."""
    if isinstance(value, Timeframe):
        return value
    key = value.strip().lower().replace(" ", "")
    try:
        return _TIMEFRAME_CODES[key]
    except KeyError as exc:
        supported = ", ".join(timeframe.value for timeframe in Timeframe)
        raise ValueError(f"Unknown timeframe '{value}'. Supported: {supported}") from exc


def coarser_timeframes(timeframe: Timeframe) -> tuple[Timeframe, ...]:
    """Ordered fallbacks to try when a timeframe has no usable data."""
    return _COARSER[timeframe]
