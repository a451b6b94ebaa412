"""Resolve free-form instrument text to a canonical ticker."""

from __future__ import annotations

import logging
import re
from types import MappingProxyType

from pricesignal.domain.errors import SymbolNotFoundError
from pricesignal.domain.models import AssetClass, ResolvedSymbol
from pricesignal.normalize.text import destem, normalize_digits, normalize_text, tokenize

logger = logging.getLogger("pricesignal.normalize.symbols")

CRYPTO_BASES = frozenset({"BTC", "ETH", "SOL", "XRP", "BNB", "ADA", "DOGE", "LTC"})
QUOTE_CURRENCIES = ("USDT", "USD", "EUR", "GBP", "JPY", "CHF", "CAD", "AUD", "NZD", "BTC", "ETH")
MAX_PHRASE_TOKENS = 3
# Bases a lower-case bare ticker may start with ("gbpjpy", "ltcbtc").
KNOWN_BASES = CRYPTO_BASES | frozenset(
    {"XAU", "XAG", "XPT", "XPD", "XTI", "XBR", "USD", "EUR", "GBP", "JPY", "CHF", "CAD", "AUD", "NZD"}
)

# Ordered by lookup priority; entries are folded with normalize_text at import.
_SYMBOL_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("XAUUSD", ("xau", "gold", "ذهب", "دهب", "الذهب", "الدهب", "سعر الذهب", "اونصه الذهب")),
    ("XAGUSD", ("xag", "silver", "فضه", "الفضه", "سيلفر")),
    ("XTIUSD", ("xti", "wti", "oil", "crude", "crude oil", "us oil", "نفط", "النفط", "خام", "نفط خام", "خام تكساس")),
    ("XBRUSD", ("xbr", "brent", "برنت", "خام برنت", "نفط برنت")),
    ("BTCUSDT", ("btc", "bitcoin", "بيتكوين", "بتكوين", "البيتكوين", "بيتكون")),
    ("ETHUSDT", ("eth", "ethereum", "ether", "ايثيريوم", "اثيريوم", "ايثريوم", "ايثر")),
    ("SOLUSDT", ("sol", "solana", "سولانا")),
    ("XRPUSDT", ("xrp", "ripple", "ريبل")),
    ("BNBUSDT", ("bnb", "binance coin")),
    ("ADAUSDT", ("ada", "cardano", "كاردانو")),
    ("DOGEUSDT", ("doge", "dogecoin", "دوج", "دوجكوين")),
    ("LTCUSDT", ("ltc", "litecoin", "لايتكوين")),
    ("EURUSD", ("eur", "euro", "يورو", "اليورو", "يورو دولار")),
    ("GBPUSD", ("gbp", "pound", "sterling", "cable", "استرليني", "الاسترليني", "جنيه", "جنيه استرليني", "باوند")),
    ("USDJPY", ("jpy", "yen", "ين", "الين", "ين ياباني", "دولار ين")),
    ("USDCHF", ("chf", "franc", "swiss franc", "فرنك", "فرنك سويسري", "الفرنك")),
    ("USDCAD", ("cad", "loonie", "canadian dollar", "كندي", "دولار كندي", "الكندي")),
    ("AUDUSD", ("aud", "aussie", "australian dollar", "استرالي", "دولار استرالي", "الاسترالي")),
    ("NZDUSD", ("nzd", "kiwi", "نيوزلندي", "دولار نيوزلندي", "النيوزلندي")),
)

_SLASH_PAIR_RE = re.compile(r"\b([A-Za-z]{3,5})\s*/\s*([A-Za-z]{3,4})\b")
_TICKER_RE = re.compile(r"\b[A-Za-z]{6,10}\b")


def is_crypto_symbol(symbol: str) -> bool:
    compact = ohlc_symbol(symbol)
    if compact.endswith("USDT"):
        return True
    for quote in ("USD", "EUR", "BTC", "ETH"):
        if compact.endswith(quote) and compact[: -len(quote)] in CRYPTO_BASES:
            return True
    return compact in CRYPTO_BASES


def asset_class_for(symbol: str) -> AssetClass:
    """Derive the routing asset class from a canonical ticker."""
    return AssetClass.CRYPTO if is_crypto_symbol(symbol) else AssetClass.FOREX_METAL


def ohlc_symbol(symbol: str) -> str:
    """Return the separator-free form used for OHLC queries (``XAUUSD``)."""
    return re.sub(r"[^A-Za-z0-9]", "", symbol).upper()


def split_pair(symbol: str) -> tuple[str, str] | None:
    """Split a canonical ticker into base and quote currencies."""
    compact = ohlc_symbol(symbol)
    for quote in QUOTE_CURRENCIES:
        if compact.endswith(quote) and len(compact) - len(quote) >= 2:
            return compact[: -len(quote)], quote
    return None


def display_symbol(symbol: str) -> str:
    """Return the slash-separated quote form (``XAU/USD``, ``BTC/USDT``)."""
    parts = split_pair(symbol)
    if parts is None:
        return ohlc_symbol(symbol)
    return f"{parts[0]}/{parts[1]}"


def _build_alias_table() -> MappingProxyType[str, str]:
    table: dict[str, str] = {}
    for canonical, aliases in _SYMBOL_ALIASES:
        for phrase in (canonical, display_symbol(canonical), *aliases):
            key = normalize_text(phrase)
            if key in table and table[key] != canonical:
                raise ValueError(f"alias {phrase!r} maps to both {table[key]} and {canonical}")
            table.setdefault(key, canonical)
    return MappingProxyType(table)


ALIAS_TABLE = _build_alias_table()


def _resolved(symbol: str) -> ResolvedSymbol:
    canonical = ohlc_symbol(symbol)
    return ResolvedSymbol(symbol=canonical, asset_class=asset_class_for(canonical))


def _scan_phrases(tokens: list[str]) -> str | None:
    stemmed = [destem(token) for token in tokens]
    for start in range(len(tokens)):
        for size in range(MAX_PHRASE_TOKENS, 0, -1):
            end = start + size
            if end > len(tokens):
                continue
            raw_phrase = " ".join(tokens[start:end])
            if raw_phrase in ALIAS_TABLE:
                return ALIAS_TABLE[raw_phrase]
            stemmed_phrase = " ".join(stemmed[start:end])
            if stemmed_phrase in ALIAS_TABLE:
                return ALIAS_TABLE[stemmed_phrase]
    return None


def _match_ticker_pattern(raw_text: str) -> str | None:
    for slash in _SLASH_PAIR_RE.finditer(normalize_digits(raw_text)):
        base, quote = slash.group(1).upper(), slash.group(2).upper()
        if quote in QUOTE_CURRENCIES:
            return f"{base}{quote}"
    # A bare word needs a known quote currency, and unless typed in upper case
    # also a known base, so "signal", "applaud" or "twentieth" never pass.
    for match in _TICKER_RE.finditer(normalize_digits(raw_text)):
        word = match.group(0)
        parts = split_pair(word)
        if parts is None:
            continue
        if word.isupper() or parts[0] in KNOWN_BASES:
            return word.upper()
    return None


def normalize_symbol(raw_text: str | None) -> ResolvedSymbol:
    """Resolve user text such as ``"price of gold"`` or ``"ذهب"`` to a ticker.

    Resolution order: whole-text alias, phrase scan (longest first, raw and
    destemmed tokens), then explicit ticker patterns. Raises
    SymbolNotFoundError when nothing matches.
    """
    raw = raw_text or ""
    normalized = normalize_text(raw)
    if not normalized:
        raise SymbolNotFoundError(raw)

    exact = ALIAS_TABLE.get(normalized)
    if exact is not None:
        return _resolved(exact)

    scanned = _scan_phrases(tokenize(normalized))
    if scanned is not None:
        logger.debug("symbol phrase match | %r -> %s", raw, scanned)
        return _resolved(scanned)

    ticker = _match_ticker_pattern(raw)
    if ticker is not None:
        logger.debug("symbol pattern match | %r -> %s", raw, ticker)
        return _resolved(ticker)

    raise SymbolNotFoundError(raw)
