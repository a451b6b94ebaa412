"""Tests for free-text instrument resolution."""

from __future__ import annotations

import pytest

from pricesignal.domain.errors import SymbolNotFoundError
from pricesignal.domain.models import AssetClass
from pricesignal.normalize.symbols import (
    ALIAS_TABLE,
    display_symbol,
    is_crypto_symbol,
    normalize_symbol,
    ohlc_symbol,
    split_pair,
)
from pricesignal.normalize.text import destem, normalize_text


def test_arabic_gold_alias_resolves_to_metal() -> None:
    resolved = normalize_symbol("ذهب")

    assert resolved.symbol == "XAUUSD"
    assert resolved.asset_class is AssetClass.FOREX_METAL


def test_english_and_display_forms_resolve() -> None:
    assert normalize_symbol("Gold").symbol == "XAUUSD"
    assert normalize_symbol("XAU/USD").symbol == "XAUUSD"
    assert normalize_symbol("Bitcoin 15m").symbol == "BTCUSDT"
    assert normalize_symbol("btcusdt 1h").asset_class is AssetClass.CRYPTO


def test_every_canonical_ticker_resolves_to_itself() -> None:
    for canonical in set(ALIAS_TABLE.values()):
        assert normalize_symbol(canonical).symbol == canonical


def test_every_display_form_resolves_back_to_its_ticker() -> None:
    for canonical in set(ALIAS_TABLE.values()):
        assert normalize_symbol(display_symbol(canonical)).symbol == canonical
        assert normalize_symbol(display_symbol(canonical).lower()).symbol == canonical


def test_phrase_scan_finds_alias_inside_sentence() -> None:
    assert normalize_symbol("كم سعر الذهب الان").symbol == "XAUUSD"
    assert normalize_symbol("what about crude oil today").symbol == "XTIUSD"


def test_destemmed_tokens_match_aliases() -> None:
    assert normalize_symbol("signal for بالفضة").symbol == "XAGUSD"
    assert normalize_symbol("والذهب").symbol == "XAUUSD"


def test_diacritics_and_hamza_are_folded() -> None:
    assert normalize_text("الذَّهَب") == "الذهب"
    assert normalize_text("  أونصة   الذهب! ") == "اونصه الذهب"
    assert normalize_symbol("أونصة الذهب").symbol == "XAUUSD"


def test_slash_pair_pattern_is_accepted() -> None:
    resolved = normalize_symbol("eth/btc please")

    assert resolved.symbol == "ETHBTC"
    assert resolved.asset_class is AssetClass.CRYPTO


def test_bare_ticker_requires_known_quote_currency() -> None:
    assert normalize_symbol("gbpjpy now").symbol == "GBPJPY"
    assert normalize_symbol("ltcbtc signal").symbol == "LTCBTC"
    with pytest.raises(SymbolNotFoundError):
        normalize_symbol("signal please")


@pytest.mark.parametrize("text", ["applaud", "amateur", "twentieth", "signal for applaud please"])
def test_english_words_ending_in_currency_codes_are_not_tickers(text: str) -> None:
    with pytest.raises(SymbolNotFoundError):
        normalize_symbol(text)


def test_upper_case_bare_ticker_needs_only_a_known_quote() -> None:
    assert normalize_symbol("XYZUSD please").symbol == "XYZUSD"
    assert normalize_symbol("eurgbp now").symbol == "EURGBP"


def test_unknown_or_empty_text_raises() -> None:
    with pytest.raises(SymbolNotFoundError) as excinfo:
        normalize_symbol("تفاح")
    assert excinfo.value.raw_text == "تفاح"
    with pytest.raises(SymbolNotFoundError):
        normalize_symbol("")
    with pytest.raises(SymbolNotFoundError):
        normalize_symbol(None)


def test_symbol_formatting_helpers() -> None:
    assert ohlc_symbol("xau/usd") == "XAUUSD"
    assert display_symbol("BTCUSDT") == "BTC/USDT"
    assert display_symbol("USDJPY") == "USD/JPY"
    assert split_pair("XAUUSD") == ("XAU", "USD")
    assert split_pair("GOLD") is None
    assert is_crypto_symbol("ETHUSD")
    assert not is_crypto_symbol("EURUSD")


def test_destem_keeps_short_tokens() -> None:
    assert destem("الذهب") == "ذهب"
    assert destem("بالفضه") == "فضه"
    assert destem("ولد") == "ولد"
