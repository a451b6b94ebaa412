from __future__ import annotations

import pytest

from pricesignal import cli
from pricesignal.cli import apply_cli_overrides, build_parser, main
from pricesignal.config import Settings
from pricesignal.domain.errors import NoDataForTimeframeError, SymbolNotFoundError
from pricesignal.domain.models import PriceQuote


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("pricesignal.config.load_dotenv", lambda *args, **kwargs: None)
    for key in ("MIN_SIGNAL_BARS", "OHLC_LIMIT", "LOG_LEVEL", "FCS_API_KEY", "FMP_API_KEY"):
        monkeypatch.delenv(key, raising=False)


def test_signal_arguments_override_settings() -> None:
    args = build_parser().parse_args(
        ["--log-level", "DEBUG", "signal", "ذهب", "عالساعة", "--min-bars", "30", "--limit", "300"]
    )

    settings = apply_cli_overrides(Settings(), args)

    assert args.command == "signal"
    assert args.text == ["ذهب", "عالساعة"]
    assert settings.min_signal_bars == 30
    assert settings.ohlc_limit == 300
    assert settings.log_level == "DEBUG"


def test_cli_rejects_min_bars_outside_range() -> None:
    args = build_parser().parse_args(["signal", "gold", "--min-bars", "5"])

    with pytest.raises(ValueError):
        apply_cli_overrides(Settings(), args)


def test_cli_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_main_returns_config_error_code(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("MIN_SIGNAL_BARS", "5")

    assert main(["signal", "gold"]) == 2
    assert "Configuration error" in capsys.readouterr().out


def test_main_maps_symbol_not_found(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_analyze(*_args: object, **_kwargs: object) -> None:
        raise SymbolNotFoundError("تفاح")

    monkeypatch.setattr(cli, "analyze_signal", fake_analyze)

    assert main(["signal", "تفاح"]) == 3


def test_main_maps_no_data(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_quote(*_args: object, **_kwargs: object) -> None:
        raise NoDataForTimeframeError("XAUUSD", "1m", "all providers failed")

    monkeypatch.setattr(cli, "quote_price", fake_quote)

    assert main(["price", "gold"]) == 4


def test_main_prints_price_block(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    captured: dict[str, object] = {}

    def fake_quote(settings: Settings, text: str, timeframe_text: str | None) -> PriceQuote:
        captured["text"] = text
        captured["timeframe"] = timeframe_text
        return PriceQuote(symbol="XAG/USD", price=23.4567, timestamp=1_704_114_300, provider="fcs")

    monkeypatch.setattr(cli, "quote_price", fake_quote)

    assert main(["price", "سعر", "الفضة", "--timeframe", "5m"]) == 0
    out = capsys.readouterr().out
    assert captured == {"text": "سعر الفضة", "timeframe": "5m"}
    assert "Price: 23.4567" in out
    assert "Note: latest CLOSED price" in out
