from __future__ import annotations

import pytest

from pricesignal.data.base import ProviderResponse
from pricesignal.data.gateway import OhlcGateway, format_epoch, freshness, select_candidate
from pricesignal.data.rows import FcsQuoteRow, FcsRow
from pricesignal.domain.errors import NoDataForTimeframeError, ProviderTransportError
from pricesignal.domain.models import AssetClass, Candle, OhlcResult, ResolvedSymbol, Timeframe

NOW = 1_700_000_000
GOLD = ResolvedSymbol(symbol="XAUUSD", asset_class=AssetClass.FOREX_METAL)


def _rows(count: int, last_timestamp: int, step: int = 300) -> list[FcsRow]:
    first = last_timestamp - (count - 1) * step
    return [
        FcsRow(time=first + index * step, open=2000.0, high=2001.0, low=1999.0, close=2000.0 + index)
        for index in range(count)
    ]


class FakeProvider:
    def __init__(
        self,
        name: str,
        rows: list[FcsRow] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.rows = rows
        self.error = error
        self.calls: list[tuple[str, Timeframe, int]] = []

    def fetch(self, symbol: ResolvedSymbol, timeframe: Timeframe, limit: int) -> ProviderResponse | None:
        self.calls.append((symbol.symbol, timeframe, limit))
        if self.error is not None:
            raise self.error
        if self.rows is None:
            return None
        return ProviderResponse(provider=self.name, provider_symbol=symbol.symbol, rows=self.rows)


def _gateway(*providers: FakeProvider) -> OhlcGateway:
    return OhlcGateway(
        providers={AssetClass.FOREX_METAL: list(providers)},
        default_limit=200,
        clock=lambda: float(NOW),
    )


def test_all_providers_failing_raises_no_data() -> None:
    gateway = _gateway(
        FakeProvider("fcs", error=ProviderTransportError("fcs", "timeout")),
        FakeProvider("fmp", error=ProviderTransportError("fmp", "boom", status_code=500)),
    )

    with pytest.raises(NoDataForTimeframeError) as excinfo:
        gateway.fetch_candles(GOLD, Timeframe.H1)
    assert excinfo.value.symbol == "XAUUSD"
    assert excinfo.value.timeframe == "1h"
    assert excinfo.value.reason == "all providers failed"


def test_empty_providers_raise_no_data() -> None:
    gateway = _gateway(FakeProvider("fcs"), FakeProvider("fmp"))

    with pytest.raises(NoDataForTimeframeError, match="no candles"):
        gateway.fetch_candles(GOLD, Timeframe.M5)


def test_six_hour_old_data_on_5m_is_stale_but_returned() -> None:
    gateway = _gateway(FakeProvider("fcs", rows=_rows(40, NOW - 6 * 3600)))

    result = gateway.fetch_candles(GOLD, Timeframe.M5)

    assert result.is_stale is True
    assert result.is_too_old is False
    assert result.age_seconds == 6 * 3600
    assert len(result.candles) == 40


def test_data_older_than_a_day_is_rejected() -> None:
    gateway = _gateway(FakeProvider("fcs", rows=_rows(40, NOW - 2 * 86400)))

    with pytest.raises(NoDataForTimeframeError, match="old"):
        gateway.fetch_candles(GOLD, Timeframe.M5)


def test_fresh_sufficient_result_skips_remaining_providers() -> None:
    primary = FakeProvider("fcs", rows=_rows(40, NOW))
    backup = FakeProvider("fmp", rows=_rows(40, NOW))

    result = _gateway(primary, backup).fetch_candles(GOLD, Timeframe.M5)

    assert result.provider == "fcs"
    assert result.is_stale is False
    assert backup.calls == []


def test_failure_falls_through_to_next_provider() -> None:
    backup = FakeProvider("fmp", rows=_rows(40, NOW))
    gateway = _gateway(FakeProvider("fcs", error=ProviderTransportError("fcs", "timeout")), backup)

    result = gateway.fetch_candles(GOLD, Timeframe.M5)

    assert result.provider == "fmp"
    assert len(backup.calls) == 1


def test_short_series_loses_to_sufficient_lower_priority_provider() -> None:
    gateway = _gateway(FakeProvider("fcs", rows=_rows(10, NOW)), FakeProvider("fmp", rows=_rows(35, NOW)))

    result = gateway.fetch_candles(GOLD, Timeframe.M5)

    assert result.provider == "fmp"


def test_only_short_series_is_still_returned() -> None:
    gateway = _gateway(FakeProvider("fcs", rows=_rows(10, NOW)), FakeProvider("fmp"))

    result = gateway.fetch_candles(GOLD, Timeframe.M5)

    assert result.provider == "fcs"
    assert len(result.candles) == 10


def test_limit_is_clamped_and_applied() -> None:
    provider = FakeProvider("fcs", rows=_rows(50, NOW))

    result = _gateway(provider).fetch_candles(GOLD, Timeframe.M5, limit=5000)
    assert provider.calls[-1][2] == 1000
    assert len(result.candles) == 50

    trimmed = _gateway(FakeProvider("fcs", rows=_rows(50, NOW))).fetch_candles(GOLD, Timeframe.M5, limit=20)
    assert len(trimmed.candles) == 20
    assert trimmed.last_candle.timestamp == NOW


def test_latest_price_uses_last_close() -> None:
    gateway = _gateway(FakeProvider("fcs", rows=_rows(40, NOW, step=60)))

    quote = gateway.latest_price(GOLD)

    assert quote.symbol == "XAU/USD"
    assert quote.timestamp == NOW
    assert quote.provider == "fcs"
    assert quote.price == 2039.0


def test_freshness_threshold_scales_with_timeframe() -> None:
    assert freshness(NOW - 400, Timeframe.M1, NOW) == (400, True, False)
    assert freshness(NOW - 400, Timeframe.H1, NOW) == (400, False, False)
    assert freshness(NOW - 90_000, Timeframe.D1, NOW) == (90_000, False, True)


def test_select_candidate_skips_too_old_when_possible() -> None:
    candle = Candle(timestamp=NOW, open=1.0, high=1.0, low=1.0, close=1.0)

    def result(provider: str, count: int, too_old: bool) -> OhlcResult:
        return OhlcResult(
            symbol="XAUUSD",
            timeframe=Timeframe.M5,
            candles=(candle,) * count,
            provider=provider,
            provider_symbol="XAUUSD",
            age_seconds=0,
            is_stale=too_old,
            is_too_old=too_old,
        )

    stale_primary = result("fcs", 40, True)
    fresh_backup = result("fmp", 35, False)

    assert select_candidate([stale_primary, fresh_backup], ["fcs", "fmp"]) is fresh_backup
    assert select_candidate([], ["fcs"]) is None


def test_rows_with_nanosecond_times_fall_through_to_next_provider() -> None:
    nanosecond_rows = [
        FcsRow(time=(NOW + index * 60) * 1_000_000_000, open=1.0, high=1.0, low=1.0, close=1.0)
        for index in range(40)
    ]
    gateway = _gateway(FakeProvider("fcs", rows=nanosecond_rows), FakeProvider("fmp", rows=_rows(40, NOW, step=60)))

    result = gateway.fetch_candles(GOLD, Timeframe.M1)

    assert result.provider == "fmp"
    assert len(result.candles) == 40


def test_format_epoch_falls_back_to_the_raw_number() -> None:
    assert format_epoch(NOW) == "2023-11-14T22:13:20+00:00"
    assert format_epoch(10**20) == str(10**20)


class LiveQuoteProvider(FakeProvider):
    def __init__(
        self,
        name: str,
        rows: list[FcsRow] | None = None,
        quote: FcsQuoteRow | None = None,
        quote_error: Exception | None = None,
    ) -> None:
        super().__init__(name, rows=rows)
        self.quote = quote
        self.quote_error = quote_error
        self.quote_calls = 0

    def latest_quote(self, symbol: ResolvedSymbol) -> FcsQuoteRow | None:
        self.quote_calls += 1
        if self.quote_error is not None:
            raise self.quote_error
        return self.quote


def test_latest_price_prefers_fresh_live_quote() -> None:
    provider = LiveQuoteProvider(
        "fcs",
        rows=_rows(40, NOW, step=60),
        quote=FcsQuoteRow(price="2405.25", bid="2405.1", ask="2405.4", time=NOW - 90),
    )

    quote = _gateway(provider).latest_price(GOLD)

    assert quote.live is True
    assert quote.price == 2405.25
    assert quote.bid == 2405.1
    assert quote.ask == 2405.4
    assert quote.timestamp == NOW - 90
    assert quote.symbol == "XAU/USD"
    assert provider.calls == []


def test_live_quote_without_time_is_stamped_now() -> None:
    provider = LiveQuoteProvider("fcs", quote=FcsQuoteRow(price="2405.25", bid=None, ask=None, time=None))

    quote = _gateway(provider).latest_price(GOLD)

    assert quote.timestamp == NOW
    assert quote.bid is None


def test_stale_live_quote_falls_back_to_candles() -> None:
    provider = LiveQuoteProvider(
        "fcs",
        rows=_rows(40, NOW, step=60),
        quote=FcsQuoteRow(price="2300.0", bid=None, ask=None, time=NOW - 121),
    )

    quote = _gateway(provider).latest_price(GOLD)

    assert quote.live is False
    assert quote.price == 2039.0
    assert provider.quote_calls == 1
    assert len(provider.calls) == 1


def test_failed_live_quote_tries_next_provider_then_candles() -> None:
    failing = LiveQuoteProvider("fcs", quote_error=ProviderTransportError("fcs", "timeout"))
    candles_only = FakeProvider("fmp", rows=_rows(40, NOW, step=60))

    quote = _gateway(failing, candles_only).latest_price(GOLD)

    assert quote.live is False
    assert quote.provider == "fmp"
    assert failing.quote_calls == 1
