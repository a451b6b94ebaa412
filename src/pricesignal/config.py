"""Environment and CLI runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Self

from dotenv import load_dotenv

from pricesignal.data.binance import BINANCE_BASE_URL
from pricesignal.data.fcs import FCS_BASE_URL
from pricesignal.data.fmp import FMP_BASE_URL
from pricesignal.domain.errors import ConfigError
from pricesignal.domain.models import Timeframe
from pricesignal.normalize.timeframes import parse_timeframe
from pricesignal.signals.engine import DEFAULT_MIN_BARS, MIN_BARS_CEILING, MIN_BARS_FLOOR

KNOWN_PROVIDERS = ("fcs", "fmp", "binance", "yahoo")
DEFAULT_CRYPTO_PROVIDERS = ("fmp",)
DEFAULT_FOREX_PROVIDERS = ("fcs", "fmp")


def parse_providers(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse a comma-separated provider priority list, dropping duplicates."""
    if not value or not value.strip():
        return default
    providers: list[str] = []
    for item in value.split(","):
        name = item.strip().lower()
        if name and name not in providers:
            providers.append(name)
    return tuple(providers) or default


def parse_positive_int(value: str | None, default: int, *, field_name: str) -> int:
    """Parse a positive integer from an env string."""
    if value is None or not value.strip():
        return default
    parsed = int(value.strip())
    if parsed <= 0:
        raise ConfigError(f"{field_name} must be positive")
    return parsed


def parse_positive_float(value: str | None, default: float, *, field_name: str) -> float:
    if value is None or not value.strip():
        return default
    parsed = float(value.strip())
    if parsed <= 0:
        raise ConfigError(f"{field_name} must be positive")
    return parsed


def _first_env(*names: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value.strip()
    return ""


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""

    fcs_api_key: str = field(default="", repr=False)
    fmp_api_key: str = field(default="", repr=False)
    fcs_base_url: str = FCS_BASE_URL
    fmp_base_url: str = FMP_BASE_URL
    binance_base_url: str = BINANCE_BASE_URL
    crypto_providers: tuple[str, ...] = DEFAULT_CRYPTO_PROVIDERS
    forex_providers: tuple[str, ...] = DEFAULT_FOREX_PROVIDERS
    request_timeout_seconds: float = 9.0
    ohlc_limit: int = 200
    min_signal_bars: int = DEFAULT_MIN_BARS
    signal_timeframe: Timeframe = Timeframe.H1
    price_timeframe: Timeframe = Timeframe.M1
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Self:
        """Create settings from environment variables (and a local .env file)."""
        load_dotenv()
        raw = cls(
            fcs_api_key=_first_env("FCS_API_KEY", "OHLC_API_KEY"),
            fmp_api_key=_first_env("FMP_API_KEY"),
            fcs_base_url=_first_env("FCS_BASE_URL") or FCS_BASE_URL,
            fmp_base_url=_first_env("FMP_BASE_URL") or FMP_BASE_URL,
            binance_base_url=_first_env("BINANCE_BASE_URL") or BINANCE_BASE_URL,
            crypto_providers=parse_providers(os.getenv("CRYPTO_PROVIDERS"), DEFAULT_CRYPTO_PROVIDERS),
            forex_providers=parse_providers(os.getenv("FOREX_PROVIDERS"), DEFAULT_FOREX_PROVIDERS),
            request_timeout_seconds=parse_positive_float(
                os.getenv("REQUEST_TIMEOUT_SECONDS"),
                9.0,
                field_name="request_timeout_seconds",
            ),
            ohlc_limit=parse_positive_int(os.getenv("OHLC_LIMIT"), 200, field_name="ohlc_limit"),
            min_signal_bars=parse_positive_int(
                os.getenv("MIN_SIGNAL_BARS"),
                DEFAULT_MIN_BARS,
                field_name="min_signal_bars",
            ),
            signal_timeframe=parse_timeframe(os.getenv("SIGNAL_TIMEFRAME") or "1h"),
            price_timeframe=parse_timeframe(os.getenv("PRICE_TIMEFRAME") or "1m"),
            log_level=str(os.getenv("LOG_LEVEL", "INFO")).strip().upper(),
        )
        return raw.validate()

    def with_overrides(self, **kwargs: object) -> Self:
        """Return a new settings object with updated values."""
        overrides = dict(kwargs)
        for key in ("signal_timeframe", "price_timeframe"):
            value = overrides.get(key)
            if isinstance(value, str):
                overrides[key] = parse_timeframe(value)
        updated = replace(self, **overrides)
        return updated.validate()

    def secrets(self) -> list[str]:
        """Configured credentials, for log redaction."""
        return [value for value in (self.fcs_api_key, self.fmp_api_key) if value]

    def validate(self) -> Self:
        """Validate settings fields."""
        if self.request_timeout_seconds <= 0:
            raise ConfigError("request_timeout_seconds must be positive")
        if self.request_timeout_seconds > 30:
            raise ConfigError("request_timeout_seconds must be at most 30")
        if self.ohlc_limit <= 0:
            raise ConfigError("ohlc_limit must be positive")
        if not MIN_BARS_FLOOR <= self.min_signal_bars <= MIN_BARS_CEILING:
            raise ConfigError(
                f"min_signal_bars must be between {MIN_BARS_FLOOR} and {MIN_BARS_CEILING}"
            )
        for label, chain in (("crypto_providers", self.crypto_providers), ("forex_providers", self.forex_providers)):
            if not chain:
                raise ConfigError(f"{label} must name at least one provider")
            unknown = [name for name in chain if name not in KNOWN_PROVIDERS]
            if unknown:
                supported = ", ".join(KNOWN_PROVIDERS)
                raise ConfigError(f"{label} has unknown provider(s) {unknown}. Supported: {supported}")
        if "binance" in self.forex_providers:
            raise ConfigError("binance only serves crypto pairs")
        if self.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ConfigError("log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return self
