"""Custom exceptions for clearer error handling across the package."""

from __future__ import annotations


class PriceSignalError(Exception):
    """Base exception for all package-specific errors."""


class ConfigError(PriceSignalError, ValueError):
    """Raised when environment configuration is invalid or missing."""


class SymbolNotFoundError(PriceSignalError):
    """Raised when text matches no alias or ticker pattern."""

    def __init__(self, raw_text: str) -> None:
        super().__init__(f"No instrument matches {raw_text!r}")
        self.raw_text = raw_text


class NoDataForTimeframeError(PriceSignalError):
    """Raised when every provider failed or returned unusable candles."""

    def __init__(self, symbol: str, timeframe: str, reason: str = "no usable candles") -> None:
        super().__init__(f"{symbol} {timeframe}: {reason}")
        self.symbol = symbol
        self.timeframe = timeframe
        self.reason = reason


class ProviderTransportError(PriceSignalError):
    """Raised when a single provider request fails at the network or HTTP level."""

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        detail = f"{provider} request failed: {message}"
        if status_code is not None:
            detail = f"{provider} request failed ({status_code}): {message}"
        super().__init__(detail)
        self.provider = provider
        self.status_code = status_code
