"""Command-line interface for signal and price requests."""

from __future__ import annotations

import argparse
import sys

from pricesignal.config import Settings
from pricesignal.domain.errors import NoDataForTimeframeError, SymbolNotFoundError
from pricesignal.formatting import format_price
from pricesignal.logging.logger import setup_logger
from pricesignal.runtime import analyze_signal, quote_price

EXIT_OK = 0
EXIT_CONFIG = 2
EXIT_SYMBOL_NOT_FOUND = 3
EXIT_NO_DATA = 4


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(description="Technical signals and latest prices from free-form requests")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    signal_parser = subparsers.add_parser("signal", help="Compute indicators and a BUY/SELL/NEUTRAL signal")
    signal_parser.add_argument("text", nargs="+", help="Request text, e.g. 'ذهب عالساعة' or 'BTCUSDT 15m'")
    signal_parser.add_argument("--timeframe", type=str, help="Timeframe text, e.g. 15m or 'ربع ساعة'")
    signal_parser.add_argument("--min-bars", type=int, help="Minimum candles before a directional signal")
    signal_parser.add_argument("--limit", type=int, help="Candles to request per provider")

    price_parser = subparsers.add_parser("price", help="Show the latest closed price")
    price_parser.add_argument("text", nargs="+", help="Request text, e.g. 'سعر الفضة'")
    price_parser.add_argument("--timeframe", type=str, help="Candle timeframe used for the quote")
    return parser


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply CLI values onto environment-derived settings."""
    overrides: dict[str, object] = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if getattr(args, "min_bars", None) is not None:
        overrides["min_signal_bars"] = args.min_bars
    if getattr(args, "limit", None) is not None:
        overrides["ohlc_limit"] = args.limit
    return settings.with_overrides(**overrides)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = apply_cli_overrides(Settings.from_env(), args)
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        return EXIT_CONFIG

    logger = setup_logger(settings.log_level, secrets=settings.secrets())
    text = " ".join(args.text)
    try:
        if args.command == "price":
            quote = quote_price(settings, text, args.timeframe)
            print(format_price(quote))
        else:
            report = analyze_signal(settings, text, args.timeframe)
            print(report.render())
    except SymbolNotFoundError as exc:
        logger.warning("symbol not found | text=%r", exc.raw_text)
        print(f"Symbol not found: {exc.raw_text}")
        return EXIT_SYMBOL_NOT_FOUND
    except NoDataForTimeframeError as exc:
        logger.warning("no data | %s", exc)
        print(f"No data: {exc}")
        return EXIT_NO_DATA
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
