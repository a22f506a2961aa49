#!/usr/bin/env python3
"""Command-line interface for the DCA platform."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone


def parse_date(date_str: str) -> datetime:
    """Parse date string to datetime."""
    return datetime.strptime(date_str, "%Y-%m-%d").replace(tzinfo=timezone.utc)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _source_params(args: argparse.Namespace) -> dict:
    params = {}
    if args.data_source == "csv":
        params["file_path"] = args.csv_file
    if args.strict:
        params["strict"] = True
    return params


def _build_provider(args: argparse.Namespace):
    from dca_platform.data import QuoteProvider, resolve_quote_source

    source = resolve_quote_source(args.data_source, _source_params(args))
    return QuoteProvider(source)


def _fetch_for_command(args: argparse.Namespace):
    """Fetch the quotes for a single-asset command, printing progress."""
    from dca_platform.types import DateRange

    provider = _build_provider(args)
    date_range = DateRange(start=parse_date(args.start), end=parse_date(args.end))

    print(f"\n📊 Fetching {args.symbol}...")
    quotes = provider.get_quotes(args.symbol, date_range, native=args.native)
    print(f"   Fetched {len(quotes)} quotes")
    return quotes


def _print_result(result) -> None:
    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    print(f"Strategy:        {result.name}")
    print(f"Total Invested:  ${result.total_invested:,.2f}")
    print(f"Final Value:     ${result.final_value:,.2f}")
    print(f"Total Return:    {result.return_percent:+.2f}%")
    if result.total_accumulated:
        print(f"Units Held:      {result.total_accumulated:,.6f}")


def cmd_dca(args: argparse.Namespace) -> int:
    """Simulate a DCA plan on one asset."""
    from dca_platform.catalog import asset_name
    from dca_platform.exceptions import DcaPlatformError
    from dca_platform.strategies import calculate_dca

    print("=" * 60)
    print("DCA SIMULATION")
    print("=" * 60)
    print(f"Asset:      {asset_name(args.symbol)}")
    print(f"Period:     {args.start} to {args.end}")
    print(f"Recurring:  ${args.amount:,.2f} {args.frequency}")
    print(f"Initial:    ${args.initial:,.2f}")

    try:
        quotes = _fetch_for_command(args)
        result = calculate_dca(quotes, args.initial, args.amount, args.frequency)
    except DcaPlatformError as e:
        print(f"Error: {e}")
        return 1

    _print_result(result)
    return 0


def cmd_lump_sum(args: argparse.Namespace) -> int:
    """Simulate a single up-front investment on one asset."""
    from dca_platform.catalog import asset_name
    from dca_platform.exceptions import DcaPlatformError
    from dca_platform.strategies import calculate_lump_sum

    print("=" * 60)
    print("LUMP SUM SIMULATION")
    print("=" * 60)
    print(f"Asset:      {asset_name(args.symbol)}")
    print(f"Period:     {args.start} to {args.end}")
    print(f"Amount:     ${args.amount:,.2f}")

    try:
        quotes = _fetch_for_command(args)
        result = calculate_lump_sum(
            quotes, args.amount, f"Lump Sum {asset_name(args.symbol)}"
        )
    except DcaPlatformError as e:
        print(f"Error: {e}")
        return 1

    _print_result(result)
    return 0


def cmd_note(args: argparse.Namespace) -> int:
    """Compute a structured note payoff on one underlying."""
    from dca_platform.catalog import asset_name
    from dca_platform.exceptions import DcaPlatformError
    from dca_platform.strategies import calculate_structured_note

    print("=" * 60)
    print("STRUCTURED NOTE")
    print("=" * 60)
    print(f"Underlying:     {asset_name(args.symbol)}")
    print(f"Period:         {args.start} to {args.end}")
    print(f"Amount:         ${args.amount:,.2f}")
    print(f"Protected:      {not args.unprotected}")
    print(f"Participation:  {args.participation:.0%}")
    print(f"Cap:            {f'{args.cap:.0%}' if args.cap > 0 else 'none'}")

    try:
        quotes = _fetch_for_command(args)
        result = calculate_structured_note(
            quotes,
            args.amount,
            not args.unprotected,
            args.participation,
            args.cap,
        )
    except DcaPlatformError as e:
        print(f"Error: {e}")
        return 1

    _print_result(result)
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare strategies across assets."""
    from dca_platform.commands.compare import (load_compare_config,
                                               parse_compare_config)
    from dca_platform.comparison import compare, summary_table
    from dca_platform.data import QuoteProvider, resolve_quote_source
    from dca_platform.exceptions import ConfigError, DcaPlatformError

    try:
        if args.config:
            config = load_compare_config(args.config)
        else:
            config = parse_compare_config(
                {
                    "date_range": {"start": args.start, "end": args.end},
                    "periodic_amount": args.amount,
                    "initial_amount": args.initial,
                    "frequency": args.frequency,
                    "dca_assets": args.dca or [],
                    "lump_sum_assets": args.lump_sum or [],
                    "use_native": args.native,
                    "data_source": args.data_source,
                    "source_params": _source_params(args),
                    "log_level": args.log_level,
                }
            )
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 1

    if args.config:
        logging.getLogger().setLevel(config.log_level)

    print("=" * 70)
    print("STRATEGY COMPARISON")
    print("=" * 70)
    print(
        f"Period:     {config.date_range.start.date()} to {config.date_range.end.date()}"
    )
    print(f"Recurring:  ${config.periodic_amount:,.2f} {config.frequency.value}")
    print(f"Initial:    ${config.initial_amount:,.2f}")
    print(f"DCA:        {', '.join(config.dca_assets) or '-'}")
    print(f"Lump Sum:   {', '.join(config.lump_sum_assets) or '-'}")
    if config.structured_notes:
        print(
            f"Notes:      {', '.join(n.underlying for n in config.structured_notes)}"
        )
    print(f"Currency:   {'native' if config.use_native else 'USD'}")

    try:
        source = resolve_quote_source(config.data_source, config.source_params)
        print("\n🚀 Running comparison...")
        report = compare(config, QuoteProvider(source))
    except DcaPlatformError as e:
        print(f"Error: {e}")
        return 1

    print()
    print(summary_table(report))

    if not report.results:
        print("No strategy could be simulated.")
        return 1

    return 0


def cmd_assets(args: argparse.Namespace) -> int:
    """List the asset catalog."""
    from dca_platform.catalog import assets_by_category

    for category, assets in assets_by_category().items():
        print(f"\n{category}")
        print("-" * 60)
        for asset in assets:
            print(f"   {asset.symbol:<18} {asset.name}")

    return 0


def _add_period_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--start", default="2017-01-01", help="Start date (YYYY-MM-DD)"
    )
    parser.add_argument(
        "--end",
        default=datetime.now(timezone.utc).strftime("%Y-%m-%d"),
        help="End date (YYYY-MM-DD, default: today)",
    )
    parser.add_argument(
        "--native",
        action="store_true",
        help="Keep quotes in the instrument's native currency",
    )
    parser.add_argument(
        "--data-source",
        default="yahoo",
        choices=["yahoo", "csv"],
        help="Raw quote source (default: yahoo)",
    )
    parser.add_argument("--csv-file", help="CSV file for --data-source csv")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject out-of-order or same-day quotes instead of repairing them",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Compare DCA, lump-sum and structured-note strategies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # DCA command
    dca_parser = subparsers.add_parser("dca", help="Simulate a DCA plan")
    dca_parser.add_argument("symbol", help="Asset symbol (e.g., BTC-USD)")
    _add_period_args(dca_parser)
    dca_parser.add_argument(
        "-a", "--amount", type=float, default=100.0, help="Recurring amount"
    )
    dca_parser.add_argument(
        "-i", "--initial", type=float, default=0.0, help="Initial amount"
    )
    dca_parser.add_argument(
        "-f",
        "--frequency",
        default="monthly",
        choices=["daily", "weekly", "monthly"],
        help="Purchase frequency (default: monthly)",
    )

    # Lump sum command
    ls_parser = subparsers.add_parser("lump-sum", help="Simulate a lump-sum investment")
    ls_parser.add_argument("symbol", help="Asset symbol (e.g., BTC-USD)")
    _add_period_args(ls_parser)
    ls_parser.add_argument(
        "-a", "--amount", type=float, default=10000.0, help="Amount invested"
    )

    # Structured note command
    note_parser = subparsers.add_parser("note", help="Compute a structured note payoff")
    note_parser.add_argument("symbol", help="Underlying symbol (e.g., ^GSPC)")
    _add_period_args(note_parser)
    note_parser.add_argument(
        "-a", "--amount", type=float, default=10000.0, help="Amount invested"
    )
    note_parser.add_argument(
        "-p", "--participation", type=float, default=1.0, help="Participation (1.0 = 100%%)"
    )
    note_parser.add_argument(
        "-c", "--cap", type=float, default=0.0, help="Return cap (0.2 = 20%%, 0 = none)"
    )
    note_parser.add_argument(
        "--unprotected", action="store_true", help="Disable capital protection"
    )

    # Compare command
    compare_parser = subparsers.add_parser(
        "compare", help="Compare strategies across assets"
    )
    compare_parser.add_argument(
        "config", nargs="?", default=None, help="Path to YAML configuration file"
    )
    _add_period_args(compare_parser)
    compare_parser.add_argument(
        "--dca", action="append", metavar="SYMBOL", help="Asset simulated with DCA"
    )
    compare_parser.add_argument(
        "--lump-sum", action="append", metavar="SYMBOL", help="Asset simulated with lump sum"
    )
    compare_parser.add_argument(
        "-a", "--amount", type=float, default=100.0, help="Recurring amount"
    )
    compare_parser.add_argument(
        "-i", "--initial", type=float, default=0.0, help="Initial amount"
    )
    compare_parser.add_argument(
        "-f",
        "--frequency",
        default="monthly",
        choices=["daily", "weekly", "monthly"],
        help="Purchase frequency (default: monthly)",
    )

    # Assets command
    subparsers.add_parser("assets", help="List the asset catalog")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "dca":
        return cmd_dca(args)
    elif args.command == "lump-sum":
        return cmd_lump_sum(args)
    elif args.command == "note":
        return cmd_note(args)
    elif args.command == "compare":
        return cmd_compare(args)
    elif args.command == "assets":
        return cmd_assets(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
