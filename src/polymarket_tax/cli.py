"""Command-line interface for Polymarket Tax."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from polymarket_tax import __version__
from polymarket_tax.clients.polymarket import PolymarketClient, PolymarketMarketResolver
from polymarket_tax.domain.reports import TaxReport
from polymarket_tax.exceptions import PolymarketTaxError
from polymarket_tax.logging_config import configure_logging
from polymarket_tax.services.export import export_form_8949_csv, export_report_json
from polymarket_tax.services.interfaces import MarketResolver
from polymarket_tax.services.market_resolution import (
    NullMarketResolver,
    StaticMarketResolver,
)
from polymarket_tax.services.tax_report import TaxReportService


def load_trade_records(path: Path) -> list[dict[str, Any]]:
    """Read a trades file: a JSON list, or an object wrapping one."""
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("trades") or data.get("activities") or data.get("data") or []
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of trade records in {path}")
    return data


def _money(value: Any) -> str:
    return f"${value:,.2f}"


def print_report(report: TaxReport) -> None:
    st = report.short_term_summary
    lt = report.long_term_summary

    print(f"Form 8949 Summary - Tax Year {report.tax_year}")
    print("=" * 50)
    print(f"Total dispositions: {report.total_transactions}")
    print("\nShort-Term (Part I):")
    print(f"  Transactions: {st.count}")
    print(f"  Proceeds: {_money(st.total_proceeds)}")
    print(f"  Cost Basis: {_money(st.total_cost_basis)}")
    print(f"  Gain/Loss: {_money(st.total_gain_loss)}")
    print("\nLong-Term (Part II):")
    print(f"  Transactions: {lt.count}")
    print(f"  Proceeds: {_money(lt.total_proceeds)}")
    print(f"  Cost Basis: {_money(lt.total_cost_basis)}")
    print(f"  Gain/Loss: {_money(lt.total_gain_loss)}")
    print(f"\nNet Capital Gain/Loss: {_money(report.total_gain_loss)}")

    if report.open_positions:
        print(f"\nOpen positions ({len(report.open_positions)}):")
        for position in report.open_positions:
            print(
                f"  - {position.outcome} {position.title}: "
                f"{position.quantity:f} tokens, basis {_money(position.cost_basis)}"
            )

    if report.warnings:
        print(f"\nWarnings ({len(report.warnings)}):")
        for warning in report.warnings:
            print(f"  - {warning}")


def _build_resolver(
    args: argparse.Namespace, client: PolymarketClient
) -> MarketResolver:
    if args.offline:
        return NullMarketResolver()
    if args.markets:
        return StaticMarketResolver.from_json_file(Path(args.markets))
    return PolymarketMarketResolver(client)


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Polymarket Tax v{__version__}")
    return 0


def cmd_fetch(args: argparse.Namespace) -> int:
    """Download a wallet's trade history for a tax year."""
    output_path = Path(args.output or f"trades_{args.tax_year}.json")

    try:
        with PolymarketClient() as client:
            trades = client.fetch_trading_history(
                args.wallet, args.tax_year, on_progress=print
            )

        if not trades:
            print(f"No trades found for {args.tax_year}")
            return 1

        with open(output_path, "w") as f:
            json.dump(trades, f, indent=2)
        print(f"Saved {len(trades)} records to {output_path}")
        return 0

    except PolymarketTaxError as e:
        print(f"Error: {e.message}")
        return 1
    except OSError as e:
        print(f"Error: {e}")
        return 1


def cmd_report(args: argparse.Namespace) -> int:
    """Compute realized gains from a trades file."""
    trades_path = Path(args.trades)
    if not trades_path.exists():
        print(f"Error: File not found: {trades_path}")
        return 1

    try:
        records = load_trade_records(trades_path)

        with PolymarketClient() as client:
            resolver = _build_resolver(args, client)
            report = TaxReportService(resolver).generate(records, args.tax_year)

        print_report(report)

        if args.csv:
            export_form_8949_csv(report, args.csv)
            print(f"\nExported Form 8949 statement to {args.csv}")
        if args.json:
            export_report_json(report, args.json)
            print(f"Exported report to {args.json}")
        return 0

    except PolymarketTaxError as e:
        print(f"Error: {e.message}")
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pmtax",
        description="Polymarket Tax - FIFO capital gains for Form 8949",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # fetch command
    fetch_parser = subparsers.add_parser(
        "fetch", help="Download trade history from Polymarket"
    )
    fetch_parser.add_argument("--wallet", required=True, help="Wallet address")
    fetch_parser.add_argument(
        "--tax-year", type=int, required=True, help="Tax year (e.g., 2024)"
    )
    fetch_parser.add_argument(
        "--output", "-o", help="Output file path (default: trades_<year>.json)"
    )
    fetch_parser.set_defaults(func=cmd_fetch)

    # report command
    report_parser = subparsers.add_parser(
        "report", help="Compute gains and losses from a trades file"
    )
    report_parser.add_argument("--trades", required=True, help="Trades JSON file")
    report_parser.add_argument(
        "--tax-year", type=int, required=True, help="Tax year (e.g., 2024)"
    )
    resolution_group = report_parser.add_mutually_exclusive_group()
    resolution_group.add_argument(
        "--markets",
        help="JSON file of market resolutions instead of querying Polymarket",
    )
    resolution_group.add_argument(
        "--offline",
        action="store_true",
        help="Skip market resolution; leave all unsold positions open",
    )
    report_parser.add_argument("--csv", help="Write Form 8949 statement CSV")
    report_parser.add_argument("--json", help="Write the full report as JSON")
    report_parser.set_defaults(func=cmd_report)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(command=args.command)

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
