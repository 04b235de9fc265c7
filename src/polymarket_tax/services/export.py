"""CSV and JSON exports of a TaxReport for tax software import."""

from __future__ import annotations

import csv
import json
from decimal import Decimal
from io import StringIO
from pathlib import Path

from polymarket_tax.domain.reports import Form8949Entry, TaxReport
from polymarket_tax.domain.value_objects import HoldingTerm
from polymarket_tax.exceptions import ExportError

CSV_HEADERS = [
    "Type",
    "Description",
    "Date Acquired",
    "Date Sold",
    "Proceeds",
    "Cost Basis",
    "Gain/Loss",
    "Holding Days",
    "Term",
]


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def _entry_row(part: HoldingTerm, entry: Form8949Entry) -> list[str]:
    return [
        part.label,
        entry.description,
        entry.date_acquired,
        entry.date_sold,
        _money(entry.proceeds),
        _money(entry.cost_basis),
        _money(entry.gain_loss),
        str(entry.holding_days),
        entry.term.label,
    ]


def _write(content: str, output_path: str | Path) -> None:
    try:
        with open(output_path, "w", newline="") as f:
            f.write(content)
    except OSError as e:
        raise ExportError(str(output_path), str(e)) from e


def export_form_8949_csv(
    report: TaxReport,
    output_path: str | Path | None = None,
) -> str:
    """
    Export the report as a Form 8949 transaction statement.

    Args:
        report: Report to export
        output_path: Path to write CSV (if None, only returns the string)

    Returns:
        CSV content as string
    """
    output = StringIO()
    writer = csv.writer(output, lineterminator="\n")

    writer.writerow(CSV_HEADERS)
    for entry in report.short_term:
        writer.writerow(_entry_row(HoldingTerm.SHORT_TERM, entry))
    for entry in report.long_term:
        writer.writerow(_entry_row(HoldingTerm.LONG_TERM, entry))

    st = report.short_term_summary
    lt = report.long_term_summary
    writer.writerow([])
    writer.writerow(["SUMMARY"] + [""] * 8)
    writer.writerow([])
    writer.writerow(
        [
            "Short-Term Total",
            f"{st.count} transactions",
            "",
            "",
            _money(st.total_proceeds),
            _money(st.total_cost_basis),
            _money(st.total_gain_loss),
            "",
            "",
        ]
    )
    writer.writerow(
        [
            "Long-Term Total",
            f"{lt.count} transactions",
            "",
            "",
            _money(lt.total_proceeds),
            _money(lt.total_cost_basis),
            _money(lt.total_gain_loss),
            "",
            "",
        ]
    )
    writer.writerow([])
    writer.writerow(
        [
            "GRAND TOTAL",
            f"{report.total_transactions} transactions",
            "",
            "",
            _money(report.total_proceeds),
            _money(report.total_cost_basis),
            _money(report.total_gain_loss),
            "",
            "",
        ]
    )

    csv_content = output.getvalue()
    if output_path:
        _write(csv_content, output_path)
    return csv_content


def export_report_json(
    report: TaxReport,
    output_path: str | Path | None = None,
) -> str:
    """Serialize the report; decimals are written as strings."""
    content = json.dumps(report.to_dict(), indent=2)
    if output_path:
        _write(content, output_path)
    return content
