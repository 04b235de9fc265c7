"""Tests for CSV and JSON report exports."""

import csv
import json
from decimal import Decimal
from io import StringIO

import pytest

from polymarket_tax.domain.reports import Form8949Entry
from polymarket_tax.exceptions import ExportError
from polymarket_tax.services.export import (
    CSV_HEADERS,
    export_form_8949_csv,
    export_report_json,
)
from polymarket_tax.services.tax_report import build_report


@pytest.fixture
def report():
    short = Form8949Entry(
        description="YES token - Will it rain tomorrow?",
        date_acquired="01/01/2024",
        date_sold="03/01/2024",
        proceeds=Decimal("7.00"),
        cost_basis=Decimal("4.00"),
        gain_loss=Decimal("3.00"),
        is_long_term=False,
        holding_days=60,
    )
    oversold = Form8949Entry(
        description="NO token - Who wins?",
        date_acquired="VARIOUS",
        date_sold="05/01/2024",
        proceeds=Decimal("2.50"),
        cost_basis=Decimal("0"),
        gain_loss=Decimal("2.50"),
        is_long_term=False,
        holding_days=0,
    )
    long = Form8949Entry(
        description="YES token - Election, with a comma",
        date_acquired="01/01/2023",
        date_sold="06/01/2024",
        proceeds=Decimal("6.00"),
        cost_basis=Decimal("2.00"),
        gain_loss=Decimal("4.00"),
        is_long_term=True,
        holding_days=517,
    )
    return build_report(
        2024, [short, long, oversold], warnings=["Sold 5 more tokens"]
    )


def _rows(content: str) -> list[list[str]]:
    return list(csv.reader(StringIO(content)))


class TestForm8949Csv:
    def test_header_and_entry_rows(self, report) -> None:
        rows = _rows(export_form_8949_csv(report))

        assert rows[0] == CSV_HEADERS
        assert rows[1] == [
            "Short-Term",
            "YES token - Will it rain tomorrow?",
            "01/01/2024",
            "03/01/2024",
            "7.00",
            "4.00",
            "3.00",
            "60",
            "Short-Term",
        ]
        assert rows[2][2] == "VARIOUS"
        assert rows[2][5] == "0.00"
        assert rows[3][0] == "Long-Term"
        assert rows[3][1] == "YES token - Election, with a comma"

    def test_summary_block(self, report) -> None:
        rows = _rows(export_form_8949_csv(report))

        assert rows[4] == []
        assert rows[5] == ["SUMMARY"] + [""] * 8
        assert rows[7][:2] == ["Short-Term Total", "2 transactions"]
        assert rows[7][4:7] == ["9.50", "4.00", "5.50"]
        assert rows[8][:2] == ["Long-Term Total", "1 transactions"]
        assert rows[8][4:7] == ["6.00", "2.00", "4.00"]
        assert rows[10][:2] == ["GRAND TOTAL", "3 transactions"]
        assert rows[10][4:7] == ["15.50", "6.00", "9.50"]

    def test_writes_file(self, report, tmp_path) -> None:
        path = tmp_path / "form8949.csv"

        content = export_form_8949_csv(report, path)

        assert path.read_text() == content

    def test_empty_report(self) -> None:
        rows = _rows(export_form_8949_csv(build_report(2024, [])))

        assert rows[0] == CSV_HEADERS
        assert rows[-1][:2] == ["GRAND TOTAL", "0 transactions"]
        assert rows[-1][6] == "0.00"

    def test_unwritable_path_raises(self, report, tmp_path) -> None:
        path = tmp_path / "missing" / "form8949.csv"

        with pytest.raises(ExportError) as exc_info:
            export_form_8949_csv(report, path)

        assert exc_info.value.context == {"path": str(path)}


class TestReportJson:
    def test_round_trips_through_json(self, report) -> None:
        data = json.loads(export_report_json(report))

        assert data["taxYear"] == 2024
        assert data["totalTransactions"] == 3
        assert data["totalGainLoss"] == "9.50"
        assert data["longTerm"][0]["holdingDays"] == 517
        assert data["shortTermSummary"]["totalProceeds"] == "9.50"
        assert data["warnings"] == ["Sold 5 more tokens"]

    def test_writes_file(self, report, tmp_path) -> None:
        path = tmp_path / "report.json"

        export_report_json(report, path)

        assert json.loads(path.read_text())["taxYear"] == 2024
