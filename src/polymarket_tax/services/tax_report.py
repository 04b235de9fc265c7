"""Tax report generation: normalization, FIFO matching, write-offs and totals."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from polymarket_tax.config import Settings, get_settings
from polymarket_tax.domain.lots import OpenPosition
from polymarket_tax.domain.reports import Form8949Entry, TaxReport, TermSummary
from polymarket_tax.domain.value_objects import round_currency, tax_year_end
from polymarket_tax.exceptions import InvalidTaxYearError
from polymarket_tax.logging_config import get_logger, run_context
from polymarket_tax.schemas import RawTradeRecord
from polymarket_tax.services.interfaces import MarketResolver
from polymarket_tax.services.lot_matching import FifoMatchingEngine
from polymarket_tax.services.market_resolution import NullMarketResolver
from polymarket_tax.services.normalizer import normalize_trades
from polymarket_tax.services.worthless import WorthlessPositionResolver

logger = get_logger(__name__)

MIN_TAX_YEAR = 2000
MAX_TAX_YEAR = 9998


def _sum(entries: list[Form8949Entry], attr: str) -> Decimal:
    return round_currency(sum((getattr(e, attr) for e in entries), Decimal("0")))


def calculate_summary(entries: list[Form8949Entry]) -> TermSummary:
    return TermSummary(
        count=len(entries),
        total_proceeds=_sum(entries, "proceeds"),
        total_cost_basis=_sum(entries, "cost_basis"),
        total_gain_loss=_sum(entries, "gain_loss"),
    )


def build_report(
    tax_year: int,
    entries: list[Form8949Entry],
    warnings: list[str] | None = None,
    open_positions: list[OpenPosition] | None = None,
) -> TaxReport:
    """Partition entries by holding period and total them.

    The grand total is rounded on its own rather than derived from the two
    partition totals.
    """
    short_term = [e for e in entries if not e.is_long_term]
    long_term = [e for e in entries if e.is_long_term]
    return TaxReport(
        tax_year=tax_year,
        short_term=short_term,
        long_term=long_term,
        short_term_summary=calculate_summary(short_term),
        long_term_summary=calculate_summary(long_term),
        total_gain_loss=_sum(entries, "gain_loss"),
        warnings=list(warnings or []),
        open_positions=list(open_positions or []),
    )


class TaxReportService:
    """Service that turns a wallet's raw trade history into a TaxReport."""

    def __init__(
        self,
        resolver: MarketResolver | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._resolver = resolver or NullMarketResolver()

    def generate(
        self,
        records: Iterable[RawTradeRecord | Mapping[str, Any]],
        tax_year: int,
    ) -> TaxReport:
        """
        Generate the Form 8949 data for a tax year.

        Args:
            records: Raw trade and redemption records, in any order
            tax_year: Tax year; its last second is the write-off date

        Returns:
            TaxReport with entries split by holding period
        """
        if not MIN_TAX_YEAR <= tax_year <= MAX_TAX_YEAR:
            raise InvalidTaxYearError(tax_year)

        max_len = self._settings.description_max_length

        with run_context(tax_year):
            trades = normalize_trades(records)

            # A fresh engine per run keeps inventory state local to this report
            engine = FifoMatchingEngine(description_max_length=max_len)
            engine.process_all(trades)
            entries = engine.entries
            open_positions = engine.collect_open_positions()

            worthless = WorthlessPositionResolver(
                self._resolver, description_max_length=max_len
            ).resolve(open_positions, tax_year_end(tax_year))
            entries.extend(worthless.entries)

            report = build_report(
                tax_year,
                entries,
                warnings=engine.warnings,
                open_positions=worthless.still_open,
            )

            logger.info(
                "tax_report_generated",
                trades=len(trades),
                short_term=len(report.short_term),
                long_term=len(report.long_term),
                written_off=len(worthless.written_off),
                open_positions=len(report.open_positions),
                warnings=len(report.warnings),
                total_gain_loss=str(report.total_gain_loss),
            )

        return report
