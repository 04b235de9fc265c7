"""Form 8949 entries and the tax report that groups them."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from polymarket_tax.domain.lots import OpenPosition
from polymarket_tax.domain.value_objects import HoldingTerm


@dataclass(frozen=True)
class Form8949Entry:
    """Single closed disposition on Form 8949."""

    description: str  # Column (a) - Description of property
    date_acquired: str  # Column (b) - MM/DD/YYYY or VARIOUS
    date_sold: str  # Column (c) - MM/DD/YYYY
    proceeds: Decimal  # Column (d)
    cost_basis: Decimal  # Column (e)
    gain_loss: Decimal  # Column (h)
    is_long_term: bool
    holding_days: int

    @property
    def term(self) -> HoldingTerm:
        return HoldingTerm.LONG_TERM if self.is_long_term else HoldingTerm.SHORT_TERM

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "dateAcquired": self.date_acquired,
            "dateSold": self.date_sold,
            "proceeds": str(self.proceeds),
            "costBasis": str(self.cost_basis),
            "gainLoss": str(self.gain_loss),
            "isLongTerm": self.is_long_term,
            "holdingDays": self.holding_days,
        }


@dataclass(frozen=True)
class TermSummary:
    """Totals for one part of Form 8949 (Part I short-term or Part II long-term)."""

    count: int = 0
    total_proceeds: Decimal = Decimal("0.00")
    total_cost_basis: Decimal = Decimal("0.00")
    total_gain_loss: Decimal = Decimal("0.00")

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "totalProceeds": str(self.total_proceeds),
            "totalCostBasis": str(self.total_cost_basis),
            "totalGainLoss": str(self.total_gain_loss),
        }


@dataclass
class TaxReport:
    """Realized gains for one tax year, split by holding period.

    total_gain_loss is rounded independently of the two partition totals and
    can differ from their sum by one cent.
    """

    tax_year: int
    short_term: list[Form8949Entry] = field(default_factory=list)
    long_term: list[Form8949Entry] = field(default_factory=list)
    short_term_summary: TermSummary = field(default_factory=TermSummary)
    long_term_summary: TermSummary = field(default_factory=TermSummary)
    total_gain_loss: Decimal = Decimal("0.00")
    warnings: list[str] = field(default_factory=list)
    open_positions: list[OpenPosition] = field(default_factory=list)

    @property
    def total_transactions(self) -> int:
        return len(self.short_term) + len(self.long_term)

    @property
    def entries(self) -> list[Form8949Entry]:
        return [*self.short_term, *self.long_term]

    @property
    def total_proceeds(self) -> Decimal:
        return (
            self.short_term_summary.total_proceeds
            + self.long_term_summary.total_proceeds
        )

    @property
    def total_cost_basis(self) -> Decimal:
        return (
            self.short_term_summary.total_cost_basis
            + self.long_term_summary.total_cost_basis
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "taxYear": self.tax_year,
            "shortTerm": [e.to_dict() for e in self.short_term],
            "longTerm": [e.to_dict() for e in self.long_term],
            "shortTermSummary": self.short_term_summary.to_dict(),
            "longTermSummary": self.long_term_summary.to_dict(),
            "totalTransactions": self.total_transactions,
            "totalGainLoss": str(self.total_gain_loss),
            "warnings": list(self.warnings),
            "openPositions": [p.to_dict() for p in self.open_positions],
        }
