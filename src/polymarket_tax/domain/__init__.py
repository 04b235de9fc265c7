from polymarket_tax.domain.lots import InventoryLot, OpenPosition
from polymarket_tax.domain.reports import Form8949Entry, TaxReport, TermSummary
from polymarket_tax.domain.trades import Trade
from polymarket_tax.domain.value_objects import (
    ActivityType,
    HoldingTerm,
    PositionKey,
    Side,
)

__all__ = [
    "ActivityType",
    "Form8949Entry",
    "HoldingTerm",
    "InventoryLot",
    "OpenPosition",
    "PositionKey",
    "Side",
    "TaxReport",
    "TermSummary",
    "Trade",
]
