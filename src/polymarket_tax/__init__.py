from polymarket_tax.domain.lots import InventoryLot, OpenPosition
from polymarket_tax.domain.reports import Form8949Entry, TaxReport, TermSummary
from polymarket_tax.domain.trades import Trade
from polymarket_tax.domain.value_objects import PositionKey, Side
from polymarket_tax.services.interfaces import MarketResolution, MarketResolver
from polymarket_tax.services.tax_report import TaxReportService

__all__ = [
    "Form8949Entry",
    "InventoryLot",
    "MarketResolution",
    "MarketResolver",
    "OpenPosition",
    "PositionKey",
    "Side",
    "TaxReport",
    "TaxReportService",
    "TermSummary",
    "Trade",
]

__version__ = "0.1.0"
