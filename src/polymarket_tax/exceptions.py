"""Exception hierarchy for Polymarket Tax.

All package exceptions inherit from PolymarketTaxError so callers can catch
every boundary failure with a single base class. The FIFO core itself raises
none of these: oversells and unresolved markets are reported as warnings and
open positions instead.
"""

from typing import Any


class PolymarketTaxError(Exception):
    """Base exception for all Polymarket Tax errors.

    Includes an error_code for machine-readable output and extra context.
    """

    error_code: str = "PMTAX_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON output."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Input Errors
# =============================================================================


class InvalidTaxYearError(PolymarketTaxError):
    """Raised when a tax year is outside the supported range."""

    error_code = "INVALID_TAX_YEAR"

    def __init__(self, tax_year: int) -> None:
        super().__init__(
            f"Invalid tax year: {tax_year}",
            context={"tax_year": tax_year},
        )


class TradeRecordError(PolymarketTaxError):
    """Raised when a raw trade record cannot be parsed at all.

    Records that parse but miss a market id or outcome are dropped instead.
    """

    error_code = "TRADE_RECORD_INVALID"

    def __init__(self, index: int, detail: str) -> None:
        super().__init__(
            f"Trade record {index} is not valid: {detail}",
            context={"index": index},
        )


# =============================================================================
# Polymarket API Errors
# =============================================================================


class PolymarketAPIError(PolymarketTaxError):
    """Base exception for Polymarket API failures."""

    error_code = "POLYMARKET_API_ERROR"


class TradeHistoryFetchError(PolymarketAPIError):
    """Raised when the activity endpoint cannot be read."""

    error_code = "TRADE_HISTORY_FETCH_FAILED"

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(
            f"Failed to fetch trading history: {detail}",
            context={"status_code": status_code},
        )
        self.status_code = status_code


class MarketLookupError(PolymarketAPIError):
    """Raised when a single market cannot be looked up."""

    error_code = "MARKET_LOOKUP_FAILED"

    def __init__(self, market_id: str, detail: str) -> None:
        super().__init__(
            f"Market lookup failed for {market_id}: {detail}",
            context={"market_id": market_id},
        )
        self.market_id = market_id


# =============================================================================
# Export Errors
# =============================================================================


class ExportError(PolymarketTaxError):
    """Raised when a report cannot be written to disk."""

    error_code = "EXPORT_FAILED"

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(
            f"Failed to export report to {path}: {detail}",
            context={"path": path},
        )
