from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

# Lots below this many tokens are treated as fully consumed
EPSILON = Decimal("0.0001")
LONG_TERM_DAYS = 365
SECONDS_PER_DAY = 86400
VARIOUS = "VARIOUS"

_CENT = Decimal("0.01")


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class ActivityType(str, Enum):
    TRADE = "TRADE"
    REDEEM = "REDEEM"


class HoldingTerm(str, Enum):
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"

    @property
    def label(self) -> str:
        return "Short-Term" if self is HoldingTerm.SHORT_TERM else "Long-Term"


@dataclass(frozen=True, slots=True)
class PositionKey:
    """A fungible inventory bucket: one outcome token of one market."""

    market_id: str
    outcome: str

    def __str__(self) -> str:
        return f"{self.market_id}-{self.outcome}"


def round_currency(value: Decimal) -> Decimal:
    """Round to cents, halves away from zero."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def holding_days(acquired_ts: int, disposed_ts: int) -> int:
    return (disposed_ts - acquired_ts) // SECONDS_PER_DAY


def is_long_term(days: int) -> bool:
    return days >= LONG_TERM_DAYS


def format_date(timestamp: int) -> str:
    """MM/DD/YYYY in UTC."""
    return datetime.fromtimestamp(timestamp, tz=UTC).strftime("%m/%d/%Y")


def tax_year_end(tax_year: int) -> int:
    """Timestamp of Dec 31, 23:59:59 UTC of the tax year."""
    return int(datetime(tax_year, 12, 31, 23, 59, 59, tzinfo=UTC).timestamp())


def tax_year_start(tax_year: int) -> int:
    return int(datetime(tax_year, 1, 1, tzinfo=UTC).timestamp())


__all__ = [
    "EPSILON",
    "LONG_TERM_DAYS",
    "SECONDS_PER_DAY",
    "VARIOUS",
    "ActivityType",
    "HoldingTerm",
    "PositionKey",
    "Side",
    "format_date",
    "holding_days",
    "is_long_term",
    "round_currency",
    "tax_year_end",
    "tax_year_start",
]
