"""Write-off of positions held on the losing outcome of a resolved market."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from polymarket_tax.domain.lots import OpenPosition
from polymarket_tax.domain.reports import Form8949Entry
from polymarket_tax.domain.value_objects import (
    format_date,
    holding_days,
    is_long_term,
    round_currency,
)
from polymarket_tax.logging_config import get_logger
from polymarket_tax.services.descriptions import DEFAULT_MAX_LENGTH, describe_position
from polymarket_tax.services.interfaces import MarketResolution, MarketResolver

logger = get_logger(__name__)


@dataclass
class WorthlessResolution:
    entries: list[Form8949Entry] = field(default_factory=list)
    written_off: list[OpenPosition] = field(default_factory=list)
    still_open: list[OpenPosition] = field(default_factory=list)


def unique_market_ids(positions: list[OpenPosition]) -> list[str]:
    """Distinct market ids in first-seen order."""
    return list(dict.fromkeys(p.market_id for p in positions))


def is_worthless(
    position: OpenPosition, resolution: MarketResolution | None
) -> bool:
    """A position is worthless once its market closed on another outcome."""
    return resolution is not None and resolution.is_losing_outcome(position.outcome)


class WorthlessPositionResolver:
    """Force-closes losing positions at zero proceeds on the tax-year end date."""

    def __init__(
        self,
        resolver: MarketResolver,
        description_max_length: int = DEFAULT_MAX_LENGTH,
    ) -> None:
        self._resolver = resolver
        self._description_max_length = description_max_length

    def resolve(
        self, positions: list[OpenPosition], disposal_ts: int
    ) -> WorthlessResolution:
        """
        Split open positions into written-off and still-open ones.

        Args:
            positions: Open positions left after FIFO matching
            disposal_ts: Timestamp used as the date sold (tax-year end)

        Returns:
            WorthlessResolution with one entry per lot of each losing position
        """
        result = WorthlessResolution()
        if not positions:
            return result

        market_ids = unique_market_ids(positions)
        resolutions = self._resolver.resolve_markets(market_ids)
        logger.info(
            "markets_resolved",
            requested=len(market_ids),
            answered=len(resolutions),
        )

        for position in positions:
            resolution = resolutions.get(position.market_id)
            if not is_worthless(position, resolution):
                result.still_open.append(position)
                continue

            result.entries.extend(self.write_off(position, disposal_ts))
            result.written_off.append(position)
            logger.debug(
                "position_written_off",
                position=str(position.key),
                winning_outcome=resolution.winning_outcome,
            )

        return result

    def write_off(
        self, position: OpenPosition, disposal_ts: int
    ) -> list[Form8949Entry]:
        description = describe_position(
            position.outcome, position.title, self._description_max_length
        )
        date_sold = format_date(disposal_ts)
        entries: list[Form8949Entry] = []
        for lot in position.lots:
            cost_basis = round_currency(lot.remaining_cost)
            days = holding_days(lot.acquired_at, disposal_ts)
            entries.append(
                Form8949Entry(
                    description=description,
                    date_acquired=format_date(lot.acquired_at),
                    date_sold=date_sold,
                    proceeds=Decimal("0.00"),
                    cost_basis=cost_basis,
                    gain_loss=-cost_basis if cost_basis else Decimal("0.00"),
                    is_long_term=is_long_term(days),
                    holding_days=days,
                )
            )
        return entries
