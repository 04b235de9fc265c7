"""FIFO lot matching for prediction-market outcome tokens."""

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from polymarket_tax.domain.lots import InventoryLot, OpenPosition
from polymarket_tax.domain.reports import Form8949Entry
from polymarket_tax.domain.trades import Trade
from polymarket_tax.domain.value_objects import (
    EPSILON,
    VARIOUS,
    PositionKey,
    format_date,
    holding_days,
    is_long_term,
    round_currency,
)
from polymarket_tax.logging_config import get_logger
from polymarket_tax.services.descriptions import DEFAULT_MAX_LENGTH, describe_position

logger = get_logger(__name__)


@dataclass
class SellMatch:
    """Entries produced by one sell, plus the oversell warning if any."""

    trade: Trade
    entries: list[Form8949Entry] = field(default_factory=list)
    matched_quantity: Decimal = Decimal("0")
    oversold_quantity: Decimal = Decimal("0")
    warning: str | None = None

    @property
    def is_oversold(self) -> bool:
        return self.warning is not None


def _quantity_str(quantity: Decimal) -> str:
    return format(quantity.normalize(), "f")


class FifoMatchingEngine:
    """Matches sells against the oldest open lots of the same position.

    One engine holds the inventory of a single report run. Trades must be fed
    in chronological order; the engine does not sort them.
    """

    def __init__(self, description_max_length: int = DEFAULT_MAX_LENGTH) -> None:
        self._description_max_length = description_max_length
        self._inventory: dict[PositionKey, deque[InventoryLot]] = {}
        self._entries: list[Form8949Entry] = []
        self._warnings: list[str] = []

    @property
    def entries(self) -> list[Form8949Entry]:
        return list(self._entries)

    @property
    def warnings(self) -> list[str]:
        return list(self._warnings)

    def get_open_lots(self, key: PositionKey) -> list[InventoryLot]:
        """Returns the open lots for a position, oldest first."""
        return list(self._inventory.get(key, ()))

    def process_all(self, trades: Iterable[Trade]) -> None:
        for trade in trades:
            self.process(trade)

    def process(self, trade: Trade) -> SellMatch | None:
        if trade.is_buy:
            self.process_buy(trade)
            return None
        return self.process_sell(trade)

    def process_buy(self, trade: Trade) -> InventoryLot:
        """Adds a new lot at the tail of the position's queue."""
        lot = InventoryLot.from_trade(trade)
        self._inventory.setdefault(trade.position_key, deque()).append(lot)
        return lot

    def process_sell(self, trade: Trade) -> SellMatch:
        """Disposes of the oldest lots first and records one entry per lot touched."""
        key = trade.position_key
        queue = self._inventory.setdefault(key, deque())
        description = describe_position(
            trade.outcome, trade.title, self._description_max_length
        )
        date_sold = format_date(trade.timestamp)
        unit_proceeds = trade.unit_value
        result = SellMatch(trade=trade)
        remaining = trade.quantity

        while remaining > EPSILON and queue:
            lot = queue[0]
            matched_qty = min(remaining, lot.remaining_quantity)

            raw_proceeds = matched_qty * unit_proceeds
            raw_cost = lot.consume(matched_qty)
            days = holding_days(lot.acquired_at, trade.timestamp)

            result.entries.append(
                Form8949Entry(
                    description=description,
                    date_acquired=format_date(lot.acquired_at),
                    date_sold=date_sold,
                    proceeds=round_currency(raw_proceeds),
                    cost_basis=round_currency(raw_cost),
                    gain_loss=round_currency(raw_proceeds - raw_cost),
                    is_long_term=is_long_term(days),
                    holding_days=days,
                )
            )

            remaining -= matched_qty
            result.matched_quantity += matched_qty

            if lot.is_exhausted:
                queue.popleft()

        if remaining > EPSILON:
            # Sold more than the tracked history holds: treat the excess as
            # zero-basis short-term gain
            proceeds = round_currency(remaining * unit_proceeds)
            result.entries.append(
                Form8949Entry(
                    description=description,
                    date_acquired=VARIOUS,
                    date_sold=date_sold,
                    proceeds=proceeds,
                    cost_basis=Decimal("0.00"),
                    gain_loss=proceeds,
                    is_long_term=False,
                    holding_days=0,
                )
            )
            result.oversold_quantity = remaining
            result.warning = (
                f"Sold {_quantity_str(remaining)} more tokens than owned for {key}"
            )
            self._warnings.append(result.warning)
            logger.warning(
                "oversell_detected",
                position=str(key),
                oversold_quantity=_quantity_str(remaining),
                reference=trade.reference,
            )

        self._entries.extend(result.entries)
        return result

    def collect_open_positions(self) -> list[OpenPosition]:
        """Snapshots every position that still holds lots, in first-seen order."""
        return [
            OpenPosition(key=key, lots=list(queue))
            for key, queue in self._inventory.items()
            if queue
        ]
