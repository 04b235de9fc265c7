from dataclasses import dataclass
from decimal import Decimal

from polymarket_tax.domain.value_objects import ActivityType, PositionKey, Side


@dataclass(frozen=True, slots=True)
class Trade:
    """A normalized fill: always carries a side, a positive quantity and a price."""

    market_id: str
    outcome: str
    side: Side
    quantity: Decimal
    notional: Decimal
    price: Decimal
    timestamp: int
    title: str = ""
    reference: str = ""
    activity_type: ActivityType = ActivityType.TRADE

    @property
    def position_key(self) -> PositionKey:
        return PositionKey(self.market_id, self.outcome)

    @property
    def unit_value(self) -> Decimal:
        """Cash value per token (cost for buys, proceeds for sells)."""
        return self.notional / self.quantity

    @property
    def is_buy(self) -> bool:
        return self.side == Side.BUY

    @property
    def is_sell(self) -> bool:
        return self.side == Side.SELL
