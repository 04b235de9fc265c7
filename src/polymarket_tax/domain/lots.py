from dataclasses import dataclass, field
from decimal import Decimal

from polymarket_tax.domain.trades import Trade
from polymarket_tax.domain.value_objects import EPSILON, PositionKey


@dataclass
class InventoryLot:
    acquired_at: int
    original_quantity: Decimal
    unit_cost: Decimal
    title: str = ""
    outcome: str = ""
    reference: str = ""
    remaining_quantity: Decimal = field(init=False)

    def __post_init__(self) -> None:
        self.remaining_quantity = self.original_quantity

    @classmethod
    def from_trade(cls, trade: Trade) -> "InventoryLot":
        return cls(
            acquired_at=trade.timestamp,
            original_quantity=trade.quantity,
            unit_cost=trade.unit_value,
            title=trade.title,
            outcome=trade.outcome,
            reference=trade.reference,
        )

    @property
    def total_cost(self) -> Decimal:
        return self.unit_cost * self.original_quantity

    @property
    def remaining_cost(self) -> Decimal:
        return self.unit_cost * self.remaining_quantity

    @property
    def is_exhausted(self) -> bool:
        return self.remaining_quantity < EPSILON

    def consume(self, quantity: Decimal) -> Decimal:
        """Take quantity out of the lot and return the cost basis it carried."""
        self.remaining_quantity -= quantity
        return quantity * self.unit_cost


@dataclass
class OpenPosition:
    """Snapshot of the lots still held for one position after all trades."""

    key: PositionKey
    lots: list[InventoryLot] = field(default_factory=list)

    @property
    def market_id(self) -> str:
        return self.key.market_id

    @property
    def outcome(self) -> str:
        return self.key.outcome

    @property
    def quantity(self) -> Decimal:
        return sum((lot.remaining_quantity for lot in self.lots), Decimal("0"))

    @property
    def cost_basis(self) -> Decimal:
        return sum((lot.remaining_cost for lot in self.lots), Decimal("0"))

    @property
    def title(self) -> str:
        return self.lots[0].title if self.lots else ""

    def to_dict(self) -> dict:
        return {
            "positionKey": str(self.key),
            "conditionId": self.market_id,
            "outcome": self.outcome,
            "quantity": str(self.quantity),
            "costBasis": str(self.cost_basis),
            "title": self.title,
            "lots": [
                {
                    "acquisitionDate": lot.acquired_at,
                    "quantity": str(lot.remaining_quantity),
                    "costBasisPerToken": str(lot.unit_cost),
                    "totalCostBasis": str(lot.total_cost),
                    "marketTitle": lot.title,
                    "transactionHash": lot.reference,
                    "outcome": lot.outcome,
                }
                for lot in self.lots
            ],
        }
