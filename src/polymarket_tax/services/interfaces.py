from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class MarketResolution:
    closed: bool
    winning_outcome: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.closed and bool(self.winning_outcome)

    def is_losing_outcome(self, outcome: str) -> bool:
        if not self.is_resolved or self.winning_outcome is None:
            return False
        return outcome.upper() != self.winning_outcome.upper()


class MarketResolver(ABC):
    """Looks up how markets resolved.

    Implementations may omit ids they could not answer for; a missing id is
    read as "not resolved".
    """

    @abstractmethod
    def resolve_markets(
        self, market_ids: Iterable[str]
    ) -> dict[str, MarketResolution]:
        pass
