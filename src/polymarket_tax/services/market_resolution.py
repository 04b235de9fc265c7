"""Market resolvers that do not touch the network."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from polymarket_tax.services.interfaces import MarketResolution, MarketResolver


class NullMarketResolver(MarketResolver):
    """Treats every market as unresolved; all open positions stay open."""

    def resolve_markets(
        self, market_ids: Iterable[str]
    ) -> dict[str, MarketResolution]:
        return {}


class StaticMarketResolver(MarketResolver):
    """Answers from a fixed mapping of market id to resolution facts."""

    def __init__(self, resolutions: Mapping[str, MarketResolution]) -> None:
        self._resolutions = dict(resolutions)

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Mapping[str, Any]]
    ) -> StaticMarketResolver:
        """Build from {"<id>": {"closed": bool, "winningOutcome": str | null}}."""
        resolutions = {
            market_id: MarketResolution(
                closed=bool(facts.get("closed", False)),
                winning_outcome=facts.get("winningOutcome")
                or facts.get("winning_outcome"),
            )
            for market_id, facts in data.items()
        }
        return cls(resolutions)

    @classmethod
    def from_json_file(cls, path: Path) -> StaticMarketResolver:
        with open(path) as f:
            return cls.from_mapping(json.load(f))

    def resolve_markets(
        self, market_ids: Iterable[str]
    ) -> dict[str, MarketResolution]:
        ids = list(market_ids)
        return {
            market_id: self._resolutions[market_id]
            for market_id in ids
            if market_id in self._resolutions
        }
