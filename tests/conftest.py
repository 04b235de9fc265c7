from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from typing import Any

import pytest
import structlog

from polymarket_tax.config import Environment, Settings
from polymarket_tax.services.interfaces import MarketResolution
from polymarket_tax.services.market_resolution import StaticMarketResolver
from polymarket_tax.services.tax_report import TaxReportService

DAY = 86400


def ts(year: int, month: int, day: int) -> int:
    """UTC midnight timestamp."""
    return int(datetime(year, month, day, tzinfo=UTC).timestamp())


RecordFactory = Callable[..., dict[str, Any]]


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(environment=Environment.TESTING, batch_pause_seconds=0)


@pytest.fixture
def make_record() -> RecordFactory:
    """Build a raw trade record in the neutral field naming."""

    def _make(
        side: str = "BUY",
        quantity: str | int = "10",
        notional: str | int = "5",
        timestamp: int = 0,
        market_id: str = "m1",
        outcome: str = "Yes",
        type: str = "TRADE",
        title: str = "Will it rain tomorrow?",
        reference: str = "0xabc",
        price: str | None = None,
    ) -> dict[str, Any]:
        record: dict[str, Any] = {
            "timestamp": timestamp or ts(2024, 1, 1),
            "type": type,
            "marketId": market_id,
            "outcome": outcome,
            "quantity": quantity,
            "notional": notional,
            "reference": reference,
            "title": title,
        }
        if type != "REDEEM":
            record["side"] = side
        if price is not None:
            record["price"] = price
        return record

    return _make


@pytest.fixture
def resolutions() -> dict[str, MarketResolution]:
    return {
        "m1": MarketResolution(closed=True, winning_outcome="Yes"),
        "m2": MarketResolution(closed=True, winning_outcome="Yes"),
        "m3": MarketResolution(closed=False, winning_outcome=None),
    }


@pytest.fixture
def static_resolver(
    resolutions: dict[str, MarketResolution],
) -> StaticMarketResolver:
    return StaticMarketResolver(resolutions)


@pytest.fixture
def service(
    static_resolver: StaticMarketResolver, test_settings: Settings
) -> TaxReportService:
    return TaxReportService(static_resolver, settings=test_settings)
