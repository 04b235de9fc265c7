"""HTTP client for the Polymarket data and CLOB APIs."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import httpx
from pydantic import ValidationError

from polymarket_tax.config import Settings, get_settings
from polymarket_tax.domain.value_objects import tax_year_end, tax_year_start
from polymarket_tax.exceptions import MarketLookupError, TradeHistoryFetchError
from polymarket_tax.logging_config import get_logger, run_context
from polymarket_tax.schemas import MarketPayload
from polymarket_tax.services.interfaces import MarketResolution, MarketResolver

logger = get_logger(__name__)

ACTIVITY_TYPES = ("TRADE", "REDEEM")

ProgressCallback = Callable[[str], None]


def _extract_batch(data: Any) -> list[dict[str, Any]]:
    """The activity endpoint returns either a list or an envelope object."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get("activities") or data.get("data") or []
    return []


class PolymarketClient:
    """Reads trade history and market data from Polymarket.

    Pass an httpx.Client to share a connection pool or to stub transport in
    tests; otherwise the client owns one per instance.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=self._settings.request_timeout)

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> PolymarketClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Trade history
    # ------------------------------------------------------------------

    def fetch_trading_history(
        self,
        wallet: str,
        tax_year: int,
        on_progress: ProgressCallback | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch every TRADE and REDEEM activity of a wallet within a tax year.

        Args:
            wallet: Wallet address, passed through unvalidated
            tax_year: Calendar year bounding the activity window
            on_progress: Optional callback receiving progress messages

        Returns:
            Raw activity records, REDEEMs enriched with their winning outcome
        """
        with run_context(tax_year, wallet=wallet):
            trades = self._fetch_activity(wallet, tax_year, on_progress)
            logger.info("trading_history_fetched", count=len(trades))
            return self.enrich_redeem_outcomes(trades)

    def _fetch_activity(
        self,
        wallet: str,
        tax_year: int,
        on_progress: ProgressCallback | None,
    ) -> list[dict[str, Any]]:
        settings = self._settings
        limit = settings.page_size
        url = f"{settings.data_api_url}/activity"
        trades: list[dict[str, Any]] = []
        offset = 0

        while True:
            if on_progress:
                on_progress(f"Fetching trades ({len(trades)} found)...")

            params = {
                "user": wallet.lower(),
                "limit": str(limit),
                "offset": str(offset),
                "start": str(tax_year_start(tax_year)),
                "end": str(tax_year_end(tax_year)),
                "sortBy": "TIMESTAMP",
                "sortDirection": "ASC",
            }
            try:
                response = self._http.get(url, params=params)
            except httpx.HTTPError as e:
                raise TradeHistoryFetchError(str(e)) from e
            if response.status_code >= 400:
                raise TradeHistoryFetchError(
                    f"API error: {response.status_code}", response.status_code
                )

            try:
                batch = _extract_batch(response.json())
            except ValueError as e:
                raise TradeHistoryFetchError(f"invalid JSON: {e}") from e
            trades.extend(
                item for item in batch if item.get("type") in ACTIVITY_TYPES
            )

            if len(batch) < limit:
                break
            offset += limit
            if offset > settings.max_offset:
                logger.warning("activity_pagination_limit_reached", offset=offset)
                break

        return trades

    def enrich_redeem_outcomes(
        self, trades: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Fill in the outcome of REDEEMs, which the API leaves empty."""
        redeems = [
            t for t in trades if t.get("type") == "REDEEM" and not t.get("outcome")
        ]
        if not redeems:
            return trades

        markets = self.fetch_markets_batch(r.get("conditionId", "") for r in redeems)
        enriched = 0
        for trade in redeems:
            market = markets.get(trade.get("conditionId", ""))
            if market is None:
                continue
            winner = market.winning_outcome
            if winner:
                trade["outcome"] = winner
                enriched += 1

        logger.info("redeems_enriched", redeems=len(redeems), enriched=enriched)
        return trades

    # ------------------------------------------------------------------
    # Markets
    # ------------------------------------------------------------------

    def get_market(self, condition_id: str) -> MarketPayload:
        """Fetch one market, raising MarketLookupError on any failure."""
        url = f"{self._settings.clob_api_url}/markets/{condition_id}"
        try:
            response = self._http.get(url)
        except httpx.HTTPError as e:
            raise MarketLookupError(condition_id, str(e)) from e
        if response.status_code >= 400:
            raise MarketLookupError(condition_id, f"HTTP {response.status_code}")
        try:
            return MarketPayload.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MarketLookupError(condition_id, str(e)) from e

    def fetch_market(self, condition_id: str) -> MarketPayload | None:
        """Fetch one market, returning None when it cannot be read."""
        try:
            return self.get_market(condition_id)
        except MarketLookupError as e:
            logger.warning(
                "market_lookup_failed", market_id=condition_id, error=e.message
            )
            return None

    def fetch_markets_batch(
        self, condition_ids: Iterable[str]
    ) -> dict[str, MarketPayload]:
        """
        Fetch many markets, a batch at a time, with bounded parallelism.

        Ids are deduplicated. Markets that fail to load are left out of the
        result.
        """
        unique = [cid for cid in dict.fromkeys(condition_ids) if cid]
        markets: dict[str, MarketPayload] = {}
        batch_size = self._settings.market_batch_size
        workers = min(batch_size, self._settings.max_concurrent_lookups)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            for i in range(0, len(unique), batch_size):
                batch = unique[i : i + batch_size]
                for cid, market in zip(batch, pool.map(self.fetch_market, batch)):
                    if market is not None:
                        markets[cid] = market

                if i + batch_size < len(unique) and self._settings.batch_pause_seconds:
                    time.sleep(self._settings.batch_pause_seconds)

        logger.debug("markets_fetched", requested=len(unique), found=len(markets))
        return markets


class PolymarketMarketResolver(MarketResolver):
    """MarketResolver backed by the CLOB markets endpoint."""

    def __init__(self, client: PolymarketClient) -> None:
        self._client = client

    def resolve_markets(
        self, market_ids: Iterable[str]
    ) -> dict[str, MarketResolution]:
        markets = self._client.fetch_markets_batch(market_ids)
        return {
            market_id: MarketResolution(
                closed=market.closed, winning_outcome=market.winning_outcome
            )
            for market_id, market in markets.items()
        }
