"""Tests for the Polymarket HTTP client, using httpx.MockTransport."""

from collections.abc import Callable

import httpx
import pytest

from polymarket_tax.clients.polymarket import (
    PolymarketClient,
    PolymarketMarketResolver,
)
from polymarket_tax.config import Settings
from polymarket_tax.exceptions import MarketLookupError, TradeHistoryFetchError

Handler = Callable[[httpx.Request], httpx.Response]


def activity(n: int, type: str = "TRADE", **extra) -> dict:
    return {
        "type": type,
        "timestamp": 1704067200 + n,
        "conditionId": f"c{n}",
        "outcome": "Yes",
        "side": "BUY",
        "size": 10,
        "usdcSize": 5,
        **extra,
    }


def market(condition_id: str, winner: str | None = "Yes", closed: bool = True) -> dict:
    return {
        "condition_id": condition_id,
        "question": f"Question {condition_id}?",
        "closed": closed,
        "tokens": [
            {"outcome": "Yes", "winner": winner == "Yes", "price": "1"},
            {"outcome": "No", "winner": winner == "No", "price": "0"},
        ],
    }


@pytest.fixture
def make_client(test_settings: Settings):
    clients: list[PolymarketClient] = []

    def _make(handler: Handler, **overrides) -> PolymarketClient:
        settings = test_settings.model_copy(update=overrides)
        http = httpx.Client(transport=httpx.MockTransport(handler))
        client = PolymarketClient(settings, http_client=http)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client._http.close()


class TestFetchTradingHistory:
    def test_paginates_until_short_page(self, make_client) -> None:
        pages = [[activity(0), activity(1)], [activity(2), activity(3)], [activity(4)]]
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=pages[len(requests) - 1])

        client = make_client(handler, page_size=2)

        trades = client.fetch_trading_history("0xABCDEF", 2024)

        assert [t["conditionId"] for t in trades] == ["c0", "c1", "c2", "c3", "c4"]
        assert [r.url.params["offset"] for r in requests] == ["0", "2", "4"]
        params = requests[0].url.params
        assert requests[0].url.path == "/activity"
        assert params["user"] == "0xabcdef"
        assert params["limit"] == "2"
        assert params["start"] == "1704067200"
        assert params["end"] == "1735689599"
        assert params["sortBy"] == "TIMESTAMP"
        assert params["sortDirection"] == "ASC"

    def test_keeps_only_trades_and_redemptions(self, make_client) -> None:
        batch = [
            activity(0),
            activity(1, type="SPLIT"),
            activity(2, type="REDEEM", outcome="No"),
            activity(3, type="REWARD"),
        ]
        client = make_client(lambda request: httpx.Response(200, json=batch))

        trades = client.fetch_trading_history("0xabc", 2024)

        assert [t["type"] for t in trades] == ["TRADE", "REDEEM"]

    def test_accepts_envelope_response(self, make_client) -> None:
        client = make_client(
            lambda request: httpx.Response(200, json={"data": [activity(0)]})
        )

        assert len(client.fetch_trading_history("0xabc", 2024)) == 1

    def test_stops_at_offset_ceiling(self, make_client) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=[activity(0), activity(1)])

        client = make_client(handler, page_size=2, max_offset=4)

        client.fetch_trading_history("0xabc", 2024)

        assert len(calls) == 3

    def test_reports_progress(self, make_client) -> None:
        messages: list[str] = []
        client = make_client(lambda request: httpx.Response(200, json=[]))

        client.fetch_trading_history("0xabc", 2024, on_progress=messages.append)

        assert messages == ["Fetching trades (0 found)..."]

    def test_http_error_status_raises(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(503))

        with pytest.raises(TradeHistoryFetchError) as exc_info:
            client.fetch_trading_history("0xabc", 2024)

        assert exc_info.value.status_code == 503

    def test_transport_error_raises(self, make_client) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(TradeHistoryFetchError):
            client.fetch_trading_history("0xabc", 2024)

    def test_invalid_json_raises(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(TradeHistoryFetchError):
            client.fetch_trading_history("0xabc", 2024)

    def test_redeems_get_winning_outcome(self, make_client) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/activity":
                return httpx.Response(
                    200,
                    json=[
                        activity(0),
                        activity(1, type="REDEEM", outcome="", conditionId="won"),
                        activity(2, type="REDEEM", outcome="", conditionId="gone"),
                    ],
                )
            if request.url.path == "/markets/won":
                return httpx.Response(200, json=market("won", winner="No"))
            return httpx.Response(404)

        client = make_client(handler)

        trades = client.fetch_trading_history("0xabc", 2024)

        assert trades[1]["outcome"] == "No"
        assert trades[2]["outcome"] == ""


class TestMarkets:
    def test_get_market_parses_payload(self, make_client) -> None:
        client = make_client(
            lambda request: httpx.Response(200, json=market("c1", winner="No"))
        )

        payload = client.get_market("c1")

        assert payload.closed
        assert payload.winning_outcome == "No"

    def test_get_market_raises_on_error(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(MarketLookupError) as exc_info:
            client.get_market("c1")

        assert exc_info.value.market_id == "c1"

    def test_fetch_market_returns_none_on_failure(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(404))

        assert client.fetch_market("c1") is None

    def test_batch_deduplicates_and_skips_failures(self, make_client) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            condition_id = request.url.path.rsplit("/", 1)[-1]
            seen.append(condition_id)
            if condition_id == "bad":
                return httpx.Response(500)
            return httpx.Response(200, json=market(condition_id))

        client = make_client(handler, market_batch_size=2)

        markets = client.fetch_markets_batch(["a", "b", "a", "", "bad", "c"])

        assert sorted(seen) == ["a", "b", "bad", "c"]
        assert set(markets) == {"a", "b", "c"}

    def test_resolver_maps_markets_to_resolutions(self, make_client) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            condition_id = request.url.path.rsplit("/", 1)[-1]
            if condition_id == "open":
                return httpx.Response(
                    200, json=market(condition_id, winner=None, closed=False)
                )
            return httpx.Response(200, json=market(condition_id, winner="Yes"))

        resolver = PolymarketMarketResolver(make_client(handler))

        resolutions = resolver.resolve_markets(["done", "open"])

        assert resolutions["done"].is_losing_outcome("No")
        assert not resolutions["open"].is_resolved
