from polymarket_tax.clients.polymarket import (
    PolymarketClient,
    PolymarketMarketResolver,
)

__all__ = ["PolymarketClient", "PolymarketMarketResolver"]
