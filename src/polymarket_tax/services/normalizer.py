"""Trade normalization: raw activity records to uniform, time-ordered trades."""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from polymarket_tax.domain.trades import Trade
from polymarket_tax.domain.value_objects import ActivityType, Side
from polymarket_tax.exceptions import TradeRecordError
from polymarket_tax.logging_config import get_logger
from polymarket_tax.schemas import RawTradeRecord

logger = get_logger(__name__)

REDEMPTION_PRICE = Decimal("1.0")


def parse_trade_record(
    record: RawTradeRecord | Mapping[str, Any], index: int = 0
) -> RawTradeRecord:
    if isinstance(record, RawTradeRecord):
        return record
    try:
        return RawTradeRecord.model_validate(record)
    except ValidationError as e:
        raise TradeRecordError(index, str(e)) from e


def normalize_trade(raw: RawTradeRecord) -> Trade | None:
    """Canonicalize one record, or return None when it must be dropped.

    Dropped records are those without a market id or outcome, and those with
    no quantity (their unit price would be undefined).
    """
    if not raw.market_id or not raw.outcome:
        return None

    quantity = raw.quantity or Decimal("0")
    if quantity <= 0:
        return None

    if raw.type == ActivityType.REDEEM.value:
        # Winning tokens settle 1:1 in USDC
        return Trade(
            market_id=raw.market_id,
            outcome=raw.outcome,
            side=Side.SELL,
            quantity=quantity,
            notional=quantity * REDEMPTION_PRICE,
            price=REDEMPTION_PRICE,
            timestamp=raw.timestamp,
            title=raw.title,
            reference=raw.reference,
            activity_type=ActivityType.REDEEM,
        )

    if raw.side not in (Side.BUY.value, Side.SELL.value):
        return None

    notional = raw.notional or Decimal("0")
    price = raw.price or notional / quantity

    return Trade(
        market_id=raw.market_id,
        outcome=raw.outcome,
        side=Side(raw.side),
        quantity=quantity,
        notional=notional,
        price=price,
        timestamp=raw.timestamp,
        title=raw.title,
        reference=raw.reference,
        activity_type=ActivityType.TRADE,
    )


def normalize_trades(
    records: Iterable[RawTradeRecord | Mapping[str, Any]],
) -> list[Trade]:
    """Normalize records and sort them by timestamp.

    The sort is stable, so trades sharing a timestamp keep their input order.
    """
    trades: list[Trade] = []
    dropped = 0
    for index, record in enumerate(records):
        trade = normalize_trade(parse_trade_record(record, index))
        if trade is None:
            dropped += 1
            logger.debug("trade_dropped", index=index)
            continue
        trades.append(trade)

    trades.sort(key=lambda t: t.timestamp)
    logger.info("trades_normalized", kept=len(trades), dropped=dropped)
    return trades
