"""Pydantic v2 schemas for raw Polymarket payloads."""

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RawTradeRecord(BaseModel):
    """One activity record as delivered by the data API or a trades file.

    Accepts both the Polymarket field names (conditionId, size, usdcSize,
    transactionHash) and the neutral ones (marketId, quantity, notional,
    reference). Every field is optional so that incomplete records reach the
    normalizer, which decides whether to drop them.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True, populate_by_name=True, extra="ignore"
    )

    timestamp: int = 0
    type: str = "TRADE"
    side: str | None = None
    market_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("marketId", "conditionId", "market_id"),
    )
    outcome: str | None = None
    quantity: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("quantity", "size")
    )
    notional: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("notional", "usdcSize")
    )
    price: Decimal | None = None
    reference: str = Field(
        default="",
        validation_alias=AliasChoices("reference", "transactionHash"),
    )
    title: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def upper_type(cls, v: str | None) -> str:
        return (v or "TRADE").upper()

    @field_validator("side", mode="before")
    @classmethod
    def upper_side(cls, v: str | None) -> str | None:
        return v.upper() if isinstance(v, str) and v else None

    @field_validator("reference", "title", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return v or ""


class MarketToken(BaseModel):
    model_config = ConfigDict(extra="ignore")

    outcome: str
    winner: bool = False
    price: Decimal | None = None


class MarketPayload(BaseModel):
    """Market as returned by the CLOB /markets/{condition_id} endpoint."""

    model_config = ConfigDict(extra="ignore")

    condition_id: str = ""
    question: str = ""
    closed: bool = False
    tokens: list[MarketToken] = Field(default_factory=list)

    @property
    def winning_outcome(self) -> str | None:
        for token in self.tokens:
            if token.winner:
                return token.outcome
        return None
