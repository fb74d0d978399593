"""Wash-sale detection results."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class WashSaleResult(BaseModel):
    is_wash_sale: bool = False
    disallowed_loss: Decimal = Decimal("0")
    matching_buy_id: str | None = None
    matching_buy_date: date | None = None
    matching_buy_qty: Decimal | None = None
    days_from_sell: int | None = None  # negative when the buy preceded the sell


class WashSaleTrigger(BaseModel):
    """Outcome of checking a proposed buy against recent loss sales."""

    would_trigger: bool = False
    affected_sell_ids: list[str] = Field(default_factory=list)
