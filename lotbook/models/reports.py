"""Realized-gain report models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from lotbook.models.wash_sale import WashSaleResult


class RealizedGainDetail(BaseModel):
    transaction_id: str
    lot_id: str
    symbol: str
    sale_date: date
    acquisition_date: date
    holding_days: int
    is_long_term: bool
    shares_sold: Decimal
    proceeds: Decimal
    cost_basis: Decimal
    gain: Decimal
    gain_percent: Decimal


class SaleWashSale(BaseModel):
    """Wash-sale outcome for one loss-making sale inside the report window."""

    transaction_id: str
    symbol: str
    sale_date: date
    gain_loss: Decimal
    result: WashSaleResult


class RealizedGainSummary(BaseModel):
    total_gain: Decimal = Decimal("0")
    total_proceeds: Decimal = Decimal("0")
    total_cost_basis: Decimal = Decimal("0")
    long_term_gain: Decimal = Decimal("0")
    long_term_proceeds: Decimal = Decimal("0")
    long_term_cost_basis: Decimal = Decimal("0")
    short_term_gain: Decimal = Decimal("0")
    short_term_proceeds: Decimal = Decimal("0")
    short_term_cost_basis: Decimal = Decimal("0")
    total_transactions: int = 0
    long_term_count: int = 0
    short_term_count: int = 0
    wash_sale_disallowed: Decimal = Decimal("0")


class RealizedGainReport(BaseModel):
    start_date: date
    end_date: date
    gains: list[RealizedGainDetail] = Field(default_factory=list)
    wash_sales: list[SaleWashSale] = Field(default_factory=list)
    summary: RealizedGainSummary = Field(default_factory=RealizedGainSummary)
