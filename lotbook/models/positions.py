"""Holding and closed-position models produced by the holding aggregator."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from lotbook.models.transaction import Transaction


class Holding(BaseModel):
    symbol: str
    quantity: Decimal = Field(ge=0)
    cost_basis: Decimal

    @property
    def avg_cost(self) -> Decimal:
        if self.quantity == 0:
            return Decimal("0")
        return self.cost_basis / self.quantity


class ClosedPosition(BaseModel):
    """One open-to-flat cycle of a symbol."""

    symbol: str
    total_shares_bought: Decimal
    total_shares_sold: Decimal
    total_cost_basis: Decimal
    total_proceeds: Decimal
    total_fees: Decimal
    realized_gain: Decimal
    realized_gain_percent: Decimal
    first_buy_date: date
    last_sell_date: date
    holding_period_days: int
    is_long_term: bool
    transactions: list[Transaction] = Field(default_factory=list)


class PortfolioSummary(BaseModel):
    open_holdings: dict[str, Holding] = Field(default_factory=dict)
    closed_positions: list[ClosedPosition] = Field(default_factory=list)
    total_realized_gain: Decimal = Decimal("0")
    total_realized_gain_long_term: Decimal = Decimal("0")
    total_realized_gain_short_term: Decimal = Decimal("0")


class PositionValuation(BaseModel):
    """An open holding marked to a current price.

    When no price is known the holding is valued at its average cost and
    ``price_available`` is False, so the unrealized gain reads as zero.
    """

    symbol: str
    quantity: Decimal
    cost_basis: Decimal
    current_price: Decimal
    market_value: Decimal
    unrealized_gain: Decimal
    unrealized_gain_percent: Decimal
    price_available: bool


class UnrealizedSummary(BaseModel):
    positions: list[PositionValuation] = Field(default_factory=list)
    total_market_value: Decimal = Decimal("0")
    total_cost_basis: Decimal = Decimal("0")
    total_unrealized_gain: Decimal = Decimal("0")
    total_unrealized_gain_percent: Decimal = Decimal("0")
    missing_prices: list[str] = Field(default_factory=list)
