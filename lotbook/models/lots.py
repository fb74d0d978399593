"""Tax lot and sell-allocation models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class TaxLot(BaseModel):
    id: str
    transaction_id: str
    symbol: str
    quantity: Decimal = Field(ge=0)
    remaining_qty: Decimal = Field(ge=0)
    cost_basis: Decimal
    acquired_date: date

    @model_validator(mode="after")
    def _remaining_within_quantity(self) -> "TaxLot":
        if self.remaining_qty > self.quantity:
            raise ValueError(
                f"remaining_qty {self.remaining_qty} exceeds lot quantity {self.quantity}"
            )
        return self

    @property
    def cost_per_share(self) -> Decimal:
        if self.quantity == 0:
            return Decimal("0")
        return self.cost_basis / self.quantity


class SellAllocation(BaseModel):
    """The slice of one lot consumed by a sale."""

    lot_id: str
    quantity_sold: Decimal
    cost_basis_allocated: Decimal
    acquired_date: date
    proceeds: Decimal
    gain_loss: Decimal
    is_long_term: bool
    holding_days: int


class SellResult(BaseModel):
    allocations: list[SellAllocation] = Field(default_factory=list)
    total_cost_basis: Decimal = Decimal("0")
    total_proceeds: Decimal = Decimal("0")
    total_gain_loss: Decimal = Decimal("0")
    long_term_gain: Decimal = Decimal("0")
    short_term_gain: Decimal = Decimal("0")

    @property
    def quantity_allocated(self) -> Decimal:
        return sum((a.quantity_sold for a in self.allocations), Decimal("0"))


class SellPreview(SellResult):
    """A sell allocation that also reports whether enough shares were available."""

    insufficient_shares: bool = False
    shortfall: Decimal = Decimal("0")
