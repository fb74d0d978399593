"""Transaction input model."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lotbook.models.enums import ACQUISITION_TYPES, DISPOSITION_TYPES, TransactionType


def normalize_symbol(symbol: str) -> str:
    """Canonical ticker form: surrounding whitespace stripped, upper-cased."""
    return symbol.strip().upper()


class Transaction(BaseModel):
    """A single raw portfolio event. Owned by the caller and never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    symbol: str
    transaction_type: TransactionType
    quantity: Decimal = Field(ge=0)
    price: Decimal
    amount: Decimal
    fees: Decimal = Decimal("0")
    trade_date: date
    description: str | None = None

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        return normalize_symbol(value)

    @property
    def is_acquisition(self) -> bool:
        return self.transaction_type in ACQUISITION_TYPES

    @property
    def is_disposition(self) -> bool:
        return self.transaction_type in DISPOSITION_TYPES


def sort_transactions(transactions: list[Transaction]) -> list[Transaction]:
    """Order by trade date; same-day transactions keep their input order."""
    return sorted(transactions, key=lambda tx: tx.trade_date)
