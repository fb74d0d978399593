"""Shared test fixtures for lotbook."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal

import pytest

from lotbook.models.enums import TransactionType
from lotbook.models.lots import TaxLot
from lotbook.models.transaction import Transaction


def make_tx(
    tx_id: str,
    tx_type: TransactionType,
    quantity: str,
    price: str,
    trade_date: date,
    symbol: str = "ACME",
    fees: str = "0",
    amount: str | None = None,
) -> Transaction:
    qty = Decimal(quantity)
    px = Decimal(price)
    return Transaction(
        id=tx_id,
        symbol=symbol,
        transaction_type=tx_type,
        quantity=qty,
        price=px,
        amount=Decimal(amount) if amount is not None else qty * px,
        fees=Decimal(fees),
        trade_date=trade_date,
    )


def make_lot(
    lot_id: str,
    quantity: str,
    price: str,
    acquired: date,
    symbol: str = "ACME",
    remaining: str | None = None,
) -> TaxLot:
    qty = Decimal(quantity)
    return TaxLot(
        id=lot_id,
        transaction_id=f"tx-{lot_id}",
        symbol=symbol,
        quantity=qty,
        remaining_qty=Decimal(remaining) if remaining is not None else qty,
        cost_basis=qty * Decimal(price),
        acquired_date=acquired,
    )


@pytest.fixture
def tx_factory() -> Callable[..., Transaction]:
    return make_tx


@pytest.fixture
def two_lots() -> list[TaxLot]:
    """10 sh @ $10 (2023-01-01) and 10 sh @ $20 (2023-06-01)."""
    return [
        make_lot("lot-1", "10", "10", date(2023, 1, 1)),
        make_lot("lot-2", "10", "20", date(2023, 6, 1)),
    ]


@pytest.fixture
def round_trip() -> list[Transaction]:
    return [
        make_tx("buy-1", TransactionType.BUY, "10", "100", date(2023, 1, 1)),
        make_tx("sell-1", TransactionType.SELL, "10", "150", date(2024, 2, 1)),
    ]


@pytest.fixture
def lot_factory() -> Callable[..., TaxLot]:
    return make_lot
