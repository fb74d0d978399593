"""Tests for the pydantic models and enums."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from lotbook.models.enums import CostBasisMethod, TransactionType
from lotbook.models.lots import SellPreview, TaxLot
from lotbook.models.positions import Holding
from lotbook.models.transaction import Transaction, normalize_symbol, sort_transactions


def _tx(**overrides) -> Transaction:
    fields = {
        "id": "t1",
        "symbol": "acme",
        "transaction_type": TransactionType.BUY,
        "quantity": Decimal("10"),
        "price": Decimal("5"),
        "amount": Decimal("50"),
        "trade_date": date(2024, 1, 1),
    }
    fields.update(overrides)
    return Transaction(**fields)


class TestTransaction:
    def test_symbol_is_normalized(self):
        assert _tx(symbol="  brk.b ").symbol == "BRK.B"
        assert normalize_symbol(" x ") == "X"

    def test_fees_default_to_zero(self):
        assert _tx().fees == Decimal("0")
        assert _tx().description is None

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            _tx(quantity=Decimal("-1"))

    def test_type_accepts_string_value(self):
        assert _tx(transaction_type="TRANSFER_OUT").transaction_type == TransactionType.TRANSFER_OUT

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            _tx(transaction_type="SPLIT")

    def test_is_frozen(self):
        tx = _tx()
        with pytest.raises(ValidationError):
            tx.quantity = Decimal("1")

    def test_acquisition_and_disposition_flags(self):
        assert _tx().is_acquisition
        assert _tx(transaction_type=TransactionType.TRANSFER_IN).is_acquisition
        assert _tx(transaction_type=TransactionType.SELL).is_disposition
        dividend = _tx(transaction_type=TransactionType.DIVIDEND)
        assert not dividend.is_acquisition
        assert not dividend.is_disposition

    def test_sort_is_stable_within_a_day(self):
        txs = [
            _tx(id="late", trade_date=date(2024, 2, 1)),
            _tx(id="first", trade_date=date(2024, 1, 1)),
            _tx(id="second", trade_date=date(2024, 1, 1)),
        ]
        assert [tx.id for tx in sort_transactions(txs)] == ["first", "second", "late"]


class TestTaxLot:
    def test_remaining_above_quantity_rejected(self):
        with pytest.raises(ValidationError, match="exceeds lot quantity"):
            TaxLot(
                id="lot-1", transaction_id="t1", symbol="ACME",
                quantity=Decimal("5"), remaining_qty=Decimal("6"),
                cost_basis=Decimal("50"), acquired_date=date(2024, 1, 1),
            )

    def test_cost_per_share(self, lot_factory):
        assert lot_factory("lot-1", "4", "12.5", date(2024, 1, 1)).cost_per_share == Decimal("12.5")

    def test_zero_quantity_lot_has_zero_cost_per_share(self, lot_factory):
        assert lot_factory("lot-1", "0", "10", date(2024, 1, 1)).cost_per_share == Decimal("0")


class TestSmallModels:
    def test_empty_holding_avg_cost(self):
        assert Holding(symbol="ACME", quantity=Decimal("0"), cost_basis=Decimal("0")).avg_cost == Decimal("0")

    def test_preview_defaults(self):
        preview = SellPreview()
        assert preview.allocations == []
        assert preview.insufficient_shares is False
        assert preview.quantity_allocated == Decimal("0")


class TestCostBasisMethod:
    def test_labels(self):
        assert CostBasisMethod.FIFO.label == "First In, First Out (FIFO)"
        assert CostBasisMethod.HIFO.label == "Highest Cost First (HIFO)"

    def test_every_method_is_described(self):
        for method in CostBasisMethod:
            assert method.description
