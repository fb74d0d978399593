"""Cross-engine consistency checks over small transaction histories."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import make_tx
from lotbook.engines.holdings import HoldingAggregator
from lotbook.engines.lot_matcher import LotAllocator
from lotbook.engines.periods import holding_days, is_long_term, percent_of
from lotbook.models.enums import CostBasisMethod, TransactionType

BUY = TransactionType.BUY
SELL = TransactionType.SELL

HISTORIES = {
    "single-symbol": [
        make_tx("b1", BUY, "10", "10", date(2023, 1, 1)),
        make_tx("b2", BUY, "5", "30", date(2023, 2, 1)),
        make_tx("s1", SELL, "7", "25", date(2023, 3, 1)),
        make_tx("b3", BUY, "8", "5", date(2023, 4, 1)),
        make_tx("s2", SELL, "9", "12", date(2023, 5, 1)),
    ],
    "two-symbols": [
        make_tx("a1", BUY, "3", "100", date(2023, 1, 5)),
        make_tx("z1", BUY, "20", "4", date(2023, 1, 6), symbol="ZZZ"),
        make_tx("a2", BUY, "2", "90", date(2023, 2, 5)),
        make_tx("z2", SELL, "12", "6", date(2023, 3, 6), symbol="ZZZ"),
        make_tx("a3", SELL, "4", "110", date(2023, 6, 5)),
    ],
    "dust": [
        make_tx("d0", BUY, "0.00005", "10", date(2023, 1, 1)),
        make_tx("b1", BUY, "10", "10", date(2023, 1, 2)),
        make_tx("s1", SELL, "4", "12", date(2023, 1, 3)),
    ],
    "fractional": [
        make_tx("b1", BUY, "1.5", "200", date(2023, 1, 1)),
        make_tx("b2", BUY, "0.25", "240", date(2023, 1, 2)),
        make_tx("s1", SELL, "0.75", "210", date(2023, 1, 3)),
        make_tx("s2", SELL, "0.5", "190", date(2023, 1, 4)),
    ],
}

AUTOMATIC = [CostBasisMethod.FIFO, CostBasisMethod.LIFO, CostBasisMethod.HIFO]


def _remaining_by_symbol(lots):
    totals: dict[str, Decimal] = {}
    for lot in lots:
        totals[lot.symbol] = totals.get(lot.symbol, Decimal("0")) + lot.remaining_qty
    return totals


@pytest.mark.parametrize("name", sorted(HISTORIES))
@pytest.mark.parametrize("method", AUTOMATIC)
class TestLotBookMatchesHoldings:
    def test_remaining_shares_equal_held_shares(self, name, method):
        txs = HISTORIES[name]
        allocator = LotAllocator()
        aggregator = HoldingAggregator()
        for index, (_tx, _result, lots) in enumerate(allocator.walk(txs, method), start=1):
            holdings = aggregator.aggregate(txs[:index]).open_holdings
            remaining = _remaining_by_symbol(lots)
            for symbol, qty in remaining.items():
                held = holdings[symbol].quantity if symbol in holdings else Decimal("0")
                assert qty == held

    def test_lots_never_go_negative(self, name, method):
        lots = LotAllocator().replay(HISTORIES[name], method)
        assert all(Decimal("0") <= lot.remaining_qty <= lot.quantity for lot in lots)

    def test_sale_proceeds_match_price_times_quantity(self, name, method):
        for tx, result, _lots in LotAllocator().walk(HISTORIES[name], method):
            if result is None:
                continue
            assert result.quantity_allocated == tx.quantity
            assert result.total_proceeds == tx.quantity * tx.price
            assert result.total_gain_loss == result.long_term_gain + result.short_term_gain


class TestFullLiquidation:
    @pytest.mark.parametrize("method", AUTOMATIC)
    def test_every_method_agrees_with_closed_position(self, method):
        txs = [
            make_tx("b1", BUY, "10", "10", date(2023, 1, 1)),
            make_tx("b2", BUY, "10", "30", date(2023, 2, 1)),
            make_tx("b3", BUY, "10", "20", date(2023, 3, 1)),
            make_tx("s1", SELL, "12", "25", date(2023, 4, 1)),
            make_tx("s2", SELL, "18", "22", date(2023, 5, 1)),
        ]
        closed = HoldingAggregator().aggregate(txs).closed_positions
        assert len(closed) == 1

        total = Decimal("0")
        for _tx, result, _lots in LotAllocator().walk(txs, method):
            if result is not None:
                total += result.total_gain_loss
        assert total == closed[0].realized_gain


class TestPeriods:
    def test_holding_days_ignores_order(self):
        assert holding_days(date(2024, 1, 1), date(2024, 1, 31)) == 30
        assert holding_days(date(2024, 1, 31), date(2024, 1, 1)) == 30

    @pytest.mark.parametrize(
        ("disposed", "expected"),
        [
            (date(2024, 1, 1), False),
            (date(2024, 1, 2), True),
        ],
    )
    def test_long_term_starts_after_365_days(self, disposed, expected):
        assert is_long_term(date(2023, 1, 1), disposed) is expected

    def test_percent_of_non_positive_base(self):
        assert percent_of(Decimal("10"), Decimal("0")) == Decimal("0")
        assert percent_of(Decimal("10"), Decimal("-5")) == Decimal("0")
        assert percent_of(Decimal("5"), Decimal("20")) == Decimal("25")
