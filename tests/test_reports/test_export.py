"""Tests for report row flattening and CSV export."""

from datetime import date
from decimal import Decimal

from lotbook.engines.gains import RealizedGainReporter
from lotbook.engines.holdings import HoldingAggregator
from lotbook.models.enums import TransactionType
from lotbook.reports.export import (
    closed_position_rows,
    closed_positions_digest,
    money,
    realized_gain_rows,
    shares,
    tax_treatment,
    to_csv,
)


class TestFormatting:
    def test_money_rounds_half_up(self):
        assert money(Decimal("1.005")) == "1.01"
        assert money(Decimal("-2.5")) == "-2.50"
        assert money(Decimal("1E+2")) == "100.00"

    def test_shares(self):
        assert shares(Decimal("1.23456")) == "1.2346"
        assert shares(Decimal("10")) == "10.0000"

    def test_tax_treatment(self):
        assert tax_treatment(True) == "Long-term Capital Gain"
        assert tax_treatment(False) == "Short-term Capital Gain"


class TestClosedPositions:
    def test_rows(self, round_trip):
        closed = HoldingAggregator().aggregate(round_trip).closed_positions
        row = closed_position_rows(closed)[0]
        assert row["symbol"] == "ACME"
        assert row["status"] == "CLOSED"
        assert row["realized_gain"] == "500.00"
        assert row["realized_gain_percent"] == "50.00"
        assert row["first_buy_date"] == "2023-01-01"
        assert row["holding_period_days"] == 396
        assert row["tax_treatment"] == "Long-term Capital Gain"

    def test_digest(self, round_trip):
        closed = HoldingAggregator().aggregate(round_trip).closed_positions
        digest = closed_positions_digest(closed)
        assert digest.startswith("ACME: CLOSED POSITION")
        assert "Realized Gain: +$500.00 (+50.00%)" in digest
        assert "(396 days, Long-term)" in digest

    def test_digest_for_loss(self, tx_factory):
        txs = [
            tx_factory("b1", TransactionType.BUY, "10", "10", date(2024, 1, 1)),
            tx_factory("s1", TransactionType.SELL, "10", "8", date(2024, 2, 1)),
        ]
        closed = HoldingAggregator().aggregate(txs).closed_positions
        assert "Realized Loss: $-20.00" in closed_positions_digest(closed)

    def test_digest_when_nothing_closed(self):
        assert closed_positions_digest([]) == "No closed positions (no fully sold holdings)"


class TestRealizedGainRows:
    def test_wash_sale_amount_carried_on_row(self, tx_factory):
        txs = [
            tx_factory("b1", TransactionType.BUY, "100", "10", date(2024, 1, 2)),
            tx_factory("s1", TransactionType.SELL, "100", "5", date(2024, 1, 20)),
            tx_factory("b2", TransactionType.BUY, "100", "6", date(2024, 2, 5)),
        ]
        report = RealizedGainReporter().report_year(txs, 2024)
        rows = realized_gain_rows(report.gains, report.wash_sales)
        assert rows == [{
            "symbol": "ACME",
            "sale_date": "2024-01-20",
            "acquisition_date": "2024-01-02",
            "holding_days": 18,
            "tax_treatment": "Short-term",
            "shares_sold": "100.0000",
            "proceeds": "500.00",
            "cost_basis": "1000.00",
            "gain_loss": "-500.00",
            "gain_percent": "-50.00",
            "wash_sale_disallowed": "500.00",
        }]

    def test_rows_without_wash_sales(self, round_trip):
        report = RealizedGainReporter().report_year(round_trip, 2024)
        assert realized_gain_rows(report.gains)[0]["wash_sale_disallowed"] == "0.00"


class TestToCsv:
    def test_header_and_rows(self):
        text = to_csv([{"symbol": "ACME", "gain": "1.00"}, {"symbol": "ZZZ", "gain": "-2.00"}])
        assert text == "symbol,gain\nACME,1.00\nZZZ,-2.00\n"

    def test_empty(self):
        assert to_csv([]) == ""
