"""Realized and unrealized gain reporting.

Realized gains always use FIFO lots rebuilt from the complete history: sales
before the reporting window still deplete lots, but only sales inside the
window produce report lines.
"""

import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from lotbook.engines.lot_matcher import LotAllocator
from lotbook.engines.periods import percent_of
from lotbook.engines.wash_sale import WashSaleDetector
from lotbook.models.enums import CostBasisMethod
from lotbook.models.positions import PositionValuation, UnrealizedSummary
from lotbook.models.reports import (
    RealizedGainDetail,
    RealizedGainReport,
    RealizedGainSummary,
    SaleWashSale,
)
from lotbook.models.transaction import Transaction

logger = logging.getLogger(__name__)


class RealizedGainReporter:
    """Builds lot-level realized gain reports for a date range."""

    def __init__(self) -> None:
        self.allocator = LotAllocator()
        self.wash_detector = WashSaleDetector()

    def report(
        self,
        transactions: Sequence[Transaction],
        start_date: date,
        end_date: date,
        detect_wash_sales: bool = True,
    ) -> RealizedGainReport:
        """Replay all transactions and report sales dated within the range.

        Args:
            transactions: Complete history for one owner, in any order.
            start_date: First sale date to report (inclusive).
            end_date: Last sale date to report (inclusive).
            detect_wash_sales: Annotate in-range loss sales with wash-sale results.

        Returns:
            RealizedGainReport with per-lot gain lines, wash-sale annotations
            and long/short-term subtotals.
        """
        if end_date < start_date:
            raise ValueError(f"end_date {end_date} is before start_date {start_date}")

        gains: list[RealizedGainDetail] = []
        wash_sales: list[SaleWashSale] = []

        for tx, result, lots in self.allocator.walk(transactions, CostBasisMethod.FIFO):
            if result is None or not start_date <= tx.trade_date <= end_date:
                continue

            for allocation in result.allocations:
                gains.append(RealizedGainDetail(
                    transaction_id=tx.id,
                    lot_id=allocation.lot_id,
                    symbol=tx.symbol,
                    sale_date=tx.trade_date,
                    acquisition_date=allocation.acquired_date,
                    holding_days=allocation.holding_days,
                    is_long_term=allocation.is_long_term,
                    shares_sold=allocation.quantity_sold,
                    proceeds=allocation.proceeds,
                    cost_basis=allocation.cost_basis_allocated,
                    gain=allocation.gain_loss,
                    gain_percent=percent_of(allocation.gain_loss, allocation.cost_basis_allocated),
                ))

            if detect_wash_sales and result.total_gain_loss < 0:
                # The buys behind the lots this sale consumed are not replacements
                lot_sources = {lot.id: lot.transaction_id for lot in lots}
                consumed = {lot_sources[a.lot_id] for a in result.allocations}
                wash = self.wash_detector.detect(
                    tx.trade_date,
                    tx.symbol,
                    result.total_gain_loss,
                    result.quantity_allocated,
                    [t for t in transactions if t.id not in consumed],
                )
                if wash.is_wash_sale:
                    wash_sales.append(SaleWashSale(
                        transaction_id=tx.id,
                        symbol=tx.symbol,
                        sale_date=tx.trade_date,
                        gain_loss=result.total_gain_loss,
                        result=wash,
                    ))

        gains.sort(key=lambda g: g.sale_date)
        logger.info(
            "Realized gains %s to %s: %d line(s), %d wash sale(s)",
            start_date, end_date, len(gains), len(wash_sales),
        )
        return RealizedGainReport(
            start_date=start_date,
            end_date=end_date,
            gains=gains,
            wash_sales=wash_sales,
            summary=self.summarize(gains, wash_sales),
        )

    def report_year(
        self,
        transactions: Sequence[Transaction],
        year: int,
        detect_wash_sales: bool = True,
    ) -> RealizedGainReport:
        return self.report(
            transactions, date(year, 1, 1), date(year, 12, 31), detect_wash_sales
        )

    @staticmethod
    def summarize(
        gains: Sequence[RealizedGainDetail],
        wash_sales: Sequence[SaleWashSale] = (),
    ) -> RealizedGainSummary:
        zero = Decimal("0")
        long_term = [g for g in gains if g.is_long_term]
        short_term = [g for g in gains if not g.is_long_term]
        return RealizedGainSummary(
            total_gain=sum((g.gain for g in gains), zero),
            total_proceeds=sum((g.proceeds for g in gains), zero),
            total_cost_basis=sum((g.cost_basis for g in gains), zero),
            long_term_gain=sum((g.gain for g in long_term), zero),
            long_term_proceeds=sum((g.proceeds for g in long_term), zero),
            long_term_cost_basis=sum((g.cost_basis for g in long_term), zero),
            short_term_gain=sum((g.gain for g in short_term), zero),
            short_term_proceeds=sum((g.proceeds for g in short_term), zero),
            short_term_cost_basis=sum((g.cost_basis for g in short_term), zero),
            total_transactions=len(gains),
            long_term_count=len(long_term),
            short_term_count=len(short_term),
            wash_sale_disallowed=sum((w.result.disallowed_loss for w in wash_sales), zero),
        )


def summarize_unrealized(positions: Sequence[PositionValuation]) -> UnrealizedSummary:
    """Totals across already-valued positions."""
    zero = Decimal("0")
    total_value = sum((p.market_value for p in positions), zero)
    total_cost = sum((p.cost_basis for p in positions), zero)
    total_gain = total_value - total_cost
    return UnrealizedSummary(
        positions=list(positions),
        total_market_value=total_value,
        total_cost_basis=total_cost,
        total_unrealized_gain=total_gain,
        total_unrealized_gain_percent=percent_of(total_gain, total_cost),
        missing_prices=[p.symbol for p in positions if not p.price_available],
    )
