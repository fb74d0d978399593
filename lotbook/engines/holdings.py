"""Holding aggregator: running average-cost positions and closed cycles.

This is the cheap summary method used for dashboards. Sells reduce basis
pro rata against the running average, which is not lot-exact; tax reporting
goes through the lot allocator instead.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from lotbook.engines.gains import summarize_unrealized
from lotbook.engines.periods import LONG_TERM_THRESHOLD_DAYS, QUANTITY_EPSILON, percent_of
from lotbook.models.enums import TransactionType
from lotbook.models.positions import (
    ClosedPosition,
    Holding,
    PortfolioSummary,
    PositionValuation,
    UnrealizedSummary,
)
from lotbook.models.transaction import Transaction, sort_transactions

logger = logging.getLogger(__name__)


@dataclass
class _Accumulator:
    """Running state for one symbol between opening and closing flat."""

    quantity: Decimal = Decimal("0")
    cost_basis: Decimal = Decimal("0")
    transactions: list[Transaction] = field(default_factory=list)
    first_buy_date: date | None = None


class HoldingAggregator:
    """Folds a transaction stream into open holdings and closed positions."""

    def aggregate(self, transactions: Sequence[Transaction]) -> PortfolioSummary:
        """Recompute the portfolio from full history.

        Over-sells are tolerated: the consumed ratio is clamped to 1 and the
        position closes at zero instead of going negative.
        """
        accumulators: dict[str, _Accumulator] = {}
        closed: list[ClosedPosition] = []

        for tx in sort_transactions(list(transactions)):
            acc = accumulators.setdefault(tx.symbol, _Accumulator())
            acc.transactions.append(tx)

            match tx.transaction_type:
                case TransactionType.BUY | TransactionType.TRANSFER_IN:
                    if acc.quantity == 0:
                        acc.first_buy_date = tx.trade_date
                    acc.quantity += tx.quantity
                    acc.cost_basis += tx.amount + tx.fees
                case TransactionType.SELL | TransactionType.TRANSFER_OUT:
                    if acc.quantity > 0:
                        if tx.quantity > acc.quantity + QUANTITY_EPSILON:
                            logger.warning(
                                "Transaction %s sells %s %s but only %s held; clamping",
                                tx.id, tx.quantity, tx.symbol, acc.quantity,
                            )
                        sold = min(tx.quantity, acc.quantity)
                        acc.cost_basis -= acc.cost_basis * sold / acc.quantity
                        acc.quantity -= sold
                    else:
                        logger.warning(
                            "Transaction %s sells %s with no open position", tx.id, tx.symbol
                        )
                case TransactionType.DIVIDEND:
                    pass

            if acc.quantity <= QUANTITY_EPSILON:
                position = self._close_position(tx.symbol, acc)
                if position is not None:
                    closed.append(position)
                accumulators[tx.symbol] = _Accumulator()

        open_holdings = {
            symbol: Holding(symbol=symbol, quantity=acc.quantity, cost_basis=acc.cost_basis)
            for symbol, acc in accumulators.items()
            if acc.quantity > QUANTITY_EPSILON
        }

        zero = Decimal("0")
        return PortfolioSummary(
            open_holdings=open_holdings,
            closed_positions=closed,
            total_realized_gain=sum((cp.realized_gain for cp in closed), zero),
            total_realized_gain_long_term=sum(
                (cp.realized_gain for cp in closed if cp.is_long_term), zero
            ),
            total_realized_gain_short_term=sum(
                (cp.realized_gain for cp in closed if not cp.is_long_term), zero
            ),
        )

    def value_holdings(
        self,
        holdings: Mapping[str, Holding],
        prices: Mapping[str, Decimal | None],
    ) -> UnrealizedSummary:
        """Mark open holdings to current prices.

        A symbol with no usable price is valued at its average cost and listed
        in ``missing_prices``.
        """
        positions: list[PositionValuation] = []
        missing: list[str] = []

        for symbol, holding in holdings.items():
            price = prices.get(symbol)
            available = price is not None and price > 0
            if not available:
                missing.append(symbol)
                price = holding.avg_cost
            market_value = holding.quantity * price
            gain = market_value - holding.cost_basis
            positions.append(PositionValuation(
                symbol=symbol,
                quantity=holding.quantity,
                cost_basis=holding.cost_basis,
                current_price=price,
                market_value=market_value,
                unrealized_gain=gain,
                unrealized_gain_percent=percent_of(gain, holding.cost_basis),
                price_available=available,
            ))

        if missing:
            logger.info("No price for %s; valued at average cost", ", ".join(missing))
        return summarize_unrealized(positions)

    @staticmethod
    def _close_position(symbol: str, acc: _Accumulator) -> ClosedPosition | None:
        """Summarize one open-to-flat cycle. None if it lacks a buy or a sell."""
        zero = Decimal("0")
        bought = sold = cost = proceeds = fees = zero
        first_buy = acc.first_buy_date
        last_sell: date | None = None

        for tx in acc.transactions:
            fees += tx.fees
            match tx.transaction_type:
                case TransactionType.BUY | TransactionType.TRANSFER_IN:
                    bought += tx.quantity
                    cost += tx.amount + tx.fees
                case TransactionType.SELL | TransactionType.TRANSFER_OUT:
                    sold += tx.quantity
                    proceeds += tx.amount - tx.fees
                    last_sell = tx.trade_date
                case TransactionType.DIVIDEND:
                    pass

        if first_buy is None or last_sell is None:
            return None

        gain = proceeds - cost
        days = (last_sell - first_buy).days
        return ClosedPosition(
            symbol=symbol,
            total_shares_bought=bought,
            total_shares_sold=sold,
            total_cost_basis=cost,
            total_proceeds=proceeds,
            total_fees=fees,
            realized_gain=gain,
            realized_gain_percent=percent_of(gain, cost),
            first_buy_date=first_buy,
            last_sell_date=last_sell,
            holding_period_days=days,
            is_long_term=days > LONG_TERM_THRESHOLD_DAYS,
            transactions=list(acc.transactions),
        )
