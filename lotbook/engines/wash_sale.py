"""Wash-sale detection.

A loss is disallowed when substantially identical shares are acquired within
30 days before or after the loss sale (a 61-day window including the sale
date).
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal

from lotbook.engines.periods import holding_days
from lotbook.models.enums import ACQUISITION_TYPES, DISPOSITION_TYPES
from lotbook.models.transaction import Transaction, normalize_symbol
from lotbook.models.wash_sale import WashSaleResult, WashSaleTrigger

logger = logging.getLogger(__name__)

WASH_SALE_WINDOW_DAYS = 30


def _in_window(center: date, other: date) -> bool:
    return holding_days(center, other) <= WASH_SALE_WINDOW_DAYS


class WashSaleDetector:
    """Flags loss sales that have a replacement purchase in the window."""

    def detect(
        self,
        sell_date: date,
        symbol: str,
        sell_loss: Decimal,
        sell_qty: Decimal,
        transactions: Sequence[Transaction],
    ) -> WashSaleResult:
        """Check one sale against the surrounding history.

        Only a single replacement buy is matched. Purchases after the sale are
        preferred; within each side the buy closest to the sale wins.

        Args:
            sell_date: Trade date of the sale.
            symbol: Ticker sold.
            sell_loss: Gain/loss of the sale. Non-negative values never wash.
            sell_qty: Shares sold.
            transactions: History to search for replacement buys.

        Returns:
            WashSaleResult; ``disallowed_loss`` is the loss prorated by the
            fraction of sold shares replaced.
        """
        if sell_loss >= 0:
            return WashSaleResult()

        wanted = normalize_symbol(symbol)
        candidates = [
            tx for tx in transactions
            if tx.transaction_type in ACQUISITION_TYPES
            and tx.symbol == wanted
            and _in_window(sell_date, tx.trade_date)
        ]
        if not candidates:
            return WashSaleResult()

        replacement = min(
            candidates,
            key=lambda tx: (
                0 if tx.trade_date > sell_date else 1,
                holding_days(sell_date, tx.trade_date),
            ),
        )

        replaced = min(replacement.quantity, sell_qty)
        if sell_qty > 0:
            disallowed = abs(sell_loss) * replaced / sell_qty
        else:
            disallowed = Decimal("0")
        direction = 1 if replacement.trade_date > sell_date else -1

        logger.debug(
            "Wash sale on %s %s: buy %s on %s replaces %s share(s), disallows %s",
            wanted, sell_date, replacement.id, replacement.trade_date, replaced, disallowed,
        )
        return WashSaleResult(
            is_wash_sale=True,
            disallowed_loss=disallowed,
            matching_buy_id=replacement.id,
            matching_buy_date=replacement.trade_date,
            matching_buy_qty=replaced,
            days_from_sell=holding_days(sell_date, replacement.trade_date) * direction,
        )

    def would_trigger(
        self,
        buy_date: date,
        symbol: str,
        recent_sells: Sequence[Transaction],
        sell_gains_losses: Mapping[str, Decimal],
    ) -> WashSaleTrigger:
        """Pre-trade check: would buying ``symbol`` on ``buy_date`` taint a loss sale?

        ``sell_gains_losses`` maps sale transaction ids to their realized
        gain/loss; sales missing from it are treated as break-even.
        """
        wanted = normalize_symbol(symbol)
        affected = [
            sell.id for sell in recent_sells
            if sell.symbol == wanted
            and sell.transaction_type in DISPOSITION_TYPES
            and _in_window(buy_date, sell.trade_date)
            and sell_gains_losses.get(sell.id, Decimal("0")) < 0
        ]
        return WashSaleTrigger(would_trigger=bool(affected), affected_sell_ids=affected)

    def transactions_in_window(
        self,
        center_date: date,
        symbol: str,
        transactions: Sequence[Transaction],
    ) -> list[Transaction]:
        """All transactions of ``symbol`` within 30 days of ``center_date``."""
        wanted = normalize_symbol(symbol)
        return [
            tx for tx in transactions
            if tx.symbol == wanted and _in_window(center_date, tx.trade_date)
        ]

    @staticmethod
    def format_warning(result: WashSaleResult) -> str:
        if not result.is_wash_sale:
            return ""
        days_from_sell = result.days_from_sell or 0
        direction = "after" if days_from_sell > 0 else "before"
        return (
            f"Wash Sale: ${result.disallowed_loss:,.2f} loss disallowed due to purchase of "
            f"{result.matching_buy_qty} shares {abs(days_from_sell)} days {direction} this sale."
        )
