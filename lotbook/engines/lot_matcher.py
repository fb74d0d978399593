"""Tax-lot allocation engine: FIFO, LIFO, HIFO and specific identification."""

import logging
from collections.abc import Iterable, Iterator, Sequence
from datetime import date
from decimal import Decimal

from lotbook.engines.periods import QUANTITY_EPSILON, holding_days, is_long_term
from lotbook.exceptions import InvalidCostBasisConfigError
from lotbook.models.enums import CostBasisMethod, TransactionType
from lotbook.models.lots import SellAllocation, SellPreview, SellResult, TaxLot
from lotbook.models.transaction import Transaction, normalize_symbol, sort_transactions

logger = logging.getLogger(__name__)


def validate_method(
    method: CostBasisMethod | str,
    specific_lot_ids: Sequence[str] | None = None,
) -> CostBasisMethod:
    """Coerce ``method`` to a CostBasisMethod and reject unusable settings.

    SPECID has no fallback ordering, so it must come with lot ids.
    """
    try:
        resolved = CostBasisMethod(str(method).strip().upper())
    except ValueError:
        valid = ", ".join(m.value for m in CostBasisMethod)
        raise InvalidCostBasisConfigError(
            str(method), f"unknown method, expected one of {valid}"
        ) from None
    if resolved == CostBasisMethod.SPECID and not specific_lot_ids:
        raise InvalidCostBasisConfigError(resolved.value, "no lot ids supplied")
    return resolved


class LotAllocator:
    """Selects and depletes acquisition lots for a sale.

    Allocation is a pure computation: ``allocate_sell`` never touches the lots
    it is given. Callers apply the outcome with ``commit_sell`` once the sale
    is final.
    """

    def sort_lots(self, lots: Iterable[TaxLot], method: CostBasisMethod) -> list[TaxLot]:
        """Order lots for depletion. Ties keep their input order."""
        match method:
            case CostBasisMethod.FIFO:
                return sorted(lots, key=lambda lot: lot.acquired_date)
            case CostBasisMethod.LIFO:
                return sorted(lots, key=lambda lot: lot.acquired_date, reverse=True)
            case CostBasisMethod.HIFO:
                return sorted(lots, key=lambda lot: lot.cost_per_share, reverse=True)
            case CostBasisMethod.SPECID:
                return list(lots)

    def allocate_sell(
        self,
        lots: Sequence[TaxLot],
        sell_qty: Decimal,
        sell_price: Decimal,
        sell_date: date,
        method: CostBasisMethod | str = CostBasisMethod.FIFO,
        specific_lot_ids: Sequence[str] | None = None,
    ) -> SellResult:
        """Allocate a sale across ``lots`` in the order the method dictates.

        Args:
            lots: Lots for the sold symbol.
            sell_qty: Shares sold. May exceed what the lots hold; the excess
                is left unallocated.
            sell_price: Per-share sale price.
            sell_date: Trade date of the sale.
            method: Cost-basis method.
            specific_lot_ids: Lot ids in the order to consume them (SPECID only).

        Returns:
            SellResult with one allocation per lot touched.
        """
        method = validate_method(method, specific_lot_ids)
        available = [lot for lot in lots if lot.remaining_qty > 0]

        if method == CostBasisMethod.SPECID:
            by_id = {lot.id: lot for lot in available}
            ordered = [by_id[lot_id] for lot_id in specific_lot_ids if lot_id in by_id]
        else:
            ordered = self.sort_lots(available, method)

        allocations: list[SellAllocation] = []
        remaining = sell_qty

        for lot in ordered:
            if remaining <= 0:
                break
            qty = min(remaining, lot.remaining_qty)
            if lot.quantity > 0:
                cost = qty * lot.cost_basis / lot.quantity
            else:
                cost = Decimal("0")
            proceeds = qty * sell_price
            allocations.append(SellAllocation(
                lot_id=lot.id,
                quantity_sold=qty,
                cost_basis_allocated=cost,
                acquired_date=lot.acquired_date,
                proceeds=proceeds,
                gain_loss=proceeds - cost,
                is_long_term=is_long_term(lot.acquired_date, sell_date),
                holding_days=holding_days(lot.acquired_date, sell_date),
            ))
            remaining -= qty

        if remaining > 0:
            logger.debug(
                "Sell of %s on %s left %s share(s) unallocated (%s)",
                sell_qty, sell_date, remaining, method.value,
            )
        return self._summarize(allocations)

    def preview_sell(
        self,
        lots: Sequence[TaxLot],
        symbol: str,
        sell_qty: Decimal,
        sell_price: Decimal,
        sell_date: date,
        method: CostBasisMethod | str = CostBasisMethod.FIFO,
        specific_lot_ids: Sequence[str] | None = None,
    ) -> SellPreview:
        """Show what a sale would do without committing it.

        A shortfall is reported on the result rather than raised.
        """
        symbol_lots = self.available_lots(lots, symbol)
        total_available = self.total_available_qty(lots, symbol)
        result = self.allocate_sell(
            symbol_lots, sell_qty, sell_price, sell_date, method, specific_lot_ids
        )
        return SellPreview(
            **result.model_dump(),
            insufficient_shares=sell_qty > total_available,
            shortfall=max(Decimal("0"), sell_qty - total_available),
        )

    def available_lots(self, lots: Iterable[TaxLot], symbol: str) -> list[TaxLot]:
        """Lots of ``symbol`` with shares left, oldest first."""
        wanted = normalize_symbol(symbol)
        return sorted(
            (lot for lot in lots if lot.symbol == wanted and lot.remaining_qty > 0),
            key=lambda lot: lot.acquired_date,
        )

    def total_available_qty(self, lots: Iterable[TaxLot], symbol: str) -> Decimal:
        return sum(
            (lot.remaining_qty for lot in self.available_lots(lots, symbol)),
            Decimal("0"),
        )

    def weighted_avg_cost(self, lots: Iterable[TaxLot], symbol: str) -> Decimal:
        """Average cost per remaining share across the symbol's open lots."""
        open_lots = self.available_lots(lots, symbol)
        total_qty = sum((lot.remaining_qty for lot in open_lots), Decimal("0"))
        if total_qty == 0:
            return Decimal("0")
        total_cost = sum(
            (lot.cost_per_share * lot.remaining_qty for lot in open_lots), Decimal("0")
        )
        return total_cost / total_qty

    def build_lot(self, transaction: Transaction) -> TaxLot:
        """One lot per acquisition; basis includes fees."""
        if not transaction.is_acquisition:
            raise ValueError(
                f"Cannot open a lot from {transaction.transaction_type} transaction {transaction.id}"
            )
        return TaxLot(
            id=f"lot-{transaction.id}",
            transaction_id=transaction.id,
            symbol=transaction.symbol,
            quantity=transaction.quantity,
            remaining_qty=transaction.quantity,
            cost_basis=transaction.amount + transaction.fees,
            acquired_date=transaction.trade_date,
        )

    def commit_sell(self, lots: Sequence[TaxLot], result: SellResult) -> list[TaxLot]:
        """Apply a sell allocation, returning depleted copies of the lots."""
        sold = {a.lot_id: a.quantity_sold for a in result.allocations}
        updated: list[TaxLot] = []
        for lot in lots:
            if lot.id not in sold:
                updated.append(lot)
                continue
            remaining = lot.remaining_qty - sold[lot.id]
            if remaining <= QUANTITY_EPSILON:
                remaining = Decimal("0")
            updated.append(lot.model_copy(update={"remaining_qty": remaining}))
        return updated

    def walk(
        self,
        transactions: Sequence[Transaction],
        method: CostBasisMethod | str = CostBasisMethod.FIFO,
    ) -> Iterator[tuple[Transaction, SellResult | None, list[TaxLot]]]:
        """Replay a transaction history through the lot book.

        Yields each transaction in processing order together with the sell
        allocation it produced (None for non-disposals) and the lot book as it
        stands afterwards.
        """
        if str(method).strip().upper() == CostBasisMethod.SPECID:
            raise InvalidCostBasisConfigError(
                CostBasisMethod.SPECID.value, "history replay needs an automatic lot ordering"
            )
        method = validate_method(method)

        lots: list[TaxLot] = []
        for tx in sort_transactions(list(transactions)):
            result: SellResult | None = None
            match tx.transaction_type:
                case TransactionType.BUY | TransactionType.TRANSFER_IN:
                    held = self.total_available_qty(lots, tx.symbol)
                    if held + tx.quantity <= QUANTITY_EPSILON:
                        # Dust acquisition into a flat position never opens a lot
                        logger.debug("Skipping %s %s from %s", tx.quantity, tx.symbol, tx.id)
                    else:
                        lots.append(self.build_lot(tx))
                case TransactionType.SELL | TransactionType.TRANSFER_OUT:
                    symbol_lots = [lot for lot in lots if lot.symbol == tx.symbol]
                    result = self.allocate_sell(
                        symbol_lots, tx.quantity, tx.price, tx.trade_date, method
                    )
                    lots = self.commit_sell(lots, result)
                    unallocated = tx.quantity - result.quantity_allocated
                    if unallocated > QUANTITY_EPSILON:
                        logger.warning(
                            "Transaction %s sells %s %s but only %s held; %s left unallocated",
                            tx.id, tx.quantity, tx.symbol,
                            result.quantity_allocated, unallocated,
                        )
                case TransactionType.DIVIDEND:
                    pass
            yield tx, result, list(lots)

    def replay(
        self,
        transactions: Sequence[Transaction],
        method: CostBasisMethod | str = CostBasisMethod.FIFO,
    ) -> list[TaxLot]:
        """Rebuild the lot book from full transaction history."""
        lots: list[TaxLot] = []
        for _tx, _result, lots in self.walk(transactions, method):
            pass
        return lots

    @staticmethod
    def _summarize(allocations: list[SellAllocation]) -> SellResult:
        zero = Decimal("0")
        total_cost = sum((a.cost_basis_allocated for a in allocations), zero)
        total_proceeds = sum((a.proceeds for a in allocations), zero)
        return SellResult(
            allocations=allocations,
            total_cost_basis=total_cost,
            total_proceeds=total_proceeds,
            total_gain_loss=total_proceeds - total_cost,
            long_term_gain=sum((a.gain_loss for a in allocations if a.is_long_term), zero),
            short_term_gain=sum((a.gain_loss for a in allocations if not a.is_long_term), zero),
        )
