"""Base adapter interface for transaction ingestion."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

from lotbook.engines.periods import QUANTITY_EPSILON
from lotbook.exceptions import DataValidationError
from lotbook.models.enums import TransactionType
from lotbook.models.transaction import Transaction


@dataclass
class ImportResult:
    """Bundles the output from an adapter's parse method."""

    source: str
    transactions: list[Transaction] = field(default_factory=list)


class BaseAdapter(ABC):
    """Abstract base class for all ingestion adapters."""

    @abstractmethod
    def parse(self, file_path: Path) -> ImportResult:
        """Parse a file and return an ImportResult with typed models."""
        ...

    def validate(self, data: ImportResult) -> list[str]:
        """Check imported transactions for problems the engines will tolerate.

        Returns a list of warning messages; nothing here is fatal.
        """
        warnings: list[str] = []
        seen: set[str] = set()
        held: dict[str, Decimal] = {}

        for tx in sorted(data.transactions, key=lambda t: t.trade_date):
            if tx.id in seen:
                warnings.append(f"Duplicate transaction id {tx.id}")
            seen.add(tx.id)
            if tx.is_acquisition:
                held[tx.symbol] = held.get(tx.symbol, Decimal("0")) + tx.quantity
            elif tx.is_disposition:
                if tx.symbol not in held:
                    warnings.append(
                        f"{tx.transaction_type.value} of {tx.symbol} on {tx.trade_date} "
                        f"precedes any acquisition"
                    )
                    continue
                available = held[tx.symbol]
                if tx.quantity > available + QUANTITY_EPSILON:
                    warnings.append(
                        f"{tx.transaction_type.value} of {tx.quantity} {tx.symbol} on "
                        f"{tx.trade_date} exceeds the {available} held"
                    )
                held[tx.symbol] = max(Decimal("0"), available - tx.quantity)
        return warnings

    def _build_transaction(self, record: dict[str, str], row: int, source: str) -> Transaction:
        """Turn one normalized record into a Transaction.

        ``record`` keys are lower-case canonical field names. Missing ids are
        derived from the source and row number; a missing amount defaults to
        quantity * price.
        """
        symbol = (record.get("symbol") or "").strip()
        if not symbol:
            raise DataValidationError("symbol", f"row {row}: symbol is required")

        tx_type = _parse_type(record.get("type"), row)
        quantity = _parse_decimal(record.get("quantity"), "quantity", row)
        price = _parse_decimal(record.get("price"), "price", row)
        amount = _parse_decimal(record.get("amount"), "amount", row, default=quantity * price)
        fees = _parse_decimal(record.get("fees"), "fees", row, default=Decimal("0"))

        if quantity < 0:
            raise DataValidationError("quantity", f"row {row}: quantity must not be negative")

        return Transaction(
            id=(record.get("id") or "").strip() or f"{source}-{row}",
            symbol=symbol,
            transaction_type=tx_type,
            quantity=quantity,
            price=price,
            amount=amount,
            fees=fees,
            trade_date=_parse_date(record.get("date"), row),
            description=(record.get("description") or "").strip() or None,
        )


_TYPE_ALIASES: dict[str, TransactionType] = {
    "BOUGHT": TransactionType.BUY,
    "PURCHASE": TransactionType.BUY,
    "SOLD": TransactionType.SELL,
    "SALE": TransactionType.SELL,
    "DIV": TransactionType.DIVIDEND,
}

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y%m%d")


def _parse_type(value: str | None, row: int) -> TransactionType:
    raw = (value or "").strip().upper().replace(" ", "_").replace("-", "_")
    if raw in _TYPE_ALIASES:
        return _TYPE_ALIASES[raw]
    try:
        return TransactionType(raw)
    except ValueError:
        raise DataValidationError("type", f"row {row}: unknown transaction type {value!r}") from None


def _parse_decimal(
    value: str | None,
    field_name: str,
    row: int,
    default: Decimal | None = None,
) -> Decimal:
    """Parse a money or share value, tolerating "$" and thousands separators."""
    stripped = str(value).strip().replace("$", "").replace(",", "") if value is not None else ""
    if not stripped:
        if default is None:
            raise DataValidationError(field_name, f"row {row}: value is required")
        return default
    try:
        return Decimal(stripped)
    except InvalidOperation:
        raise DataValidationError(field_name, f"row {row}: not a number: {value!r}") from None


def _parse_date(value: str | None, row: int) -> date:
    stripped = str(value).strip()[:10] if value is not None else ""
    if not stripped:
        raise DataValidationError("date", f"row {row}: date is required")
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(stripped, fmt).date()
        except ValueError:
            continue
    raise DataValidationError("date", f"row {row}: unrecognized date {value!r}")
