"""Enumerations for lotbook."""

from enum import StrEnum


class TransactionType(StrEnum):
    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"


ACQUISITION_TYPES = frozenset({TransactionType.BUY, TransactionType.TRANSFER_IN})
DISPOSITION_TYPES = frozenset({TransactionType.SELL, TransactionType.TRANSFER_OUT})


class CostBasisMethod(StrEnum):
    FIFO = "FIFO"
    LIFO = "LIFO"
    HIFO = "HIFO"
    SPECID = "SPECID"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]

    @property
    def description(self) -> str:
        return _METHOD_DESCRIPTIONS[self]


_METHOD_LABELS = {
    CostBasisMethod.FIFO: "First In, First Out (FIFO)",
    CostBasisMethod.LIFO: "Last In, First Out (LIFO)",
    CostBasisMethod.HIFO: "Highest Cost First (HIFO)",
    CostBasisMethod.SPECID: "Specific Identification",
}

_METHOD_DESCRIPTIONS = {
    CostBasisMethod.FIFO: "Sells oldest shares first",
    CostBasisMethod.LIFO: "Sells newest shares first",
    CostBasisMethod.HIFO: "Sells highest-cost shares first to minimize taxable gains",
    CostBasisMethod.SPECID: "Choose specific lots to sell",
}


class HoldingPeriod(StrEnum):
    SHORT_TERM = "SHORT_TERM"
    LONG_TERM = "LONG_TERM"
