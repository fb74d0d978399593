"""Data models for lotbook."""

from lotbook.models.enums import (
    ACQUISITION_TYPES,
    DISPOSITION_TYPES,
    CostBasisMethod,
    HoldingPeriod,
    TransactionType,
)
from lotbook.models.lots import SellAllocation, SellPreview, SellResult, TaxLot
from lotbook.models.positions import (
    ClosedPosition,
    Holding,
    PortfolioSummary,
    PositionValuation,
    UnrealizedSummary,
)
from lotbook.models.reports import (
    RealizedGainDetail,
    RealizedGainReport,
    RealizedGainSummary,
    SaleWashSale,
)
from lotbook.models.transaction import Transaction, normalize_symbol, sort_transactions
from lotbook.models.wash_sale import WashSaleResult, WashSaleTrigger

__all__ = [
    "ACQUISITION_TYPES",
    "ClosedPosition",
    "CostBasisMethod",
    "DISPOSITION_TYPES",
    "Holding",
    "HoldingPeriod",
    "PortfolioSummary",
    "PositionValuation",
    "RealizedGainDetail",
    "RealizedGainReport",
    "RealizedGainSummary",
    "SaleWashSale",
    "SellAllocation",
    "SellPreview",
    "SellResult",
    "TaxLot",
    "Transaction",
    "TransactionType",
    "UnrealizedSummary",
    "WashSaleResult",
    "WashSaleTrigger",
    "normalize_symbol",
    "sort_transactions",
]
