"""Portfolio computation engines."""

from lotbook.engines.gains import RealizedGainReporter, summarize_unrealized
from lotbook.engines.holdings import HoldingAggregator
from lotbook.engines.lot_matcher import LotAllocator, validate_method
from lotbook.engines.wash_sale import WashSaleDetector

__all__ = [
    "HoldingAggregator",
    "LotAllocator",
    "RealizedGainReporter",
    "WashSaleDetector",
    "summarize_unrealized",
    "validate_method",
]
