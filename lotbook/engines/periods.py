"""Holding-period arithmetic shared by the engines."""

from datetime import date
from decimal import Decimal

from lotbook.models.enums import HoldingPeriod

LONG_TERM_THRESHOLD_DAYS = 365

# Quantities at or below this are treated as zero (fractional-share residue
# from imported data).
QUANTITY_EPSILON = Decimal("0.0001")


def holding_days(acquired: date, disposed: date) -> int:
    """Whole calendar days between two dates, regardless of order."""
    return abs((disposed - acquired).days)


def is_long_term(acquired: date, disposed: date) -> bool:
    """Long-term means held strictly more than 365 days."""
    return holding_days(acquired, disposed) > LONG_TERM_THRESHOLD_DAYS


def holding_period(acquired: date, disposed: date) -> HoldingPeriod:
    if is_long_term(acquired, disposed):
        return HoldingPeriod.LONG_TERM
    return HoldingPeriod.SHORT_TERM


def percent_of(amount: Decimal, base: Decimal) -> Decimal:
    """``amount / base * 100``, or 0 when the base is not positive."""
    if base <= 0:
        return Decimal("0")
    return amount / base * 100
