"""Presentation helpers for engine results."""

from lotbook.reports.export import (
    closed_position_rows,
    closed_positions_digest,
    money,
    realized_gain_rows,
    shares,
    to_csv,
)

__all__ = [
    "closed_position_rows",
    "closed_positions_digest",
    "money",
    "realized_gain_rows",
    "shares",
    "to_csv",
]
