"""Flatten engine results into presentation rows.

Dates become ISO-8601 strings and decimals become fixed-point strings; the
engines themselves only ever return native values.
"""

import csv
import io
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from lotbook.models.positions import ClosedPosition
from lotbook.models.reports import RealizedGainDetail, SaleWashSale

_CENTS = Decimal("0.01")
_SHARES = Decimal("0.0001")


def money(value: Decimal) -> str:
    return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def shares(value: Decimal) -> str:
    return str(value.quantize(_SHARES, rounding=ROUND_HALF_UP))


def tax_treatment(is_long_term: bool) -> str:
    return "Long-term Capital Gain" if is_long_term else "Short-term Capital Gain"


def closed_position_rows(positions: Sequence[ClosedPosition]) -> list[dict[str, str | int]]:
    return [
        {
            "symbol": cp.symbol,
            "status": "CLOSED",
            "shares_bought": shares(cp.total_shares_bought),
            "shares_sold": shares(cp.total_shares_sold),
            "cost_basis": money(cp.total_cost_basis),
            "proceeds": money(cp.total_proceeds),
            "fees": money(cp.total_fees),
            "realized_gain": money(cp.realized_gain),
            "realized_gain_percent": money(cp.realized_gain_percent),
            "first_buy_date": cp.first_buy_date.isoformat(),
            "last_sell_date": cp.last_sell_date.isoformat(),
            "holding_period_days": cp.holding_period_days,
            "tax_treatment": tax_treatment(cp.is_long_term),
        }
        for cp in positions
    ]


def realized_gain_rows(
    gains: Sequence[RealizedGainDetail],
    wash_sales: Sequence[SaleWashSale] = (),
) -> list[dict[str, str | int]]:
    """One row per lot slice; the sale's wash-sale disallowance is repeated on each slice."""
    disallowed = {w.transaction_id: w.result.disallowed_loss for w in wash_sales}
    return [
        {
            "symbol": g.symbol,
            "sale_date": g.sale_date.isoformat(),
            "acquisition_date": g.acquisition_date.isoformat(),
            "holding_days": g.holding_days,
            "tax_treatment": "Long-term" if g.is_long_term else "Short-term",
            "shares_sold": shares(g.shares_sold),
            "proceeds": money(g.proceeds),
            "cost_basis": money(g.cost_basis),
            "gain_loss": money(g.gain),
            "gain_percent": money(g.gain_percent),
            "wash_sale_disallowed": money(disallowed.get(g.transaction_id, Decimal("0"))),
        }
        for g in gains
    ]


def to_csv(rows: Sequence[dict[str, str | int]]) -> str:
    """Render rows as CSV text with a header taken from the first row."""
    if not rows:
        return ""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()), lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def closed_positions_digest(positions: Sequence[ClosedPosition]) -> str:
    """Plain-text summary of closed positions, one block per position."""
    if not positions:
        return "No closed positions (no fully sold holdings)"

    blocks = []
    for cp in positions:
        label = "Gain" if cp.realized_gain >= 0 else "Loss"
        sign = "+" if cp.realized_gain >= 0 else ""
        term = "Long-term" if cp.is_long_term else "Short-term"
        blocks.append(
            f"{cp.symbol}: CLOSED POSITION\n"
            f"  - Shares: Bought {shares(cp.total_shares_bought)}, Sold {shares(cp.total_shares_sold)}\n"
            f"  - Cost Basis: ${money(cp.total_cost_basis)}, Proceeds: ${money(cp.total_proceeds)}\n"
            f"  - Realized {label}: {sign}${money(cp.realized_gain)} "
            f"({sign}{money(cp.realized_gain_percent)}%)\n"
            f"  - Holding Period: {cp.first_buy_date.isoformat()} to {cp.last_sell_date.isoformat()} "
            f"({cp.holding_period_days} days, {term})"
        )
    return "\n\n".join(blocks)
