"""Typer CLI interface for lotbook."""

import json
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from lotbook.engines import HoldingAggregator, LotAllocator, RealizedGainReporter, WashSaleDetector
from lotbook.engines.periods import holding_period
from lotbook.exceptions import LotbookError
from lotbook.ingestion import adapter_for
from lotbook.models.enums import CostBasisMethod
from lotbook.models.transaction import Transaction
from lotbook.reports.export import money, realized_gain_rows, shares, to_csv

app = typer.Typer(
    name="lotbook",
    help="lotbook: holdings, tax lots, realized gains and wash sales from a transaction file.",
)
console = Console()

_METHOD_ENVVAR = "LOTBOOK_COST_BASIS_METHOD"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine warnings and details"),
) -> None:
    """lotbook: holdings, tax lots, realized gains and wash sales from a transaction file."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_transactions(file_path: Path) -> list[Transaction]:
    """Parse a .csv or .json transaction file, exiting with a message on failure."""
    try:
        adapter = adapter_for(file_path)
        result = adapter.parse(file_path)
    except (LotbookError, FileNotFoundError, ValidationError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    for warning in adapter.validate(result):
        typer.echo(f"Warning: {warning}", err=True)
    return result.transactions


def _decimal_arg(value: str, name: str) -> Decimal:
    try:
        return Decimal(value.replace(",", ""))
    except InvalidOperation:
        typer.echo(f"Error: {name} must be a number, got {value!r}", err=True)
        raise typer.Exit(1)


def _date_arg(value: datetime | None) -> date:
    return value.date() if value is not None else date.today()


def _signed(value: Decimal) -> str:
    text = money(value)
    style = "green" if value >= 0 else "red"
    return f"[{style}]{text}[/{style}]"


@app.command()
def holdings(
    file: Path = typer.Argument(..., help="Transaction file (.csv or .json)"),
    prices: Path | None = typer.Option(
        None,
        "--prices",
        "-p",
        help="JSON object mapping symbols to current prices",
    ),
) -> None:
    """Show open holdings (average cost) and closed positions."""
    transactions = _load_transactions(file)
    aggregator = HoldingAggregator()
    summary = aggregator.aggregate(transactions)

    price_map: dict[str, Decimal | None] = {}
    if prices is not None:
        try:
            raw = json.loads(prices.read_text())
            price_map = {
                symbol.strip().upper(): None if value is None else Decimal(str(value))
                for symbol, value in raw.items()
            }
        except (OSError, ValueError, AttributeError, InvalidOperation) as exc:
            typer.echo(f"Error: cannot read prices from {prices}: {exc}", err=True)
            raise typer.Exit(1)
    valuation = aggregator.value_holdings(summary.open_holdings, price_map)

    tbl = Table(title="Open Holdings", show_header=True)
    tbl.add_column("Symbol", style="cyan")
    tbl.add_column("Shares", justify="right")
    tbl.add_column("Avg Cost", justify="right")
    tbl.add_column("Cost Basis", justify="right")
    tbl.add_column("Price", justify="right")
    tbl.add_column("Value", justify="right")
    tbl.add_column("Unrealized", justify="right")
    for position in valuation.positions:
        price = money(position.current_price)
        if not position.price_available:
            price = f"[dim]{price}*[/dim]"
        tbl.add_row(
            position.symbol,
            shares(position.quantity),
            money(summary.open_holdings[position.symbol].avg_cost),
            money(position.cost_basis),
            price,
            money(position.market_value),
            _signed(position.unrealized_gain),
        )
    console.print(tbl)
    if valuation.missing_prices:
        console.print("[dim]* no price available; valued at average cost[/dim]")

    if summary.closed_positions:
        closed = Table(title="Closed Positions", show_header=True)
        closed.add_column("Symbol", style="cyan")
        closed.add_column("Opened")
        closed.add_column("Closed")
        closed.add_column("Days", justify="right")
        closed.add_column("Cost Basis", justify="right")
        closed.add_column("Proceeds", justify="right")
        closed.add_column("Realized", justify="right")
        closed.add_column("Term")
        for cp in summary.closed_positions:
            closed.add_row(
                cp.symbol,
                cp.first_buy_date.isoformat(),
                cp.last_sell_date.isoformat(),
                str(cp.holding_period_days),
                money(cp.total_cost_basis),
                money(cp.total_proceeds),
                _signed(cp.realized_gain),
                "Long" if cp.is_long_term else "Short",
            )
        console.print(closed)

    typer.echo(f"Realized gain:   ${money(summary.total_realized_gain)}")
    typer.echo(f"  Long-term:     ${money(summary.total_realized_gain_long_term)}")
    typer.echo(f"  Short-term:    ${money(summary.total_realized_gain_short_term)}")
    typer.echo(f"Unrealized gain: ${money(valuation.total_unrealized_gain)}")


@app.command()
def lots(
    file: Path = typer.Argument(..., help="Transaction file (.csv or .json)"),
    symbol: str | None = typer.Option(None, "--symbol", "-s", help="Only show this symbol"),
    method: str = typer.Option(
        "FIFO",
        "--method",
        "-m",
        envvar=_METHOD_ENVVAR,
        help="Lot depletion order for past sales: FIFO, LIFO or HIFO",
    ),
) -> None:
    """List tax lots with shares remaining after replaying all sales."""
    transactions = _load_transactions(file)
    allocator = LotAllocator()
    try:
        lot_book = allocator.replay(transactions, method)
    except LotbookError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    if symbol:
        lot_book = allocator.available_lots(lot_book, symbol)
    else:
        lot_book = [lot for lot in lot_book if lot.remaining_qty > 0]

    tbl = Table(title="Tax Lots", show_header=True)
    tbl.add_column("Lot", style="cyan")
    tbl.add_column("Symbol")
    tbl.add_column("Acquired")
    tbl.add_column("Shares", justify="right")
    tbl.add_column("Remaining", justify="right")
    tbl.add_column("Cost/Share", justify="right")
    tbl.add_column("Term")
    today = date.today()
    for lot in lot_book:
        tbl.add_row(
            lot.id,
            lot.symbol,
            lot.acquired_date.isoformat(),
            shares(lot.quantity),
            shares(lot.remaining_qty),
            money(lot.cost_per_share),
            holding_period(lot.acquired_date, today).value,
        )
    console.print(tbl)


@app.command(name="preview-sell")
def preview_sell(
    file: Path = typer.Argument(..., help="Transaction file (.csv or .json)"),
    symbol: str = typer.Argument(..., help="Symbol to sell"),
    quantity: str = typer.Argument(..., help="Shares to sell"),
    price: str = typer.Argument(..., help="Sale price per share"),
    sell_date: datetime | None = typer.Option(
        None, "--date", "-d", formats=["%Y-%m-%d"], help="Sale date (default: today)"
    ),
    method: str = typer.Option(
        "FIFO",
        "--method",
        "-m",
        envvar=_METHOD_ENVVAR,
        help="Cost-basis method: FIFO, LIFO, HIFO or SPECID",
    ),
    lot_ids: list[str] | None = typer.Option(
        None, "--lot", "-l", help="Lot id to sell from, in order (SPECID; repeatable)"
    ),
) -> None:
    """Preview how a sale would be allocated across current lots."""
    transactions = _load_transactions(file)
    sell_qty = _decimal_arg(quantity, "quantity")
    sell_price = _decimal_arg(price, "price")
    allocator = LotAllocator()

    try:
        lot_book = allocator.replay(transactions)
        preview = allocator.preview_sell(
            lot_book, symbol, sell_qty, sell_price, _date_arg(sell_date), method, lot_ids
        )
    except LotbookError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    resolved = CostBasisMethod(method.strip().upper())
    tbl = Table(title=f"Sell {shares(sell_qty)} {symbol.upper()} ({resolved.label})", show_header=True)
    tbl.add_column("Lot", style="cyan")
    tbl.add_column("Acquired")
    tbl.add_column("Shares", justify="right")
    tbl.add_column("Cost Basis", justify="right")
    tbl.add_column("Proceeds", justify="right")
    tbl.add_column("Gain/Loss", justify="right")
    tbl.add_column("Term")
    for a in preview.allocations:
        tbl.add_row(
            a.lot_id,
            a.acquired_date.isoformat(),
            shares(a.quantity_sold),
            money(a.cost_basis_allocated),
            money(a.proceeds),
            _signed(a.gain_loss),
            f"{'Long' if a.is_long_term else 'Short'} ({a.holding_days}d)",
        )
    console.print(tbl)

    typer.echo(f"Total proceeds:  ${money(preview.total_proceeds)}")
    typer.echo(f"Cost basis:      ${money(preview.total_cost_basis)}")
    typer.echo(f"Gain/Loss:       ${money(preview.total_gain_loss)}")
    typer.echo(f"  Long-term:     ${money(preview.long_term_gain)}")
    typer.echo(f"  Short-term:    ${money(preview.short_term_gain)}")
    if preview.insufficient_shares:
        typer.echo(f"Warning: insufficient shares, short by {shares(preview.shortfall)}", err=True)


@app.command()
def gains(
    file: Path = typer.Argument(..., help="Transaction file (.csv or .json)"),
    year: int | None = typer.Option(None, "--year", "-y", help="Tax year to report"),
    start: datetime | None = typer.Option(
        None, "--start", formats=["%Y-%m-%d"], help="First sale date (inclusive)"
    ),
    end: datetime | None = typer.Option(
        None, "--end", formats=["%Y-%m-%d"], help="Last sale date (inclusive)"
    ),
    csv_out: Path | None = typer.Option(None, "--csv", help="Write gain lines to this CSV file"),
    wash_sales: bool = typer.Option(
        True, "--wash-sales/--no-wash-sales", help="Check loss sales for wash sales"
    ),
) -> None:
    """Report FIFO realized gains for a year or date range."""
    if year is not None and (start is not None or end is not None):
        typer.echo("Error: use either --year or --start/--end, not both", err=True)
        raise typer.Exit(1)
    if year is None:
        year = date.today().year
    start_date = start.date() if start is not None else date(year, 1, 1)
    end_date = end.date() if end is not None else date(year, 12, 31)

    transactions = _load_transactions(file)
    reporter = RealizedGainReporter()
    try:
        report = reporter.report(transactions, start_date, end_date, detect_wash_sales=wash_sales)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    tbl = Table(title=f"Realized Gains {start_date} to {end_date}", show_header=True)
    tbl.add_column("Symbol", style="cyan")
    tbl.add_column("Sold")
    tbl.add_column("Acquired")
    tbl.add_column("Shares", justify="right")
    tbl.add_column("Proceeds", justify="right")
    tbl.add_column("Cost Basis", justify="right")
    tbl.add_column("Gain/Loss", justify="right")
    tbl.add_column("Term")
    for g in report.gains:
        tbl.add_row(
            g.symbol,
            g.sale_date.isoformat(),
            g.acquisition_date.isoformat(),
            shares(g.shares_sold),
            money(g.proceeds),
            money(g.cost_basis),
            _signed(g.gain),
            "Long" if g.is_long_term else "Short",
        )
    console.print(tbl)

    s = report.summary
    typer.echo(f"Total gain/loss: ${money(s.total_gain)} ({s.total_transactions} line(s))")
    typer.echo(f"  Long-term:     ${money(s.long_term_gain)} ({s.long_term_count})")
    typer.echo(f"  Short-term:    ${money(s.short_term_gain)} ({s.short_term_count})")

    if report.wash_sales:
        detector = WashSaleDetector()
        typer.echo("\nWash sales:")
        for w in report.wash_sales:
            typer.echo(f"  - {w.symbol} {w.sale_date}: {detector.format_warning(w.result)}")
        typer.echo(f"  Total disallowed: ${money(s.wash_sale_disallowed)}")

    if csv_out is not None:
        csv_out.parent.mkdir(parents=True, exist_ok=True)
        csv_out.write_text(to_csv(realized_gain_rows(report.gains, report.wash_sales)))
        typer.echo(f"\nWrote {len(report.gains)} line(s) to {csv_out}")


@app.command(name="wash-check")
def wash_check(
    file: Path = typer.Argument(..., help="Transaction file (.csv or .json)"),
    symbol: str = typer.Argument(..., help="Symbol you plan to buy"),
    buy_date: datetime | None = typer.Option(
        None, "--date", "-d", formats=["%Y-%m-%d"], help="Planned purchase date (default: today)"
    ),
) -> None:
    """Warn if buying a symbol would turn a recent loss sale into a wash sale."""
    transactions = _load_transactions(file)
    allocator = LotAllocator()

    gain_loss: dict[str, Decimal] = {}
    sells: list[Transaction] = []
    for tx, result, _lots in allocator.walk(transactions):
        if result is not None:
            gain_loss[tx.id] = result.total_gain_loss
            sells.append(tx)

    trigger = WashSaleDetector().would_trigger(_date_arg(buy_date), symbol, sells, gain_loss)
    if not trigger.would_trigger:
        typer.echo(f"No wash-sale risk for {symbol.upper()}.")
        return

    typer.echo(f"Buying {symbol.upper()} would trigger the wash-sale rule on:")
    by_id = {tx.id: tx for tx in sells}
    for sell_id in trigger.affected_sell_ids:
        tx = by_id[sell_id]
        typer.echo(f"  - {sell_id} ({tx.trade_date}): loss ${money(gain_loss[sell_id])}")
    raise typer.Exit(2)
