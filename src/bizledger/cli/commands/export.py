"""CSV export commands."""

from datetime import date

import click

from bizledger.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from bizledger.domain.client import ClientService
from bizledger.domain.entities import INVOICE_STATUSES, TRANSACTION_TYPES, TransactionFilter
from bizledger.domain.invoice import InvoiceService
from bizledger.domain.transaction import TransactionService
from bizledger.export.csv_export import invoices_to_csv, transactions_to_csv


def _emit(text: str, output: str | None, default_name: str) -> None:
    if output == "-":
        click.echo(text, nl=False)
        return
    path = output or default_name
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    click.echo(f"Wrote {path}", err=True)


@click.group()
def export_group():
    """Export data as CSV."""
    pass


@export_group.command("transactions")
@period_options
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES))
@click.option("--output", "-o", help="Output file, or '-' for stdout (default: transactions_<today>.csv)")
@click.pass_context
def export_transactions(ctx, txn_type: str | None, output: str | None, **kwargs):
    """Export transactions."""
    period_flags = pop_period_flags(kwargs)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=kwargs.pop("start_date"),
        end_date=kwargs.pop("end_date"),
        period_flags=period_flags,
    )
    store = ctx.obj["store"]
    transactions = TransactionService(store).filter_transactions(
        TransactionFilter(start_date=start, end_date=end, type=txn_type)
    )
    text = transactions_to_csv(transactions, ClientService(store).list_clients())
    _emit(text, output, f"transactions_{date.today().isoformat()}.csv")


@export_group.command("invoices")
@click.option("--status", type=click.Choice(INVOICE_STATUSES))
@click.option("--output", "-o", help="Output file, or '-' for stdout (default: invoices_<today>.csv)")
@click.pass_context
def export_invoices(ctx, status: str | None, output: str | None):
    """Export invoices."""
    store = ctx.obj["store"]
    service = InvoiceService(store)
    invoices = service.list_by_status(status) if status else service.list_invoices()
    text = invoices_to_csv(invoices, ClientService(store).list_clients())
    _emit(text, output, f"invoices_{date.today().isoformat()}.csv")


def register_commands(cli: click.Group) -> None:
    """Register export commands with main CLI."""
    cli.add_command(export_group, name="export")
