"""Invoice management commands."""

from pathlib import Path

import click

from bizledger.cli.error_handling import handle_domain_error
from bizledger.domain.client import ClientService
from bizledger.domain.entities import INVOICE_STATUSES, InvoiceItem
from bizledger.domain.errors import DomainError
from bizledger.domain.invoice import InvoiceService, line_item
from bizledger.export.invoice_pdf import render_invoice_pdf
from bizledger.utils.amount_parser import format_currency, parse_amount
from bizledger.utils.date_parser import parse_date

ITEM_HELP = "Line item as DESCRIPTION:QUANTITY:UNIT_PRICE (repeatable)"


def parse_item_spec(spec: str) -> InvoiceItem:
    """Parse "Design work:2:150" into an unsaved line item.

    Raises:
        ValueError: If the item text is malformed or a number is negative
    """
    parts = spec.rsplit(":", 2)
    if len(parts) != 3 or not parts[0].strip():
        raise ValueError(f"Invalid item '{spec}'. Expected DESCRIPTION:QUANTITY:UNIT_PRICE")
    description, quantity, unit_price = parts
    qty = parse_amount(quantity)
    price = parse_amount(unit_price)
    if qty < 0 or price < 0:
        raise ValueError(f"Invalid item '{spec}'. Quantity and price must not be negative")
    return line_item(description.strip(), qty, price)


def _parse_items_or_exit(ctx, specs: tuple[str, ...]) -> list[InvoiceItem]:
    items = []
    for spec in specs:
        try:
            items.append(parse_item_spec(spec))
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
    return items


def _parse_date_or_exit(ctx, value: str, label: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _parse_amount_or_exit(ctx, value: str, label: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


@click.group()
def invoice_group():
    """Create and manage invoices."""
    pass


@invoice_group.command("create")
@click.option("--client", "client_id", required=True, help="Client ID")
@click.option("--issue-date", default="today", show_default=True, help="Issue date")
@click.option("--due-date", default="in 30 days", show_default=True, help="Due date")
@click.option("--item", "items", multiple=True, required=True, help=ITEM_HELP)
@click.option("--tax-rate", default="0", show_default=True, help="Tax rate in percent")
@click.option("--paid", "paid_amount", default="0", show_default=True, help="Amount already paid")
@click.option("--status", type=click.Choice(INVOICE_STATUSES), default="draft", show_default=True)
@click.option("--notes", help="Notes printed on the invoice")
@click.option("--terms", help="Payment terms")
@click.pass_context
def create_invoice(
    ctx,
    client_id: str,
    issue_date: str,
    due_date: str,
    items: tuple[str, ...],
    tax_rate: str,
    paid_amount: str,
    status: str,
    notes: str | None,
    terms: str | None,
):
    """Create an invoice.

    Examples:
        bizledger invoice create --client client_abc --item "Design:2:50" --item "Hosting:1:100" --tax-rate 10
    """
    line_items = _parse_items_or_exit(ctx, items)
    issued = _parse_date_or_exit(ctx, issue_date, "issue date")
    due = _parse_date_or_exit(ctx, due_date, "due date")
    rate = _parse_amount_or_exit(ctx, tax_rate, "tax rate")
    paid = _parse_amount_or_exit(ctx, paid_amount, "paid amount")

    store = ctx.obj["store"]
    if ClientService(store).get_client(client_id) is None:
        click.echo(f"Warning: client {client_id} does not exist", err=True)

    try:
        invoice = InvoiceService(store).create_invoice(
            ctx.obj["user"],
            client_id=client_id,
            issue_date=issued,
            due_date=due,
            items=line_items,
            tax_rate=rate,
            paid_amount=paid,
            status=status,
            notes=notes,
            terms=terms,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Created invoice {invoice.invoice_number} ({invoice.id}) "
        f"total {format_currency(invoice.total)}, status {invoice.status}"
    )


@invoice_group.command("list")
@click.option("--status", type=click.Choice(INVOICE_STATUSES))
@click.option("--client", "client_id", help="Client ID")
@click.pass_context
def list_invoices(ctx, status: str | None, client_id: str | None):
    """List invoices."""
    store = ctx.obj["store"]
    service = InvoiceService(store)
    if client_id:
        invoices = service.list_by_client(client_id)
        if status:
            invoices = [inv for inv in invoices if inv.status == status]
    elif status:
        invoices = service.list_by_status(status)
    else:
        invoices = service.list_invoices()

    if not invoices:
        click.echo("No invoices found.")
        return

    clients = {c.id: c.name for c in ClientService(store).list_clients()}
    click.echo(
        f"{'Number':<15} {'Client':<22} {'Issued':<12} {'Due':<12} {'Status':<10} {'Total':>12} {'Balance':>12}"
    )
    click.echo("-" * 100)
    for inv in invoices:
        click.echo(
            f"{inv.invoice_number:<15} {clients.get(inv.client_id, 'Unknown')[:22]:<22} "
            f"{str(inv.issue_date or ''):<12} {str(inv.due_date or ''):<12} {inv.status:<10} "
            f"{format_currency(inv.total):>12} {format_currency(inv.balance_due):>12}"
        )


@invoice_group.command("show")
@click.argument("invoice_id")
@click.pass_context
def show_invoice(ctx, invoice_id: str):
    """Show an invoice with its line items."""
    store = ctx.obj["store"]
    invoice = InvoiceService(store).get_invoice(invoice_id)
    if invoice is None:
        click.echo(f"Error: Invoice {invoice_id} not found", err=True)
        ctx.exit(1)

    client = ClientService(store).get_client(invoice.client_id)
    click.echo(f"Invoice {invoice.invoice_number} ({invoice.id})")
    click.echo(f"  Client: {client.name if client else 'Unknown'}")
    click.echo(f"  Issued: {invoice.issue_date}  Due: {invoice.due_date}")
    click.echo(f"  Status: {invoice.status}")
    click.echo("  Items:")
    for item in invoice.items:
        click.echo(
            f"    {item.description[:40]:<40} {item.quantity:>8} x "
            f"{format_currency(item.unit_price):>10} = {format_currency(item.amount):>12}"
        )
    click.echo(f"  Subtotal:    {format_currency(invoice.subtotal)}")
    click.echo(f"  Tax ({invoice.tax_rate}%): {format_currency(invoice.tax)}")
    click.echo(f"  Total:       {format_currency(invoice.total)}")
    click.echo(f"  Paid:        {format_currency(invoice.paid_amount)}")
    click.echo(f"  Balance due: {format_currency(invoice.balance_due)}")
    if invoice.notes:
        click.echo(f"  Notes: {invoice.notes}")


@invoice_group.command("update")
@click.argument("invoice_id")
@click.option("--status", type=click.Choice(INVOICE_STATUSES))
@click.option("--paid", "paid_amount", help="Total amount paid so far")
@click.option("--tax-rate", help="Tax rate in percent")
@click.option("--issue-date")
@click.option("--due-date")
@click.option("--item", "items", multiple=True, help=f"{ITEM_HELP}; replaces all items")
@click.option("--notes", help="Notes, or empty string to clear")
@click.option("--terms", help="Payment terms, or empty string to clear")
@click.pass_context
def update_invoice(
    ctx,
    invoice_id: str,
    status: str | None,
    paid_amount: str | None,
    tax_rate: str | None,
    issue_date: str | None,
    due_date: str | None,
    items: tuple[str, ...],
    notes: str | None,
    terms: str | None,
):
    """Update an invoice; totals and status are recomputed.

    Examples:
        bizledger invoice update inv_abc --paid 220
        bizledger invoice update inv_abc --status sent
    """
    changes = {}
    if status is not None:
        changes["status"] = status
    if paid_amount is not None:
        changes["paid_amount"] = _parse_amount_or_exit(ctx, paid_amount, "paid amount")
    if tax_rate is not None:
        changes["tax_rate"] = _parse_amount_or_exit(ctx, tax_rate, "tax rate")
    if issue_date is not None:
        changes["issue_date"] = _parse_date_or_exit(ctx, issue_date, "issue date")
    if due_date is not None:
        changes["due_date"] = _parse_date_or_exit(ctx, due_date, "due date")
    if items:
        changes["items"] = _parse_items_or_exit(ctx, items)
    if notes is not None:
        changes["notes"] = notes or None
    if terms is not None:
        changes["terms"] = terms or None

    if not changes:
        click.echo("Error: Nothing to update", err=True)
        ctx.exit(1)

    try:
        invoice = InvoiceService(ctx.obj["store"]).update_invoice(invoice_id, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Updated invoice {invoice.invoice_number}: status {invoice.status}, "
        f"balance due {format_currency(invoice.balance_due)}"
    )


@invoice_group.command("delete")
@click.argument("invoice_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_invoice(ctx, invoice_id: str, yes: bool):
    """Delete an invoice and its line items."""
    service = InvoiceService(ctx.obj["store"])
    invoice = service.get_invoice(invoice_id)
    if invoice is None:
        click.echo(f"Error: Invoice {invoice_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete invoice {invoice.invoice_number}?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_invoice(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted invoice {invoice.invoice_number}")


@invoice_group.command("pdf")
@click.argument("invoice_id")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (default: invoice_<number>.pdf)")
@click.pass_context
def invoice_pdf(ctx, invoice_id: str, output: str | None):
    """Render an invoice as PDF."""
    store = ctx.obj["store"]
    invoice = InvoiceService(store).get_invoice(invoice_id)
    if invoice is None:
        click.echo(f"Error: Invoice {invoice_id} not found", err=True)
        ctx.exit(1)

    client = ClientService(store).get_client(invoice.client_id)
    content = render_invoice_pdf(invoice, client, ctx.obj["business"])

    path = Path(output or f"invoice_{invoice.invoice_number}.pdf")
    path.write_bytes(content)
    click.echo(f"Wrote {path}")


def register_commands(cli: click.Group) -> None:
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
