"""Dashboard command."""

import click

from bizledger.domain.analytics import AnalyticsService
from bizledger.utils.amount_parser import format_currency
from bizledger.utils.date_parser import parse_date


@click.command("dashboard")
@click.option("--as-of", help="Reference date (defaults to today)")
@click.pass_context
def dashboard(ctx, as_of: str | None):
    """Show the financial dashboard.

    Summary totals, the last six months, category breakdown, top clients,
    recent transactions and invoices due in the next 30 days.
    """
    today = None
    if as_of:
        try:
            today = parse_date(as_of)
        except ValueError as e:
            click.echo(f"Error: Invalid date: {e}", err=True)
            ctx.exit(1)

    board = AnalyticsService(ctx.obj["store"]).get_dashboard(today)
    summary = board.summary

    click.echo("\nSummary")
    click.echo("=" * 60)
    click.echo(f"Income:       {format_currency(summary.total_income)}")
    click.echo(f"Expenses:     {format_currency(summary.total_expenses)}")
    click.echo(f"Net balance:  {format_currency(summary.net_balance)}")
    click.echo(
        f"Transactions: {summary.transaction_count}  Clients: {summary.client_count}  "
        f"Invoices: {summary.invoice_count}  Overdue: {summary.overdue_invoices}"
    )

    click.echo("\nMonthly")
    click.echo("-" * 60)
    for point in board.monthly:
        click.echo(
            f"{point.label:<10} income {format_currency(point.income):>12}  "
            f"expenses {format_currency(point.expenses):>12}  net {format_currency(point.net):>12}"
        )

    if board.categories:
        click.echo("\nCategories")
        click.echo("-" * 60)
        for cat in board.categories:
            click.echo(
                f"{cat.category[:24]:<24} {cat.type:<8} {format_currency(cat.amount):>12} "
                f"{cat.percentage:6.1f}%  ({cat.count})"
            )

    if board.top_clients:
        click.echo("\nTop clients")
        click.echo("-" * 60)
        for top in board.top_clients:
            click.echo(
                f"{top.client_name[:30]:<30} {format_currency(top.total_revenue):>12}  "
                f"({top.transaction_count})"
            )

    if board.recent_transactions:
        click.echo("\nRecent transactions")
        click.echo("-" * 60)
        for recent in board.recent_transactions:
            txn = recent.transaction
            click.echo(
                f"{str(txn.date or ''):<12} {txn.type:<8} {format_currency(txn.amount):>12}  "
                f"{txn.description[:24]:<24} {recent.client_name or ''}"
            )

    if board.upcoming_invoices:
        click.echo("\nUpcoming invoices")
        click.echo("-" * 60)
        for upcoming in board.upcoming_invoices:
            inv = upcoming.invoice
            click.echo(
                f"{inv.invoice_number:<15} {upcoming.client_name[:20]:<20} due {inv.due_date}  "
                f"{format_currency(inv.balance_due):>12}"
            )


def register_commands(cli: click.Group) -> None:
    """Register dashboard command with main CLI."""
    cli.add_command(dashboard)
