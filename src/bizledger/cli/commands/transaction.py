"""Transaction management commands."""

import click

from bizledger.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from bizledger.cli.error_handling import handle_domain_error
from bizledger.domain.client import ClientService
from bizledger.domain.entities import (
    PAYMENT_METHODS,
    RECURRING_FREQUENCIES,
    TRANSACTION_TYPES,
    TransactionFilter,
)
from bizledger.domain.errors import DomainError
from bizledger.domain.transaction import TransactionService
from bizledger.utils.amount_parser import format_currency, parse_amount, parse_positive_amount
from bizledger.utils.date_parser import parse_date


def _split_tags(tags: str | None) -> tuple[str, ...]:
    if not tags:
        return ()
    return tuple(tag.strip() for tag in tags.split(",") if tag.strip())


@click.group()
def transaction_group():
    """Manage income and expense transactions."""
    pass


@transaction_group.command("add")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), required=True)
@click.option("--amount", required=True, help="Amount greater than zero (e.g., 123.45)")
@click.option(
    "--date",
    "txn_date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--category", required=True, help="Category name (e.g., 'Office Supplies')")
@click.option("--description", required=True, help="Transaction description")
@click.option(
    "--payment-method",
    type=click.Choice(PAYMENT_METHODS),
    default="cash",
    show_default=True,
)
@click.option("--client", "client_id", help="Client or vendor ID")
@click.option("--invoice", "invoice_id", help="Related invoice ID")
@click.option("--tags", help="Comma-separated tags")
@click.option("--notes", help="Notes")
@click.option(
    "--recurring",
    "recurring_frequency",
    type=click.Choice(RECURRING_FREQUENCIES),
    help="Mark as recurring with this frequency",
)
@click.pass_context
def add_transaction(
    ctx,
    txn_type: str,
    amount: str,
    txn_date: str,
    category: str,
    description: str,
    payment_method: str,
    client_id: str | None,
    invoice_id: str | None,
    tags: str | None,
    notes: str | None,
    recurring_frequency: str | None,
):
    """Record a transaction.

    Examples:
        bizledger transaction add --type expense --amount 49.99 --category Software --description "Editor license"
        bizledger transaction add --type income --amount 1200 --category Consulting --description "March retainer" --client client_abc
    """
    service = TransactionService(ctx.obj["store"])

    try:
        parsed_amount = parse_positive_amount(amount, "Amount")
    except ValueError as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)

    try:
        parsed_date = parse_date(txn_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn = service.create_transaction(
            ctx.obj["user"],
            type=txn_type,
            amount=parsed_amount,
            date=parsed_date,
            category=category,
            description=description,
            payment_method=payment_method,
            client_id=client_id,
            invoice_id=invoice_id,
            tags=_split_tags(tags),
            notes=notes,
            is_recurring=recurring_frequency is not None,
            recurring_frequency=recurring_frequency,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {txn.id}")


@transaction_group.command("list")
@period_options
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), help="Only income or only expenses")
@click.option("--category", help="Category name")
@click.option("--client", "client_id", help="Client or vendor ID")
@click.option("--payment-method", type=click.Choice(PAYMENT_METHODS))
@click.option("--min-amount", help="Minimum amount")
@click.option("--max-amount", help="Maximum amount")
@click.option("--search", help="Text to look for in description, category or notes")
@click.option("--tags", help="Comma-separated tags; matches any")
@click.pass_context
def list_transactions(ctx, **kwargs):
    """View transactions with optional filters."""
    period_flags = pop_period_flags(kwargs)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=kwargs.pop("start_date"),
        end_date=kwargs.pop("end_date"),
        period_flags=period_flags,
    )

    bounds = {}
    for key in ("min_amount", "max_amount"):
        if kwargs[key]:
            try:
                bounds[key] = parse_amount(kwargs[key])
            except ValueError as e:
                click.echo(f"Error: Invalid {key.replace('_', ' ')}: {e}", err=True)
                ctx.exit(1)

    store = ctx.obj["store"]
    service = TransactionService(store)
    transactions = service.filter_transactions(
        TransactionFilter(
            start_date=start,
            end_date=end,
            type=kwargs["txn_type"],
            category=kwargs["category"],
            client_id=kwargs["client_id"],
            payment_method=kwargs["payment_method"],
            min_amount=bounds.get("min_amount"),
            max_amount=bounds.get("max_amount"),
            search_query=kwargs["search"],
            tags=_split_tags(kwargs["tags"]),
        )
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    clients = {c.id: c.name for c in ClientService(store).list_clients()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<24} {'Date':<12} {'Type':<8} {'Amount':>12}  {'Category':<18} {'Client':<16} {'Description':<20}"
    )
    click.echo("-" * 110)

    for txn in transactions:
        client_name = clients.get(txn.client_id, "") if txn.client_id else ""
        click.echo(
            f"{txn.id:<24} {str(txn.date or ''):<12} {txn.type:<8} "
            f"{format_currency(txn.amount):>12}  {txn.category[:18]:<18} "
            f"{client_name[:16]:<16} {txn.description[:20]:<20}"
        )

    income = sum(t.amount for t in transactions if t.type == "income")
    expenses = sum(t.amount for t in transactions if t.type == "expense")
    click.echo("-" * 110)
    click.echo(
        f"Income: {format_currency(income)} | Expenses: {format_currency(expenses)} | "
        f"Net: {format_currency(income - expenses)} | Count: {len(transactions)}"
    )


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES))
@click.option("--amount", help="New amount")
@click.option("--date", "txn_date", help="New date")
@click.option("--category", help="New category")
@click.option("--description", help="New description")
@click.option("--payment-method", type=click.Choice(PAYMENT_METHODS))
@click.option("--client", "client_id", help="Client or vendor ID, or empty string to clear")
@click.option("--tags", help="Comma-separated tags, or empty string to clear")
@click.option("--notes", help="Notes, or empty string to clear")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    txn_type: str | None,
    amount: str | None,
    txn_date: str | None,
    category: str | None,
    description: str | None,
    payment_method: str | None,
    client_id: str | None,
    tags: str | None,
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        bizledger transaction update txn_abc --amount 75.00
        bizledger transaction update txn_abc --client ""  # Clear client
    """
    changes = {}
    if txn_type is not None:
        changes["type"] = txn_type
    if amount is not None:
        try:
            changes["amount"] = parse_positive_amount(amount, "Amount")
        except ValueError as e:
            click.echo(f"Error: Invalid amount: {e}", err=True)
            ctx.exit(1)
    if txn_date is not None:
        try:
            changes["date"] = parse_date(txn_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)
    if category is not None:
        changes["category"] = category
    if description is not None:
        changes["description"] = description
    if payment_method is not None:
        changes["payment_method"] = payment_method
    if client_id is not None:
        changes["client_id"] = client_id or None
    if tags is not None:
        changes["tags"] = _split_tags(tags)
    if notes is not None:
        changes["notes"] = notes or None

    if not changes:
        click.echo("Error: Nothing to update", err=True)
        ctx.exit(1)

    try:
        TransactionService(ctx.obj["store"]).update_transaction(transaction_id, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        bizledger transaction delete txn_abc
    """
    service = TransactionService(ctx.obj["store"])

    if service.get_transaction(transaction_id) is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete transaction {transaction_id}?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


@transaction_group.command("stats")
@period_options
@click.pass_context
def transaction_stats(ctx, **kwargs):
    """Show income, expenses and per-category totals."""
    period_flags = pop_period_flags(kwargs)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=kwargs.pop("start_date"),
        end_date=kwargs.pop("end_date"),
        period_flags=period_flags,
    )
    stats = TransactionService(ctx.obj["store"]).get_stats(start, end)

    click.echo(f"Income:   {format_currency(stats.total_income)}")
    click.echo(f"Expenses: {format_currency(stats.total_expenses)}")
    click.echo(f"Net:      {format_currency(stats.net_balance)}")
    click.echo(f"Count:    {stats.transaction_count}")
    if stats.category_breakdown:
        click.echo("\nBy category:")
        for category, total in sorted(stats.category_breakdown.items()):
            click.echo(f"  {category:<24} {format_currency(total.amount):>12}  ({total.count})")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
