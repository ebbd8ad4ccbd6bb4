"""Client and vendor management commands."""

import click

from bizledger.cli.error_handling import handle_domain_error
from bizledger.domain.client import ClientService
from bizledger.domain.entities import CLIENT_TYPES
from bizledger.domain.errors import DomainError


@click.group()
def client_group():
    """Manage clients and vendors."""
    pass


@client_group.command("add")
@click.option("--name", required=True, help="Client name")
@click.option("--email", required=True, help="Contact email")
@click.option("--phone", default="", help="Contact phone")
@click.option("--address", default="", help="Street address")
@click.option("--city", default="")
@click.option("--state", default="")
@click.option("--zip", "zip_code", default="", help="Postal code")
@click.option("--country", default="")
@click.option("--tax-id", help="Tax identifier")
@click.option("--type", "client_type", type=click.Choice(CLIENT_TYPES), default="client", show_default=True)
@click.option("--notes", help="Notes")
@click.pass_context
def add_client(ctx, name: str, email: str, client_type: str, tax_id: str | None, notes: str | None, **address):
    """Add a client or vendor.

    Examples:
        bizledger client add --name "Acme Corp" --email billing@acme.test
        bizledger client add --name "Paper Co" --email sales@paper.test --type vendor
    """
    service = ClientService(ctx.obj["store"])
    try:
        client = service.create_client(
            ctx.obj["user"],
            name=name.strip(),
            email=email.strip(),
            tax_id=tax_id,
            type=client_type,
            notes=notes,
            **address,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {client.type} '{client.name}' with ID {client.id}")


@client_group.command("list")
@click.option("--type", "client_type", type=click.Choice(CLIENT_TYPES), help="Only this type (includes 'both')")
@click.option("--search", help="Match name, email, phone or tax ID")
@click.pass_context
def list_clients(ctx, client_type: str | None, search: str | None):
    """List clients and vendors."""
    service = ClientService(ctx.obj["store"])

    if search:
        clients = service.search_clients(search)
        if client_type:
            clients = [c for c in clients if c.type in (client_type, "both")]
    elif client_type:
        clients = service.list_clients_by_type(client_type)
    else:
        clients = service.list_clients()

    if not clients:
        click.echo("No clients found.")
        return

    click.echo(f"{'ID':<28} {'Name':<24} {'Type':<8} {'Email':<28} {'Phone':<16}")
    click.echo("-" * 108)
    for client in clients:
        click.echo(
            f"{client.id:<28} {client.name[:24]:<24} {client.type:<8} "
            f"{client.email[:28]:<28} {client.phone[:16]:<16}"
        )


@client_group.command("update")
@click.argument("client_id")
@click.option("--name")
@click.option("--email")
@click.option("--phone")
@click.option("--address")
@click.option("--city")
@click.option("--state")
@click.option("--zip", "zip_code")
@click.option("--country")
@click.option("--tax-id", help="Tax identifier, or empty string to clear")
@click.option("--type", "client_type", type=click.Choice(CLIENT_TYPES))
@click.option("--notes", help="Notes, or empty string to clear")
@click.pass_context
def update_client(ctx, client_id: str, client_type: str | None, tax_id: str | None, notes: str | None, **fields):
    """Update a client. Only the provided fields change."""
    changes = {key: value for key, value in fields.items() if value is not None}
    if client_type is not None:
        changes["type"] = client_type
    if tax_id is not None:
        changes["tax_id"] = tax_id or None
    if notes is not None:
        changes["notes"] = notes or None

    if not changes:
        click.echo("Error: Nothing to update", err=True)
        ctx.exit(1)

    try:
        ClientService(ctx.obj["store"]).update_client(client_id, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated client {client_id}")


@client_group.command("delete")
@click.argument("client_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_client(ctx, client_id: str, yes: bool):
    """Delete a client. Existing transactions and invoices keep their reference."""
    service = ClientService(ctx.obj["store"])
    client = service.get_client(client_id)
    if client is None:
        click.echo(f"Error: Client {client_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete '{client.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_client(client_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted client {client_id}")


@client_group.command("stats")
@click.pass_context
def client_stats(ctx):
    """Count clients by type."""
    stats = ClientService(ctx.obj["store"]).get_stats()
    click.echo(f"Total:   {stats.total}")
    click.echo(f"Clients: {stats.clients}")
    click.echo(f"Vendors: {stats.vendors}")
    click.echo(f"Both:    {stats.both}")


def register_commands(cli: click.Group) -> None:
    """Register client commands with main CLI."""
    cli.add_command(client_group, name="client")
