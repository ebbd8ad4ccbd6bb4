"""Main CLI entry point."""

import getpass
import logging

import click

from bizledger.config import STORE_ENV, USER_ENV, BusinessInfo
from bizledger.database.factories import create_store

# Import and register all commands at module level
from bizledger.cli.commands import (
    client,
    dashboard,
    export,
    invoice,
    transaction,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@click.group()
@click.option(
    "--store",
    "store_path",
    type=click.Path(),
    help=f"Path to the store file, .db for SQLite or .xlsx for a workbook (overrides {STORE_ENV})",
    envvar=STORE_ENV,
)
@click.option(
    "--user",
    help=f"Identity recorded on created records (overrides {USER_ENV})",
    envvar=USER_ENV,
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, store_path: str | None, user: str | None, verbose: bool):
    """Bizledger - small-business bookkeeping.

    Record income and expenses, keep a client and vendor directory, issue
    invoices and review the financial dashboard.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        format=LOG_FORMAT,
        level=logging.DEBUG if verbose else logging.WARNING,
    )

    # Open the store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        store = create_store(store_path)
        ctx.call_on_close(store.close)
        ctx.obj["store"] = store
        ctx.obj["user"] = user or getpass.getuser()
        ctx.obj["business"] = BusinessInfo.from_env()


# Register all commands
transaction.register_commands(cli)
client.register_commands(cli)
invoice.register_commands(cli)
dashboard.register_commands(cli)
export.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
