"""Main CLI entry point."""

import click
from exledger.database.factories import create_sqlite_database
from exledger.domain.entities import Actor, Role
from exledger.logging_config import configure_logging

# Import and register all commands at module level
from exledger.cli.commands import (
    bank,
    cash,
    credit,
    customer,
    exchange,
    expense,
    ledger,
    settings,
    settle,
    transaction,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides EXLEDGER_DB_PATH environment variable)",
    envvar="EXLEDGER_DB_PATH",
)
@click.option(
    "--staff",
    default="staff",
    show_default=True,
    envvar="EXLEDGER_STAFF",
    help="Staff identifier recorded on every entry",
)
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.STAFF.value,
    show_default=True,
    envvar="EXLEDGER_ROLE",
    help="Role of the current staff member",
)
@click.option(
    "--permission",
    "permissions",
    multiple=True,
    help="Extra permission granted to the current staff member (repeatable)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="EXLEDGER_LOG_LEVEL",
    help="Logging verbosity (messages go to stderr)",
)
@click.pass_context
def cli(ctx, db_path: str | None, staff: str, role: str, permissions: tuple[str, ...], log_level: str):
    """Exledger - bookkeeping for an NPR/INR currency exchange shop.

    Record exchanges, expenses and customer credit, count the till at
    opening and closing, and reconcile each day's expected cash against
    what was actually counted.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["actor"] = Actor(id=staff, role=Role(role), permissions=frozenset(permissions))
        ctx.call_on_close(db.disconnect)


# Register all commands
customer.register_commands(cli)
bank.register_commands(cli)
exchange.register_commands(cli)
transaction.register_commands(cli)
credit.register_commands(cli)
expense.register_commands(cli)
cash.register_commands(cli)
settle.register_commands(cli)
settings.register_commands(cli)
ledger.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
