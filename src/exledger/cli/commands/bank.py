"""Bank account commands."""

import click
from exledger.cli.error_handling import handle_domain_error
from exledger.domain.bank_account import BankAccountService
from exledger.domain.errors import DomainError


@click.group()
def bank_group():
    """Manage shop bank and wallet accounts."""
    pass


@bank_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--number", "account_number", help="Account or wallet number")
@click.pass_context
def create_bank_account(ctx, name: str, account_number: str | None):
    """Create a bank account that can receive online payments.

    Examples:
        exledger bank create "eSewa Shop"
        exledger bank create "Nabil" --number 0123456789
    """
    db = ctx.obj["db"]
    service = BankAccountService(db)

    try:
        bank_account_id = service.create_bank_account(name=name, account_number=account_number)
        click.echo(f"Created bank account '{name.strip()}' (ID: {bank_account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@bank_group.command("list")
@click.pass_context
def list_bank_accounts(ctx):
    """List all bank accounts."""
    db = ctx.obj["db"]
    service = BankAccountService(db)

    accounts = service.list_bank_accounts()
    if not accounts:
        click.echo("No bank accounts found.")
        return

    click.echo("\nBank accounts:")
    click.echo("-" * 60)
    for acc in accounts:
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | Number: {acc.account_number or '-'}")


def register_commands(cli):
    """Register bank account commands with main CLI."""
    cli.add_command(bank_group, name="bank")
