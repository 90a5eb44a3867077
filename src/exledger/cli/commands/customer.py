"""Customer management commands."""

import click
from exledger.cli.error_handling import handle_domain_error
from exledger.cli.input_parsing import parse_amount_or_exit
from exledger.domain.credit import credit_limit_status
from exledger.domain.customer import CustomerService
from exledger.domain.errors import DomainError


@click.group()
def customer_group():
    """Manage customers."""
    pass


@customer_group.command("create")
@click.argument("name", metavar="CUSTOMER_NAME")
@click.option("--phone", help="Phone number")
@click.option("--credit-limit", default="0", help="NPR credit limit (0 means no limit)")
@click.pass_context
def create_customer(ctx, name: str, phone: str | None, credit_limit: str):
    """Create a new customer.

    Examples:
        exledger customer create "Ram Bahadur"
        exledger customer create "Sita" --phone 9800000000 --credit-limit 5000
    """
    db = ctx.obj["db"]
    service = CustomerService(db)
    limit = parse_amount_or_exit(ctx, credit_limit, "credit limit")

    try:
        customer_id = service.create_customer(name=name, phone=phone, credit_limit=limit)
        click.echo(f"Created customer '{name.strip()}' (ID: {customer_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@customer_group.command("list")
@click.option("--debtors", is_flag=True, help="Show only customers with outstanding credit")
@click.pass_context
def list_customers(ctx, debtors: bool):
    """List customers with their outstanding credit."""
    db = ctx.obj["db"]
    service = CustomerService(db)

    customers = service.list_debtors() if debtors else service.list_customers()
    if not customers:
        click.echo("No customers found.")
        return

    click.echo("\nCustomers:")
    click.echo("-" * 78)
    for c in customers:
        status = credit_limit_status(c.credit_balance_npr, c.credit_limit)
        limit = f"{c.credit_limit:,.2f}" if c.credit_limit > 0 else "none"
        click.echo(
            f"ID: {c.id:3d} | {c.name:20s} | NPR owed: {c.credit_balance_npr:>11,.2f} | "
            f"INR owed: {c.credit_balance_inr:>10,.2f} | Limit: {limit} ({status.value})"
        )


def register_commands(cli):
    """Register customer commands with main CLI."""
    cli.add_command(customer_group, name="customer")
