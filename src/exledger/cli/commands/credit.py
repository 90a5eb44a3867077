"""Customer credit commands."""

import click
from exledger.cli.error_handling import handle_domain_error
from exledger.cli.input_parsing import parse_amount_or_exit, resolve_customer_or_exit
from exledger.domain.credit import CreditService, credit_limit_status
from exledger.domain.customer import CustomerService
from exledger.domain.entities import CreditTransactionType, Currency, PaymentMethod
from exledger.domain.errors import DomainError


@click.group()
def credit_group():
    """Track money customers owe the shop."""
    pass


@credit_group.command("pay")
@click.argument("customer", metavar="CUSTOMER")
@click.argument("amount")
@click.option(
    "--currency",
    type=click.Choice([c.value for c in Currency], case_sensitive=False),
    default=Currency.NPR.value,
    show_default=True,
)
@click.option("--online", is_flag=True, help="Payment was received online")
@click.option("--notes", help="Notes")
@click.pass_context
def pay(ctx, customer: str, amount: str, currency: str, online: bool, notes: str | None):
    """Record a customer paying down their credit.

    CUSTOMER can be a customer name or ID. A payment larger than the
    outstanding balance is reduced to the balance.

    Examples:
        exledger credit pay "Ram" 500
        exledger credit pay 2 1000 --currency INR --online
    """
    db = ctx.obj["db"]
    customer_service = CustomerService(db)
    credit_service = CreditService(db)

    customer_id = resolve_customer_or_exit(ctx, customer_service, customer)
    requested = parse_amount_or_exit(ctx, amount)
    currency_enum = Currency(currency.upper())

    try:
        result = credit_service.record_payment(
            ctx.obj["actor"],
            customer_id=customer_id,
            amount=requested,
            currency=currency_enum,
            payment_method=PaymentMethod.ONLINE if online else PaymentMethod.CASH,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if result.was_clamped:
        click.echo(
            f"Payment reduced from {result.requested:,.2f} to the outstanding "
            f"{result.applied:,.2f} {currency_enum.value}"
        )
    click.echo(
        f"Recorded payment of {result.applied:,.2f} {currency_enum.value}. "
        f"Remaining balance: {result.new_balance:,.2f} {currency_enum.value}"
    )


@credit_group.command("history")
@click.argument("customer", metavar="CUSTOMER")
@click.pass_context
def history(ctx, customer: str):
    """Show a customer's credit movements and current balance."""
    db = ctx.obj["db"]
    customer_service = CustomerService(db)
    credit_service = CreditService(db)

    customer_id = resolve_customer_or_exit(ctx, customer_service, customer)
    cust = customer_service.require_customer(customer_id)
    records = credit_service.history(customer_id)

    click.echo(f"\nCredit history for '{cust.name}':")
    click.echo("-" * 80)
    if not records:
        click.echo("No credit movements.")
    for rec in records:
        sign = "+" if rec.transaction_type is CreditTransactionType.CREDIT_GIVEN else "-"
        reference = f" (exchange {rec.reference_transaction_id})" if rec.reference_transaction_id else ""
        click.echo(
            f"{rec.created_at.strftime('%Y-%m-%d %H:%M'):<17} {rec.transaction_type.value:<17} "
            f"{sign}{rec.amount:>12,.2f} {rec.currency.value} {rec.payment_method.value:<7}{reference}"
        )
    click.echo("-" * 80)
    status = credit_limit_status(cust.credit_balance_npr, cust.credit_limit)
    click.echo(
        f"Balance: NPR {cust.credit_balance_npr:,.2f} | INR {cust.credit_balance_inr:,.2f} | "
        f"Limit status: {status.value}"
    )


def register_commands(cli):
    """Register credit commands with main CLI."""
    cli.add_command(credit_group, name="credit")
