"""Exchange transaction management commands."""

import click
from exledger.cli.error_handling import handle_domain_error
from exledger.cli.input_parsing import (
    parse_amount_or_exit,
    resolve_bank_or_exit,
    resolve_customer_or_exit,
    resolve_date_or_exit,
)
from exledger.domain.bank_account import BankAccountService
from exledger.domain.customer import CustomerService
from exledger.domain.day_boundary import day_window
from exledger.domain.entities import Currency, PaymentMethod, TransactionType
from exledger.domain.errors import DomainError
from exledger.domain.exchange import ExchangeService


@click.group()
def transaction_group():
    """Manage recorded exchanges."""
    pass


@transaction_group.command("list")
@click.option("--date", help="Business date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--verbose", "-v", is_flag=True, help="Show notes, customer and bank account")
@click.pass_context
def list_transactions(ctx, date: str | None, verbose: bool):
    """List the exchanges recorded on a day (default today)."""
    db = ctx.obj["db"]
    service = ExchangeService(db)
    day = resolve_date_or_exit(ctx, date)

    start, end = day_window(day)
    transactions = service.list_transactions(start=start, end=end)
    if not transactions:
        click.echo(f"No transactions found for {day.isoformat()}.")
        return

    customers = {c.id: c.name for c in CustomerService(db).list_customers()}
    banks = {b.id: b.name for b in BankAccountService(db).list_bank_accounts()}

    click.echo(f"\nFound {len(transactions)} transaction(s) on {day.isoformat()}:")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<6} {'Time':<6} {'Type':<5} {'From':>16} {'To':>16} {'Rate':>10} "
        f"{'Method':<7} {'Flags':<16} {'Staff':<10}"
    )
    click.echo("-" * 100)
    for txn in transactions:
        flags = []
        if txn.is_credit:
            flags.append("credit")
        if txn.is_personal_account:
            flags.append("personal")
        click.echo(
            f"{txn.id:<6} {txn.created_at.strftime('%H:%M'):<6} {txn.transaction_type.value:<5} "
            f"{txn.from_amount:>12,.2f} {txn.from_currency.value} "
            f"{txn.to_amount:>12,.2f} {txn.to_currency.value} "
            f"{txn.exchange_rate:>10.4f} {txn.payment_method.value:<7} "
            f"{','.join(flags):<16} {txn.staff_id:<10}"
        )
        if verbose:
            if txn.customer_id is not None:
                click.echo(f"       Customer: {customers.get(txn.customer_id, 'Unknown')}")
            if txn.bank_account_id is not None:
                click.echo(f"       Bank: {banks.get(txn.bank_account_id, 'Unknown')}")
            if txn.notes:
                click.echo(f"       Notes: {txn.notes}")


@transaction_group.command("edit")
@click.argument("transaction_id", type=int)
@click.option("--type", "transaction_type", type=click.Choice([t.value for t in TransactionType]))
@click.option("--from-amount", help="Amount the customer hands over")
@click.option("--rate", help="Exchange rate")
@click.option("--from-currency", type=click.Choice([c.value for c in Currency], case_sensitive=False))
@click.option("--to-amount", help="Adjusted payout (recomputed from the rate if amount or rate change)")
@click.option("--online/--cash", default=None, help="Payment method")
@click.option("--bank", help="Bank account name or ID")
@click.option("--personal/--no-personal", default=None, help="Online payment went to a personal wallet")
@click.option("--customer", help="Customer name or ID")
@click.option("--notes", help="Notes")
@click.pass_context
def edit_transaction(
    ctx,
    transaction_id: int,
    transaction_type: str | None,
    from_amount: str | None,
    rate: str | None,
    from_currency: str | None,
    to_amount: str | None,
    online: bool | None,
    bank: str | None,
    personal: bool | None,
    customer: str | None,
    notes: str | None,
) -> None:
    """Edit an exchange. Owners and managers only.

    Fields not given keep their current value; the stored record is then
    replaced as a whole.

    Examples:
        exledger --role manager transaction edit 3 --from-amount 1200
        exledger --role owner transaction edit 3 --online --bank "eSewa Shop"
    """
    db = ctx.obj["db"]
    service = ExchangeService(db)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    new_from_amount = txn.from_amount
    if from_amount is not None:
        new_from_amount = parse_amount_or_exit(ctx, from_amount, "from-amount")
    new_rate = txn.exchange_rate
    if rate is not None:
        new_rate = parse_amount_or_exit(ctx, rate, "rate")
    if to_amount is not None:
        new_to_amount = parse_amount_or_exit(ctx, to_amount, "to-amount")
    elif from_amount is not None or rate is not None:
        new_to_amount = None
    else:
        new_to_amount = txn.to_amount

    customer_id = txn.customer_id
    if customer is not None:
        customer_id = resolve_customer_or_exit(ctx, CustomerService(db), customer)
    bank_account_id = txn.bank_account_id
    if bank is not None:
        bank_account_id = resolve_bank_or_exit(ctx, BankAccountService(db), bank)

    payment_method = txn.payment_method
    if online is not None:
        payment_method = PaymentMethod.ONLINE if online else PaymentMethod.CASH
    is_personal_account = personal
    if is_personal_account is None:
        is_personal_account = txn.is_personal_account and payment_method is PaymentMethod.ONLINE

    try:
        service.edit_transaction(
            ctx.obj["actor"],
            transaction_id=transaction_id,
            transaction_type=TransactionType(transaction_type) if transaction_type else txn.transaction_type,
            from_currency=Currency(from_currency.upper()) if from_currency else txn.from_currency,
            from_amount=new_from_amount,
            exchange_rate=new_rate,
            to_amount=new_to_amount,
            payment_method=payment_method,
            is_personal_account=is_personal_account,
            customer_id=customer_id,
            bank_account_id=bank_account_id,
            notes=txn.notes if notes is None else notes,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete an exchange. Owners only.

    Deleting a credit exchange also removes its credit record and reduces
    the customer's outstanding balance. It is refused once the customer
    has repaid more than the balance left without it.

    Examples:
        exledger --role owner transaction delete 3
    """
    db = ctx.obj["db"]
    service = ExchangeService(db)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete transaction {transaction_id} "
        f"({txn.from_amount:,.2f} {txn.from_currency.value} -> {txn.to_amount:,.2f} {txn.to_currency.value})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(ctx.obj["actor"], transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
