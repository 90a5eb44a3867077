"""Exchange recording commands."""

import click
from exledger.cli.error_handling import handle_domain_error
from exledger.cli.input_parsing import (
    parse_amount_or_exit,
    resolve_bank_or_exit,
    resolve_customer_or_exit,
)
from exledger.domain.bank_account import BankAccountService
from exledger.domain.customer import CustomerService
from exledger.domain.entities import Currency, PaymentMethod, TransactionType
from exledger.domain.errors import DomainError
from exledger.domain.exchange import ExchangeService

CURRENCY_CHOICE = click.Choice([c.value for c in Currency], case_sensitive=False)


def exchange_options(func):
    """Options shared by recording and editing an exchange."""
    options = [
        click.option("--from-amount", required=True, help="Amount the customer hands over"),
        click.option("--rate", required=True, help="Exchange rate applied to the from-amount"),
        click.option("--from-currency", type=CURRENCY_CHOICE, help="Currency the customer hands over"),
        click.option("--to-amount", help="Adjusted payout (defaults to from-amount x rate)"),
        click.option("--online", is_flag=True, help="Customer paid online instead of cash"),
        click.option("--bank", help="Bank account (name or ID) that received an online payment"),
        click.option("--personal", is_flag=True, help="Online payment went to the staff member's personal wallet"),
        click.option("--customer", help="Customer name or ID"),
        click.option("--notes", help="Notes"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_refs(ctx, customer: str | None, bank: str | None) -> tuple[int | None, int | None]:
    db = ctx.obj["db"]
    customer_id = None
    if customer is not None:
        customer_id = resolve_customer_or_exit(ctx, CustomerService(db), customer)
    bank_account_id = None
    if bank is not None:
        bank_account_id = resolve_bank_or_exit(ctx, BankAccountService(db), bank)
    return customer_id, bank_account_id


def _record(ctx, transaction_type: TransactionType, **kwargs) -> None:
    db = ctx.obj["db"]
    service = ExchangeService(db)
    customer_id, bank_account_id = _resolve_refs(ctx, kwargs["customer"], kwargs["bank"])
    from_amount = parse_amount_or_exit(ctx, kwargs["from_amount"], "from-amount")
    rate = parse_amount_or_exit(ctx, kwargs["rate"], "rate")
    to_amount = None
    if kwargs["to_amount"] is not None:
        to_amount = parse_amount_or_exit(ctx, kwargs["to_amount"], "to-amount")
    from_currency = Currency(kwargs["from_currency"].upper()) if kwargs["from_currency"] else None

    try:
        transaction_id = service.record_exchange(
            ctx.obj["actor"],
            transaction_type=transaction_type,
            from_amount=from_amount,
            exchange_rate=rate,
            from_currency=from_currency,
            to_amount=to_amount,
            payment_method=PaymentMethod.ONLINE if kwargs["online"] else PaymentMethod.CASH,
            is_personal_account=kwargs["personal"],
            is_credit=kwargs["credit"],
            customer_id=customer_id,
            bank_account_id=bank_account_id,
            notes=kwargs["notes"],
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    txn = service.get_transaction(transaction_id)
    click.echo(
        f"Recorded {transaction_type.value} {transaction_id}: "
        f"{txn.from_amount:,.2f} {txn.from_currency.value} -> "
        f"{txn.to_amount:,.2f} {txn.to_currency.value}"
        + (" (on credit)" if txn.is_credit else "")
    )
    if txn.is_credit:
        customer = CustomerService(db).get_customer(txn.customer_id)
        click.echo(
            f"Customer '{customer.name}' now owes "
            f"{customer.credit_balance(txn.from_currency):,.2f} {txn.from_currency.value}"
        )


@click.group()
def exchange_group():
    """Record currency exchanges."""
    pass


@exchange_group.command("buy")
@exchange_options
@click.option("--credit", is_flag=True, help="Customer takes the exchange on credit")
@click.pass_context
def buy(ctx, **kwargs):
    """Shop buys the customer's currency (customer hands over INR by default).

    Examples:
        exledger exchange buy --from-amount 625 --rate 1.6
        exledger exchange buy --from-amount 500 --rate 1.6 --online --bank "eSewa Shop"
    """
    _record(ctx, TransactionType.BUY, **kwargs)


@exchange_group.command("sell")
@exchange_options
@click.option("--credit", is_flag=True, help="Customer takes the exchange on credit")
@click.pass_context
def sell(ctx, **kwargs):
    """Shop sells currency (customer hands over NPR by default).

    Examples:
        exledger exchange sell --from-amount 1000 --rate 0.625
        exledger exchange sell --from-amount 2000 --rate 0.625 --credit --customer "Ram"
    """
    _record(ctx, TransactionType.SELL, **kwargs)


def register_commands(cli):
    """Register exchange commands with main CLI."""
    cli.add_command(exchange_group, name="exchange")
