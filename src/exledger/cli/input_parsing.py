"""CLI helpers that parse user input or exit with a CLI error.

These keep error messaging and exit behavior consistent across commands.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import click

from exledger.cli.error_handling import handle_domain_error
from exledger.domain.bank_account import BankAccountService
from exledger.domain.customer import CustomerService
from exledger.domain.errors import DomainError
from exledger.utils.amount_parser import parse_amount
from exledger.utils.date_parser import parse_date, parse_month
from exledger.utils.denomination_parser import parse_denominations


def resolve_date_or_exit(ctx: click.Context, date_str: str | None) -> date:
    """Parse a --date option, defaulting to today."""
    if date_str is None:
        return date.today()
    try:
        return parse_date(date_str)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)


def resolve_month_or_exit(ctx: click.Context, month_str: str | None) -> date:
    """Parse a --month option into its first day, defaulting to this month."""
    if month_str is None:
        return date.today().replace(day=1)
    try:
        return parse_month(month_str)
    except ValueError as e:
        click.echo(f"Error: Invalid month: {e}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, amount_str: str, label: str = "amount") -> Decimal:
    try:
        return parse_amount(amount_str)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_counts_or_exit(ctx: click.Context, counts_str: str | None, label: str) -> dict[str, int]:
    try:
        return parse_denominations(counts_str or "")
    except ValueError as e:
        click.echo(f"Error: Invalid {label} counts: {e}", err=True)
        ctx.exit(1)


def resolve_customer_or_exit(
    ctx: click.Context, customer_service: CustomerService, customer: str | int
) -> int:
    """Resolve customer name or ID, or exit with a CLI error."""
    try:
        return customer_service.resolve(customer)
    except DomainError as e:
        handle_domain_error(ctx, e)


def resolve_bank_or_exit(
    ctx: click.Context, bank_service: BankAccountService, bank_account: str | int
) -> int:
    """Resolve bank account name or ID, or exit with a CLI error."""
    try:
        return bank_service.resolve(bank_account)
    except DomainError as e:
        handle_domain_error(ctx, e)
