"""Expense commands."""

import click
from exledger.cli.error_handling import handle_domain_error
from exledger.cli.input_parsing import parse_amount_or_exit, resolve_date_or_exit
from exledger.domain.entities import Currency, ExpenseCategory
from exledger.domain.errors import DomainError
from exledger.domain.expense import ExpenseService, aggregate_expenses, expenses_by_category


@click.group()
def expense_group():
    """Record expenses (Nasta) taken out of the till."""
    pass


@expense_group.command("add")
@click.argument("description")
@click.argument("amount")
@click.option(
    "--currency",
    type=click.Choice([c.value for c in Currency], case_sensitive=False),
    default=Currency.NPR.value,
    show_default=True,
)
@click.option(
    "--category",
    type=click.Choice([c.value for c in ExpenseCategory]),
    default=ExpenseCategory.GENERAL.value,
    show_default=True,
)
@click.option("--date", help="Date the expense counts against (default today)")
@click.option("--receipt", help="Receipt reference")
@click.option("--notes", help="Notes")
@click.pass_context
def add_expense(
    ctx,
    description: str,
    amount: str,
    currency: str,
    category: str,
    date: str | None,
    receipt: str | None,
    notes: str | None,
):
    """Record an expense.

    Examples:
        exledger expense add "Tea and snacks" 200
        exledger expense add "eSewa fee" 15 --category esewa --date yesterday
    """
    db = ctx.obj["db"]
    service = ExpenseService(db)
    expense_amount = parse_amount_or_exit(ctx, amount)
    expense_date = resolve_date_or_exit(ctx, date)

    try:
        expense_id = service.record_expense(
            ctx.obj["actor"],
            description=description,
            amount=expense_amount,
            currency=Currency(currency.upper()),
            category=ExpenseCategory(category),
            expense_date=expense_date,
            receipt_ref=receipt,
            notes=notes,
        )
        click.echo(
            f"Recorded expense {expense_id}: {expense_amount:,.2f} {currency.upper()} "
            f"({category}) on {expense_date.isoformat()}"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@expense_group.command("list")
@click.option("--date", help="Date to list (default today)")
@click.pass_context
def list_expenses(ctx, date: str | None):
    """List a day's expenses with per-category totals."""
    db = ctx.obj["db"]
    service = ExpenseService(db)
    expense_date = resolve_date_or_exit(ctx, date)

    expenses = service.list_expenses(expense_date=expense_date)
    if not expenses:
        click.echo(f"No expenses found for {expense_date.isoformat()}.")
        return

    click.echo(f"\nExpenses on {expense_date.isoformat()}:")
    click.echo("-" * 80)
    for exp in expenses:
        click.echo(
            f"{exp.id:<5} {exp.description[:30]:<30} {exp.amount:>12,.2f} {exp.currency.value} "
            f"{exp.category.value:<10} {exp.staff_id}"
        )
    click.echo("-" * 80)

    breakdown = expenses_by_category(expenses)
    totals = aggregate_expenses(expenses)
    for currency in Currency:
        if not breakdown[currency]:
            continue
        parts = ", ".join(
            f"{cat.value}: {total:,.2f}" for cat, total in sorted(breakdown[currency].items())
        )
        click.echo(f"Total {currency.value}: {totals[currency]:,.2f} ({parts})")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
