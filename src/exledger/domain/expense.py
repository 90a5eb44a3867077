"""Expense (deduction) domain service and daily aggregation."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from exledger.database.base import Database
from exledger.domain.access import require_active
from exledger.domain.entities import Actor, Currency, Expense, ExpenseCategory
from exledger.domain.errors import ValidationError
from exledger.domain.validation import positive_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def aggregate_expenses(
    expenses: Iterable[Expense], target_date: Optional[date] = None
) -> dict[Currency, Decimal]:
    """Sum expenses per currency, optionally only those dated ``target_date``.

    Category plays no part in reconciliation.
    """
    totals = {currency: ZERO for currency in Currency}
    for expense in expenses:
        if target_date is not None and expense.expense_date != target_date:
            continue
        totals[expense.currency] += expense.amount
    return totals


def expenses_by_category(
    expenses: Iterable[Expense],
) -> dict[Currency, dict[ExpenseCategory, Decimal]]:
    """Break expense totals down by currency and category for reports."""
    breakdown: dict[Currency, dict[ExpenseCategory, Decimal]] = {
        currency: defaultdict(lambda: ZERO) for currency in Currency
    }
    for expense in expenses:
        breakdown[expense.currency][expense.category] += expense.amount
    return {currency: dict(by_category) for currency, by_category in breakdown.items()}


class ExpenseService:
    """Service for recording and listing expenses."""

    def __init__(self, db: Database):
        """Initialize expense service.

        Args:
            db: Database instance
        """
        self.db = db

    def record_expense(
        self,
        actor: Actor,
        description: str,
        amount: Decimal,
        currency: Currency = Currency.NPR,
        category: ExpenseCategory = ExpenseCategory.GENERAL,
        expense_date: Optional[date] = None,
        receipt_ref: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record an expense.

        Args:
            actor: Staff member recording the expense
            description: What the money was spent on
            amount: Positive amount
            currency: Currency of the amount
            category: Reporting category
            expense_date: Business date the expense counts against (defaults to today)
            receipt_ref: Optional receipt attachment reference
            notes: Optional notes

        Returns:
            Expense ID

        Raises:
            ValidationError: If description is empty or amount is not positive
        """
        require_active(actor, "record expenses")
        description = description.strip()
        if not description:
            raise ValidationError("Expense description cannot be empty")
        amount = positive_amount(amount)
        if expense_date is None:
            expense_date = date.today()

        expense_id = self.db.create_expense(
            staff_id=actor.id,
            description=description,
            amount=amount,
            currency=currency,
            category=category,
            expense_date=expense_date,
            receipt_ref=receipt_ref,
            notes=notes,
        )
        logger.info(
            "Recorded expense %s: %s %s (%s) on %s",
            expense_id, amount, currency.value, category.value, expense_date.isoformat(),
        )
        return expense_id

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        return self.db.get_expense(expense_id)

    def list_expenses(self, expense_date: Optional[date] = None) -> list[Expense]:
        """List expenses, optionally for a single date."""
        return self.db.list_expenses(expense_date=expense_date)

    def daily_totals(self, expense_date: date) -> dict[Currency, Decimal]:
        """Total expenses per currency for a date."""
        return aggregate_expenses(self.db.list_expenses(expense_date=expense_date), expense_date)
