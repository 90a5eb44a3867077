"""Tests for expense recording and aggregation."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from exledger.domain.entities import Currency, Expense, ExpenseCategory
from exledger.domain.errors import PermissionDeniedError, ValidationError
from exledger.domain.expense import aggregate_expenses, expenses_by_category

from conftest import BUSINESS_DAY


def make_expense(amount, currency=Currency.NPR, category=ExpenseCategory.GENERAL, expense_date=BUSINESS_DAY):
    return Expense(
        id=1,
        staff_id="hari",
        description="Tea",
        amount=Decimal(amount),
        currency=currency,
        category=category,
        expense_date=expense_date,
        receipt_ref=None,
        notes=None,
        created_at=datetime(2024, 3, 15, 9, 0),
    )


class TestAggregation:
    def test_totals_grouped_by_currency(self):
        totals = aggregate_expenses(
            [make_expense("200"), make_expense("50"), make_expense("30", currency=Currency.INR)]
        )
        assert totals == {Currency.NPR: Decimal("250"), Currency.INR: Decimal("30")}

    def test_only_target_date_counts(self):
        totals = aggregate_expenses(
            [make_expense("200"), make_expense("999", expense_date=date(2024, 3, 14))],
            BUSINESS_DAY,
        )
        assert totals[Currency.NPR] == Decimal("200")

    def test_category_breakdown(self):
        breakdown = expenses_by_category(
            [
                make_expense("15", category=ExpenseCategory.ESEWA),
                make_expense("200"),
                make_expense("5", category=ExpenseCategory.ESEWA),
            ]
        )
        assert breakdown[Currency.NPR] == {
            ExpenseCategory.ESEWA: Decimal("20"),
            ExpenseCategory.GENERAL: Decimal("200"),
        }
        assert breakdown[Currency.INR] == {}


class TestExpenseService:
    def test_record_and_list(self, expense_service, staff):
        expense_id = expense_service.record_expense(
            staff, "Tea and snacks", Decimal("200"), expense_date=BUSINESS_DAY
        )

        expense = expense_service.get_expense(expense_id)
        assert expense.description == "Tea and snacks"
        assert expense.amount == Decimal("200")
        assert expense.currency is Currency.NPR
        assert expense.category is ExpenseCategory.GENERAL
        assert expense.staff_id == staff.id
        assert [e.id for e in expense_service.list_expenses(BUSINESS_DAY)] == [expense_id]
        assert expense_service.list_expenses(date(2024, 3, 16)) == []

    def test_defaults_to_today(self, expense_service, staff):
        expense_id = expense_service.record_expense(staff, "Bus fare", Decimal("40"))
        assert expense_service.get_expense(expense_id).expense_date == date.today()

    def test_daily_totals(self, expense_service, staff):
        expense_service.record_expense(staff, "Tea", Decimal("200"), expense_date=BUSINESS_DAY)
        expense_service.record_expense(
            staff, "Fee", Decimal("12.50"), currency=Currency.INR,
            category=ExpenseCategory.BANK, expense_date=BUSINESS_DAY,
        )

        totals = expense_service.daily_totals(BUSINESS_DAY)
        assert totals[Currency.NPR] == Decimal("200")
        assert totals[Currency.INR] == Decimal("12.50")

    @pytest.mark.parametrize("amount", ["0", "-10", "10.005"])
    def test_invalid_amount_rejected(self, expense_service, staff, amount):
        with pytest.raises(ValidationError):
            expense_service.record_expense(staff, "Tea", Decimal(amount))

    def test_empty_description_rejected(self, expense_service, staff):
        with pytest.raises(ValidationError, match="description"):
            expense_service.record_expense(staff, "   ", Decimal("10"))

    def test_pending_actor_rejected(self, expense_service, pending):
        with pytest.raises(PermissionDeniedError):
            expense_service.record_expense(pending, "Tea", Decimal("10"))
