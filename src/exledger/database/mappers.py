"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from decimal import Decimal
from typing import Optional

from exledger.domain import entities as domain
from exledger.database.models import (
    Customer as ORMCustomer,
    BankAccount as ORMBankAccount,
    ExchangeTransaction as ORMExchangeTransaction,
    CreditTransaction as ORMCreditTransaction,
    Expense as ORMExpense,
    CashTrackerRecord as ORMCashTrackerRecord,
    StaffSettlement as ORMStaffSettlement,
    SystemSettings as ORMSystemSettings,
)


def _decimal(value) -> Decimal:
    return Decimal(value) if value is not None else Decimal("0")


def _optional_decimal(value) -> Optional[Decimal]:
    return Decimal(value) if value is not None else None


def customer_to_domain(orm_customer: ORMCustomer) -> domain.Customer:
    """Convert SQLAlchemy Customer model to domain Customer entity."""
    return domain.Customer(
        id=orm_customer.id,
        name=orm_customer.name,
        phone=orm_customer.phone,
        credit_limit=_decimal(orm_customer.credit_limit),
        credit_balance_npr=_decimal(orm_customer.credit_balance_npr),
        credit_balance_inr=_decimal(orm_customer.credit_balance_inr),
        created_at=orm_customer.created_at,
    )


def bank_account_to_domain(orm_account: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        name=orm_account.name,
        account_number=orm_account.account_number,
        created_at=orm_account.created_at,
    )


def exchange_transaction_to_domain(orm_txn: ORMExchangeTransaction) -> domain.ExchangeTransaction:
    """Convert SQLAlchemy ExchangeTransaction model to domain entity."""
    return domain.ExchangeTransaction(
        id=orm_txn.id,
        staff_id=orm_txn.staff_id,
        transaction_type=domain.TransactionType(orm_txn.transaction_type),
        from_currency=domain.Currency(orm_txn.from_currency),
        to_currency=domain.Currency(orm_txn.to_currency),
        from_amount=_decimal(orm_txn.from_amount),
        to_amount=_decimal(orm_txn.to_amount),
        exchange_rate=_decimal(orm_txn.exchange_rate),
        payment_method=domain.PaymentMethod(orm_txn.payment_method),
        is_credit=bool(orm_txn.is_credit),
        is_personal_account=bool(orm_txn.is_personal_account),
        customer_id=orm_txn.customer_id,
        bank_account_id=orm_txn.bank_account_id,
        notes=orm_txn.notes,
        created_at=orm_txn.created_at,
        updated_at=orm_txn.updated_at,
    )


def credit_transaction_to_domain(orm_credit: ORMCreditTransaction) -> domain.CreditTransaction:
    """Convert SQLAlchemy CreditTransaction model to domain entity."""
    return domain.CreditTransaction(
        id=orm_credit.id,
        customer_id=orm_credit.customer_id,
        staff_id=orm_credit.staff_id,
        amount=_decimal(orm_credit.amount),
        currency=domain.Currency(orm_credit.currency),
        transaction_type=domain.CreditTransactionType(orm_credit.transaction_type),
        payment_method=domain.PaymentMethod(orm_credit.payment_method),
        reference_transaction_id=orm_credit.reference_transaction_id,
        notes=orm_credit.notes,
        created_at=orm_credit.created_at,
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity."""
    return domain.Expense(
        id=orm_expense.id,
        staff_id=orm_expense.staff_id,
        description=orm_expense.description,
        amount=_decimal(orm_expense.amount),
        currency=domain.Currency(orm_expense.currency),
        category=domain.ExpenseCategory(orm_expense.category),
        expense_date=orm_expense.expense_date,
        receipt_ref=orm_expense.receipt_ref,
        notes=orm_expense.notes,
        created_at=orm_expense.created_at,
    )


def cash_tracker_record_to_domain(orm_record: ORMCashTrackerRecord) -> domain.CashTrackerRecord:
    """Convert SQLAlchemy CashTrackerRecord model to domain entity."""
    return domain.CashTrackerRecord(
        id=orm_record.id,
        staff_id=orm_record.staff_id,
        date=orm_record.date,
        opening_npr=_decimal(orm_record.opening_npr),
        opening_inr=_decimal(orm_record.opening_inr),
        closing_npr=_optional_decimal(orm_record.closing_npr),
        closing_inr=_optional_decimal(orm_record.closing_inr),
        is_closed=bool(orm_record.is_closed),
        closed_at=orm_record.closed_at,
        notes=orm_record.notes,
        created_at=orm_record.created_at,
    )


def staff_settlement_to_domain(orm_settlement: ORMStaffSettlement) -> domain.StaffSettlement:
    """Convert SQLAlchemy StaffSettlement model to domain entity."""
    return domain.StaffSettlement(
        id=orm_settlement.id,
        staff_id=orm_settlement.staff_id,
        settled_by=orm_settlement.settled_by,
        date=orm_settlement.date,
        npr_amount=_decimal(orm_settlement.npr_amount),
        inr_amount=_decimal(orm_settlement.inr_amount),
        notes=orm_settlement.notes,
        created_at=orm_settlement.created_at,
    )


def system_settings_to_domain(orm_settings: Optional[ORMSystemSettings]) -> domain.SystemSettings:
    """Convert the settings row; a missing row means defaults."""
    if orm_settings is None:
        return domain.SystemSettings()
    return domain.SystemSettings(
        day_end_hour=orm_settings.day_end_hour,
        day_end_minute=orm_settings.day_end_minute,
    )
