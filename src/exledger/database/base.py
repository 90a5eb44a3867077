"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from exledger.domain.entities import (
    BankAccount,
    CashTrackerRecord,
    CreditTransaction,
    CreditTransactionType,
    Currency,
    Customer,
    ExchangeTransaction,
    Expense,
    ExpenseCategory,
    PaymentMethod,
    StaffSettlement,
    SystemSettings,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for exledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction boundaries
    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Group several writes into one atomic commit.

        Writes issued inside the block become visible together when it exits
        normally; any exception rolls all of them back. Blocks may nest, in
        which case only the outermost one commits.
        """
        pass

    @abstractmethod
    def read_snapshot(self) -> AbstractContextManager[None]:
        """Run a group of reads against one consistent view of the data."""
        pass

    # Customer operations
    @abstractmethod
    def create_customer(
        self, name: str, phone: Optional[str] = None, credit_limit: Decimal = Decimal("0")
    ) -> int:
        """Create a customer. Returns customer ID."""
        pass

    @abstractmethod
    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        pass

    @abstractmethod
    def get_customer_by_name(self, name: str) -> Optional[Customer]:
        """Get customer by exact name."""
        pass

    @abstractmethod
    def list_customers(self) -> list[Customer]:
        """List all customers ordered by name."""
        pass

    @abstractmethod
    def update_customer_credit_balance(
        self, customer_id: int, currency: Currency, balance: Decimal
    ) -> None:
        """Set a customer's outstanding balance in one currency."""
        pass

    # Bank account operations
    @abstractmethod
    def create_bank_account(self, name: str, account_number: Optional[str] = None) -> int:
        """Create a bank account. Returns bank account ID."""
        pass

    @abstractmethod
    def get_bank_account(self, bank_account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def list_bank_accounts(self) -> list[BankAccount]:
        """List all bank accounts."""
        pass

    # Exchange transaction operations
    @abstractmethod
    def create_exchange_transaction(
        self,
        staff_id: str,
        transaction_type: TransactionType,
        from_currency: Currency,
        to_currency: Currency,
        from_amount: Decimal,
        to_amount: Decimal,
        exchange_rate: Decimal,
        payment_method: PaymentMethod,
        is_credit: bool = False,
        is_personal_account: bool = False,
        customer_id: Optional[int] = None,
        bank_account_id: Optional[int] = None,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """Create an exchange transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_exchange_transaction(self, transaction_id: int) -> Optional[ExchangeTransaction]:
        """Get exchange transaction by ID."""
        pass

    @abstractmethod
    def replace_exchange_transaction(
        self,
        transaction_id: int,
        transaction_type: TransactionType,
        from_currency: Currency,
        to_currency: Currency,
        from_amount: Decimal,
        to_amount: Decimal,
        exchange_rate: Decimal,
        payment_method: PaymentMethod,
        is_personal_account: bool,
        customer_id: Optional[int],
        bank_account_id: Optional[int],
        notes: Optional[str],
    ) -> None:
        """Replace every editable field of an exchange transaction."""
        pass

    @abstractmethod
    def delete_exchange_transaction(self, transaction_id: int) -> None:
        """Delete an exchange transaction."""
        pass

    @abstractmethod
    def list_exchange_transactions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        staff_id: Optional[str] = None,
    ) -> list[ExchangeTransaction]:
        """List exchanges with created_at in [start, end), oldest first."""
        pass

    # Credit transaction operations
    @abstractmethod
    def create_credit_transaction(
        self,
        customer_id: int,
        staff_id: str,
        amount: Decimal,
        currency: Currency,
        transaction_type: CreditTransactionType,
        payment_method: PaymentMethod,
        reference_transaction_id: Optional[int] = None,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """Create a credit transaction. Returns credit transaction ID."""
        pass

    @abstractmethod
    def get_credit_transaction_for_exchange(
        self, transaction_id: int
    ) -> Optional[CreditTransaction]:
        """Get the credit record created by a credit-backed exchange."""
        pass

    @abstractmethod
    def update_credit_transaction_amount(
        self, credit_transaction_id: int, amount: Decimal, currency: Currency
    ) -> None:
        """Update the amount and currency of a credit transaction."""
        pass

    @abstractmethod
    def delete_credit_transaction(self, credit_transaction_id: int) -> None:
        """Delete a credit transaction."""
        pass

    @abstractmethod
    def list_credit_transactions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        customer_id: Optional[int] = None,
    ) -> list[CreditTransaction]:
        """List credit transactions with created_at in [start, end), oldest first."""
        pass

    # Expense operations
    @abstractmethod
    def create_expense(
        self,
        staff_id: str,
        description: str,
        amount: Decimal,
        currency: Currency,
        category: ExpenseCategory,
        expense_date: date,
        receipt_ref: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create an expense. Returns expense ID."""
        pass

    @abstractmethod
    def get_expense(self, expense_id: int) -> Optional[Expense]:
        """Get expense by ID."""
        pass

    @abstractmethod
    def list_expenses(
        self,
        expense_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Expense]:
        """List expenses dated ``expense_date``, or within [start_date, end_date] inclusive."""
        pass

    # Cash tracker operations
    @abstractmethod
    def create_cash_tracker_record(
        self,
        staff_id: str,
        date: date,
        opening_npr: Decimal,
        opening_inr: Decimal,
        notes: Optional[str] = None,
    ) -> int:
        """Create a cash tracker record. Returns record ID."""
        pass

    @abstractmethod
    def get_cash_tracker_record_by_id(self, record_id: int) -> Optional[CashTrackerRecord]:
        """Get cash tracker record by ID."""
        pass

    @abstractmethod
    def list_cash_tracker_records(
        self, date: date, staff_id: Optional[str] = None
    ) -> list[CashTrackerRecord]:
        """List cash tracker records for a date, earliest created first."""
        pass

    @abstractmethod
    def get_previous_closed_record(
        self, before: date, staff_id: Optional[str] = None
    ) -> Optional[CashTrackerRecord]:
        """Get the most recent closed record dated before ``before``."""
        pass

    @abstractmethod
    def update_cash_tracker_record(
        self,
        record_id: int,
        opening_npr: Optional[Decimal] = None,
        opening_inr: Optional[Decimal] = None,
        closing_npr: Optional[Decimal] = None,
        closing_inr: Optional[Decimal] = None,
        is_closed: Optional[bool] = None,
        closed_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update the provided fields of a cash tracker record."""
        pass

    @abstractmethod
    def delete_cash_tracker_record(self, record_id: int) -> None:
        """Delete a cash tracker record."""
        pass

    # Staff settlement operations
    @abstractmethod
    def create_staff_settlement(
        self,
        staff_id: str,
        settled_by: str,
        date: date,
        npr_amount: Decimal,
        inr_amount: Decimal,
        notes: Optional[str] = None,
    ) -> int:
        """Record a settlement. Returns settlement ID."""
        pass

    @abstractmethod
    def list_staff_settlements(
        self, date: date, staff_id: Optional[str] = None
    ) -> list[StaffSettlement]:
        """List settlements recorded for a business date."""
        pass

    # Settings operations
    @abstractmethod
    def get_system_settings(self) -> SystemSettings:
        """Get shop settings (defaults when never saved)."""
        pass

    @abstractmethod
    def update_system_settings(self, day_end_hour: int, day_end_minute: int) -> None:
        """Save shop settings."""
        pass
