"""Domain model entities for exledger.

These are pure data classes representing business concepts, independent of
database schema. Services and the ledger engine only ever see these types;
the SQLAlchemy models stay behind the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

from exledger.domain.errors import CurrencyMismatchError


class Currency(str, Enum):
    """Currencies handled by the shop."""

    NPR = "NPR"
    INR = "INR"

    @property
    def counterpart(self) -> "Currency":
        """Return the other currency of the pair."""
        return Currency.INR if self is Currency.NPR else Currency.NPR


class TransactionType(str, Enum):
    """Direction of an exchange, from the shop's point of view."""

    BUY = "buy"
    SELL = "sell"


class PaymentMethod(str, Enum):
    CASH = "cash"
    ONLINE = "online"


class CreditTransactionType(str, Enum):
    CREDIT_GIVEN = "credit_given"
    PAYMENT_RECEIVED = "payment_received"


class ExpenseCategory(str, Enum):
    ESEWA = "esewa"
    BANK = "bank"
    REMITTANCE = "remittance"
    GENERAL = "general"


class Role(str, Enum):
    OWNER = "owner"
    MANAGER = "manager"
    STAFF = "staff"
    PENDING = "pending"


class CreditLimitStatus(str, Enum):
    """Customer credit utilisation relative to the credit limit."""

    OK = "ok"
    WARNING = "warning"
    EXCEEDED = "exceeded"


@dataclass(frozen=True)
class Money:
    """A decimal amount tagged with its currency.

    Arithmetic is only defined between amounts of the same currency.
    """

    amount: Decimal
    currency: Currency

    def _check(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot combine Money with {type(other).__name__}")
        if other.currency is not self.currency:
            raise CurrencyMismatchError(
                f"Cannot combine {self.currency.value} with {other.currency.value}"
            )

    def __add__(self, other: "Money") -> "Money":
        self._check(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check(other)
        return Money(self.amount - other.amount, self.currency)

    @classmethod
    def zero(cls, currency: Currency) -> "Money":
        return cls(Decimal("0"), currency)


@dataclass(frozen=True)
class Actor:
    """The staff member performing an operation."""

    id: str
    role: Role
    permissions: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Customer:
    """Customer domain entity with per-currency outstanding credit."""

    id: int
    name: str
    phone: Optional[str]
    credit_limit: Decimal
    credit_balance_npr: Decimal
    credit_balance_inr: Decimal
    created_at: datetime

    def credit_balance(self, currency: Currency) -> Decimal:
        """Return the outstanding credit balance in the given currency."""
        if currency is Currency.NPR:
            return self.credit_balance_npr
        return self.credit_balance_inr


@dataclass(frozen=True)
class BankAccount:
    """Shop bank or wallet account that receives online payments."""

    id: int
    name: str
    account_number: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class ExchangeTransaction:
    """One buy/sell exchange event.

    The customer hands over ``from_amount`` of ``from_currency`` and receives
    ``to_amount`` of ``to_currency``. ``to_amount`` normally equals
    ``from_amount * exchange_rate`` but may be adjusted by hand.
    """

    id: int
    staff_id: str
    transaction_type: TransactionType
    from_currency: Currency
    to_currency: Currency
    from_amount: Decimal
    to_amount: Decimal
    exchange_rate: Decimal
    payment_method: PaymentMethod
    is_credit: bool
    is_personal_account: bool
    customer_id: Optional[int]
    bank_account_id: Optional[int]
    notes: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CreditTransaction:
    """A change to a customer's outstanding credit balance."""

    id: int
    customer_id: int
    staff_id: str
    amount: Decimal
    currency: Currency
    transaction_type: CreditTransactionType
    payment_method: PaymentMethod
    reference_transaction_id: Optional[int]
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Expense:
    """A deduction from the day's cash position."""

    id: int
    staff_id: str
    description: str
    amount: Decimal
    currency: Currency
    category: ExpenseCategory
    expense_date: date
    receipt_ref: Optional[str]
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class CashTrackerRecord:
    """Opening and closing cash counts for one staff-day."""

    id: int
    staff_id: str
    date: date
    opening_npr: Decimal
    opening_inr: Decimal
    closing_npr: Optional[Decimal]
    closing_inr: Optional[Decimal]
    is_closed: bool
    closed_at: Optional[datetime]
    notes: Optional[str]
    created_at: datetime

    def opening(self, currency: Currency) -> Decimal:
        return self.opening_npr if currency is Currency.NPR else self.opening_inr

    def closing(self, currency: Currency) -> Optional[Decimal]:
        return self.closing_npr if currency is Currency.NPR else self.closing_inr


@dataclass(frozen=True)
class StaffSettlement:
    """Hand-over of personal-wallet receipts from a staff member to the shop."""

    id: int
    staff_id: str
    settled_by: str
    date: date
    npr_amount: Decimal
    inr_amount: Decimal
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class SystemSettings:
    """Shop-wide settings."""

    day_end_hour: int = 0
    day_end_minute: int = 0


@dataclass(frozen=True)
class LedgerRow:
    """A single named line of the printed ledger."""

    key: str
    label: str
    amount: Decimal


@dataclass(frozen=True)
class CurrencyLedger:
    """Reconciliation of one currency for one business day.

    ``expected`` is what should be in the till ("Hunu Parne"), ``actual`` the
    counted closing balance ("Cha") and ``difference`` their gap ("Farak").
    A positive difference means money is missing.
    """

    currency: Currency
    opening: Decimal
    received_via_exchange: Decimal
    cash_received: Decimal
    online_received: Decimal
    expenses: Decimal
    paid_out_via_exchange: Decimal
    credit_given: Decimal
    credit_received: Decimal
    staff_owes_personal: Decimal
    expected: Decimal
    actual: Decimal
    difference: Decimal

    def rows(self) -> tuple[LedgerRow, ...]:
        """Return the ten report rows in print order."""
        return (
            LedgerRow("opening", "Opening", self.opening),
            LedgerRow("received", "Received (exchange)", self.received_via_exchange),
            LedgerRow("take", "Cash In (Take)", self.cash_received),
            LedgerRow("esewa", "Online In (eSewa)", self.online_received),
            LedgerRow("nasta", "Expenses (Nasta)", self.expenses),
            LedgerRow("paid_out", "Paid Out (exchange)", self.paid_out_via_exchange),
            LedgerRow("credit_given", "Credit Given", self.credit_given),
            LedgerRow("credit_received", "Credit Received", self.credit_received),
            LedgerRow("expected", "Expected (Hunu Parne)", self.expected),
            LedgerRow("farak", "Difference (Farak)", self.difference),
        )


@dataclass(frozen=True)
class LedgerSnapshot:
    """Derived daily ledger for both currencies. Never persisted."""

    date: date
    window_start: datetime
    window_end: datetime
    has_cash_record: bool
    is_closed: bool
    npr: CurrencyLedger
    inr: CurrencyLedger

    def for_currency(self, currency: Currency) -> CurrencyLedger:
        return self.npr if currency is Currency.NPR else self.inr

    @property
    def difference_is_reliable(self) -> bool:
        """True only when the day was closed with a physical count.

        Before closing, ``actual`` defaults to zero and the difference is
        simply the negated expectation.
        """
        return self.is_closed

    def to_dict(self) -> dict:
        """Return a JSON-friendly representation (amounts as strings)."""

        def currency_dict(ledger: CurrencyLedger) -> dict:
            data = {row.key: str(row.amount) for row in ledger.rows()}
            data["actual"] = str(ledger.actual)
            data["staff_owes_personal"] = str(ledger.staff_owes_personal)
            return data

        return {
            "date": self.date.isoformat(),
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "has_cash_record": self.has_cash_record,
            "is_closed": self.is_closed,
            "NPR": currency_dict(self.npr),
            "INR": currency_dict(self.inr),
        }


@dataclass(frozen=True)
class CurrencyPeriodTotals:
    """Movements of one currency summed over a reporting period."""

    currency: Currency
    received_via_exchange: Decimal
    paid_out_via_exchange: Decimal
    expenses: Decimal
    credit_given: Decimal
    credit_received: Decimal

    @property
    def net_flow(self) -> Decimal:
        """Change in the till over the period, before any counting."""
        return (
            self.received_via_exchange
            + self.credit_received
            - self.paid_out_via_exchange
            - self.expenses
            - self.credit_given
        )


@dataclass(frozen=True)
class PeriodSummary:
    """Exchange, expense and credit totals for a range of business days."""

    start_date: date
    end_date: date
    window_start: datetime
    window_end: datetime
    transaction_count: int
    npr: CurrencyPeriodTotals
    inr: CurrencyPeriodTotals

    def for_currency(self, currency: Currency) -> CurrencyPeriodTotals:
        return self.npr if currency is Currency.NPR else self.inr

    def to_dict(self) -> dict:
        def totals_dict(totals: CurrencyPeriodTotals) -> dict:
            return {
                "received": str(totals.received_via_exchange),
                "paid_out": str(totals.paid_out_via_exchange),
                "expenses": str(totals.expenses),
                "credit_given": str(totals.credit_given),
                "credit_received": str(totals.credit_received),
                "net_flow": str(totals.net_flow),
            }

        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "transaction_count": self.transaction_count,
            "NPR": totals_dict(self.npr),
            "INR": totals_dict(self.inr),
        }
