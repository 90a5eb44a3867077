"""SQLAlchemy models for exledger database."""

from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Enum,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from exledger.domain.entities import (
    Currency,
    TransactionType,
    PaymentMethod,
    CreditTransactionType,
    ExpenseCategory,
)

Base = declarative_base()

# Timestamps are naive shop-local time; business days are cut on local clocks.
_now = datetime.now


def _enum(enum_cls, name: str) -> Enum:
    return Enum(enum_cls, name=name, values_callable=lambda members: [m.value for m in members])


class Customer(Base):
    """Customer model."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    phone = Column(String, nullable=True)
    credit_limit = Column(Numeric(14, 2), default=0, nullable=False)
    credit_balance_npr = Column(Numeric(14, 2), default=0, nullable=False)
    credit_balance_inr = Column(Numeric(14, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    credit_transactions = relationship("CreditTransaction", back_populates="customer")


class BankAccount(Base):
    """Shop bank/wallet account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    account_number = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class ExchangeTransaction(Base):
    """Buy/sell exchange model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    staff_id = Column(String, nullable=False)
    transaction_type = Column(_enum(TransactionType, "transaction_type"), nullable=False)
    from_currency = Column(_enum(Currency, "currency_type"), nullable=False)
    to_currency = Column(_enum(Currency, "currency_type"), nullable=False)
    from_amount = Column(Numeric(14, 2), nullable=False)
    to_amount = Column(Numeric(14, 2), nullable=False)
    exchange_rate = Column(Numeric(14, 6), nullable=False)
    payment_method = Column(_enum(PaymentMethod, "payment_method"), nullable=False)
    is_credit = Column(Boolean, default=False, nullable=False)
    is_personal_account = Column(Boolean, default=False, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=True)


class CreditTransaction(Base):
    """Customer credit movement model."""

    __tablename__ = "credit_transactions"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    staff_id = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(_enum(Currency, "currency_type"), nullable=False, default=Currency.NPR)
    transaction_type = Column(
        _enum(CreditTransactionType, "credit_transaction_type"), nullable=False
    )
    payment_method = Column(_enum(PaymentMethod, "payment_method"), nullable=False)
    reference_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False, index=True)

    # Relationships
    customer = relationship("Customer", back_populates="credit_transactions")


class Expense(Base):
    """Expense/deduction model."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    staff_id = Column(String, nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(_enum(Currency, "currency_type"), nullable=False)
    category = Column(_enum(ExpenseCategory, "expense_category"), nullable=False)
    expense_date = Column(Date, nullable=False, index=True)
    receipt_ref = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class CashTrackerRecord(Base):
    """Per staff-day opening/closing cash model."""

    __tablename__ = "staff_cash_tracker"

    id = Column(Integer, primary_key=True)
    staff_id = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    opening_npr = Column(Numeric(14, 2), default=0, nullable=False)
    opening_inr = Column(Numeric(14, 2), default=0, nullable=False)
    closing_npr = Column(Numeric(14, 2), nullable=True)
    closing_inr = Column(Numeric(14, 2), nullable=True)
    is_closed = Column(Boolean, default=False, nullable=False)
    closed_at = Column(DateTime, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class StaffSettlement(Base):
    """Personal-wallet settlement model."""

    __tablename__ = "staff_settlements"

    id = Column(Integer, primary_key=True)
    staff_id = Column(String, nullable=False)
    settled_by = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    npr_amount = Column(Numeric(14, 2), default=0, nullable=False)
    inr_amount = Column(Numeric(14, 2), default=0, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class SystemSettings(Base):
    """Single-row shop settings model."""

    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True)
    day_end_hour = Column(Integer, default=0, nullable=False)
    day_end_minute = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


def create_db_engine(database_url: str) -> Engine:
    """Create an engine and make sure all tables exist."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    return sessionmaker(bind=engine)
