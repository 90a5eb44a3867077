"""Shared pytest fixtures for exledger tests."""

import tempfile
import os
from datetime import date, datetime
from decimal import Decimal
import pytest

from exledger.database.factories import create_sqlite_database
from exledger.domain.bank_account import BankAccountService
from exledger.domain.cash_tracker import CashTrackerService
from exledger.domain.credit import CreditService
from exledger.domain.customer import CustomerService
from exledger.domain.entities import Actor, Role
from exledger.domain.exchange import ExchangeService
from exledger.domain.expense import ExpenseService
from exledger.domain.ledger import LedgerService
from exledger.domain.settings import SettingsService
from exledger.domain.settlement import SettlementService
from exledger.logging_config import reset_logging

BUSINESS_DAY = date(2024, 3, 15)


def at(hour: int, minute: int = 0, day: date = BUSINESS_DAY) -> datetime:
    """Naive shop-local timestamp on the test business day."""
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(autouse=True)
def _reset_logging():
    """CLI invocations install a handler on the exledger logger; undo it."""
    yield
    reset_logging()


@pytest.fixture
def owner():
    return Actor(id="owner", role=Role.OWNER)


@pytest.fixture
def manager():
    return Actor(id="manager", role=Role.MANAGER)


@pytest.fixture
def staff():
    return Actor(id="hari", role=Role.STAFF)


@pytest.fixture
def pending():
    return Actor(id="newbie", role=Role.PENDING)


@pytest.fixture
def customer_service(temp_db):
    """Create a CustomerService with a temporary database."""
    return CustomerService(temp_db)


@pytest.fixture
def bank_account_service(temp_db):
    """Create a BankAccountService with a temporary database."""
    return BankAccountService(temp_db)


@pytest.fixture
def exchange_service(temp_db):
    """Create an ExchangeService with a temporary database."""
    return ExchangeService(temp_db)


@pytest.fixture
def credit_service(temp_db):
    """Create a CreditService with a temporary database."""
    return CreditService(temp_db)


@pytest.fixture
def expense_service(temp_db):
    """Create an ExpenseService with a temporary database."""
    return ExpenseService(temp_db)


@pytest.fixture
def cash_tracker_service(temp_db):
    """Create a CashTrackerService with a temporary database."""
    return CashTrackerService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def settlement_service(temp_db):
    """Create a SettlementService with a temporary database."""
    return SettlementService(temp_db)


@pytest.fixture
def settings_service(temp_db):
    """Create a SettingsService with a temporary database."""
    return SettingsService(temp_db)


@pytest.fixture
def sample_customer(customer_service):
    """Customer with a 5000 NPR credit limit and nothing owed."""
    customer_id = customer_service.create_customer(name="Ram", credit_limit=Decimal("5000"))
    return customer_service.get_customer(customer_id)


@pytest.fixture
def sample_bank_account(bank_account_service):
    """Shop bank account for online payments."""
    bank_account_id = bank_account_service.create_bank_account(name="eSewa Shop")
    return bank_account_service.get_bank_account(bank_account_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
