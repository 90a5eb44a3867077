"""Domain layer for exledger application."""

from exledger.domain.bank_account import BankAccountService
from exledger.domain.cash_tracker import CashTrackerService
from exledger.domain.credit import CreditService
from exledger.domain.customer import CustomerService
from exledger.domain.exchange import ExchangeService
from exledger.domain.expense import ExpenseService
from exledger.domain.ledger import LedgerRequestTracker, LedgerService, build_ledger
from exledger.domain.settings import SettingsService
from exledger.domain.settlement import SettlementService

__all__ = [
    "BankAccountService",
    "CashTrackerService",
    "CreditService",
    "CustomerService",
    "ExchangeService",
    "ExpenseService",
    "LedgerRequestTracker",
    "LedgerService",
    "SettingsService",
    "SettlementService",
    "build_ledger",
]
