"""Bank account domain service."""

import logging
from typing import Optional

from exledger.database.base import Database
from exledger.domain.entities import BankAccount as BankAccountEntity
from exledger.domain.errors import ConflictError, NotFoundError, ValidationError, bank_account_not_found

logger = logging.getLogger(__name__)


class BankAccountService:
    """Service for managing the shop's bank and wallet accounts."""

    def __init__(self, db: Database):
        """Initialize bank account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_bank_account(self, name: str, account_number: Optional[str] = None) -> int:
        """Create a new bank account.

        Args:
            name: Account name
            account_number: Optional account or wallet number

        Returns:
            Bank account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If account name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Bank account name cannot be empty")
        for account in self.db.list_bank_accounts():
            if account.name == name:
                raise ConflictError(f"Bank account with name '{name}' already exists")

        bank_account_id = self.db.create_bank_account(name=name, account_number=account_number)
        logger.info("Created bank account %s (%s)", bank_account_id, name)
        return bank_account_id

    def get_bank_account(self, bank_account_id: int) -> Optional[BankAccountEntity]:
        return self.db.get_bank_account(bank_account_id)

    def list_bank_accounts(self) -> list[BankAccountEntity]:
        return self.db.list_bank_accounts()

    def resolve(self, bank_account: str | int) -> int:
        """Resolve bank account name or ID to bank account ID.

        Raises:
            NotFoundError: If bank account is not found
        """
        try:
            bank_account_id = int(bank_account)
        except (ValueError, TypeError):
            bank_account_id = None
        if bank_account_id is not None:
            if self.db.get_bank_account(bank_account_id) is None:
                raise NotFoundError(bank_account_not_found(bank_account_id))
            return bank_account_id

        for account in self.db.list_bank_accounts():
            if account.name == bank_account:
                return account.id
        raise NotFoundError(bank_account_not_found(bank_account))
