"""Customer domain service."""

import logging
from decimal import Decimal
from typing import Optional

from exledger.database.base import Database
from exledger.domain.entities import Customer as CustomerEntity
from exledger.domain.errors import ConflictError, NotFoundError, ValidationError, customer_not_found

logger = logging.getLogger(__name__)


class CustomerService:
    """Service for managing customers."""

    def __init__(self, db: Database):
        """Initialize customer service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_customer(
        self, name: str, phone: Optional[str] = None, credit_limit: Decimal = Decimal("0")
    ) -> int:
        """Create a new customer.

        Args:
            name: Customer name
            phone: Optional phone number
            credit_limit: NPR credit limit; 0 means no limit

        Returns:
            Customer ID

        Raises:
            ValidationError: If the name is empty or the limit is negative
            ConflictError: If customer name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Customer name cannot be empty")
        if Decimal(credit_limit) < 0:
            raise ValidationError("Credit limit cannot be negative")

        if self.db.get_customer_by_name(name) is not None:
            raise ConflictError(f"Customer with name '{name}' already exists")

        customer_id = self.db.create_customer(name=name, phone=phone, credit_limit=Decimal(credit_limit))
        logger.info("Created customer %s (%s)", customer_id, name)
        return customer_id

    def get_customer(self, customer_id: int) -> Optional[CustomerEntity]:
        """Get customer by ID."""
        return self.db.get_customer(customer_id)

    def require_customer(self, customer_id: int) -> CustomerEntity:
        """Get customer by ID, raising NotFoundError when missing."""
        customer = self.db.get_customer(customer_id)
        if customer is None:
            raise NotFoundError(customer_not_found(customer_id))
        return customer

    def list_customers(self) -> list[CustomerEntity]:
        """List all customers."""
        return self.db.list_customers()

    def list_debtors(self) -> list[CustomerEntity]:
        """List customers with an outstanding balance in any currency.

        Sorted by NPR balance, largest first.
        """
        debtors = [
            c for c in self.db.list_customers()
            if c.credit_balance_npr > 0 or c.credit_balance_inr > 0
        ]
        return sorted(debtors, key=lambda c: (-c.credit_balance_npr, -c.credit_balance_inr, c.name))

    def resolve(self, customer: str | int) -> int:
        """Resolve customer name or ID to customer ID.

        Raises:
            NotFoundError: If customer is not found
        """
        if isinstance(customer, int):
            return self.require_customer(customer).id

        try:
            customer_id = int(customer)
        except (ValueError, TypeError):
            customer_id = None
        if customer_id is not None:
            return self.require_customer(customer_id).id

        found = self.db.get_customer_by_name(customer)
        if found is None:
            raise NotFoundError(customer_not_found(customer))
        return found.id
