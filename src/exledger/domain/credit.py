"""Customer credit: daily aggregation and balance-changing writes.

A customer's outstanding balance per currency is maintained at write time and
must always equal the sum of their ``credit_given`` records minus their
``payment_received`` records in that currency.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from exledger.database.base import Database
from exledger.domain.access import require_active
from exledger.domain.entities import (
    Actor,
    CreditLimitStatus,
    CreditTransaction,
    CreditTransactionType,
    Currency,
    Customer,
    PaymentMethod,
)
from exledger.domain.errors import NotFoundError, ValidationError, customer_not_found
from exledger.domain.validation import positive_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
WARNING_THRESHOLD = Decimal("90")
EXCEEDED_THRESHOLD = Decimal("100")


@dataclass(frozen=True)
class CreditTotals:
    """Credit movements of one currency within a window."""

    currency: Currency
    given: Decimal = ZERO
    received: Decimal = ZERO


def aggregate_credit(credit_transactions: Iterable[CreditTransaction]) -> dict[Currency, CreditTotals]:
    """Sum credit given and payments received per currency."""
    given = {currency: ZERO for currency in Currency}
    received = {currency: ZERO for currency in Currency}
    for credit in credit_transactions:
        if credit.transaction_type is CreditTransactionType.CREDIT_GIVEN:
            given[credit.currency] += credit.amount
        else:
            received[credit.currency] += credit.amount
    return {
        currency: CreditTotals(currency, given[currency], received[currency])
        for currency in Currency
    }


def credit_limit_status(balance: Decimal, credit_limit: Decimal) -> CreditLimitStatus:
    """Classify utilisation of an NPR credit limit. A zero limit never alerts."""
    if credit_limit <= 0:
        return CreditLimitStatus.OK
    percent_used = balance / credit_limit * 100
    if percent_used >= EXCEEDED_THRESHOLD:
        return CreditLimitStatus.EXCEEDED
    if percent_used >= WARNING_THRESHOLD:
        return CreditLimitStatus.WARNING
    return CreditLimitStatus.OK


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of recording a credit payment."""

    credit_transaction_id: int
    requested: Decimal
    applied: Decimal
    new_balance: Decimal

    @property
    def was_clamped(self) -> bool:
        return self.applied < self.requested


class CreditService:
    """Service for credit given to customers and payments against it."""

    def __init__(self, db: Database):
        """Initialize credit service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_customer(self, customer_id: int) -> Customer:
        customer = self.db.get_customer(customer_id)
        if customer is None:
            raise NotFoundError(customer_not_found(customer_id))
        return customer

    def record_credit_given(
        self,
        actor: Actor,
        customer_id: int,
        amount: Decimal,
        currency: Currency,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        reference_transaction_id: Optional[int] = None,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """Extend credit to a customer.

        Increments the customer's balance in ``currency`` and appends a
        ``credit_given`` record, both in one unit of work.

        Returns:
            Credit transaction ID

        Raises:
            ValidationError: If amount is not positive
            NotFoundError: If customer doesn't exist
        """
        require_active(actor, "give credit")
        amount = positive_amount(amount)

        with self.db.unit_of_work():
            customer = self._require_customer(customer_id)
            new_balance = customer.credit_balance(currency) + amount
            self.db.update_customer_credit_balance(customer_id, currency, new_balance)
            credit_id = self.db.create_credit_transaction(
                customer_id=customer_id,
                staff_id=actor.id,
                amount=amount,
                currency=currency,
                transaction_type=CreditTransactionType.CREDIT_GIVEN,
                payment_method=payment_method,
                reference_transaction_id=reference_transaction_id,
                notes=notes,
                created_at=created_at,
            )

        logger.info(
            "Credit given to customer %s: %s %s (balance %s)",
            customer_id, amount, currency.value, new_balance,
        )
        if currency is Currency.NPR:
            self._check_limit(customer, new_balance)
        return credit_id

    def _check_limit(self, customer: Customer, balance: Decimal) -> CreditLimitStatus:
        status = credit_limit_status(balance, customer.credit_limit)
        if status is CreditLimitStatus.EXCEEDED:
            logger.warning(
                "Customer %s exceeded credit limit: balance %s, limit %s",
                customer.name, balance, customer.credit_limit,
            )
        elif status is CreditLimitStatus.WARNING:
            logger.warning(
                "Customer %s is near credit limit: balance %s, limit %s",
                customer.name, balance, customer.credit_limit,
            )
        return status

    def record_payment(
        self,
        actor: Actor,
        customer_id: int,
        amount: Decimal,
        currency: Currency = Currency.NPR,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> PaymentResult:
        """Record a customer paying down their credit.

        The applied payment is ``min(amount, outstanding balance)`` so a balance
        can never go negative through this path.

        Raises:
            ValidationError: If amount is not positive or nothing is outstanding
            NotFoundError: If customer doesn't exist (nothing is written)
        """
        require_active(actor, "record credit payments")
        requested = positive_amount(amount)

        with self.db.unit_of_work():
            customer = self._require_customer(customer_id)
            balance = customer.credit_balance(currency)
            if balance <= 0:
                raise ValidationError(
                    f"Customer '{customer.name}' has no outstanding {currency.value} credit"
                )

            applied = min(requested, balance)
            new_balance = balance - applied
            self.db.update_customer_credit_balance(customer_id, currency, new_balance)
            credit_id = self.db.create_credit_transaction(
                customer_id=customer_id,
                staff_id=actor.id,
                amount=applied,
                currency=currency,
                transaction_type=CreditTransactionType.PAYMENT_RECEIVED,
                payment_method=payment_method,
                notes=notes,
                created_at=created_at,
            )

        if applied < requested:
            logger.warning(
                "Payment from customer %s clamped from %s to outstanding %s %s",
                customer_id, requested, applied, currency.value,
            )
        logger.info(
            "Payment received from customer %s: %s %s (balance %s)",
            customer_id, applied, currency.value, new_balance,
        )
        return PaymentResult(
            credit_transaction_id=credit_id,
            requested=requested,
            applied=applied,
            new_balance=new_balance,
        )

    def history(self, customer_id: int) -> list[CreditTransaction]:
        """List a customer's credit movements, oldest first."""
        self._require_customer(customer_id)
        return self.db.list_credit_transactions(customer_id=customer_id)

    def recompute_balances(self, customer_id: int) -> dict[Currency, Decimal]:
        """Rebuild a customer's balances from their credit history."""
        totals = aggregate_credit(self.history(customer_id))
        return {currency: t.given - t.received for currency, t in totals.items()}

    def balances_consistent(self, customer_id: int) -> bool:
        """Check stored balances against the credit history."""
        customer = self._require_customer(customer_id)
        recomputed = self.recompute_balances(customer_id)
        return all(customer.credit_balance(c) == recomputed[c] for c in Currency)
