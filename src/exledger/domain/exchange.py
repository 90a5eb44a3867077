"""Exchange transaction domain service."""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from exledger.database.base import Database
from exledger.domain.access import (
    can_delete_transactions,
    can_edit_transactions,
    require,
    require_active,
)
from exledger.domain.credit import CreditService
from exledger.domain.entities import (
    Actor,
    Currency,
    ExchangeTransaction as ExchangeEntity,
    PaymentMethod,
    TransactionType,
)
from exledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    bank_account_not_found,
    customer_not_found,
    transaction_not_found,
)
from exledger.domain.validation import CENT, positive_amount, positive_rate

logger = logging.getLogger(__name__)

# The currency a customer normally hands over for each direction.
DEFAULT_FROM_CURRENCY = {
    TransactionType.SELL: Currency.NPR,
    TransactionType.BUY: Currency.INR,
}


def convert_amount(from_amount: Decimal, exchange_rate: Decimal) -> Decimal:
    """Return ``from_amount * exchange_rate`` rounded half-up to cents."""
    return (from_amount * exchange_rate).quantize(CENT, rounding=ROUND_HALF_UP)


class ExchangeService:
    """Service for recording, editing and deleting exchanges."""

    def __init__(self, db: Database):
        """Initialize exchange service.

        Args:
            db: Database instance
        """
        self.db = db
        self.credit_service = CreditService(db)

    def _validate(
        self,
        from_currency: Currency,
        to_currency: Currency,
        from_amount: Decimal,
        exchange_rate: Decimal,
        to_amount: Optional[Decimal],
        payment_method: PaymentMethod,
        is_personal_account: bool,
        is_credit: bool,
        customer_id: Optional[int],
        bank_account_id: Optional[int],
    ) -> tuple[Decimal, Decimal, Decimal, Optional[int]]:
        """Check an exchange's fields and return normalized amounts.

        Returns:
            Tuple of (from_amount, to_amount, exchange_rate, bank_account_id)
        """
        if from_currency is to_currency:
            raise ValidationError(
                f"Cannot exchange {from_currency.value} for {to_currency.value}"
            )
        from_amount = positive_amount(from_amount, "From amount")
        exchange_rate = positive_rate(exchange_rate)
        if to_amount is None:
            to_amount = convert_amount(from_amount, exchange_rate)
        to_amount = positive_amount(to_amount, "To amount")

        if payment_method is PaymentMethod.ONLINE:
            if is_personal_account:
                # Money landed in a staff wallet, not a shop account.
                bank_account_id = None
            elif bank_account_id is None:
                raise ValidationError(
                    "Online payments need a bank account or the personal-account flag"
                )
        elif is_personal_account:
            raise ValidationError("Only online payments can go to a personal account")
        else:
            bank_account_id = None

        if bank_account_id is not None and self.db.get_bank_account(bank_account_id) is None:
            raise NotFoundError(bank_account_not_found(bank_account_id))

        if is_credit and customer_id is None:
            raise ValidationError("Credit transactions require a customer")
        if customer_id is not None and self.db.get_customer(customer_id) is None:
            raise NotFoundError(customer_not_found(customer_id))

        return from_amount, to_amount, exchange_rate, bank_account_id

    def record_exchange(
        self,
        actor: Actor,
        transaction_type: TransactionType,
        from_amount: Decimal,
        exchange_rate: Decimal,
        from_currency: Optional[Currency] = None,
        to_amount: Optional[Decimal] = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        is_personal_account: bool = False,
        is_credit: bool = False,
        customer_id: Optional[int] = None,
        bank_account_id: Optional[int] = None,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """Record a buy or sell exchange.

        A credit-backed exchange also increments the customer's balance in the
        currency they should have handed over and appends a ``credit_given``
        record referencing the exchange. All writes happen in one unit of work.

        Args:
            actor: Staff member recording the exchange
            transaction_type: BUY or SELL
            from_amount: Amount the customer hands over
            exchange_rate: Rate applied to from_amount
            from_currency: Currency handed over (defaults by transaction type)
            to_amount: Manually adjusted payout; computed from the rate if omitted
            payment_method: CASH or ONLINE
            is_personal_account: Online payment received in a staff wallet
            is_credit: Customer takes the exchange on credit
            customer_id: Optional customer (required for credit)
            bank_account_id: Shop account for online payments
            notes: Optional notes
            created_at: Override the recording time (back-dated entries)

        Returns:
            Exchange transaction ID

        Raises:
            ValidationError: If fields are inconsistent or amounts invalid
            NotFoundError: If the customer or bank account doesn't exist
        """
        require_active(actor, "record exchanges")
        if from_currency is None:
            from_currency = DEFAULT_FROM_CURRENCY[transaction_type]
        to_currency = from_currency.counterpart

        from_amount, to_amount, exchange_rate, bank_account_id = self._validate(
            from_currency=from_currency,
            to_currency=to_currency,
            from_amount=from_amount,
            exchange_rate=exchange_rate,
            to_amount=to_amount,
            payment_method=payment_method,
            is_personal_account=is_personal_account,
            is_credit=is_credit,
            customer_id=customer_id,
            bank_account_id=bank_account_id,
        )

        with self.db.unit_of_work():
            transaction_id = self.db.create_exchange_transaction(
                staff_id=actor.id,
                transaction_type=transaction_type,
                from_currency=from_currency,
                to_currency=to_currency,
                from_amount=from_amount,
                to_amount=to_amount,
                exchange_rate=exchange_rate,
                payment_method=payment_method,
                is_credit=is_credit,
                is_personal_account=is_personal_account,
                customer_id=customer_id,
                bank_account_id=bank_account_id,
                notes=notes,
                created_at=created_at,
            )
            if is_credit:
                self.credit_service.record_credit_given(
                    actor,
                    customer_id=customer_id,
                    amount=from_amount,
                    currency=from_currency,
                    payment_method=payment_method,
                    reference_transaction_id=transaction_id,
                    notes=notes,
                    created_at=created_at,
                )

        logger.info(
            "Recorded %s %s: %s %s -> %s %s%s",
            transaction_type.value, transaction_id,
            from_amount, from_currency.value, to_amount, to_currency.value,
            " on credit" if is_credit else "",
        )
        return transaction_id

    def get_transaction(self, transaction_id: int) -> Optional[ExchangeEntity]:
        """Get exchange transaction by ID."""
        return self.db.get_exchange_transaction(transaction_id)

    def _require_transaction(self, transaction_id: int) -> ExchangeEntity:
        txn = self.db.get_exchange_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[ExchangeEntity]:
        """List exchanges recorded within [start, end)."""
        return self.db.list_exchange_transactions(start=start, end=end)

    def _shift_balances(self, customer_id: int, deltas: dict[Currency, Decimal]) -> None:
        """Apply net balance changes, refusing any that would go below zero.

        Payments already received stay in the history, so a balance can only
        shrink by what is still outstanding.
        """
        customer = self.db.get_customer(customer_id)
        if customer is None:
            raise NotFoundError(customer_not_found(customer_id))
        new_balances = {}
        for currency, delta in deltas.items():
            new_balance = customer.credit_balance(currency) + delta
            if new_balance < 0:
                raise ConflictError(
                    f"Customer '{customer.name}' has already repaid more than that; "
                    f"{currency.value} credit balance would be {new_balance}"
                )
            new_balances[currency] = new_balance
        for currency, new_balance in new_balances.items():
            self.db.update_customer_credit_balance(customer_id, currency, new_balance)

    def edit_transaction(
        self,
        actor: Actor,
        transaction_id: int,
        transaction_type: TransactionType,
        from_currency: Currency,
        from_amount: Decimal,
        exchange_rate: Decimal,
        to_amount: Optional[Decimal] = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        is_personal_account: bool = False,
        is_credit: Optional[bool] = None,
        customer_id: Optional[int] = None,
        bank_account_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Replace all editable fields of an exchange. Owners and managers only.

        No history is kept. For a credit-backed exchange the linked credit
        record and the customer's balance follow the new amount and currency
        in the same unit of work. Switching credit on or off is not an edit.

        Raises:
            PermissionDeniedError: If the actor may not edit transactions
            NotFoundError: If the transaction doesn't exist
            ValidationError: If fields are invalid or is_credit would change
            ConflictError: If the customer has already repaid more than the new credit
        """
        require(actor, can_edit_transactions(actor), "edit transactions")
        existing = self._require_transaction(transaction_id)
        if is_credit is not None and is_credit != existing.is_credit:
            raise ValidationError(
                "Cannot switch credit on or off by editing; delete and record the exchange again"
            )
        if existing.is_credit and customer_id != existing.customer_id:
            raise ValidationError("Cannot move a credit transaction to another customer")

        to_currency = from_currency.counterpart
        from_amount, to_amount, exchange_rate, bank_account_id = self._validate(
            from_currency=from_currency,
            to_currency=to_currency,
            from_amount=from_amount,
            exchange_rate=exchange_rate,
            to_amount=to_amount,
            payment_method=payment_method,
            is_personal_account=is_personal_account,
            is_credit=existing.is_credit,
            customer_id=customer_id,
            bank_account_id=bank_account_id,
        )

        with self.db.unit_of_work():
            self.db.replace_exchange_transaction(
                transaction_id=transaction_id,
                transaction_type=transaction_type,
                from_currency=from_currency,
                to_currency=to_currency,
                from_amount=from_amount,
                to_amount=to_amount,
                exchange_rate=exchange_rate,
                payment_method=payment_method,
                is_personal_account=is_personal_account,
                customer_id=customer_id,
                bank_account_id=bank_account_id,
                notes=notes,
            )
            if existing.is_credit:
                credit = self.db.get_credit_transaction_for_exchange(transaction_id)
                if credit is not None:
                    deltas = {credit.currency: -credit.amount}
                    deltas[from_currency] = deltas.get(from_currency, Decimal("0")) + from_amount
                    self._shift_balances(existing.customer_id, deltas)
                    self.db.update_credit_transaction_amount(credit.id, from_amount, from_currency)

        logger.info("Transaction %s edited by %s", transaction_id, actor.id)

    def delete_transaction(self, actor: Actor, transaction_id: int) -> None:
        """Delete an exchange. Owners only.

        A credit-backed exchange takes its credit record with it and the
        customer's balance is reduced accordingly. Once payments have brought
        the balance below that credit the delete is refused.

        Raises:
            PermissionDeniedError: If the actor may not delete transactions
            NotFoundError: If the transaction doesn't exist
            ConflictError: If the customer has already repaid part of the credit
        """
        require(actor, can_delete_transactions(actor), "delete transactions")
        existing = self._require_transaction(transaction_id)

        with self.db.unit_of_work():
            if existing.is_credit:
                credit = self.db.get_credit_transaction_for_exchange(transaction_id)
                if credit is not None:
                    self._shift_balances(credit.customer_id, {credit.currency: -credit.amount})
                    self.db.delete_credit_transaction(credit.id)
            self.db.delete_exchange_transaction(transaction_id)

        logger.info("Transaction %s deleted by %s", transaction_id, actor.id)
