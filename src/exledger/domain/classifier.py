"""Exchange transaction classification into per-currency ledger buckets."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from exledger.domain.entities import Currency, ExchangeTransaction, PaymentMethod
from exledger.domain.errors import CurrencyMismatchError, ValidationError

ZERO = Decimal("0")


@dataclass(frozen=True)
class ExchangeBuckets:
    """Exchange-driven movements of one currency.

    ``received_via_exchange`` is what customers handed to the shop and is
    always split into ``cash_received`` plus ``online_received``.
    ``staff_owes_personal`` is the part of ``online_received`` that landed in a
    staff member's personal wallet instead of a shop account.
    """

    currency: Currency
    received_via_exchange: Decimal = ZERO
    paid_out_via_exchange: Decimal = ZERO
    cash_received: Decimal = ZERO
    online_received: Decimal = ZERO
    staff_owes_personal: Decimal = ZERO

    def __add__(self, other: "ExchangeBuckets") -> "ExchangeBuckets":
        if other.currency is not self.currency:
            raise CurrencyMismatchError(
                f"Cannot add {other.currency.value} buckets to {self.currency.value} buckets"
            )
        return ExchangeBuckets(
            currency=self.currency,
            received_via_exchange=self.received_via_exchange + other.received_via_exchange,
            paid_out_via_exchange=self.paid_out_via_exchange + other.paid_out_via_exchange,
            cash_received=self.cash_received + other.cash_received,
            online_received=self.online_received + other.online_received,
            staff_owes_personal=self.staff_owes_personal + other.staff_owes_personal,
        )


def empty_buckets() -> dict[Currency, ExchangeBuckets]:
    return {currency: ExchangeBuckets(currency) for currency in Currency}


def classify_transaction(txn: ExchangeTransaction) -> dict[Currency, ExchangeBuckets]:
    """Return the bucket contributions of a single exchange.

    The currency the customer hands over gains one "received" entry, split by
    payment method; the counterpart currency gains one "paid out" entry. Buy
    and sell mirror each other, so the direction is read from the currencies
    rather than from the transaction type.

    Raises:
        ValidationError: If both sides carry the same currency
    """
    if txn.from_currency is txn.to_currency:
        raise ValidationError(
            f"Transaction {txn.id} exchanges {txn.from_currency.value} with itself"
        )

    online = txn.payment_method is PaymentMethod.ONLINE
    received = ExchangeBuckets(
        currency=txn.from_currency,
        received_via_exchange=txn.from_amount,
        cash_received=ZERO if online else txn.from_amount,
        online_received=txn.from_amount if online else ZERO,
        staff_owes_personal=txn.from_amount if online and txn.is_personal_account else ZERO,
    )
    paid = ExchangeBuckets(currency=txn.to_currency, paid_out_via_exchange=txn.to_amount)
    return {received.currency: received, paid.currency: paid}


def classify_transactions(
    transactions: Iterable[ExchangeTransaction],
) -> dict[Currency, ExchangeBuckets]:
    """Sum bucket contributions of all transactions, keyed by currency."""
    totals = empty_buckets()
    for txn in transactions:
        for currency, contribution in classify_transaction(txn).items():
            totals[currency] = totals[currency] + contribution
    return totals
