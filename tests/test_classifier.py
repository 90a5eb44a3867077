"""Tests for exchange transaction classification."""

import random
from datetime import datetime
from decimal import Decimal

import pytest

from exledger.domain.classifier import (
    ExchangeBuckets,
    classify_transaction,
    classify_transactions,
)
from exledger.domain.entities import (
    Currency,
    ExchangeTransaction,
    PaymentMethod,
    TransactionType,
)
from exledger.domain.errors import CurrencyMismatchError, ValidationError


def make_txn(
    txn_id=1,
    transaction_type=TransactionType.SELL,
    from_currency=Currency.NPR,
    from_amount="1000",
    to_amount="625",
    payment_method=PaymentMethod.CASH,
    is_personal_account=False,
):
    from_currency = Currency(from_currency)
    return ExchangeTransaction(
        id=txn_id,
        staff_id="hari",
        transaction_type=transaction_type,
        from_currency=from_currency,
        to_currency=from_currency.counterpart,
        from_amount=Decimal(from_amount),
        to_amount=Decimal(to_amount),
        exchange_rate=Decimal("0.625"),
        payment_method=payment_method,
        is_credit=False,
        is_personal_account=is_personal_account,
        customer_id=None,
        bank_account_id=None,
        notes=None,
        created_at=datetime(2024, 3, 15, 10, 0),
    )


def test_cash_sell_buckets():
    buckets = classify_transaction(make_txn())
    npr, inr = buckets[Currency.NPR], buckets[Currency.INR]

    assert npr.received_via_exchange == Decimal("1000")
    assert npr.cash_received == Decimal("1000")
    assert npr.online_received == 0
    assert npr.paid_out_via_exchange == 0
    assert inr.paid_out_via_exchange == Decimal("625")
    assert inr.received_via_exchange == 0


def test_buy_mirrors_sell():
    txn = make_txn(
        transaction_type=TransactionType.BUY,
        from_currency=Currency.INR,
        from_amount="625",
        to_amount="1000",
    )
    buckets = classify_transaction(txn)

    assert buckets[Currency.INR].received_via_exchange == Decimal("625")
    assert buckets[Currency.INR].cash_received == Decimal("625")
    assert buckets[Currency.NPR].paid_out_via_exchange == Decimal("1000")


def test_online_shop_account_is_not_owed_by_staff():
    buckets = classify_transaction(make_txn(payment_method=PaymentMethod.ONLINE))
    npr = buckets[Currency.NPR]

    assert npr.online_received == Decimal("1000")
    assert npr.cash_received == 0
    assert npr.staff_owes_personal == 0


def test_online_personal_account_is_owed_by_staff():
    buckets = classify_transaction(
        make_txn(payment_method=PaymentMethod.ONLINE, is_personal_account=True)
    )
    npr = buckets[Currency.NPR]

    assert npr.online_received == Decimal("1000")
    assert npr.staff_owes_personal == Decimal("1000")


def test_same_currency_rejected():
    txn = make_txn()
    broken = ExchangeTransaction(**{**txn.__dict__, "to_currency": Currency.NPR})
    with pytest.raises(ValidationError):
        classify_transaction(broken)


def test_buckets_cannot_mix_currencies():
    with pytest.raises(CurrencyMismatchError):
        ExchangeBuckets(Currency.NPR) + ExchangeBuckets(Currency.INR)


def test_empty_input_gives_zero_buckets():
    totals = classify_transactions([])
    for currency in Currency:
        assert totals[currency] == ExchangeBuckets(currency)


def test_every_amount_lands_in_exactly_one_received_and_one_paid_bucket():
    rng = random.Random(1)
    transactions = []
    for i in range(300):
        from_currency = rng.choice(list(Currency))
        transactions.append(
            make_txn(
                txn_id=i,
                transaction_type=rng.choice(list(TransactionType)),
                from_currency=from_currency,
                from_amount=str(rng.randint(1, 100000)),
                to_amount=str(rng.randint(1, 100000)),
                payment_method=rng.choice(list(PaymentMethod)),
                is_personal_account=rng.random() < 0.3,
            )
        )
    totals = classify_transactions(transactions)

    for currency in Currency:
        received = sum(t.from_amount for t in transactions if t.from_currency is currency)
        paid = sum(t.to_amount for t in transactions if t.to_currency is currency)
        b = totals[currency]
        assert b.received_via_exchange == received
        assert b.paid_out_via_exchange == paid
        assert b.cash_received + b.online_received == b.received_via_exchange
        assert b.staff_owes_personal <= b.online_received
