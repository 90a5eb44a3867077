"""Tests for customer credit aggregation, limits and payments."""

import logging
from datetime import datetime
from decimal import Decimal

import pytest

from exledger.domain.credit import aggregate_credit, credit_limit_status
from exledger.domain.entities import (
    CreditLimitStatus,
    CreditTransaction,
    CreditTransactionType,
    Currency,
    PaymentMethod,
)
from exledger.domain.errors import NotFoundError, PermissionDeniedError, ValidationError


def make_credit(amount, currency=Currency.NPR, kind=CreditTransactionType.CREDIT_GIVEN):
    return CreditTransaction(
        id=1,
        customer_id=1,
        staff_id="hari",
        amount=Decimal(amount),
        currency=currency,
        transaction_type=kind,
        payment_method=PaymentMethod.CASH,
        reference_transaction_id=None,
        notes=None,
        created_at=datetime(2024, 3, 15, 12, 0),
    )


class TestAggregateCredit:
    def test_given_and_received_per_currency(self):
        totals = aggregate_credit(
            [
                make_credit("2000"),
                make_credit("500", kind=CreditTransactionType.PAYMENT_RECEIVED),
                make_credit("300", currency=Currency.INR),
            ]
        )
        assert totals[Currency.NPR].given == Decimal("2000")
        assert totals[Currency.NPR].received == Decimal("500")
        assert totals[Currency.INR].given == Decimal("300")
        assert totals[Currency.INR].received == 0

    def test_empty(self):
        totals = aggregate_credit([])
        assert all(t.given == 0 and t.received == 0 for t in totals.values())


class TestCreditLimitStatus:
    @pytest.mark.parametrize(
        "balance,limit,expected",
        [
            ("0", "5000", CreditLimitStatus.OK),
            ("4499", "5000", CreditLimitStatus.OK),
            ("4500", "5000", CreditLimitStatus.WARNING),
            ("4999.99", "5000", CreditLimitStatus.WARNING),
            ("5000", "5000", CreditLimitStatus.EXCEEDED),
            ("9000", "5000", CreditLimitStatus.EXCEEDED),
            ("100000", "0", CreditLimitStatus.OK),
        ],
    )
    def test_thresholds(self, balance, limit, expected):
        assert credit_limit_status(Decimal(balance), Decimal(limit)) is expected


class TestCreditService:
    def test_credit_given_increments_balance(self, credit_service, customer_service, sample_customer, staff):
        credit_service.record_credit_given(staff, sample_customer.id, Decimal("1200"), Currency.NPR)

        customer = customer_service.get_customer(sample_customer.id)
        assert customer.credit_balance_npr == Decimal("1200")
        assert customer.credit_balance_inr == 0
        history = credit_service.history(sample_customer.id)
        assert len(history) == 1
        assert history[0].transaction_type is CreditTransactionType.CREDIT_GIVEN
        assert history[0].staff_id == staff.id

    def test_near_limit_logs_warning(self, credit_service, sample_customer, staff, caplog):
        with caplog.at_level(logging.WARNING, logger="exledger"):
            credit_service.record_credit_given(staff, sample_customer.id, Decimal("4600"), Currency.NPR)
        assert "near credit limit" in caplog.text

    def test_exceeding_limit_logs_warning(self, credit_service, sample_customer, staff, caplog):
        with caplog.at_level(logging.WARNING, logger="exledger"):
            credit_service.record_credit_given(staff, sample_customer.id, Decimal("6000"), Currency.NPR)
        assert "exceeded credit limit" in caplog.text

    def test_payment_clamped_to_balance(self, credit_service, customer_service, sample_customer, staff):
        credit_service.record_credit_given(staff, sample_customer.id, Decimal("300"), Currency.NPR)

        result = credit_service.record_payment(staff, sample_customer.id, Decimal("500"))

        assert result.requested == Decimal("500")
        assert result.applied == Decimal("300")
        assert result.was_clamped
        assert result.new_balance == 0
        assert customer_service.get_customer(sample_customer.id).credit_balance_npr == 0
        payment = credit_service.history(sample_customer.id)[-1]
        assert payment.transaction_type is CreditTransactionType.PAYMENT_RECEIVED
        assert payment.amount == Decimal("300")

    def test_partial_payment(self, credit_service, sample_customer, staff):
        credit_service.record_credit_given(staff, sample_customer.id, Decimal("1000"), Currency.NPR)

        result = credit_service.record_payment(staff, sample_customer.id, Decimal("400"))

        assert result.applied == Decimal("400")
        assert not result.was_clamped
        assert result.new_balance == Decimal("600")

    @pytest.mark.parametrize("balance,payment", [("100", "30"), ("100", "100"), ("100", "250"), ("0.50", "1")])
    def test_clamp_property(self, credit_service, customer_service, sample_customer, staff, balance, payment):
        credit_service.record_credit_given(staff, sample_customer.id, Decimal(balance), Currency.NPR)

        result = credit_service.record_payment(staff, sample_customer.id, Decimal(payment))

        expected_balance = max(Decimal("0"), Decimal(balance) - Decimal(payment))
        assert result.applied == min(Decimal(payment), Decimal(balance))
        assert customer_service.get_customer(sample_customer.id).credit_balance_npr == expected_balance

    def test_payment_in_other_currency_uses_that_balance(self, credit_service, customer_service, sample_customer, staff):
        credit_service.record_credit_given(staff, sample_customer.id, Decimal("1000"), Currency.NPR)
        credit_service.record_credit_given(staff, sample_customer.id, Decimal("200"), Currency.INR)

        credit_service.record_payment(staff, sample_customer.id, Decimal("500"), currency=Currency.INR)

        customer = customer_service.get_customer(sample_customer.id)
        assert customer.credit_balance_npr == Decimal("1000")
        assert customer.credit_balance_inr == 0

    def test_payment_with_nothing_outstanding_rejected(self, credit_service, sample_customer, staff):
        with pytest.raises(ValidationError, match="no outstanding"):
            credit_service.record_payment(staff, sample_customer.id, Decimal("100"))
        assert credit_service.history(sample_customer.id) == []

    def test_payment_for_unknown_customer_writes_nothing(self, credit_service, temp_db, staff):
        with pytest.raises(NotFoundError):
            credit_service.record_payment(staff, 999, Decimal("100"))
        assert temp_db.list_credit_transactions() == []

    def test_non_positive_amount_rejected(self, credit_service, sample_customer, staff):
        with pytest.raises(ValidationError):
            credit_service.record_credit_given(staff, sample_customer.id, Decimal("0"), Currency.NPR)
        with pytest.raises(ValidationError):
            credit_service.record_payment(staff, sample_customer.id, Decimal("-5"))

    def test_pending_actor_cannot_give_credit(self, credit_service, sample_customer, pending):
        with pytest.raises(PermissionDeniedError):
            credit_service.record_credit_given(pending, sample_customer.id, Decimal("10"), Currency.NPR)

    def test_balances_match_history(self, credit_service, sample_customer, staff):
        credit_service.record_credit_given(staff, sample_customer.id, Decimal("1000"), Currency.NPR)
        credit_service.record_credit_given(staff, sample_customer.id, Decimal("250"), Currency.INR)
        credit_service.record_payment(staff, sample_customer.id, Decimal("400"))

        assert credit_service.recompute_balances(sample_customer.id) == {
            Currency.NPR: Decimal("600"),
            Currency.INR: Decimal("250"),
        }
        assert credit_service.balances_consistent(sample_customer.id)
