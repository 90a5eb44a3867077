"""Tests for daily ledger reconciliation."""

import logging
import random
from datetime import date, datetime, time
from decimal import Decimal

import pytest

from exledger.domain.day_boundary import day_window
from exledger.domain.entities import (
    CashTrackerRecord,
    CreditTransaction,
    CreditTransactionType,
    Currency,
    ExchangeTransaction,
    Expense,
    ExpenseCategory,
    PaymentMethod,
    TransactionType,
)
from exledger.domain.errors import ValidationError
from exledger.domain.ledger import (
    LedgerRequestTracker,
    LedgerService,
    build_ledger,
    pick_cash_record,
    summarize_period,
)

from conftest import BUSINESS_DAY, at

WINDOW = day_window(BUSINESS_DAY)


def exchange(txn_id, from_currency, from_amount, to_amount, payment_method=PaymentMethod.CASH, personal=False):
    from_currency = Currency(from_currency)
    return ExchangeTransaction(
        id=txn_id,
        staff_id="hari",
        transaction_type=TransactionType.SELL if from_currency is Currency.NPR else TransactionType.BUY,
        from_currency=from_currency,
        to_currency=from_currency.counterpart,
        from_amount=Decimal(from_amount),
        to_amount=Decimal(to_amount),
        exchange_rate=Decimal("1"),
        payment_method=payment_method,
        is_credit=False,
        is_personal_account=personal,
        customer_id=None,
        bank_account_id=None,
        notes=None,
        created_at=at(10),
    )


def credit(credit_id, amount, kind, currency=Currency.NPR):
    return CreditTransaction(
        id=credit_id,
        customer_id=1,
        staff_id="hari",
        amount=Decimal(amount),
        currency=currency,
        transaction_type=kind,
        payment_method=PaymentMethod.CASH,
        reference_transaction_id=None,
        notes=None,
        created_at=at(11),
    )


def expense(expense_id, amount, currency=Currency.NPR):
    return Expense(
        id=expense_id,
        staff_id="hari",
        description="Tea",
        amount=Decimal(amount),
        currency=currency,
        category=ExpenseCategory.GENERAL,
        expense_date=BUSINESS_DAY,
        receipt_ref=None,
        notes=None,
        created_at=at(12),
    )


def cash_record(opening_npr="10000", opening_inr="5000", closing_npr=None, closing_inr=None, staff_id="hari", record_id=1):
    closed = closing_npr is not None or closing_inr is not None
    return CashTrackerRecord(
        id=record_id,
        staff_id=staff_id,
        date=BUSINESS_DAY,
        opening_npr=Decimal(opening_npr),
        opening_inr=Decimal(opening_inr),
        closing_npr=Decimal(closing_npr) if closing_npr is not None else None,
        closing_inr=Decimal(closing_inr) if closing_inr is not None else None,
        is_closed=closed,
        closed_at=at(20) if closed else None,
        notes=None,
        created_at=at(8),
    )


class TestBuildLedger:
    def test_sell_with_expense(self):
        snapshot = build_ledger(
            BUSINESS_DAY,
            WINDOW,
            transactions=[exchange(1, Currency.NPR, "1000", "625")],
            credit_transactions=[],
            expenses=[expense(1, "200")],
            cash_record=cash_record(closing_npr="10750", closing_inr="4375"),
        )

        assert snapshot.npr.expected == Decimal("10800")
        assert snapshot.inr.expected == Decimal("4375")
        assert snapshot.npr.difference == Decimal("50")
        assert snapshot.inr.difference == 0
        assert snapshot.is_closed
        assert snapshot.difference_is_reliable

    def test_credit_enters_formula_in_both_currencies(self):
        snapshot = build_ledger(
            BUSINESS_DAY,
            WINDOW,
            transactions=[],
            credit_transactions=[
                credit(1, "2000", CreditTransactionType.CREDIT_GIVEN),
                credit(2, "500", CreditTransactionType.PAYMENT_RECEIVED),
                credit(3, "100", CreditTransactionType.PAYMENT_RECEIVED, Currency.INR),
            ],
            expenses=[],
            cash_record=cash_record(),
        )

        assert snapshot.npr.credit_given == Decimal("2000")
        assert snapshot.npr.credit_received == Decimal("500")
        assert snapshot.npr.expected == Decimal("8500")
        assert snapshot.inr.expected == Decimal("5100")

    def test_without_cash_record_everything_opens_at_zero(self):
        snapshot = build_ledger(BUSINESS_DAY, WINDOW, [], [], [], cash_record=None)

        assert not snapshot.has_cash_record
        assert not snapshot.is_closed
        for ledger in (snapshot.npr, snapshot.inr):
            assert ledger.opening == 0
            assert ledger.expected == 0
            assert ledger.actual == 0
            assert ledger.difference == 0

    def test_open_day_actual_is_zero(self):
        snapshot = build_ledger(BUSINESS_DAY, WINDOW, [], [], [], cash_record=cash_record())

        assert snapshot.has_cash_record
        assert not snapshot.is_closed
        assert not snapshot.difference_is_reliable
        assert snapshot.npr.actual == 0
        assert snapshot.npr.difference == snapshot.npr.expected

    def test_online_and_personal_receipts(self):
        snapshot = build_ledger(
            BUSINESS_DAY,
            WINDOW,
            transactions=[
                exchange(1, Currency.NPR, "1000", "625"),
                exchange(2, Currency.NPR, "400", "250", PaymentMethod.ONLINE),
                exchange(3, Currency.NPR, "600", "375", PaymentMethod.ONLINE, personal=True),
            ],
            credit_transactions=[],
            expenses=[],
        )

        assert snapshot.npr.received_via_exchange == Decimal("2000")
        assert snapshot.npr.cash_received == Decimal("1000")
        assert snapshot.npr.online_received == Decimal("1000")
        assert snapshot.npr.staff_owes_personal == Decimal("600")

    def test_other_day_expenses_ignored(self):
        stray = Expense(**{**expense(2, "999").__dict__, "expense_date": date(2024, 3, 14)})
        snapshot = build_ledger(BUSINESS_DAY, WINDOW, [], [], [expense(1, "200"), stray])
        assert snapshot.npr.expenses == Decimal("200")

    def test_additive_over_disjoint_inputs(self):
        rng = random.Random(3)
        transactions = [
            exchange(i, rng.choice(list(Currency)), str(rng.randint(1, 5000)), str(rng.randint(1, 5000)))
            for i in range(40)
        ]
        credits = [
            credit(i, str(rng.randint(1, 500)), rng.choice(list(CreditTransactionType)), rng.choice(list(Currency)))
            for i in range(20)
        ]
        expenses = [expense(i, str(rng.randint(1, 300)), rng.choice(list(Currency))) for i in range(10)]

        def net(txns, creds, exps):
            snapshot = build_ledger(BUSINESS_DAY, WINDOW, txns, creds, exps)
            return snapshot.npr.expected, snapshot.inr.expected

        whole = net(transactions, credits, expenses)
        first = net(transactions[:17], credits[:9], expenses[:4])
        second = net(transactions[17:], credits[9:], expenses[4:])
        assert whole == (first[0] + second[0], first[1] + second[1])

    def test_rows_in_print_order(self):
        snapshot = build_ledger(BUSINESS_DAY, WINDOW, [], [], [])
        keys = [row.key for row in snapshot.npr.rows()]
        assert keys == [
            "opening", "received", "take", "esewa", "nasta",
            "paid_out", "credit_given", "credit_received", "expected", "farak",
        ]


class TestPickCashRecord:
    def test_none_when_empty(self):
        assert pick_cash_record([], BUSINESS_DAY) is None

    def test_earliest_used_with_warning(self, caplog):
        records = [cash_record(record_id=1), cash_record(staff_id="sita", record_id=2)]
        with caplog.at_level(logging.WARNING, logger="exledger"):
            chosen = pick_cash_record(records, BUSINESS_DAY)
        assert chosen.id == 1
        assert "2 cash records exist" in caplog.text


@pytest.fixture
def business_day(exchange_service, expense_service, cash_tracker_service, staff):
    """One open day: 10000 NPR and 5000 INR, a 1000 NPR cash sale and a 200 NPR expense."""
    cash_tracker_service.open_day(staff, {"1000": 10}, {"500": 10}, day=BUSINESS_DAY)
    exchange_service.record_exchange(
        staff, TransactionType.SELL, Decimal("1000"), Decimal("0.625"), created_at=at(10)
    )
    expense_service.record_expense(staff, "Tea and snacks", Decimal("200"), expense_date=BUSINESS_DAY)


class TestLedgerService:
    def test_end_to_end_day(self, ledger_service, cash_tracker_service, business_day, staff):
        before_close = ledger_service.build_daily_ledger(BUSINESS_DAY)
        assert before_close.npr.expected == Decimal("10800")
        assert before_close.inr.expected == Decimal("4375")
        assert not before_close.is_closed

        cash_tracker_service.close_day(
            staff,
            {"1000": 10, "500": 1, "100": 2, "50": 1},
            {"500": 8, "200": 1, "100": 1, "50": 1, "20": 1, "coins": 5},
            day=BUSINESS_DAY,
        )
        snapshot = ledger_service.build_daily_ledger(BUSINESS_DAY)

        assert snapshot.is_closed
        assert snapshot.npr.actual == Decimal("10750")
        assert snapshot.npr.difference == Decimal("50")
        assert snapshot.inr.actual == Decimal("4375")
        assert snapshot.inr.difference == 0

    def test_repeat_computation_is_identical(self, ledger_service, business_day):
        first = ledger_service.build_daily_ledger(BUSINESS_DAY)
        second = ledger_service.build_daily_ledger(BUSINESS_DAY)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_transactions_outside_window_ignored(self, ledger_service, exchange_service, business_day, staff):
        exchange_service.record_exchange(
            staff, TransactionType.SELL, Decimal("500"), Decimal("0.625"),
            created_at=datetime(2024, 3, 16, 0, 0),
        )
        exchange_service.record_exchange(
            staff, TransactionType.SELL, Decimal("700"), Decimal("0.625"),
            created_at=datetime(2024, 3, 14, 23, 59),
        )
        assert ledger_service.build_daily_ledger(BUSINESS_DAY).npr.received_via_exchange == Decimal("1000")

    def test_day_without_cash_record(self, ledger_service, exchange_service, staff):
        exchange_service.record_exchange(
            staff, TransactionType.SELL, Decimal("1000"), Decimal("0.625"), created_at=at(10)
        )
        snapshot = ledger_service.build_daily_ledger(BUSINESS_DAY)
        assert not snapshot.has_cash_record
        assert snapshot.npr.opening == 0
        assert snapshot.npr.expected == Decimal("1000")
        assert snapshot.inr.expected == Decimal("-625")

    def test_override_replaces_stored_record(self, ledger_service, business_day):
        override = cash_record(opening_npr="20000", opening_inr="0", closing_npr="20800", closing_inr="0")
        snapshot = ledger_service.build_daily_ledger(BUSINESS_DAY, cash_tracker_override=override)
        assert snapshot.npr.opening == Decimal("20000")
        assert snapshot.npr.difference == 0
        assert snapshot.inr.expected == Decimal("-625")

    def test_credit_sale_and_payment(self, ledger_service, exchange_service, credit_service, sample_customer, staff):
        exchange_service.record_exchange(
            staff, TransactionType.SELL, Decimal("2000"), Decimal("0.625"),
            is_credit=True, customer_id=sample_customer.id, created_at=at(10),
        )
        credit_service.record_payment(staff, sample_customer.id, Decimal("500"), created_at=at(15))

        snapshot = ledger_service.build_daily_ledger(BUSINESS_DAY)

        assert snapshot.npr.received_via_exchange == Decimal("2000")
        assert snapshot.npr.credit_given == Decimal("2000")
        assert snapshot.npr.credit_received == Decimal("500")
        assert snapshot.npr.expected == Decimal("500")
        assert snapshot.inr.paid_out_via_exchange == Decimal("1250")

    def test_two_open_records_use_earliest(self, ledger_service, cash_tracker_service, staff, manager, caplog):
        cash_tracker_service.open_day(staff, {"1000": 10}, {}, day=BUSINESS_DAY)
        cash_tracker_service.open_day(manager, {"1000": 3}, {}, day=BUSINESS_DAY)

        with caplog.at_level(logging.WARNING, logger="exledger"):
            snapshot = ledger_service.build_daily_ledger(BUSINESS_DAY)

        assert snapshot.npr.opening == Decimal("10000")
        assert "using the earliest" in caplog.text
        assert ledger_service.build_daily_ledger(BUSINESS_DAY, staff_id=manager.id).npr.opening == Decimal("3000")

    def test_configured_day_end_moves_late_trade(self, temp_db, exchange_service, settings_service, owner, staff):
        settings_service.set_day_end(owner, 2, 0)
        exchange_service.record_exchange(
            staff, TransactionType.SELL, Decimal("300"), Decimal("0.625"),
            created_at=datetime(2024, 3, 16, 1, 30),
        )

        midnight = LedgerService(temp_db)
        shifted = LedgerService(temp_db, use_day_end_setting=True)

        assert midnight.build_daily_ledger(BUSINESS_DAY).npr.received_via_exchange == 0
        late = shifted.build_daily_ledger(BUSINESS_DAY)
        assert late.npr.received_via_exchange == Decimal("300")
        assert late.window_end == datetime(2024, 3, 16, 2, 0)


class TestSummarizePeriod:
    def test_totals_and_net_flow(self):
        window = (datetime(2024, 3, 1), datetime(2024, 4, 1))
        summary = summarize_period(
            date(2024, 3, 1),
            date(2024, 3, 31),
            window,
            transactions=[exchange(1, "NPR", "1000", "625"), exchange(2, "INR", "500", "800")],
            credit_transactions=[
                credit(1, "300", CreditTransactionType.CREDIT_GIVEN),
                credit(2, "100", CreditTransactionType.PAYMENT_RECEIVED),
            ],
            expenses=[expense(1, "200"), expense(2, "50", Currency.INR)],
        )

        assert summary.transaction_count == 2
        assert summary.npr.received_via_exchange == Decimal("1000")
        assert summary.npr.paid_out_via_exchange == Decimal("800")
        assert summary.inr.received_via_exchange == Decimal("500")
        assert summary.inr.paid_out_via_exchange == Decimal("625")
        # 1000 + 100 - 800 - 200 - 300
        assert summary.npr.net_flow == Decimal("-200")
        assert summary.inr.net_flow == Decimal("-175")
        assert summary.to_dict()["NPR"]["net_flow"] == "-200"

    def test_expenses_outside_period_ignored(self):
        summary = summarize_period(
            date(2024, 4, 1), date(2024, 4, 30), (datetime(2024, 4, 1), datetime(2024, 5, 1)),
            transactions=[], credit_transactions=[], expenses=[expense(1, "200")],
        )
        assert summary.npr.expenses == 0

    def test_net_flow_matches_daily_ledger(self):
        txns = [exchange(1, "NPR", "1000", "625"), exchange(2, "INR", "400", "640", PaymentMethod.ONLINE)]
        credits = [credit(1, "250", CreditTransactionType.CREDIT_GIVEN)]
        expenses = [expense(1, "120")]

        daily = build_ledger(BUSINESS_DAY, WINDOW, txns, credits, expenses, cash_record())
        period = summarize_period(BUSINESS_DAY, BUSINESS_DAY, WINDOW, txns, credits, expenses)

        for currency in Currency:
            day = daily.for_currency(currency)
            assert period.for_currency(currency).net_flow == day.expected - day.opening


class TestMonthlySummary:
    def test_month_boundaries(
        self, ledger_service, exchange_service, expense_service, credit_service, sample_customer, staff
    ):
        for moment in (
            datetime(2024, 2, 29, 23, 59),
            datetime(2024, 3, 1, 0, 0),
            datetime(2024, 3, 31, 23, 59),
            datetime(2024, 4, 1, 0, 0),
        ):
            exchange_service.record_exchange(
                staff, TransactionType.SELL, Decimal("100"), Decimal("0.625"), created_at=moment
            )
        exchange_service.record_exchange(
            staff, TransactionType.SELL, Decimal("2000"), Decimal("0.625"),
            is_credit=True, customer_id=sample_customer.id, created_at=datetime(2024, 3, 10, 12, 0),
        )
        credit_service.record_payment(
            staff, sample_customer.id, Decimal("500"), created_at=datetime(2024, 3, 20, 12, 0)
        )
        expense_service.record_expense(staff, "Rent", Decimal("3000"), expense_date=date(2024, 3, 31))
        expense_service.record_expense(staff, "Rent", Decimal("3000"), expense_date=date(2024, 4, 1))

        summary = ledger_service.build_monthly_summary(date(2024, 3, 15))

        assert (summary.start_date, summary.end_date) == (date(2024, 3, 1), date(2024, 3, 31))
        assert (summary.window_start, summary.window_end) == (datetime(2024, 3, 1), datetime(2024, 4, 1))
        assert summary.transaction_count == 3
        assert summary.npr.received_via_exchange == Decimal("2200")
        assert summary.inr.paid_out_via_exchange == Decimal("1375.00")
        assert summary.npr.credit_given == Decimal("2000")
        assert summary.npr.credit_received == Decimal("500")
        assert summary.npr.expenses == Decimal("3000")

    def test_configured_day_end_shifts_month_edges(self, temp_db, exchange_service, settings_service, owner, staff):
        settings_service.set_day_end(owner, 22, 0)
        exchange_service.record_exchange(
            staff, TransactionType.SELL, Decimal("100"), Decimal("0.625"),
            created_at=datetime(2024, 2, 29, 23, 0),
        )
        exchange_service.record_exchange(
            staff, TransactionType.SELL, Decimal("300"), Decimal("0.625"),
            created_at=datetime(2024, 3, 31, 23, 0),
        )

        summary = LedgerService(temp_db, use_day_end_setting=True).build_monthly_summary(date(2024, 3, 1))

        assert summary.window_start == datetime(2024, 2, 29, 22, 0)
        assert summary.npr.received_via_exchange == Decimal("100")

    def test_end_before_start_rejected(self, ledger_service):
        with pytest.raises(ValidationError, match="before it starts"):
            ledger_service.build_period_summary(date(2024, 3, 31), date(2024, 3, 1))


class TestLedgerRequestTracker:
    def test_latest_request_accepted(self):
        tracker = LedgerRequestTracker()
        request = tracker.start(BUSINESS_DAY)
        assert tracker.is_current(request)
        assert tracker.accept(request)

    def test_superseded_request_discarded(self, caplog):
        tracker = LedgerRequestTracker()
        stale = tracker.start(BUSINESS_DAY)
        fresh = tracker.start(date(2024, 3, 16))

        with caplog.at_level(logging.WARNING, logger="exledger"):
            assert not tracker.accept(stale)
        assert tracker.accept(fresh)
        assert "Discarding stale ledger result for 2024-03-15" in caplog.text

    def test_run_returns_snapshot(self, ledger_service, business_day):
        tracker = LedgerRequestTracker()
        snapshot = tracker.run(ledger_service, BUSINESS_DAY)
        assert snapshot is not None
        assert snapshot.npr.expected == Decimal("10800")


def test_midnight_window():
    assert day_window(BUSINESS_DAY) == (datetime(2024, 3, 15), datetime(2024, 3, 16))
    assert day_window(BUSINESS_DAY, time(0, 0)) == day_window(BUSINESS_DAY)
