"""Daily ledger reconciliation.

``build_ledger`` is the single reconciliation formula. Per currency::

    expected = opening + received_via_exchange + credit_received
               - paid_out_via_exchange - expenses - credit_given
    difference = expected - actual

``actual`` is the counted closing balance, or zero while the day is open.
"""

import itertools
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, Optional

from exledger.database.base import Database
from exledger.domain.classifier import classify_transactions
from exledger.domain.credit import aggregate_credit
from exledger.domain.day_boundary import day_end_from_settings, day_window, month_bounds, period_window
from exledger.domain.entities import (
    CashTrackerRecord,
    CreditTransaction,
    Currency,
    CurrencyLedger,
    CurrencyPeriodTotals,
    ExchangeTransaction,
    Expense,
    LedgerSnapshot,
    PeriodSummary,
)
from exledger.domain.expense import aggregate_expenses

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def build_ledger(
    target_date: date,
    window: tuple[datetime, datetime],
    transactions: Iterable[ExchangeTransaction],
    credit_transactions: Iterable[CreditTransaction],
    expenses: Iterable[Expense],
    cash_record: Optional[CashTrackerRecord] = None,
) -> LedgerSnapshot:
    """Reduce one day's inputs into a ledger snapshot.

    Inputs are assumed already filtered to the day window; expenses are
    additionally matched on ``expense_date``. Without a cash record the
    opening balances are zero. Without a closing count ``actual`` is zero and
    the snapshot reports ``is_closed=False``.
    """
    buckets = classify_transactions(transactions)
    credit = aggregate_credit(credit_transactions)
    expense_totals = aggregate_expenses(expenses, target_date)

    ledgers = {}
    for currency in Currency:
        b = buckets[currency]
        c = credit[currency]
        opening = cash_record.opening(currency) if cash_record is not None else ZERO
        closing = cash_record.closing(currency) if cash_record is not None else None
        actual = closing if closing is not None else ZERO

        expected = (
            opening
            + b.received_via_exchange
            + c.received
            - b.paid_out_via_exchange
            - expense_totals[currency]
            - c.given
        )
        ledgers[currency] = CurrencyLedger(
            currency=currency,
            opening=opening,
            received_via_exchange=b.received_via_exchange,
            cash_received=b.cash_received,
            online_received=b.online_received,
            expenses=expense_totals[currency],
            paid_out_via_exchange=b.paid_out_via_exchange,
            credit_given=c.given,
            credit_received=c.received,
            staff_owes_personal=b.staff_owes_personal,
            expected=expected,
            actual=actual,
            difference=expected - actual,
        )

    start, end = window
    return LedgerSnapshot(
        date=target_date,
        window_start=start,
        window_end=end,
        has_cash_record=cash_record is not None,
        is_closed=bool(cash_record is not None and cash_record.is_closed),
        npr=ledgers[Currency.NPR],
        inr=ledgers[Currency.INR],
    )


def summarize_period(
    start_date: date,
    end_date: date,
    window: tuple[datetime, datetime],
    transactions: Iterable[ExchangeTransaction],
    credit_transactions: Iterable[CreditTransaction],
    expenses: Iterable[Expense],
) -> PeriodSummary:
    """Total exchanges, expenses and credit over a range of business days.

    Uses the same buckets as the daily ledger, without opening balances or
    counts, so a month's ``net_flow`` equals the sum of its days'
    ``expected - opening``.
    """
    transactions = list(transactions)
    buckets = classify_transactions(transactions)
    credit = aggregate_credit(credit_transactions)
    expense_totals = aggregate_expenses(
        e for e in expenses if start_date <= e.expense_date <= end_date
    )

    totals = {
        currency: CurrencyPeriodTotals(
            currency=currency,
            received_via_exchange=buckets[currency].received_via_exchange,
            paid_out_via_exchange=buckets[currency].paid_out_via_exchange,
            expenses=expense_totals[currency],
            credit_given=credit[currency].given,
            credit_received=credit[currency].received,
        )
        for currency in Currency
    }
    start, end = window
    return PeriodSummary(
        start_date=start_date,
        end_date=end_date,
        window_start=start,
        window_end=end,
        transaction_count=len(transactions),
        npr=totals[Currency.NPR],
        inr=totals[Currency.INR],
    )


def pick_cash_record(
    records: list[CashTrackerRecord], target_date: date
) -> Optional[CashTrackerRecord]:
    """Choose the cash record a shop-wide ledger starts from."""
    if not records:
        return None
    if len(records) > 1:
        logger.warning(
            "%d cash records exist for %s; using the earliest (staff %s)",
            len(records), target_date.isoformat(), records[0].staff_id,
        )
    return records[0]


class LedgerService:
    """Builds daily ledgers from the database."""

    def __init__(self, db: Database, use_day_end_setting: bool = False):
        """Initialize ledger service.

        Args:
            db: Database instance
            use_day_end_setting: Apply the persisted day-end time to the day
                window instead of plain midnight
        """
        self.db = db
        self.use_day_end_setting = use_day_end_setting

    def _day_end(self) -> Optional[time]:
        if not self.use_day_end_setting:
            return None
        return day_end_from_settings(self.db.get_system_settings())

    def build_daily_ledger(
        self,
        target_date: date,
        cash_tracker_override: Optional[CashTrackerRecord] = None,
        staff_id: Optional[str] = None,
    ) -> LedgerSnapshot:
        """Compute the ledger for a business date.

        All inputs are read inside one snapshot so a concurrent write is
        either fully visible or not visible at all.

        Args:
            target_date: Business date to reconcile
            cash_tracker_override: Use this opening/closing record instead of
                the stored one (e.g. counts still being edited)
            staff_id: Restrict the cash record lookup to one staff member

        Returns:
            LedgerSnapshot for the date
        """
        with self.db.read_snapshot():
            window = day_window(target_date, self._day_end())
            start, end = window
            transactions = self.db.list_exchange_transactions(start=start, end=end)
            credit_transactions = self.db.list_credit_transactions(start=start, end=end)
            expenses = self.db.list_expenses(expense_date=target_date)
            if cash_tracker_override is not None:
                cash_record = cash_tracker_override
            else:
                cash_record = pick_cash_record(
                    self.db.list_cash_tracker_records(target_date, staff_id=staff_id),
                    target_date,
                )

        snapshot = build_ledger(
            target_date,
            window,
            transactions=transactions,
            credit_transactions=credit_transactions,
            expenses=expenses,
            cash_record=cash_record,
        )
        logger.debug(
            "Ledger %s [%s, %s): %d transactions, %d credit, %d expenses; "
            "expected NPR %s INR %s",
            target_date.isoformat(), start.isoformat(), end.isoformat(),
            len(transactions), len(credit_transactions), len(expenses),
            snapshot.npr.expected, snapshot.inr.expected,
        )
        return snapshot

    def build_period_summary(self, start_date: date, end_date: date) -> PeriodSummary:
        """Total the business days ``start_date`` to ``end_date`` inclusive.

        Raises:
            ValidationError: If end_date is before start_date
        """
        with self.db.read_snapshot():
            window = period_window(start_date, end_date, self._day_end())
            start, end = window
            transactions = self.db.list_exchange_transactions(start=start, end=end)
            credit_transactions = self.db.list_credit_transactions(start=start, end=end)
            expenses = self.db.list_expenses(start_date=start_date, end_date=end_date)

        summary = summarize_period(
            start_date,
            end_date,
            window,
            transactions=transactions,
            credit_transactions=credit_transactions,
            expenses=expenses,
        )
        logger.debug(
            "Period %s..%s [%s, %s): %d transactions, net NPR %s INR %s",
            start_date.isoformat(), end_date.isoformat(), start.isoformat(), end.isoformat(),
            summary.transaction_count, summary.npr.net_flow, summary.inr.net_flow,
        )
        return summary

    def build_monthly_summary(self, month: date) -> PeriodSummary:
        """Summarize the calendar month containing ``month``."""
        first, last = month_bounds(month)
        return self.build_period_summary(first, last)


@dataclass(frozen=True)
class LedgerRequest:
    """Token identifying one ledger computation."""

    sequence: int
    target_date: date


class LedgerRequestTracker:
    """Discards ledger results that were superseded by a newer request.

    Call ``start`` before computing and ``accept`` when the result arrives;
    only the result of the most recently started request is accepted.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: Optional[LedgerRequest] = None

    def start(self, target_date: date) -> LedgerRequest:
        request = LedgerRequest(next(self._counter), target_date)
        self._latest = request
        return request

    def is_current(self, request: LedgerRequest) -> bool:
        return self._latest is not None and request.sequence == self._latest.sequence

    def accept(self, request: LedgerRequest) -> bool:
        """Return True if the result of ``request`` should be displayed."""
        if self.is_current(request):
            return True
        logger.warning(
            "Discarding stale ledger result for %s (request %d superseded by %d)",
            request.target_date.isoformat(), request.sequence,
            self._latest.sequence if self._latest else 0,
        )
        return False

    def run(self, service: LedgerService, target_date: date) -> Optional[LedgerSnapshot]:
        """Compute a ledger and return it unless a newer request started meanwhile."""
        request = self.start(target_date)
        snapshot = service.build_daily_ledger(target_date)
        return snapshot if self.accept(request) else None
