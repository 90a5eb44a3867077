"""Cash tracker: opening and closing counts per staff-day."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Mapping, Optional

from exledger.database.base import Database
from exledger.domain.access import can_manage_cash_days, is_active, require, require_active
from exledger.domain.denominations import (
    DenominationCount,
    breakdown_for_currency,
    total_for_currency,
)
from exledger.domain.entities import Actor, CashTrackerRecord, Currency
from exledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    cash_record_not_found,
)

logger = logging.getLogger(__name__)

Counts = Mapping[str | int, int]


def _totals(npr_counts: Counts, inr_counts: Counts) -> tuple[Decimal, Decimal]:
    return (
        total_for_currency(npr_counts, Currency.NPR).amount,
        total_for_currency(inr_counts, Currency.INR).amount,
    )


class CashTrackerService:
    """Service for opening, closing and correcting cash days."""

    def __init__(self, db: Database):
        """Initialize cash tracker service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_record(
        self, day: date, staff_id: Optional[str] = None
    ) -> Optional[CashTrackerRecord]:
        """Get the cash record for a date.

        Without ``staff_id`` the earliest record of the day is returned.
        """
        records = self.db.list_cash_tracker_records(day, staff_id=staff_id)
        return records[0] if records else None

    def require_record(self, day: date, staff_id: Optional[str] = None) -> CashTrackerRecord:
        record = self.get_record(day, staff_id)
        if record is None:
            raise NotFoundError(cash_record_not_found(day))
        return record

    def previous_closed(
        self, day: date, staff_id: Optional[str] = None
    ) -> Optional[CashTrackerRecord]:
        """Get the latest closed record before ``day``, shown for comparison when opening."""
        return self.db.get_previous_closed_record(day, staff_id=staff_id)

    def open_day(
        self,
        actor: Actor,
        npr_counts: Counts,
        inr_counts: Counts,
        day: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record the opening cash count for the actor's day.

        Args:
            actor: Staff member opening the day
            npr_counts: NPR note counts
            inr_counts: INR note and coin counts
            day: Business date (defaults to today)
            notes: Optional notes

        Returns:
            Cash tracker record ID

        Raises:
            ValidationError: If a count is invalid or both totals are zero
            ConflictError: If the actor already opened this date
        """
        require_active(actor, "open a cash day")
        if day is None:
            day = date.today()
        opening_npr, opening_inr = _totals(npr_counts, inr_counts)
        if opening_npr == 0 and opening_inr == 0:
            raise ValidationError("Opening balance cannot be zero in both currencies")
        if self.db.list_cash_tracker_records(day, staff_id=actor.id):
            raise ConflictError(
                f"Cash day {day.isoformat()} is already open for staff '{actor.id}'"
            )

        record_id = self.db.create_cash_tracker_record(
            staff_id=actor.id,
            date=day,
            opening_npr=opening_npr,
            opening_inr=opening_inr,
            notes=notes,
        )
        logger.info(
            "Opened cash day %s for %s: NPR %s, INR %s",
            day.isoformat(), actor.id, opening_npr, opening_inr,
        )
        return record_id

    def close_day(
        self,
        actor: Actor,
        npr_counts: Counts,
        inr_counts: Counts,
        day: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> CashTrackerRecord:
        """Record the closing count for the actor's day and mark it closed.

        Raises:
            NotFoundError: If the day was never opened
            ConflictError: If the day is already closed
        """
        require_active(actor, "close a cash day")
        if day is None:
            day = date.today()
        record = self.require_record(day, actor.id)
        if record.is_closed:
            raise ConflictError(f"Cash day {day.isoformat()} is already closed")

        closing_npr, closing_inr = _totals(npr_counts, inr_counts)
        self.db.update_cash_tracker_record(
            record.id,
            closing_npr=closing_npr,
            closing_inr=closing_inr,
            is_closed=True,
            closed_at=datetime.now(),
            notes=notes,
        )
        logger.info(
            "Closed cash day %s for %s: NPR %s, INR %s",
            day.isoformat(), actor.id, closing_npr, closing_inr,
        )
        return self.db.get_cash_tracker_record_by_id(record.id)

    def edit_record(
        self,
        actor: Actor,
        record_id: int,
        opening_npr: Optional[Decimal] = None,
        opening_inr: Optional[Decimal] = None,
        closing_npr: Optional[Decimal] = None,
        closing_inr: Optional[Decimal] = None,
    ) -> None:
        """Correct stored totals. Staff may edit their own record; cash-day managers any.

        Closing totals may only be set on a closed day.
        """
        record = self.db.get_cash_tracker_record_by_id(record_id)
        if record is None:
            raise NotFoundError(f"Cash tracker record {record_id} not found")
        require(
            actor,
            can_manage_cash_days(actor) or (record.staff_id == actor.id and is_active(actor)),
            "edit this cash record",
        )
        for name, value in (
            ("Opening NPR", opening_npr),
            ("Opening INR", opening_inr),
            ("Closing NPR", closing_npr),
            ("Closing INR", closing_inr),
        ):
            if value is not None and Decimal(value) < 0:
                raise ValidationError(f"{name} cannot be negative")
        if (closing_npr is not None or closing_inr is not None) and not record.is_closed:
            raise ValidationError("Close the day before editing closing totals")

        self.db.update_cash_tracker_record(
            record_id,
            opening_npr=opening_npr,
            opening_inr=opening_inr,
            closing_npr=closing_npr,
            closing_inr=closing_inr,
        )
        logger.info("Cash record %s edited by %s", record_id, actor.id)

    def delete_day(self, actor: Actor, day: date, staff_id: Optional[str] = None) -> None:
        """Delete a cash day. Supervisors, or staff granted ``manage_cash_days``."""
        require(actor, can_manage_cash_days(actor), "delete cash days")
        record = self.require_record(day, staff_id)
        self.db.delete_cash_tracker_record(record.id)
        logger.info("Cash day %s (%s) deleted by %s", day.isoformat(), record.staff_id, actor.id)

    def suggest_denominations(
        self, record: CashTrackerRecord, currency: Currency, closing: bool = False
    ) -> DenominationCount:
        """Pre-fill note counts for editing a stored total. Best effort only."""
        total = record.closing(currency) if closing else record.opening(currency)
        if total is None:
            return {}
        return breakdown_for_currency(total, currency)
