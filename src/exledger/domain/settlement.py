"""Staff settlement of personal-wallet receipts.

Online payments received into a staff member's personal wallet belong to the
shop. Whatever a staff member received that way during a day and has not yet
handed over is outstanding.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional

from exledger.database.base import Database
from exledger.domain.access import can_settle_staff, require
from exledger.domain.classifier import classify_transaction
from exledger.domain.day_boundary import day_end_from_settings, day_window
from exledger.domain.entities import Actor, Currency
from exledger.domain.errors import ValidationError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class StaffBalance:
    """Personal-wallet receipts of one staff member for one date."""

    staff_id: str
    owed_npr: Decimal
    owed_inr: Decimal
    settled_npr: Decimal
    settled_inr: Decimal

    @property
    def outstanding_npr(self) -> Decimal:
        return self.owed_npr - self.settled_npr

    @property
    def outstanding_inr(self) -> Decimal:
        return self.owed_inr - self.settled_inr

    @property
    def is_settled(self) -> bool:
        return self.outstanding_npr <= 0 and self.outstanding_inr <= 0


class SettlementService:
    """Service for reporting and settling what staff owe the shop."""

    def __init__(self, db: Database, use_day_end_setting: bool = False):
        """Initialize settlement service.

        Args:
            db: Database instance
            use_day_end_setting: Count receipts over the configured business
                day, matching a ledger built with the same flag
        """
        self.db = db
        self.use_day_end_setting = use_day_end_setting

    def _day_end(self) -> Optional[time]:
        if not self.use_day_end_setting:
            return None
        return day_end_from_settings(self.db.get_system_settings())

    def balances(self, day: date, staff_id: Optional[str] = None) -> list[StaffBalance]:
        """Owed, settled and outstanding amounts per staff member for a date."""
        owed: dict[str, dict[Currency, Decimal]] = defaultdict(
            lambda: {currency: ZERO for currency in Currency}
        )
        settled: dict[str, dict[Currency, Decimal]] = defaultdict(
            lambda: {currency: ZERO for currency in Currency}
        )

        with self.db.read_snapshot():
            start, end = day_window(day, self._day_end())
            transactions = self.db.list_exchange_transactions(start=start, end=end, staff_id=staff_id)
            settlements = self.db.list_staff_settlements(day, staff_id=staff_id)

        for txn in transactions:
            for currency, buckets in classify_transaction(txn).items():
                if buckets.staff_owes_personal:
                    owed[txn.staff_id][currency] += buckets.staff_owes_personal
        for settlement in settlements:
            settled[settlement.staff_id][Currency.NPR] += settlement.npr_amount
            settled[settlement.staff_id][Currency.INR] += settlement.inr_amount

        return [
            StaffBalance(
                staff_id=staff,
                owed_npr=owed[staff][Currency.NPR],
                owed_inr=owed[staff][Currency.INR],
                settled_npr=settled[staff][Currency.NPR],
                settled_inr=settled[staff][Currency.INR],
            )
            for staff in sorted(set(owed) | set(settled))
        ]

    def settle(
        self,
        actor: Actor,
        staff_id: str,
        day: date,
        npr_amount: Optional[Decimal] = None,
        inr_amount: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record that a staff member handed over personal-wallet receipts.

        Amounts default to what is outstanding for the date.

        Raises:
            PermissionDeniedError: If the actor is not an owner or manager
            ValidationError: If there is nothing to settle or an amount is negative
        """
        require(actor, can_settle_staff(actor), "settle staff balances")
        if npr_amount is None or inr_amount is None:
            balance = next(iter(self.balances(day, staff_id=staff_id)), None)
            if npr_amount is None:
                npr_amount = max(balance.outstanding_npr, ZERO) if balance else ZERO
            if inr_amount is None:
                inr_amount = max(balance.outstanding_inr, ZERO) if balance else ZERO

        if npr_amount < 0 or inr_amount < 0:
            raise ValidationError("Settlement amounts cannot be negative")
        if npr_amount == 0 and inr_amount == 0:
            raise ValidationError(
                f"Nothing to settle for staff '{staff_id}' on {day.isoformat()}"
            )

        settlement_id = self.db.create_staff_settlement(
            staff_id=staff_id,
            settled_by=actor.id,
            date=day,
            npr_amount=npr_amount,
            inr_amount=inr_amount,
            notes=notes,
        )
        logger.info(
            "Settled %s for %s: NPR %s, INR %s (by %s)",
            day.isoformat(), staff_id, npr_amount, inr_amount, actor.id,
        )
        return settlement_id

    def settle_day(self, actor: Actor, day: date) -> list[int]:
        """Settle every staff member with an outstanding balance for the date.

        The settlements are written in one unit of work: if any of them
        fails, none is recorded.
        """
        require(actor, can_settle_staff(actor), "settle staff balances")
        settlement_ids = []
        with self.db.unit_of_work():
            for balance in self.balances(day):
                if balance.is_settled:
                    continue
                settlement_ids.append(
                    self.settle(
                        actor,
                        balance.staff_id,
                        day,
                        npr_amount=max(balance.outstanding_npr, ZERO),
                        inr_amount=max(balance.outstanding_inr, ZERO),
                    )
                )
        return settlement_ids
