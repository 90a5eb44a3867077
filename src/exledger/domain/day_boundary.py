"""Business-day windows.

All timestamps are naive shop-local time. By default a business day runs
from midnight to midnight. A configured day-end time moves the rollover:

- an early-morning day end (before noon), e.g. 02:00, extends day D until
  02:00 on D+1 so late-night trade stays on D;
- a day end from noon onwards, e.g. 22:00, closes day D at 22:00 on D and
  anything later belongs to D+1.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from exledger.domain.entities import SystemSettings
from exledger.domain.errors import ValidationError

NOON = time(12, 0)


def day_end_from_settings(settings: SystemSettings) -> Optional[time]:
    """Return the configured day end, or None for plain midnight."""
    if settings.day_end_hour == 0 and settings.day_end_minute == 0:
        return None
    return time(settings.day_end_hour, settings.day_end_minute)


def day_window(target: date, day_end: Optional[time] = None) -> tuple[datetime, datetime]:
    """Return the [start, end) instants of the business day ``target``."""
    if day_end is None or day_end == time.min:
        start = datetime.combine(target, time.min)
        return start, start + timedelta(days=1)

    end_day = target + timedelta(days=1) if day_end < NOON else target
    end = datetime.combine(end_day, day_end)
    return end - timedelta(days=1), end


def business_date_for(moment: datetime, day_end: Optional[time] = None) -> date:
    """Return the business day whose window contains ``moment``."""
    candidate = moment.date()
    for offset in (-1, 0, 1):
        day = candidate + timedelta(days=offset)
        start, end = day_window(day, day_end)
        if start <= moment < end:
            return day
    # Every instant falls within one of the three neighbouring windows.
    raise AssertionError(f"No business day contains {moment.isoformat()}")


def period_window(
    start_date: date, end_date: date, day_end: Optional[time] = None
) -> tuple[datetime, datetime]:
    """Return the [start, end) instants covering business days start_date..end_date."""
    if end_date < start_date:
        raise ValidationError(
            f"Period ends ({end_date.isoformat()}) before it starts ({start_date.isoformat()})"
        )
    return day_window(start_date, day_end)[0], day_window(end_date, day_end)[1]


def month_bounds(month: date) -> tuple[date, date]:
    """Return the first and last calendar day of the month containing ``month``."""
    first = month.replace(day=1)
    return first, first + relativedelta(months=1) - timedelta(days=1)
