"""Date and time parsing utilities."""

from datetime import date, datetime, time, timedelta
import re

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_DAYS_AGO = re.compile(r"^(\d+) days? ago$")
_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "3 days ago", "last friday"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    match = _DAYS_AGO.match(date_str)
    if match:
        return today - timedelta(days=int(match.group(1)))

    if date_str.startswith("last ") and date_str[5:] in _WEEKDAYS:
        target_day = _WEEKDAYS.index(date_str[5:])
        days_ago = (today.weekday() - target_day) % 7
        if days_ago == 0:
            days_ago = 7
        return today - timedelta(days=days_ago)

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_time_of_day(time_str: str) -> time:
    """Parse "HH:MM" (24-hour) or "10pm"-style strings into a time.

    Raises:
        ValueError: If the string is not a time of day
    """
    time_str = time_str.strip()
    if not time_str:
        raise ValueError("Empty time string")
    try:
        dt = date_parser.parse(time_str, default=datetime(2000, 1, 1))
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse time '{time_str}': {e}")
    if dt.date() != date(2000, 1, 1):
        raise ValueError(f"Expected a time of day, got '{time_str}'")
    return dt.time().replace(second=0, microsecond=0)


def parse_month(month_str: str) -> date:
    """Parse "2024-03", "March 2024", "this month" or "last month".

    Returns:
        The first day of the month

    Raises:
        ValueError: If the string is not a month
    """
    month_str = month_str.strip().lower()
    this_month = date.today().replace(day=1)
    if month_str == "this month":
        return this_month
    if month_str == "last month":
        return this_month - relativedelta(months=1)

    try:
        dt = date_parser.parse(month_str, default=datetime(this_month.year, 1, 1))
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse month '{month_str}': {e}")
    return dt.date().replace(day=1)
