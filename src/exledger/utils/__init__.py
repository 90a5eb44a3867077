"""Utility functions for exledger."""

from exledger.utils.date_parser import parse_date, parse_month, parse_time_of_day
from exledger.utils.amount_parser import parse_amount
from exledger.utils.denomination_parser import format_denominations, parse_denominations

__all__ = [
    "parse_date",
    "parse_month",
    "parse_time_of_day",
    "parse_amount",
    "parse_denominations",
    "format_denominations",
]
