"""Tests for command-line input parsers."""

from datetime import date, time, timedelta
from decimal import Decimal

import pytest

from exledger.utils import (
    format_denominations,
    parse_amount,
    parse_date,
    parse_denominations,
    parse_month,
    parse_time_of_day,
)


class TestParseDate:
    def test_parse_absolute_date(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)

    def test_parse_written_date(self):
        assert parse_date("March 15, 2024") == date(2024, 3, 15)

    def test_parse_today(self):
        assert parse_date("today") == date.today()

    def test_parse_yesterday(self):
        assert parse_date(" Yesterday ") == date.today() - timedelta(days=1)

    def test_parse_tomorrow(self):
        assert parse_date("tomorrow") == date.today() + timedelta(days=1)

    def test_parse_days_ago(self):
        assert parse_date("3 days ago") == date.today() - timedelta(days=3)
        assert parse_date("1 day ago") == date.today() - timedelta(days=1)

    def test_parse_last_weekday(self):
        result = parse_date("last friday")
        assert result.weekday() == 4
        assert 1 <= (date.today() - result).days <= 7

    def test_invalid_date(self):
        with pytest.raises(ValueError, match="Could not parse date"):
            parse_date("gibberish")


class TestParseMonth:
    def test_numeric_month(self):
        assert parse_month("2024-03") == date(2024, 3, 1)

    def test_written_month(self):
        assert parse_month("March 2024") == date(2024, 3, 1)

    def test_full_date_truncated_to_month(self):
        assert parse_month("2024-02-29") == date(2024, 2, 1)

    def test_relative_months(self):
        this_month = date.today().replace(day=1)
        assert parse_month("this month") == this_month
        last_month = parse_month("Last Month")
        assert last_month.day == 1
        assert last_month < this_month
        assert (this_month - last_month).days <= 31

    def test_invalid_month(self):
        with pytest.raises(ValueError, match="Could not parse month"):
            parse_month("gibberish")


class TestParseTimeOfDay:
    @pytest.mark.parametrize(
        "text,expected",
        [("22:00", time(22, 0)), ("02:30", time(2, 30)), ("10pm", time(22, 0)), ("0:00", time(0, 0))],
    )
    def test_valid_times(self, text, expected):
        assert parse_time_of_day(text) == expected

    @pytest.mark.parametrize("text", ["", "25:00", "soon", "2024-03-15"])
    def test_invalid_times(self, text):
        with pytest.raises(ValueError):
            parse_time_of_day(text)


class TestParseAmount:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("123.45", Decimal("123.45")),
            ("Rs. 1,250", Decimal("1250")),
            ("रू 1,00,000", Decimal("100000")),
            ("₹625", Decimal("625")),
            ("NPR 500", Decimal("500")),
            ("500 INR", Decimal("500")),
            ("-20", Decimal("-20")),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc", "Rs.", "nan", "1.2.3"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_amount(text)


class TestParseDenominations:
    def test_counts(self):
        assert parse_denominations("1000=5, 500=2,Coins=7") == {"1000": 5, "500": 2, "coins": 7}

    def test_repeated_labels_summed(self):
        assert parse_denominations("100=1,100=2") == {"100": 3}

    def test_empty_means_nothing_counted(self):
        assert parse_denominations("") == {}
        assert parse_denominations("1000=1,,") == {"1000": 1}

    @pytest.mark.parametrize("text", ["1000", "=5", "1000=five", "1000=1.5"])
    def test_malformed_entries(self, text):
        with pytest.raises(ValueError):
            parse_denominations(text)

    def test_format_round_trip(self):
        counts = {"1000": 5, "coins": 7}
        assert parse_denominations(format_denominations(counts)) == counts
