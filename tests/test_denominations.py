"""Tests for denomination counting and greedy breakdown."""

import logging
import random
from decimal import Decimal

import pytest

from exledger.domain.denominations import (
    COINS_KEY,
    INR_DENOMINATIONS,
    NPR_DENOMINATIONS,
    breakdown,
    breakdown_for_currency,
    denomination_total,
    total_for_currency,
)
from exledger.domain.entities import Currency, Money
from exledger.domain.errors import ValidationError


class TestDenominationTotal:
    """Tests for summing note counts."""

    def test_npr_total(self):
        counts = {"1000": 5, "500": 2, "100": 3, "5": 1}
        assert denomination_total(counts, NPR_DENOMINATIONS) == Decimal("6305")

    def test_integer_keys_accepted(self):
        assert denomination_total({1000: 2, 20: 1}, NPR_DENOMINATIONS) == Decimal("2020")

    def test_coins_counted_at_face_value_one(self):
        counts = {"500": 1, COINS_KEY: 7}
        assert denomination_total(counts, INR_DENOMINATIONS, COINS_KEY) == Decimal("507")

    def test_coins_ignored_without_coins_key(self):
        counts = {"500": 1, COINS_KEY: 7}
        assert denomination_total(counts, INR_DENOMINATIONS) == Decimal("500")

    def test_unknown_keys_ignored(self):
        counts = {"1000": 1, "2000": 4, "foo": 3}
        assert denomination_total(counts, NPR_DENOMINATIONS) == Decimal("1000")

    def test_empty_counts_total_zero(self):
        assert denomination_total({}, NPR_DENOMINATIONS) == Decimal("0")

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            denomination_total({"100": -1}, NPR_DENOMINATIONS)

    @pytest.mark.parametrize("bad", [1.5, "3", None, True])
    def test_non_integer_count_rejected(self, bad):
        with pytest.raises(ValidationError, match="whole number"):
            denomination_total({"100": bad}, NPR_DENOMINATIONS)

    def test_total_for_currency_returns_money(self):
        result = total_for_currency({"200": 2, COINS_KEY: 3}, Currency.INR)
        assert result == Money(Decimal("403"), Currency.INR)

    def test_npr_has_no_coins_bucket(self):
        result = total_for_currency({"5": 1, COINS_KEY: 3}, Currency.NPR)
        assert result.amount == Decimal("5")


class TestBreakdown:
    """Tests for the greedy breakdown used to pre-fill edit forms."""

    def test_greedy_largest_first(self):
        assert breakdown(Decimal("1670"), NPR_DENOMINATIONS, False) == {
            "1000": 1,
            "500": 1,
            "100": 1,
            "50": 1,
            "20": 1,
        }

    def test_inr_remainder_goes_to_coins(self):
        assert breakdown_for_currency(Decimal("537"), Currency.INR) == {
            "500": 1,
            "20": 1,
            "10": 1,
            COINS_KEY: 7,
        }

    def test_npr_remainder_dropped_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="exledger"):
            result = breakdown_for_currency(Decimal("1003"), Currency.NPR)
        assert result == {"1000": 1}
        assert "dropped remainder 3" in caplog.text

    def test_zero_total(self):
        assert breakdown(0, NPR_DENOMINATIONS, False) == {}

    def test_negative_total_rejected(self):
        with pytest.raises(ValidationError):
            breakdown(Decimal("-5"), NPR_DENOMINATIONS, False)

    def test_breakdown_preserves_scalar_total(self):
        """The note mix may differ, but the total must survive a round trip."""
        rng = random.Random(42)
        for _ in range(200):
            counts = {str(v): rng.randint(0, 20) for v in INR_DENOMINATIONS}
            counts[COINS_KEY] = rng.randint(0, 50)
            total = total_for_currency(counts, Currency.INR).amount
            again = total_for_currency(breakdown_for_currency(total, Currency.INR), Currency.INR)
            assert again.amount == total

    def test_breakdown_preserves_npr_total_for_countable_amounts(self):
        rng = random.Random(7)
        for _ in range(200):
            counts = {str(v): rng.randint(0, 20) for v in NPR_DENOMINATIONS}
            total = total_for_currency(counts, Currency.NPR).amount
            again = total_for_currency(breakdown_for_currency(total, Currency.NPR), Currency.NPR)
            assert again.amount == total
