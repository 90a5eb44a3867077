"""Banknote denomination counting.

A denomination count maps a face value label (``"1000"``, ``"500"``, ...) to
the number of notes counted. INR counts may also carry a ``"coins"`` bucket
whose face value is 1.
"""

import logging
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from exledger.domain.entities import Currency, Money
from exledger.domain.errors import ValidationError

logger = logging.getLogger(__name__)

NPR_DENOMINATIONS: tuple[int, ...] = (1000, 500, 100, 50, 20, 10, 5)
INR_DENOMINATIONS: tuple[int, ...] = (500, 200, 100, 50, 20, 10)
COINS_KEY = "coins"

DenominationCount = dict[str, int]


def face_values_for(currency: Currency) -> tuple[int, ...]:
    """Return the note face values for a currency, largest first."""
    return NPR_DENOMINATIONS if currency is Currency.NPR else INR_DENOMINATIONS


def coins_key_for(currency: Currency) -> Optional[str]:
    """Only INR counts have a coins bucket."""
    return COINS_KEY if currency is Currency.INR else None


def _validate_count(key: str, count) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(f"Count for '{key}' must be a whole number, got {count!r}")
    if count < 0:
        raise ValidationError(f"Count for '{key}' cannot be negative")
    return count


def denomination_total(
    counts: Mapping[str | int, int],
    face_values: Sequence[int],
    coins_key: Optional[str] = None,
) -> Decimal:
    """Sum count x face value over the known face values.

    Unknown keys are ignored. Negative or non-integer counts are rejected,
    including counts stored under unknown keys.

    Args:
        counts: Mapping of face value label to note count
        face_values: Face values that contribute to the total
        coins_key: Optional label of a bucket valued at 1 per unit

    Returns:
        Total as a Decimal

    Raises:
        ValidationError: If any count is negative or not an integer
    """
    normalized: dict[str, int] = {}
    for key, count in counts.items():
        label = str(key)
        normalized[label] = _validate_count(label, count)

    total = 0
    for value in face_values:
        total += normalized.get(str(value), 0) * value
    if coins_key is not None:
        total += normalized.get(coins_key, 0)
    return Decimal(total)


def total_for_currency(counts: Mapping[str | int, int], currency: Currency) -> Money:
    """Return the currency total of a denomination count."""
    amount = denomination_total(counts, face_values_for(currency), coins_key_for(currency))
    return Money(amount, currency)


def breakdown(
    total: Decimal | int,
    face_values: Sequence[int],
    allow_remainder_bucket: bool,
) -> DenominationCount:
    """Greedy split of a stored total into note counts.

    This only pre-fills an edit form from a previously stored scalar total.
    It is not guaranteed to reproduce the notes that were actually counted.
    Whatever cannot be expressed in notes goes to the coins bucket when
    ``allow_remainder_bucket`` is set (whole units only), and is otherwise
    dropped with a warning.

    Raises:
        ValidationError: If total is negative
    """
    remaining = Decimal(total)
    if remaining < 0:
        raise ValidationError("Cannot break down a negative total")

    result: DenominationCount = {}
    for value in sorted(face_values, reverse=True):
        count = int(remaining // value)
        if count > 0:
            result[str(value)] = count
            remaining -= count * value

    if allow_remainder_bucket and remaining >= 1:
        coins = int(remaining)
        result[COINS_KEY] = coins
        remaining -= coins

    if remaining > 0:
        logger.warning(
            "Denomination breakdown of %s dropped remainder %s", total, remaining
        )
    return result


def breakdown_for_currency(total: Decimal | int, currency: Currency) -> DenominationCount:
    """Greedy breakdown using the currency's notes (and coins for INR)."""
    return breakdown(total, face_values_for(currency), coins_key_for(currency) is not None)
