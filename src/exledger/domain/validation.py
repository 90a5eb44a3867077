"""Input checks shared by the write-side services."""

from decimal import Decimal, InvalidOperation

from exledger.domain.errors import ValidationError, not_positive

CENT = Decimal("0.01")


def positive_amount(value: Decimal | int | str, field_name: str = "Amount") -> Decimal:
    """Return ``value`` as a Decimal after checking it is a positive money amount.

    Amounts carry at most two decimal places; anything finer is rejected
    rather than rounded away.

    Raises:
        ValidationError: If the amount is not a finite positive number with at
            most two decimal places
    """
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid number: {value!r}")

    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a finite number")
    if amount <= 0:
        raise ValidationError(not_positive(field_name))
    if amount != amount.quantize(CENT):
        raise ValidationError(f"{field_name} has more than two decimal places: {amount}")
    return amount


def positive_rate(value: Decimal | int | str) -> Decimal:
    """Exchange rates may carry more precision than amounts."""
    try:
        rate = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Exchange rate is not a valid number: {value!r}")
    if not rate.is_finite() or rate <= 0:
        raise ValidationError(not_positive("Exchange rate"))
    return rate
