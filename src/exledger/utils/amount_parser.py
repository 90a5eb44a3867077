"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

# Rupee signs and codes as they appear on receipts and in chat messages.
_CURRENCY_MARKERS = re.compile(r"(रू|रु|₹|\bRs\.?|\bNPR\b|\bINR\b|\bIRs\b)", re.IGNORECASE)


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "Rs. 1,250"
    - "रू 1,00,000" (lakh grouping)
    - "₹625"
    - "NPR 500" / "500 INR"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = _CURRENCY_MARKERS.sub("", amount_str.strip())
    cleaned = cleaned.replace(",", "").replace(" ", "").strip()

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount
