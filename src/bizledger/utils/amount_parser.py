"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"
    - "€ 99"

    Signs are kept as written; whether a negative amount is acceptable is up
    to the caller.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    cleaned = re.sub(r"[$€£¥,\s]", "", str(amount_str))

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount


def parse_positive_amount(amount_str: str, field: str = "amount") -> Decimal:
    """Parse an amount that must be greater than zero."""
    amount = parse_amount(amount_str)
    if amount <= 0:
        raise ValueError(f"{field} must be greater than zero")
    return amount


def format_money(amount: Decimal) -> str:
    """Two-decimal rendering used by exports and listings."""
    return f"{amount:.2f}"


def format_currency(amount: Decimal, symbol: str = "$") -> str:
    """Render ``amount`` as e.g. "$1,234.50" or "-$5.00"."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
