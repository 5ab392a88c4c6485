"""
Money and time helpers shared by the order service and ticket rendering.

Amounts travel as decimal strings ("120.50") with at most two decimal
places. They are parsed to float for arithmetic, then formatted back
with two decimals. Every amount fits a NUMERIC(10, 2) column.
"""

import math
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

MAX_AMOUNT = Decimal("99999999.99")
CENT = Decimal("0.01")


def parse_amount(value: str) -> float:
    """
    Parse a decimal string into a non-negative float.

    Raises:
        ValueError: If the string is not a finite, non-negative number of
            whole cents no larger than MAX_AMOUNT
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a valid amount")
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"'{value}' is not a valid amount")
    if amount > MAX_AMOUNT:
        raise ValueError(f"'{value}' exceeds the maximum amount {MAX_AMOUNT}")
    if amount != amount.quantize(CENT):
        raise ValueError(f"'{value}' has more than two decimal places")
    return float(amount)


def format_amount(amount: Union[float, int]) -> str:
    """Format an amount as a two-decimal string: 250 -> "250.00"."""
    return f"{amount:.2f}"


def _checked(amount: float) -> float:
    if not math.isfinite(amount) or amount > MAX_AMOUNT:
        raise ValueError(f"Amount exceeds the maximum {MAX_AMOUNT}")
    return amount


def line_total(price: str, quantity: int) -> float:
    return _checked(round(parse_amount(price) * quantity, 2))


def order_total(lines: list[tuple[str, int]]) -> float:
    """Sum of the rounded line totals over (price, quantity) pairs."""
    return _checked(round(sum(line_total(price, quantity) for price, quantity in lines), 2))


def format_currency(amount: Union[float, str], symbol: str = "₹") -> str:
    if isinstance(amount, str):
        amount = parse_amount(amount)
    return f"{symbol}{amount:.2f}"


def time_since(moment: datetime, now: Optional[datetime] = None) -> str:
    """
    Human readable age of a timestamp.

    Example:
        >>> time_since(placed_at)
        '12 min ago'
    """
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    minutes = int((now - moment).total_seconds() // 60)
    hours = minutes // 60

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days != 1 else ''} ago"
