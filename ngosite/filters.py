from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£"}


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    s = str(value).strip().replace(",", "").replace("_", "")
    if not s:
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    return d if d.is_finite() else None


def commafy(value: Any, *, max_decimals: int = 2, blank_for_none: bool = False) -> str:
    """
    Thousands separators for int/float/Decimal or numeric strings.
    Trailing zero decimals are dropped ("1,500" rather than "1,500.00").
    """
    d = _to_decimal(value)
    if d is None:
        return "" if blank_for_none else "0"
    q = d.quantize(Decimal(1).scaleb(-max_decimals), rounding=ROUND_HALF_UP)
    if q == q.to_integral_value():
        return f"{q:,.0f}"
    return f"{q:,.{max_decimals}f}"


def money(value: Any, currency: str = "INR") -> str:
    code = (currency or "").upper()
    symbol = CURRENCY_SYMBOLS.get(code)
    amount = commafy(value)
    return f"{symbol}{amount}" if symbol else f"{amount} {code}".strip()


def format_date(value: Any, fmt: str = "%d %b %Y") -> str:
    if isinstance(value, (datetime, date)):
        return value.strftime(fmt)
    return ""


def format_datetime(value: Any, fmt: str = "%d %b %Y, %I:%M %p") -> str:
    if isinstance(value, datetime):
        return value.strftime(fmt)
    return format_date(value)


def date_range(start: Any, end: Any = None, fmt: str = "%b %Y") -> str:
    """'Jan 2024 - Mar 2024', or just the start when there is no end."""
    first = format_date(start, fmt)
    last = format_date(end, fmt)
    if first and last and first != last:
        return f"{first} - {last}"
    return first or last
