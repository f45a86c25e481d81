"""Small helpers shared by the budget components."""

import calendar
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Tuple

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

CENT = Decimal("0.01")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the way it is stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_decimal(value: Any) -> Decimal:
    """Convert numbers coming from the DB, JSON or Python code to Decimal."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Any) -> Decimal:
    """Round an amount to cents."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Return the first and the last day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def year_bounds(year: int) -> Tuple[date, date]:
    """Return the first and the last day of a year."""
    return date(year, 1, 1), date(year, 12, 31)


def percentage(part: Any, whole: Any) -> float:
    """Share of `part` in `whole` in percent, zero when `whole` is zero."""
    whole = to_decimal(whole)
    if whole == 0:
        return 0.0
    return float(to_decimal(part) / whole * 100)
