"""
Money and ledger-date utilities for the financial management system.

This module provides the conversion between major currency units (what
clients send and receive) and integer cents (what the database stores), plus
the date helpers that anchor balance projection to a fixed daily cutoff.
"""

import logging
from calendar import monthrange
from datetime import date, datetime, time, timedelta
from datetime import timezone as dt_timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Tuple, Union

from django.conf import settings
from django.utils import timezone

# Get structured logger for this module
logger = logging.getLogger(__name__)

CENTS_PER_UNIT = 100
TWO_PLACES = Decimal("0.01")

MoneyInput = Union[str, int, Decimal, float]


class CurrencyConversionError(Exception):
    """Custom exception for money conversion failures."""

    def __init__(self, message: str, value=None):
        self.message = message
        self.value = value
        super().__init__(self.message)


# -------------------------------------------------------------------
# MONEY CONVERSION
# -------------------------------------------------------------------


def to_cents(value: MoneyInput) -> int:
    """
    Convert an amount in major units to integer cents.

    Floats are routed through ``str()`` so that 10.1 becomes Decimal("10.1")
    rather than its binary approximation.

    Args:
        value: Amount in major units (e.g. "12.34", 12, Decimal("12.345"))

    Returns:
        Integer cents, rounded half up (12.345 -> 1235)

    Raises:
        CurrencyConversionError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise CurrencyConversionError("Amount must be a valid number", value=value)

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        logger.debug(
            "Money conversion failed",
            extra={
                "value": str(value),
                "error_message": str(e),
                "action": "to_cents_failed",
                "component": "to_cents",
            },
        )
        raise CurrencyConversionError("Amount must be a valid number", value=value)

    if not amount.is_finite():
        raise CurrencyConversionError("Amount must be a valid number", value=value)

    cents = (amount * CENTS_PER_UNIT).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


def from_cents(cents: int) -> Decimal:
    """
    Convert integer cents to a two-place Decimal in major units.

    Args:
        cents: Amount in cents

    Returns:
        Decimal amount (1234 -> Decimal("12.34"))
    """
    return (Decimal(int(cents)) / CENTS_PER_UNIT).quantize(
        TWO_PLACES, rounding=ROUND_HALF_UP
    )


def percentage(part: int, whole: int, cap: Optional[int] = None) -> Decimal:
    """Percentage of two cent amounts, two places, ROUND_HALF_UP; 0 for empty whole."""
    if not whole:
        return Decimal("0.00")
    value = Decimal(part) * 100 / Decimal(whole)
    if cap is not None:
        value = min(value, Decimal(cap))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# -------------------------------------------------------------------
# LEDGER DATES
# -------------------------------------------------------------------


def cutoff_hour() -> int:
    return getattr(settings, "LEDGER_CUTOFF_HOUR_UTC", 3)


def balance_cutoff(now: Optional[datetime] = None) -> datetime:
    """
    Instant up to which transactions count towards an account balance.

    Anchored to today's UTC date at the cutoff hour (03:00 UTC by default),
    so a transaction dated "today" by a user in Brazil (UTC-3) lands exactly
    on the cutoff.

    Args:
        now: Reference instant; defaults to ``timezone.now()``

    Returns:
        Aware UTC datetime
    """
    now = now or timezone.now()
    today = now.astimezone(dt_timezone.utc).date()
    return datetime.combine(today, time(hour=cutoff_hour()), tzinfo=dt_timezone.utc)


def normalize_ledger_date(value: Union[date, datetime, str]) -> datetime:
    """
    Normalize a transaction date to an aware datetime.

    Bare dates (and ``YYYY-MM-DD`` strings) map to that day at the cutoff
    hour in UTC; naive datetimes are taken as UTC; aware datetimes pass
    through unchanged.

    Raises:
        ValueError: If a string cannot be parsed
    """
    if isinstance(value, str):
        value = value.strip()
        if len(value) == 10:
            value = date.fromisoformat(value)
        else:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))

    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return value.replace(tzinfo=dt_timezone.utc)
        return value

    return datetime.combine(value, time(hour=cutoff_hour()), tzinfo=dt_timezone.utc)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """
    First and last instant of a calendar month in UTC.

    Returns:
        (start, end) where end is 23:59:59.999999 on the last day
    """
    last_day = monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=dt_timezone.utc)
    end = datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=dt_timezone.utc)
    return start, end


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Move (year, month) by ``offset`` months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def days_ago(days: int, now: Optional[datetime] = None) -> date:
    now = now or timezone.now()
    return (now - timedelta(days=days)).date()
