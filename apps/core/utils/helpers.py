"""
Helper utilities
"""
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from django.utils import timezone


TWO_PLACES = Decimal('0.01')


def parse_calendar_date(value: Union[str, date, datetime]) -> date:
    """
    Normalize a request value to a calendar date.

    Accepts a date, a datetime (its UTC calendar day is used) or an ISO string
    ('2025-06-01' or a full ISO timestamp). Raises ValueError otherwise.
    """
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = value.astimezone(dt_timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError('Date is required')

    text = value.strip()
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid date: {value}")
    try:
        parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        raise ValueError(f"Invalid date: {value}")
    return parse_calendar_date(parsed)


def today() -> date:
    """Current UTC calendar day"""
    return timezone.now().astimezone(dt_timezone.utc).date()


def to_decimal(value) -> Decimal:
    """Convert numbers and numeric strings to Decimal without float noise"""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal('0')
    return Decimal(str(value))


def quantize_money(value) -> Decimal:
    """Round a money amount to 2 decimal places"""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
