"""
Pricing calculation for service listings.

Each listing is priced by its pricing policy:
- per_unit: price x quantity
- per_table: price x number of tables tagged with the listing
- fixed_package: price
- time_based: hourly_rate x event duration in hours
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation as DecimalInvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from django.utils.dateparse import parse_datetime

from apps.core.utils.constants import (
    PRICING_PER_UNIT,
    PRICING_PER_TABLE,
    PRICING_FIXED_PACKAGE,
    PRICING_TIME_BASED,
)

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]


class PricingError(ValueError):
    """Raised when a listing cannot be priced with the given context."""


def _as_decimal(value, label: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (DecimalInvalidOperation, TypeError, ValueError):
        raise PricingError(f"Invalid {label} format")


def _require_non_negative(value: Optional[Number], message: str, label: str) -> Decimal:
    if value is None:
        raise PricingError(message)
    amount = _as_decimal(value, label)
    if amount < 0:
        raise PricingError(f"{label.capitalize()} cannot be negative")
    return amount


def calculate_price(
    listing,
    quantity: Optional[Number] = None,
    table_count: Optional[Number] = None,
    event_duration: Optional[Number] = None,
) -> Decimal:
    """
    Calculate the total cost of a listing for the given context.

    Raises PricingError when the policy needs context that is missing or
    negative, or when a time-based listing has no hourly rate.
    """
    if listing is None:
        raise PricingError('Service listing is required')

    base_price = _as_decimal(listing.price, 'price')
    policy = listing.pricing_policy

    if policy == PRICING_PER_UNIT:
        units = _require_non_negative(quantity, 'Quantity is required for per_unit pricing', 'quantity')
        return base_price * units

    if policy == PRICING_PER_TABLE:
        tables = _require_non_negative(table_count, 'Table count is required for per_table pricing', 'table count')
        return base_price * tables

    if policy == PRICING_FIXED_PACKAGE:
        return base_price

    if policy == PRICING_TIME_BASED:
        if not listing.hourly_rate:
            raise PricingError('Hourly rate is required for time_based pricing')
        hours = _require_non_negative(
            event_duration, 'Event duration is required for time_based pricing', 'event duration'
        )
        return _as_decimal(listing.hourly_rate, 'hourly rate') * hours

    logger.warning(f"Unknown pricing policy {policy} for listing {listing.pk}, using base price")
    return base_price


def fallback_price(listing, quantity: int = 1) -> Decimal:
    """
    Price used when calculate_price fails: unit and table policies scale the
    base price by quantity, everything else is the flat base price.
    """
    base_price = _as_decimal(listing.price or 0, 'price')
    if listing.pricing_policy in (PRICING_PER_UNIT, PRICING_PER_TABLE):
        return base_price * Decimal(quantity)
    return base_price


def _coerce_datetime(value, label: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed is not None:
            return parsed
    raise PricingError(f"Invalid {label} format")


def calculate_event_duration(event_start, event_end) -> Decimal:
    """
    Event duration in hours, rounded to 2 decimal places.
    """
    if not event_start or not event_end:
        raise PricingError('Both event start time and end time are required')

    start = _coerce_datetime(event_start, 'start time')
    end = _coerce_datetime(event_end, 'end time')

    if end <= start:
        raise PricingError('Event end time must be after start time')

    seconds = Decimal(str((end - start).total_seconds()))
    return (seconds / Decimal(3600)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def project_event_duration(project) -> Optional[Decimal]:
    """Event duration for a wedding project, or None when it cannot be derived"""
    if not project or not project.event_start_time or not project.event_end_time:
        return None
    try:
        return calculate_event_duration(project.event_start_time, project.event_end_time)
    except PricingError as e:
        logger.warning(f"Cannot derive event duration for project {project.pk}: {e}")
        return None
