"""
Per-date service listing availability.

Decides whether a service listing can still be booked or placed on a
calendar date, based on:
- the listing itself (exists, active)
- vendor personal time off on that date
- the listing's availability policy and the active bookings for that date

Read-only: nothing here writes to the database.
"""
import logging
from dataclasses import dataclass, asdict
from datetime import date
from typing import Dict, Iterable, Optional, Union
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import Sum

from apps.bookings.models import Booking, SelectedService
from apps.listings.models import ServiceListing, ServiceAvailability
from apps.schedules.models import TimeSlot
from apps.core.utils.constants import (
    ACTIVE_BOOKING_STATUSES,
    AVAILABILITY_EXCLUSIVE,
    AVAILABILITY_REUSABLE,
    AVAILABILITY_QUANTITY_BASED,
    SLOT_STATUS_PERSONAL_TIME_OFF,
)
from apps.core.utils.helpers import parse_calendar_date

logger = logging.getLogger(__name__)

REASON_NOT_FOUND = 'Service listing not found'
REASON_INACTIVE = 'Service listing is inactive'
REASON_VENDOR_UNAVAILABLE = 'Vendor is unavailable on this date'
REASON_ALREADY_BOOKED = 'Already booked for this date'
REASON_SOLD_OUT = 'No remaining quantity for this date'
REASON_UNSUPPORTED = 'Unsupported availability type'
REASON_CHECK_FAILED = 'Error checking availability'


@dataclass
class AvailabilityResult:
    """Outcome of an availability check for one listing on one date."""
    service_listing_id: str
    date: date
    available: bool
    reason: Optional[str] = None
    availability_type: Optional[str] = None
    available_quantity: Optional[int] = None
    max_quantity: Optional[int] = None
    booked_quantity: Optional[int] = None

    def fits(self, requested: int) -> bool:
        """Whether a request for `requested` units fits the reported capacity."""
        if not self.available:
            return False
        if self.available_quantity is None:
            return True
        return requested <= self.available_quantity

    def to_dict(self) -> dict:
        data = asdict(self)
        data['date'] = self.date.isoformat()
        return {key: value for key, value in data.items() if value is not None}


class AvailabilityService:
    """
    Availability calculator for one listing on one date.

    Example usage:
        result = AvailabilityService(listing_id, date(2025, 6, 1)).check()
        if not result.available:
            ...
    """

    def __init__(self, service_listing_id: Union[UUID, str], target_date: Union[date, str]):
        self.service_listing_id = str(service_listing_id)
        self.target_date = parse_calendar_date(target_date)

        self._listing: Optional[ServiceListing] = None
        self._listing_loaded = False

    @property
    def listing(self) -> Optional[ServiceListing]:
        """Fetch and cache the listing, None when it does not exist."""
        if not self._listing_loaded:
            try:
                self._listing = ServiceListing.objects.select_related('vendor').get(
                    id=self.service_listing_id
                )
            except (ServiceListing.DoesNotExist, ValidationError, ValueError):
                self._listing = None
            self._listing_loaded = True
        return self._listing

    def _result(self, available: bool, **kwargs) -> AvailabilityResult:
        return AvailabilityResult(
            service_listing_id=self.service_listing_id,
            date=self.target_date,
            available=available,
            **kwargs
        )

    def active_bookings(self):
        """Active bookings on the target date that include this listing."""
        return Booking.objects.filter(
            reserved_date=self.target_date,
            status__in=ACTIVE_BOOKING_STATUSES,
            selected_services__service_listing_id=self.service_listing_id,
        ).distinct()

    def vendor_on_time_off(self) -> bool:
        return TimeSlot.objects.filter(
            vendor_id=self.listing.vendor_id,
            date=self.target_date,
            status=SLOT_STATUS_PERSONAL_TIME_OFF,
        ).exists()

    def max_quantity(self) -> int:
        """Per-date override if present, else the listing default, else 0."""
        override = ServiceAvailability.objects.filter(
            service_listing_id=self.service_listing_id,
            date=self.target_date,
        ).values_list('max_quantity', flat=True).first()
        if override is not None:
            return override
        return self.listing.max_quantity or 0

    def booked_quantity(self) -> int:
        total = SelectedService.objects.filter(
            service_listing_id=self.service_listing_id,
            booking__reserved_date=self.target_date,
            booking__status__in=ACTIVE_BOOKING_STATUSES,
        ).aggregate(total=Sum('quantity'))['total']
        return total or 0

    def check(self) -> AvailabilityResult:
        listing = self.listing
        if listing is None:
            return self._result(False, reason=REASON_NOT_FOUND)

        availability_type = listing.availability_type
        if not listing.is_active:
            return self._result(False, reason=REASON_INACTIVE, availability_type=availability_type)

        if self.vendor_on_time_off():
            return self._result(False, reason=REASON_VENDOR_UNAVAILABLE, availability_type=availability_type)

        if availability_type == AVAILABILITY_EXCLUSIVE:
            if self.active_bookings().exists():
                return self._result(False, reason=REASON_ALREADY_BOOKED, availability_type=availability_type)
            return self._result(True, availability_type=availability_type)

        if availability_type == AVAILABILITY_REUSABLE:
            return self._result(True, availability_type=availability_type)

        if availability_type == AVAILABILITY_QUANTITY_BASED:
            max_quantity = self.max_quantity()
            booked = self.booked_quantity()
            remaining = max(0, max_quantity - booked)
            return self._result(
                remaining > 0,
                reason=None if remaining > 0 else REASON_SOLD_OUT,
                availability_type=availability_type,
                available_quantity=remaining,
                max_quantity=max_quantity,
                booked_quantity=booked,
            )

        return self._result(False, reason=REASON_UNSUPPORTED, availability_type=availability_type)


def check_availability(service_listing_id, target_date) -> AvailabilityResult:
    """Check one listing on one calendar date."""
    return AvailabilityService(service_listing_id, target_date).check()


def check_many(service_listing_ids: Iterable, target_date) -> Dict[str, AvailabilityResult]:
    """
    Check several listings on the same date. A failing check is reported as
    unavailable instead of aborting the batch.
    """
    target = parse_calendar_date(target_date)
    results = {}
    for listing_id in service_listing_ids:
        key = str(listing_id)
        if key in results:
            continue
        try:
            results[key] = check_availability(key, target)
        except Exception:
            logger.exception(f"Availability check failed for listing {key} on {target}")
            results[key] = AvailabilityResult(
                service_listing_id=key, date=target, available=False, reason=REASON_CHECK_FAILED
            )
    return results
