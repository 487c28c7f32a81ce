"""
Booking creation.

Creation is serialized per vendor: the vendor row is locked for the rest of
the transaction, so two requests for the same vendor and date cannot both
pass the availability re-check.
"""
import logging
from typing import List, Optional

from django.db import transaction
from rest_framework.exceptions import NotFound

from apps.bookings.models import Booking, SelectedService
from apps.bookings.services.linkage import sync_linked_items
from apps.listings.models import ServiceListing
from apps.listings.services.pricing import PricingError, calculate_price, fallback_price, project_event_duration
from apps.projects.models import WeddingProject
from apps.schedules.services.availability import AvailabilityService
from apps.vendors.models import Vendor
from apps.core.exceptions import InvalidOperation, ResourceConflict
from apps.core.utils.constants import (
    AVAILABILITY_EXCLUSIVE,
    AVAILABILITY_QUANTITY_BASED,
    BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
    PRICING_PER_TABLE,
)
from apps.core.utils.helpers import parse_calendar_date, quantize_money, today

logger = logging.getLogger(__name__)


class BookingService:
    """
    Creates bookings for couples.

    Example usage:
        booking = booking_service.create_booking(
            couple=couple,
            vendor_id=vendor.id,
            reserved_date='2025-06-01',
            selected_services=[{'service_listing_id': listing.id, 'quantity': 1}],
        )
    """

    @staticmethod
    def _resolve_project(couple, project_id) -> Optional[WeddingProject]:
        if not project_id:
            return None
        try:
            return WeddingProject.objects.get(id=project_id, couple=couple)
        except WeddingProject.DoesNotExist:
            raise NotFound('Project not found')

    @staticmethod
    def _resolve_listings(vendor, selected_services: List[dict]) -> List[tuple]:
        if not selected_services:
            raise InvalidOperation('At least one service must be selected')

        listing_ids = [str(item['service_listing_id']) for item in selected_services]
        if len(set(listing_ids)) != len(listing_ids):
            raise InvalidOperation('Each service listing can only be selected once')

        listings = {
            str(listing.id): listing
            for listing in ServiceListing.objects.filter(id__in=listing_ids)
        }

        resolved = []
        for item in selected_services:
            listing = listings.get(str(item['service_listing_id']))
            if listing is None:
                raise NotFound(f"Service listing {item['service_listing_id']} not found")
            if listing.vendor_id != vendor.id:
                raise InvalidOperation(f"Service listing {listing.name} does not belong to this vendor")
            if not listing.is_active:
                raise InvalidOperation(f"Service listing {listing.name} is inactive")
            resolved.append((listing, item))
        return resolved

    @staticmethod
    def _line_total(listing, item, project):
        if item.get('total_price') is not None:
            return quantize_money(item['total_price'])

        quantity = item.get('quantity') or 1
        try:
            price = calculate_price(
                listing,
                quantity=quantity,
                table_count=quantity if listing.pricing_policy == PRICING_PER_TABLE else None,
                event_duration=project_event_duration(project),
            )
        except PricingError as e:
            logger.warning(f"Falling back to base price for listing {listing.id}: {e}")
            price = fallback_price(listing, quantity)
        return quantize_money(price)

    @staticmethod
    def _check_capacity(listing, quantity: int, reserved_date):
        """Re-check availability while the vendor row is locked."""
        result = AvailabilityService(listing.id, reserved_date).check()

        if listing.availability_type == AVAILABILITY_EXCLUSIVE and not result.available:
            raise ResourceConflict(f"{listing.name} is already booked for {reserved_date}")

        if listing.availability_type == AVAILABILITY_QUANTITY_BASED and not result.fits(quantity):
            raise ResourceConflict(
                f"Only {result.available_quantity or 0} of {listing.name} available on {reserved_date}"
            )

    @staticmethod
    def create_booking(
        couple,
        vendor_id,
        reserved_date,
        selected_services: List[dict],
        project_id=None,
        notes: str = '',
    ) -> Booking:
        """
        Create a booking in pending_vendor_confirmation and link the design
        items it covers.
        """
        try:
            reserved = parse_calendar_date(reserved_date)
        except ValueError as e:
            raise InvalidOperation(str(e))
        if reserved < today():
            raise InvalidOperation('Reserved date cannot be in the past')

        project = BookingService._resolve_project(couple, project_id)

        with transaction.atomic():
            try:
                vendor = Vendor.objects.select_for_update().get(id=vendor_id)
            except Vendor.DoesNotExist:
                raise NotFound('Vendor not found')

            lines = BookingService._resolve_listings(vendor, selected_services)

            if lines and AvailabilityService(lines[0][0].id, reserved).vendor_on_time_off():
                raise InvalidOperation('Vendor is unavailable on this date')

            for listing, item in lines:
                BookingService._check_capacity(listing, item.get('quantity') or 1, reserved)

            booking = Booking.objects.create(
                couple=couple,
                vendor=vendor,
                project=project,
                reserved_date=reserved,
                status=BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
                notes=notes or '',
            )
            SelectedService.objects.bulk_create([
                SelectedService(
                    booking=booking,
                    service_listing=listing,
                    quantity=item.get('quantity') or 1,
                    total_price=BookingService._line_total(listing, item, project),
                )
                for listing, item in lines
            ])

            sync_linked_items(booking)

            if project is not None:
                from apps.budgets.services.reconciliation import recompute_planned_spend
                project_pk = project.pk
                transaction.on_commit(lambda: recompute_planned_spend(project_pk))

        logger.info(
            f"Created booking {booking.id} for couple {couple.id} with vendor {vendor.id} on {reserved}"
        )
        return booking


# Singleton instance
booking_service = BookingService()
