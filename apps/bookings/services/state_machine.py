"""
Booking lifecycle.

pending_vendor_confirmation -> pending_deposit_payment -> confirmed
    -> pending_final_payment -> completed

rejected is only reachable from pending_vendor_confirmation, and the two
cancellation statuses from any payment stage. completed, rejected and the
cancellation statuses are terminal.

Every status change runs in one transaction with the booking row locked,
re-syncs the linked design items and schedules a budget recompute for the
booking's project once the transaction commits.
"""
import logging
from datetime import date, timedelta

from django.conf import settings
from django.db import transaction

from apps.bookings.models import Booking
from apps.bookings.services.linkage import sync_linked_items
from apps.schedules.models import TimeSlot
from apps.core.exceptions import InvalidTransition
from apps.core.utils.constants import (
    ACTIVE_BOOKING_STATUSES,
    RELEASED_BOOKING_STATUSES,
    BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
    BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_PENDING_FINAL_PAYMENT,
    BOOKING_STATUS_COMPLETED,
    BOOKING_STATUS_REJECTED,
    BOOKING_STATUS_CANCELLED_BY_COUPLE,
    BOOKING_STATUS_CANCELLED_BY_VENDOR,
    SLOT_STATUS_BOOKED,
)
from apps.core.utils.helpers import today

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS = {
    BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION: (
        BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
        BOOKING_STATUS_REJECTED,
    ),
    BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT: (
        BOOKING_STATUS_CONFIRMED,
        BOOKING_STATUS_CANCELLED_BY_COUPLE,
        BOOKING_STATUS_CANCELLED_BY_VENDOR,
    ),
    BOOKING_STATUS_CONFIRMED: (
        BOOKING_STATUS_PENDING_FINAL_PAYMENT,
        BOOKING_STATUS_CANCELLED_BY_COUPLE,
        BOOKING_STATUS_CANCELLED_BY_VENDOR,
    ),
    BOOKING_STATUS_PENDING_FINAL_PAYMENT: (
        BOOKING_STATUS_COMPLETED,
        BOOKING_STATUS_CANCELLED_BY_COUPLE,
        BOOKING_STATUS_CANCELLED_BY_VENDOR,
    ),
    BOOKING_STATUS_COMPLETED: (),
    BOOKING_STATUS_REJECTED: (),
    BOOKING_STATUS_CANCELLED_BY_COUPLE: (),
    BOOKING_STATUS_CANCELLED_BY_VENDOR: (),
}

# Accepted on the vendor status endpoint
STATUS_ALIASES = {
    'cancelled': BOOKING_STATUS_CANCELLED_BY_VENDOR,
}


def normalize_status(status: str) -> str:
    return STATUS_ALIASES.get(status, status)


def can_transition(from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, ())


def reserve_time_slot(booking) -> TimeSlot:
    """Idempotently mark the vendor's date as booked."""
    slot, created = TimeSlot.objects.get_or_create(
        vendor_id=booking.vendor_id,
        date=booking.reserved_date,
        defaults={'status': SLOT_STATUS_BOOKED},
    )
    if created:
        logger.info(f"Reserved time slot for vendor {booking.vendor_id} on {booking.reserved_date}")
    return slot


def release_time_slot(booking) -> bool:
    """
    Free the vendor's booked slot for the booking date unless another active
    booking of the same vendor still holds that date.
    """
    still_held = Booking.objects.filter(
        vendor_id=booking.vendor_id,
        reserved_date=booking.reserved_date,
        status__in=ACTIVE_BOOKING_STATUSES,
    ).exclude(id=booking.id).exists()
    if still_held:
        return False

    deleted, _ = TimeSlot.objects.filter(
        vendor_id=booking.vendor_id,
        date=booking.reserved_date,
        status=SLOT_STATUS_BOOKED,
    ).delete()
    if deleted:
        logger.info(f"Released time slot for vendor {booking.vendor_id} on {booking.reserved_date}")
    return bool(deleted)


def _schedule_recompute(project_id):
    from apps.budgets.services.reconciliation import recompute_planned_spend

    transaction.on_commit(lambda: recompute_planned_spend(project_id))


def _schedule_notification(booking_id, status):
    from apps.bookings.tasks import send_booking_status_email

    transaction.on_commit(lambda: send_booking_status_email.delay(str(booking_id), status))


def transition_booking(
    booking,
    requested_status: str,
    actor=None,
    deposit_due_date=None,
    final_due_date=None,
) -> Booking:
    """
    Move a booking to `requested_status`.

    Requesting the current status leaves the status alone but still applies
    the due dates. Raises InvalidTransition for moves outside the graph.
    Returns the updated booking.
    """
    requested_status = normalize_status(requested_status)

    with transaction.atomic():
        locked = Booking.objects.select_for_update().get(pk=booking.pk)
        current = locked.status
        update_fields = []

        if deposit_due_date is not None:
            locked.deposit_due_date = deposit_due_date
            update_fields.append('deposit_due_date')
        if final_due_date is not None:
            locked.final_due_date = final_due_date
            update_fields.append('final_due_date')

        if requested_status == current:
            if update_fields:
                update_fields.append('updated_at')
                locked.save(update_fields=update_fields)
            return locked

        if not can_transition(current, requested_status):
            raise InvalidTransition(current, requested_status)

        if (current == BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION
                and requested_status == BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT):
            reserve_time_slot(locked)
            if locked.deposit_due_date is None:
                locked.deposit_due_date = today() + timedelta(days=settings.BOOKING_DEPOSIT_DUE_DAYS)
                update_fields.append('deposit_due_date')

        locked.status = requested_status
        update_fields.extend(['status', 'updated_at'])
        locked.save(update_fields=list(dict.fromkeys(update_fields)))

        if requested_status in RELEASED_BOOKING_STATUSES:
            release_time_slot(locked)

        sync_linked_items(locked, requested_status)

        if locked.project_id:
            _schedule_recompute(locked.project_id)
        _schedule_notification(locked.id, requested_status)

    actor_label = getattr(actor, 'email', None) or actor or 'system'
    logger.info(f"Booking {locked.id}: {current} -> {requested_status} by {actor_label}")
    return locked


def finalize_due_date(booking) -> date:
    """
    Final payment due date for a booking entering pending_final_payment:
    a fixed number of days before the reserved date, never in the past.
    """
    due = booking.reserved_date - timedelta(days=settings.BOOKING_FINAL_DUE_DAYS_BEFORE)
    return max(due, today())
