"""
Booking payment service.

This module handles:
- Validating that a payment type matches the booking's current stage
- Recording deposit, final and cancellation fee payments
- Moving the booking forward once a deposit or final payment lands
- Listing what a vendor has been paid across their bookings
"""
import logging
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import Sum

from apps.bookings.models import Booking, Cancellation
from apps.bookings.services.state_machine import transition_booking
from apps.payments.models import Payment
from apps.core.exceptions import InvalidOperation, ResourceConflict
from apps.core.utils.constants import (
    BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
    BOOKING_STATUS_PENDING_FINAL_PAYMENT,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_COMPLETED,
    PAYMENT_TYPE_DEPOSIT,
    PAYMENT_TYPE_FINAL,
    PAYMENT_TYPE_CANCELLATION_FEE,
)
from apps.core.utils.helpers import quantize_money, to_decimal

logger = logging.getLogger(__name__)


# Required booking status and resulting status per payment type
PAYMENT_STAGES = {
    PAYMENT_TYPE_DEPOSIT: (BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT, BOOKING_STATUS_CONFIRMED),
    PAYMENT_TYPE_FINAL: (BOOKING_STATUS_PENDING_FINAL_PAYMENT, BOOKING_STATUS_COMPLETED),
}


class BookingPaymentService:
    """
    Service for recording booking payments.
    """

    @staticmethod
    def _pending_cancellation(booking: Booking) -> Optional[Cancellation]:
        try:
            cancellation = booking.cancellation
        except Cancellation.DoesNotExist:
            return None
        if cancellation.fee_payment_id or cancellation.fee_outstanding <= 0:
            return None
        return cancellation

    @staticmethod
    def validate_payment(booking: Booking, payment_type: str, amount) -> Decimal:
        """
        Check a payment request against the booking.

        Returns the amount as a Decimal. Raises InvalidOperation when the
        type does not match the booking stage and ResourceConflict when a
        payment of that type already exists.
        """
        amount = quantize_money(to_decimal(amount))
        if amount <= 0:
            raise InvalidOperation('Payment amount must be greater than zero')

        if payment_type == PAYMENT_TYPE_DEPOSIT and booking.status != BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT:
            raise InvalidOperation('Deposit payment not allowed for this booking status')
        if payment_type == PAYMENT_TYPE_FINAL and booking.status != BOOKING_STATUS_PENDING_FINAL_PAYMENT:
            raise InvalidOperation('Final payment not allowed for this booking status')
        if payment_type == PAYMENT_TYPE_CANCELLATION_FEE:
            if BookingPaymentService._pending_cancellation(booking) is None:
                raise InvalidOperation('No pending cancellation fee for this booking')

        if Payment.objects.filter(booking=booking, payment_type=payment_type).exists():
            raise ResourceConflict(f"{payment_type} payment already exists for this booking")

        return amount

    @staticmethod
    def record_payment(
        booking: Booking,
        payment_type: str,
        amount,
        payment_method: str,
        receipt: Optional[str] = None,
        actor=None,
    ) -> Payment:
        """
        Record a payment and advance the booking.

        A deposit confirms the booking and a final payment completes it,
        both through the state machine so linked design items re-sync.
        A cancellation fee payment settles the outstanding fee.
        """
        with transaction.atomic():
            booking = Booking.objects.select_for_update().get(pk=booking.pk)
            amount = BookingPaymentService.validate_payment(booking, payment_type, amount)

            payment = Payment.objects.create(
                booking=booking,
                payment_type=payment_type,
                amount=amount,
                payment_method=payment_method,
                receipt=receipt or '',
            )

            if payment_type in PAYMENT_STAGES:
                _, next_status = PAYMENT_STAGES[payment_type]
                transition_booking(booking, next_status, actor=actor)
            else:
                cancellation = booking.cancellation
                cancellation.fee_payment = payment
                cancellation.fee_outstanding = max(Decimal('0.00'), cancellation.fee_outstanding - amount)
                cancellation.save(update_fields=['fee_payment', 'fee_outstanding', 'updated_at'])

        logger.info(f"Recorded {payment_type} payment of {amount} for booking {booking.id}")
        return payment

    @staticmethod
    def vendor_payments(vendor):
        """Payments on all of a vendor's bookings, newest first."""
        return Payment.objects.filter(booking__vendor=vendor).select_related(
            'booking', 'booking__couple__user'
        )

    @staticmethod
    def vendor_payment_totals(vendor) -> dict:
        payments = BookingPaymentService.vendor_payments(vendor)
        total = payments.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')
        released = payments.filter(released_to_vendor=True).aggregate(
            total=Sum('amount')
        )['total'] or Decimal('0.00')
        return {
            'total_received': total,
            'total_released': released,
            'pending_release': total - released,
        }


# Singleton instance
booking_payment_service = BookingPaymentService()
