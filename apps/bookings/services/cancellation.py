"""
Booking cancellation and cancellation fees.

The fee is a percentage of the booking total chosen by how many days are
left before the reserved date. A listing can override the default tiers.
The fee is deducted from what the couple already paid; any part not
covered by earlier payments stays outstanding until a cancellation_fee
payment settles it.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction

from apps.bookings.models import Booking, Cancellation
from apps.bookings.services.state_machine import transition_booking
from apps.core.utils.constants import (
    BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
    BOOKING_STATUS_CANCELLED_BY_COUPLE,
    BOOKING_STATUS_CANCELLED_BY_VENDOR,
    CANCELLED_BY_COUPLE,
)
from apps.core.utils.helpers import quantize_money, to_decimal, today

logger = logging.getLogger(__name__)


TIER_ORDER = ('>90', '60-90', '30-59', '7-29', '<7')

DEFAULT_FEE_TIERS = {
    '>90': Decimal('0.00'),
    '60-90': Decimal('0.30'),
    '30-59': Decimal('0.50'),
    '7-29': Decimal('0.70'),
    '<7': Decimal('1.00'),
}


@dataclass
class CancellationQuote:
    days_until_wedding: int
    tier: str
    fee_percentage: Decimal
    total_amount: Decimal
    amount_paid: Decimal
    fee_amount: Decimal
    fee_outstanding: Decimal
    tiers: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def requires_payment(self) -> bool:
        return self.fee_outstanding > 0

    def to_dict(self) -> dict:
        return {
            'days_until_wedding': self.days_until_wedding,
            'tier': self.tier,
            'fee_percentage': str(self.fee_percentage),
            'total_amount': str(self.total_amount),
            'amount_paid': str(self.amount_paid),
            'fee_amount': str(self.fee_amount),
            'fee_outstanding': str(self.fee_outstanding),
            'requires_payment': self.requires_payment,
        }


def normalize_fee_tiers(custom_tiers: Optional[dict] = None) -> Dict[str, Decimal]:
    """
    Merge listing tiers over the defaults. Every tier after the first is at
    least the deposit percentage, and percentages never decrease as the
    wedding gets closer.
    """
    floor = to_decimal(settings.BOOKING_DEPOSIT_PERCENTAGE)
    custom_tiers = custom_tiers or {}

    tiers = {}
    last = Decimal('0')
    for index, key in enumerate(TIER_ORDER):
        value = custom_tiers.get(key)
        value = DEFAULT_FEE_TIERS[key] if value is None else to_decimal(value)
        value = max(Decimal('0'), value) if index == 0 else max(floor, value)
        value = max(value, last)
        tiers[key] = value
        last = value
    return tiers


def tier_for_days(days: int) -> Optional[str]:
    if days > 90:
        return '>90'
    if days >= 60:
        return '60-90'
    if days >= 30:
        return '30-59'
    if days >= 7:
        return '7-29'
    if days >= 0:
        return '<7'
    return None


def _fee_tiers_for(booking) -> Optional[dict]:
    selected = booking.selected_services.select_related('service_listing').order_by('id')
    for item in selected:
        if item.service_listing.cancellation_fee_tiers:
            return item.service_listing.cancellation_fee_tiers
    return None


def quote_cancellation(booking, on_date=None) -> CancellationQuote:
    """Cancellation fee a couple would owe if they cancelled now."""
    on_date = on_date or today()
    days = (booking.reserved_date - on_date).days
    total = quantize_money(booking.total_amount)
    paid = quantize_money(booking.amount_paid)
    tiers = normalize_fee_tiers(_fee_tiers_for(booking))

    if booking.status == BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION or paid <= 0:
        return CancellationQuote(
            days_until_wedding=days,
            tier='no_payment',
            fee_percentage=Decimal('0'),
            total_amount=total,
            amount_paid=paid,
            fee_amount=Decimal('0.00'),
            fee_outstanding=Decimal('0.00'),
            tiers=tiers,
        )

    tier = tier_for_days(days)
    percentage = tiers[tier] if tier else Decimal('0')
    fee = quantize_money(total * percentage)
    return CancellationQuote(
        days_until_wedding=days,
        tier=tier or 'past',
        fee_percentage=percentage,
        total_amount=total,
        amount_paid=paid,
        fee_amount=fee,
        fee_outstanding=max(Decimal('0.00'), fee - paid),
        tiers=tiers,
    )


def cancel_booking(booking, cancelled_by: str, reason: str = '', actor=None) -> Cancellation:
    """
    Cancel a booking through the state machine and record the cancellation.

    Couple cancellations are charged by the fee tiers. Vendor and system
    cancellations carry no fee.
    """
    target_status = (
        BOOKING_STATUS_CANCELLED_BY_COUPLE
        if cancelled_by == CANCELLED_BY_COUPLE
        else BOOKING_STATUS_CANCELLED_BY_VENDOR
    )

    with transaction.atomic():
        booking = Booking.objects.select_for_update().get(pk=booking.pk)
        quote = quote_cancellation(booking) if cancelled_by == CANCELLED_BY_COUPLE else None
        booking = transition_booking(booking, target_status, actor=actor)
        cancellation = Cancellation.objects.create(
            booking=booking,
            cancelled_by=cancelled_by,
            cancellation_reason=reason or '',
            cancellation_fee=quote.fee_amount if quote else Decimal('0.00'),
            fee_outstanding=quote.fee_outstanding if quote else Decimal('0.00'),
        )

    logger.info(
        f"Booking {booking.id} cancelled by {cancelled_by}, "
        f"fee {cancellation.cancellation_fee} (outstanding {cancellation.fee_outstanding})"
    )
    return cancellation
