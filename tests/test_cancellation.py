from datetime import timedelta
from decimal import Decimal

import pytest

from apps.bookings.models import Booking
from apps.bookings.services.cancellation import (
    cancel_booking,
    normalize_fee_tiers,
    quote_cancellation,
    tier_for_days,
)
from apps.bookings.services.state_machine import transition_booking
from apps.core.exceptions import InvalidTransition
from apps.core.utils.constants import (
    BOOKING_STATUS_CANCELLED_BY_COUPLE,
    BOOKING_STATUS_CANCELLED_BY_VENDOR,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
    CANCELLED_BY_COUPLE,
    CANCELLED_BY_SYSTEM,
    PAYMENT_METHOD_CREDIT_CARD,
    PAYMENT_TYPE_DEPOSIT,
)
from apps.core.utils.helpers import today
from apps.payments.models import Payment
from tests.conftest import _make_booking

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize('days,tier', [
    (120, '>90'), (91, '>90'), (90, '60-90'), (60, '60-90'), (59, '30-59'),
    (30, '30-59'), (29, '7-29'), (7, '7-29'), (6, '<7'), (0, '<7'), (-1, None),
])
def test_tier_boundaries(days, tier):
    assert tier_for_days(days) == tier


def test_default_tiers():
    tiers = normalize_fee_tiers()
    assert tiers == {
        '>90': Decimal('0.00'),
        '60-90': Decimal('0.30'),
        '30-59': Decimal('0.50'),
        '7-29': Decimal('0.70'),
        '<7': Decimal('1.00'),
    }


def test_custom_tiers_keep_floor_and_order(settings):
    settings.BOOKING_DEPOSIT_PERCENTAGE = 0.30
    tiers = normalize_fee_tiers({'60-90': 0.10, '30-59': 0.8, '7-29': 0.5})
    assert tiers['60-90'] == Decimal('0.3')
    assert tiers['30-59'] == Decimal('0.8')
    assert tiers['7-29'] == Decimal('0.8')
    assert tiers['<7'] == Decimal('1.00')


def _paid_booking(couple, vendor, listing, days_out, deposit='300.00'):
    booking = _make_booking(couple, vendor, today() + timedelta(days=days_out), [(listing, 1, 1000)])
    transition_booking(booking, BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT)
    Payment.objects.create(
        booking=booking,
        payment_type=PAYMENT_TYPE_DEPOSIT,
        amount=Decimal(deposit),
        payment_method=PAYMENT_METHOD_CREDIT_CARD,
    )
    transition_booking(booking, BOOKING_STATUS_CONFIRMED)
    booking.refresh_from_db()
    return booking


def test_no_fee_before_any_payment(couple, vendor, exclusive_listing, wedding_date):
    booking = _make_booking(couple, vendor, wedding_date, [(exclusive_listing, 1, 1000)])
    quote = quote_cancellation(booking)
    assert quote.fee_amount == Decimal('0.00')
    assert not quote.requires_payment


def test_fee_covered_by_deposit(couple, vendor, exclusive_listing):
    booking = _paid_booking(couple, vendor, exclusive_listing, days_out=75)
    quote = quote_cancellation(booking)
    assert quote.tier == '60-90'
    assert quote.fee_amount == Decimal('300.00')
    assert quote.fee_outstanding == Decimal('0.00')


def test_fee_beyond_deposit_is_outstanding(couple, vendor, exclusive_listing):
    booking = _paid_booking(couple, vendor, exclusive_listing, days_out=10)
    cancellation = cancel_booking(booking, CANCELLED_BY_COUPLE, reason='Plans changed')

    booking.refresh_from_db()
    assert booking.status == BOOKING_STATUS_CANCELLED_BY_COUPLE
    assert cancellation.cancellation_fee == Decimal('700.00')
    assert cancellation.fee_outstanding == Decimal('400.00')
    assert cancellation.cancellation_reason == 'Plans changed'


def test_listing_tiers_override_defaults(couple, vendor, exclusive_listing):
    exclusive_listing.cancellation_fee_tiers = {'>90': 0.1}
    exclusive_listing.save()
    booking = _paid_booking(couple, vendor, exclusive_listing, days_out=120)
    assert quote_cancellation(booking).fee_amount == Decimal('100.00')


def test_system_cancellation_has_no_fee(couple, vendor, exclusive_listing):
    booking = _paid_booking(couple, vendor, exclusive_listing, days_out=3)
    cancellation = cancel_booking(booking, CANCELLED_BY_SYSTEM, reason='Final payment not received by due date')

    booking.refresh_from_db()
    assert booking.status == BOOKING_STATUS_CANCELLED_BY_VENDOR
    assert cancellation.cancelled_by == CANCELLED_BY_SYSTEM
    assert cancellation.cancellation_fee == Decimal('0.00')


def test_pending_request_cannot_be_cancelled(couple, vendor, exclusive_listing, wedding_date):
    booking = _make_booking(couple, vendor, wedding_date, [(exclusive_listing, 1, 1000)])
    with pytest.raises(InvalidTransition):
        cancel_booking(booking, CANCELLED_BY_COUPLE)


def test_fee_uses_current_booking_state(couple, vendor, exclusive_listing):
    booking = _make_booking(couple, vendor, today() + timedelta(days=75), [(exclusive_listing, 1, 1000)])
    stale = Booking.objects.get(pk=booking.pk)

    transition_booking(booking, BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT)
    Payment.objects.create(
        booking=booking,
        payment_type=PAYMENT_TYPE_DEPOSIT,
        amount=Decimal('300.00'),
        payment_method=PAYMENT_METHOD_CREDIT_CARD,
    )
    transition_booking(booking, BOOKING_STATUS_CONFIRMED)

    cancellation = cancel_booking(stale, CANCELLED_BY_COUPLE)

    assert cancellation.cancellation_fee == Decimal('300.00')
    assert cancellation.fee_outstanding == Decimal('0.00')
