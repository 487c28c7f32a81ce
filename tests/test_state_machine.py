from datetime import timedelta
from unittest import mock

import pytest
from django.core import mail

from apps.core.exceptions import InvalidTransition
from apps.core.utils.constants import (
    BOOKING_STATUSES,
    BOOKING_STATUS_CANCELLED_BY_COUPLE,
    BOOKING_STATUS_CANCELLED_BY_VENDOR,
    BOOKING_STATUS_COMPLETED,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
    BOOKING_STATUS_PENDING_FINAL_PAYMENT,
    BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
    BOOKING_STATUS_REJECTED,
    SLOT_STATUS_BOOKED,
)
from apps.core.utils.helpers import today
from apps.bookings.services.state_machine import (
    ALLOWED_TRANSITIONS,
    can_transition,
    finalize_due_date,
    normalize_status,
    transition_booking,
)
from apps.schedules.models import TimeSlot
from tests.conftest import _make_booking

pytestmark = pytest.mark.django_db

ALL_STATUSES = [status for status, _ in BOOKING_STATUSES]
TERMINAL = [
    BOOKING_STATUS_COMPLETED,
    BOOKING_STATUS_REJECTED,
    BOOKING_STATUS_CANCELLED_BY_COUPLE,
    BOOKING_STATUS_CANCELLED_BY_VENDOR,
]


@pytest.fixture
def booking(couple, vendor, exclusive_listing, wedding_date):
    return _make_booking(couple, vendor, wedding_date, [(exclusive_listing, 1, 1500)])


def test_every_status_has_an_entry():
    assert set(ALLOWED_TRANSITIONS) == set(ALL_STATUSES)


@pytest.mark.parametrize('status', TERMINAL)
def test_terminal_statuses_have_no_exits(status):
    for target in ALL_STATUSES:
        assert not can_transition(status, target)


def test_happy_path_edges():
    path = [
        BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
        BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
        BOOKING_STATUS_CONFIRMED,
        BOOKING_STATUS_PENDING_FINAL_PAYMENT,
        BOOKING_STATUS_COMPLETED,
    ]
    for current, nxt in zip(path, path[1:]):
        assert can_transition(current, nxt)


def test_rejection_only_before_acceptance():
    assert can_transition(BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION, BOOKING_STATUS_REJECTED)
    assert not can_transition(BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT, BOOKING_STATUS_REJECTED)
    assert not can_transition(BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION, BOOKING_STATUS_CANCELLED_BY_COUPLE)


def test_cancelled_alias():
    assert normalize_status('cancelled') == BOOKING_STATUS_CANCELLED_BY_VENDOR
    assert normalize_status(BOOKING_STATUS_CONFIRMED) == BOOKING_STATUS_CONFIRMED


def test_accepting_reserves_slot_and_sets_deposit_due(booking, vendor, settings):
    settings.BOOKING_DEPOSIT_DUE_DAYS = 5
    updated = transition_booking(booking, BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT)

    assert updated.status == BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT
    assert updated.deposit_due_date == today() + timedelta(days=5)
    assert TimeSlot.objects.filter(vendor=vendor, date=booking.reserved_date, status=SLOT_STATUS_BOOKED).exists()


def test_explicit_deposit_due_date_is_kept(booking):
    due = today() + timedelta(days=2)
    updated = transition_booking(booking, BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT, deposit_due_date=due)
    assert updated.deposit_due_date == due


def test_invalid_transition_leaves_booking_untouched(booking):
    with pytest.raises(InvalidTransition) as excinfo:
        transition_booking(booking, BOOKING_STATUS_COMPLETED)

    assert BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION in str(excinfo.value.detail)
    assert BOOKING_STATUS_COMPLETED in str(excinfo.value.detail)
    booking.refresh_from_db()
    assert booking.status == BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION


def test_same_status_only_updates_due_dates(booking):
    due = today() + timedelta(days=30)
    updated = transition_booking(booking, BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION, final_due_date=due)
    assert updated.status == BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION
    assert updated.final_due_date == due


def test_rejection_releases_slot(booking, vendor):
    TimeSlot.objects.create(vendor=vendor, date=booking.reserved_date, status=SLOT_STATUS_BOOKED)
    transition_booking(booking, BOOKING_STATUS_REJECTED)
    assert not TimeSlot.objects.filter(vendor=vendor, date=booking.reserved_date).exists()


def test_slot_kept_while_another_booking_holds_the_date(booking, couple, vendor, chairs_listing):
    _make_booking(couple, vendor, booking.reserved_date, [(chairs_listing, 2, 40)], status=BOOKING_STATUS_CONFIRMED)
    transition_booking(booking, BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT)
    transition_booking(booking, BOOKING_STATUS_CANCELLED_BY_VENDOR)
    assert TimeSlot.objects.filter(vendor=vendor, date=booking.reserved_date, status=SLOT_STATUS_BOOKED).exists()


def test_transition_schedules_status_email(booking, couple, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        transition_booking(booking, BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT)

    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == [couple.user.email]
    assert 'Pending Deposit Payment' in mail.outbox[0].body


def test_transition_schedules_budget_recompute(couple, vendor, exclusive_listing, project, django_capture_on_commit_callbacks):
    booking = _make_booking(couple, vendor, project.wedding_date, [(exclusive_listing, 1, 1500)], project=project)
    with mock.patch('apps.budgets.services.reconciliation.recompute_planned_spend') as recompute:
        with django_capture_on_commit_callbacks(execute=True):
            transition_booking(booking, BOOKING_STATUS_REJECTED)
    recompute.assert_called_once_with(project.id)


def test_finalize_due_date_never_in_the_past(booking, settings):
    settings.BOOKING_FINAL_DUE_DAYS_BEFORE = 7
    assert finalize_due_date(booking) == booking.reserved_date - timedelta(days=7)

    booking.reserved_date = today() + timedelta(days=3)
    assert finalize_due_date(booking) == today()
