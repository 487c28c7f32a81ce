import pytest

from apps.bookings.services.linkage import sync_linked_items
from apps.bookings.services.state_machine import transition_booking
from apps.core.utils.constants import (
    BOOKING_STATUS_CANCELLED_BY_VENDOR,
    BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
    BOOKING_STATUS_REJECTED,
)
from apps.projects.models import ProjectService
from apps.venue_designs.models import PlacedElement
from apps.venue_designs.services.design_service import venue_design_service
from tests.conftest import _make_booking, _make_couple, _make_listing, _make_project

pytestmark = pytest.mark.django_db


@pytest.fixture
def placed_chairs(project, design, chairs_listing):
    venue_design_service.add_element(project, design, chairs_listing.id)
    return list(PlacedElement.objects.filter(venue_design=design, meta__service_listing=chairs_listing))


@pytest.fixture
def dj_service(project, design, vendor):
    listing = _make_listing(vendor, name='DJ Set')
    venue_design_service.add_element(project, design, listing.id)
    return ProjectService.objects.get(project=project, service_listing=listing)


def _booking_for(project, vendor, listings):
    return _make_booking(
        project.couple, vendor, project.wedding_date,
        [(listing, 1, 100) for listing in listings],
        project=project,
    )


def test_active_booking_flags_placements_and_services(project, vendor, placed_chairs, dj_service, chairs_listing):
    booking = _booking_for(project, vendor, [chairs_listing, dj_service.service_listing])

    result = sync_linked_items(booking)

    assert result.placements == len(placed_chairs)
    assert result.project_services == 1
    assert all(p.is_booked and p.booking_id == booking.id for p in PlacedElement.objects.filter(id__in=[c.id for c in placed_chairs]))
    dj_service.refresh_from_db()
    assert dj_service.is_booked
    assert dj_service.booking_id == booking.id


def test_sync_is_idempotent(project, vendor, placed_chairs, chairs_listing):
    booking = _booking_for(project, vendor, [chairs_listing])
    sync_linked_items(booking)
    snapshot = list(PlacedElement.objects.filter(booking=booking).values_list('id', 'is_booked'))

    sync_linked_items(booking)

    assert list(PlacedElement.objects.filter(booking=booking).values_list('id', 'is_booked')) == snapshot


@pytest.mark.parametrize('status', [BOOKING_STATUS_REJECTED, BOOKING_STATUS_CANCELLED_BY_VENDOR])
def test_release_clears_flags(project, vendor, placed_chairs, dj_service, chairs_listing, status):
    booking = _booking_for(project, vendor, [chairs_listing, dj_service.service_listing])
    sync_linked_items(booking)
    if status == BOOKING_STATUS_CANCELLED_BY_VENDOR:
        transition_booking(booking, BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT)

    transition_booking(booking, status)

    assert not PlacedElement.objects.filter(booking=booking).exists()
    assert not PlacedElement.objects.filter(venue_design=project.venue_design, meta__service_listing=chairs_listing, is_booked=True).exists()
    dj_service.refresh_from_db()
    assert not dj_service.is_booked
    assert dj_service.booking_id is None


def test_booking_without_project_is_a_no_op(couple, vendor, chairs_listing, wedding_date):
    booking = _make_booking(couple, vendor, wedding_date, [(chairs_listing, 1, 20)])
    assert sync_linked_items(booking).total == 0


def test_other_projects_are_untouched(project, vendor, placed_chairs, chairs_listing, venue_listing, wedding_date):
    other = _make_project(_make_couple('second@example.com'), wedding_date=wedding_date, venue=venue_listing)
    other_design = venue_design_service.get_or_create_design(other)
    venue_design_service.add_element(other, other_design, chairs_listing.id)

    booking = _booking_for(project, vendor, [chairs_listing])
    sync_linked_items(booking)

    assert not PlacedElement.objects.filter(venue_design=other_design, is_booked=True).exists()
