from datetime import timedelta
from decimal import Decimal

import pytest

from apps.bookings.services.state_machine import transition_booking
from apps.budgets.models import Budget
from apps.core.utils.constants import BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT
from apps.listings.services.pricing import project_event_duration
from apps.projects.models import WeddingProject
from tests.conftest import _make_booking, _make_element, _make_listing

pytestmark = pytest.mark.django_db

PROJECTS_URL = '/api/v1/projects/'


def test_create_project_with_budget(couple_client, venue_listing, wedding_date):
    response = couple_client.post(PROJECTS_URL, {
        'project_name': 'Summer Wedding',
        'wedding_date': wedding_date.isoformat(),
        'event_start_time': f'{wedding_date.isoformat()}T15:00:00Z',
        'event_end_time': f'{wedding_date.isoformat()}T23:00:00Z',
        'venue_service_listing_id': str(venue_listing.id),
        'total_budget': '30000.00',
    }, format='json')

    assert response.status_code == 201
    assert response.data['venue_name'] == 'Grand Hall'
    project = WeddingProject.objects.get(id=response.data['id'])
    assert Budget.objects.get(project=project).total_budget == 30000
    assert project_event_duration(project) == Decimal('8.00')


def test_venue_must_be_a_venue(couple_client, exclusive_listing):
    response = couple_client.post(PROJECTS_URL, {
        'project_name': 'Summer Wedding',
        'venue_service_listing_id': str(exclusive_listing.id),
    }, format='json')

    assert response.status_code == 400
    assert response.data['errors']['venue_service_listing_id'] == ['Selected service is not a venue']


def test_end_time_after_start(couple_client):
    response = couple_client.post(PROJECTS_URL, {
        'project_name': 'Evening',
        'event_start_time': '2031-06-01T20:00:00Z',
        'event_end_time': '2031-06-01T18:00:00Z',
    }, format='json')
    assert response.status_code == 400
    assert response.data['errors']['event_end_time'] == ['Event end time must be after the start time']


def test_list_only_own_projects(couple_client, project, other_couple):
    from tests.conftest import _make_project
    _make_project(other_couple, name='Not mine')

    response = couple_client.get(PROJECTS_URL)

    assert response.status_code == 200
    assert [item['id'] for item in response.data['results']] == [str(project.id)]


def test_update_project(couple_client, project, wedding_date):
    new_date = wedding_date + timedelta(days=7)
    response = couple_client.patch(
        f'{PROJECTS_URL}{project.id}/', {'wedding_date': new_date.isoformat()}, format='json'
    )

    assert response.status_code == 200
    assert response.data['wedding_date'] == new_date.isoformat()


def test_booked_venue_cannot_change(couple_client, couple, project, venue_listing, venue_vendor, wedding_date):
    booking = _make_booking(couple, venue_vendor, wedding_date, [(venue_listing, 1, 5000)], project=project)
    transition_booking(booking, BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT)
    other_venue = _make_listing(
        venue_vendor, name='Garden Terrace', category='Venue',
        design_element=_make_element(venue_vendor, name='Terrace'),
    )

    response = couple_client.patch(
        f'{PROJECTS_URL}{project.id}/', {'venue_service_listing_id': str(other_venue.id)}, format='json'
    )

    assert response.status_code == 400
    project.refresh_from_db()
    assert project.venue_service_listing_id == venue_listing.id


def test_vendor_cannot_create(vendor_client):
    response = vendor_client.post(PROJECTS_URL, {'project_name': 'Nope'}, format='json')
    assert response.status_code == 403
