from datetime import timedelta

import pytest

from apps.core.utils.constants import BOOKING_STATUS_CONFIRMED, SLOT_STATUS_BOOKED
from apps.core.utils.helpers import today
from apps.schedules.models import TimeSlot
from tests.conftest import _make_booking

pytestmark = pytest.mark.django_db

SLOTS_URL = '/api/v1/schedules/time-slots/'


def test_block_and_unblock_date(vendor_client, vendor):
    target = today() + timedelta(days=30)

    response = vendor_client.post(SLOTS_URL, {'date': target.isoformat(), 'reason': 'Holiday'}, format='json')
    assert response.status_code == 201

    duplicate = vendor_client.post(SLOTS_URL, {'date': target.isoformat()}, format='json')
    assert duplicate.status_code == 409

    removed = vendor_client.delete(f'{SLOTS_URL}date/{target.isoformat()}/')
    assert removed.status_code == 204
    assert not TimeSlot.objects.filter(vendor=vendor).exists()


def test_cannot_block_past_date(vendor_client):
    response = vendor_client.post(
        SLOTS_URL, {'date': (today() - timedelta(days=1)).isoformat()}, format='json'
    )
    assert response.status_code == 400


def test_booked_slot_cannot_be_removed(vendor_client, vendor):
    slot = TimeSlot.objects.create(vendor=vendor, date=today() + timedelta(days=10), status=SLOT_STATUS_BOOKED)
    response = vendor_client.delete(f'{SLOTS_URL}{slot.id}/')
    assert response.status_code == 400


def test_couple_cannot_manage_slots(couple_client):
    response = couple_client.get(SLOTS_URL)
    assert response.status_code == 403


def test_public_availability_check(api_client, couple, vendor, exclusive_listing, wedding_date):
    _make_booking(couple, vendor, wedding_date, [(exclusive_listing, 1, 1500)], status=BOOKING_STATUS_CONFIRMED)

    response = api_client.get(
        '/api/v1/schedules/availability/check/',
        {'service_listing_id': str(exclusive_listing.id), 'date': wedding_date.isoformat()},
    )

    assert response.status_code == 200
    assert response.data['available'] is False


def test_batch_availability(api_client, vendor, exclusive_listing, chairs_listing, wedding_date):
    TimeSlot.objects.create(vendor=vendor, date=wedding_date, status='personal_time_off')

    response = api_client.post('/api/v1/schedules/availability/batch-check/', {
        'date': wedding_date.isoformat(),
        'service_listing_ids': [str(exclusive_listing.id), str(chairs_listing.id)],
    }, format='json')

    assert response.status_code == 200
    results = response.data['results']
    assert results[str(exclusive_listing.id)]['available'] is False
    assert results[str(chairs_listing.id)]['available'] is False


def test_availability_calendar(vendor_client, exclusive_listing, couple, vendor, wedding_date):
    _make_booking(couple, vendor, wedding_date, [(exclusive_listing, 1, 1500)], status=BOOKING_STATUS_CONFIRMED)
    start = wedding_date - timedelta(days=1)

    response = vendor_client.get(
        f'/api/v1/schedules/availability/service/{exclusive_listing.id}/',
        {'start_date': start.isoformat(), 'end_date': (wedding_date + timedelta(days=1)).isoformat()},
    )

    assert response.status_code == 200
    assert [day['available'] for day in response.data['days']] == [True, False, True]
