from datetime import timedelta
from decimal import Decimal

import pytest

from apps.bookings.services.state_machine import transition_booking
from apps.core.utils.constants import (
    AVAILABILITY_QUANTITY_BASED,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
    PRICING_PER_UNIT,
    VENDOR_CATEGORY_VENUE,
)
from apps.core.utils.helpers import today
from apps.listings.models import ServiceComponent
from apps.projects.models import ProjectService
from apps.venue_designs.models import PlacedElement, VenueDesign
from tests.conftest import _make_booking, _make_element, _make_listing, _make_project

pytestmark = pytest.mark.django_db


def _url(project, suffix=''):
    return f'/api/v1/venue-designs/{project.id}/{suffix}'


def _add(client, project, listing, **extra):
    return client.post(_url(project, 'elements/'), {'service_listing_id': str(listing.id), **extra}, format='json')


class TestDesign:

    def test_first_access_creates_design_with_venue(self, couple_client, project, venue_listing, budget):
        response = couple_client.get(_url(project))

        assert response.status_code == 200
        assert response.data['design']['venue_name'] == 'Grand Hall'
        venue = response.data['placed_elements'][0]
        assert venue['is_locked'] is True
        assert venue['metadata']['role'] == 'venue'
        assert response.data['budget']['total_budget'] == '20000.00'

        couple_client.get(_url(project))
        assert VenueDesign.objects.filter(project=project).count() == 1

    def test_project_without_venue(self, couple_client, couple, wedding_date):
        project = _make_project(couple, wedding_date=wedding_date)
        response = couple_client.get(_url(project))
        assert response.status_code == 400

    def test_other_couples_project(self, api_client, other_couple, project):
        api_client.force_authenticate(user=other_couple.user)
        response = api_client.get(_url(project))
        assert response.status_code == 404

    def test_vendor_forbidden(self, vendor_client, project):
        response = vendor_client.get(_url(project))
        assert response.status_code == 403


class TestElements:

    def test_add_bundle(self, couple_client, project, design, vendor, table_listing):
        chair = _make_element(vendor, name='Chair')
        ServiceComponent.objects.create(service_listing=table_listing, design_element=chair, quantity_per_unit=4, role='chair')

        response = _add(couple_client, project, table_listing, position={'x': 2, 'y': 0, 'z': 2})

        assert response.status_code == 201
        placed = response.data['placed_elements']
        assert len(placed) == 5
        assert len({item['metadata']['bundle_id'] for item in placed}) == 1
        assert sorted(item['metadata']['role'] for item in placed) == ['chair'] * 4 + ['primary']

        design.refresh_from_db()
        assert len(design.layout_data['placementsMeta']) == 6

    def test_listing_without_model_becomes_project_service(self, couple_client, project, design, exclusive_listing):
        response = _add(couple_client, project, exclusive_listing)

        assert response.status_code == 201
        assert response.data['placed_elements'] == []
        assert response.data['project_service']['quantity'] == 1

    def test_exclusive_only_once(self, couple_client, project, design, vendor):
        arch = _make_listing(vendor, name='Floral Arch', design_element=_make_element(vendor, name='Arch'))

        assert _add(couple_client, project, arch).status_code == 201
        response = _add(couple_client, project, arch)

        assert response.status_code == 400
        assert 'exclusive' in response.data['message']

    def test_venue_listing_cannot_be_placed(self, couple_client, project, design, venue_vendor):
        other_venue = _make_listing(
            venue_vendor, name='Garden', category=VENDOR_CATEGORY_VENUE,
            design_element=_make_element(venue_vendor, name='Garden'),
        )
        response = _add(couple_client, project, other_venue)
        assert response.status_code == 400

    def test_unavailable_on_wedding_date(self, couple_client, other_couple, project, design, vendor, wedding_date):
        arch = _make_listing(vendor, name='Floral Arch', design_element=_make_element(vendor, name='Arch'))
        _make_booking(other_couple, vendor, wedding_date, [(arch, 1, 100)], status=BOOKING_STATUS_CONFIRMED)

        response = _add(couple_client, project, arch)
        assert response.status_code == 400

    def test_added_element_avoids_existing(self, couple_client, project, design, chairs_listing):
        first = _add(couple_client, project, chairs_listing).data['placed_elements'][0]
        second = _add(couple_client, project, chairs_listing).data['placed_elements'][0]
        assert first['position'] != second['position']

    def test_move_element(self, couple_client, project, design, chairs_listing):
        placed = _add(couple_client, project, chairs_listing).data['placed_elements'][0]

        response = couple_client.patch(
            _url(project, f"elements/{placed['id']}/"),
            {'position': {'x': 5, 'y': 0, 'z': -3}, 'rotation': 90},
            format='json',
        )

        assert response.status_code == 200
        assert response.data['position'] == {'x': 5.0, 'y': 0.0, 'z': -3.0}
        assert response.data['rotation'] == 90.0

    def test_empty_update_rejected(self, couple_client, project, design, chairs_listing):
        placed = _add(couple_client, project, chairs_listing).data['placed_elements'][0]
        response = couple_client.patch(_url(project, f"elements/{placed['id']}/"), {}, format='json')
        assert response.status_code == 400

    def test_delete_bundle(self, couple_client, project, design, vendor, table_listing):
        ServiceComponent.objects.create(
            service_listing=table_listing, design_element=_make_element(vendor, name='Chair'),
            quantity_per_unit=2, role='chair',
        )
        placed = _add(couple_client, project, table_listing).data['placed_elements']

        response = couple_client.delete(_url(project, f"elements/{placed[0]['id']}/?scope=bundle"))

        assert response.status_code == 200
        assert len(response.data['removed_placement_ids']) == 3
        assert PlacedElement.objects.filter(venue_design=design).count() == 1

    def test_booked_element_cannot_be_deleted(self, couple_client, couple, project, design, vendor, chairs_listing, wedding_date):
        placed = _add(couple_client, project, chairs_listing).data['placed_elements'][0]
        booking = _make_booking(couple, vendor, wedding_date, [(chairs_listing, 1, 20)], project=project)
        transition_booking(booking, BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT)

        response = couple_client.delete(_url(project, f"elements/{placed['id']}/"))

        assert response.status_code == 400
        assert PlacedElement.objects.filter(id=placed['id']).exists()

    def test_venue_cannot_be_deleted(self, couple_client, project, design):
        venue = PlacedElement.objects.get(venue_design=design, meta__role='venue')
        response = couple_client.delete(_url(project, f'elements/{venue.id}/'))
        assert response.status_code == 400

    def test_duplicate_limits(self, couple_client, project, design, vendor):
        element = _make_element(vendor, name='Lantern')
        lanterns = _make_listing(
            vendor, name='Lanterns', availability_type=AVAILABILITY_QUANTITY_BASED,
            max_quantity=2, pricing_policy=PRICING_PER_UNIT, price=Decimal('5.00'), design_element=element,
        )
        placed = _add(couple_client, project, lanterns).data['placed_elements'][0]

        first = couple_client.post(_url(project, f"elements/{placed['id']}/duplicate/"))
        assert first.status_code == 201
        assert first.data[0]['metadata']['bundle_id'] != placed['metadata']['bundle_id']

        second = couple_client.post(_url(project, f"elements/{placed['id']}/duplicate/"))
        assert second.status_code == 400
        assert 'Maximum quantity' in second.data['message']

    def test_past_wedding_is_read_only(self, couple_client, couple, venue_listing, chairs_listing):
        project = _make_project(couple, wedding_date=today() - timedelta(days=1), venue=venue_listing)

        assert couple_client.get(_url(project)).status_code == 200
        response = _add(couple_client, project, chairs_listing)
        assert response.status_code == 403


class TestCameraAndLayout:

    def test_camera_update(self, couple_client, project, design):
        response = couple_client.patch(
            _url(project, 'camera/'), {'position': {'x': 1, 'y': 8, 'z': 12}, 'zoom_level': 2}, format='json'
        )

        assert response.status_code == 200
        assert response.data['zoom_level'] == 2.0
        assert response.data['camera_position']['y'] == 8.0

    @pytest.mark.parametrize('payload', [{}, {'zoom_level': 0}, {'zoom_level': 11}])
    def test_camera_validation(self, couple_client, project, design, payload):
        response = couple_client.patch(_url(project, 'camera/'), payload, format='json')
        assert response.status_code == 400

    def test_save_keeps_placements_meta(self, couple_client, project, design, chairs_listing):
        _add(couple_client, project, chairs_listing)
        before = VenueDesign.objects.get(pk=design.pk).layout_data['placementsMeta']

        response = couple_client.post(
            _url(project, 'save/'),
            {'layout_data': {'gridSize': 0.5, 'placementsMeta': {}}},
            format='json',
        )

        assert response.status_code == 200
        layout = response.data['layout_data']
        assert layout['gridSize'] == 0.5
        assert layout['placementsMeta'] == before
        assert 'lastSavedAt' in layout


class TestCatalog:

    def test_catalog_excludes_venues_and_unavailable(self, couple_client, other_couple, project, design,
                                                      exclusive_listing, chairs_listing, wedding_date, vendor):
        _make_booking(other_couple, vendor, wedding_date, [(exclusive_listing, 1, 1500)], status=BOOKING_STATUS_CONFIRMED)

        response = couple_client.get(_url(project, 'catalog/'))

        assert response.status_code == 200
        names = {item['name'] for item in response.data['results']}
        assert 'Chiavari Chairs' in names
        assert 'Photography Package' not in names
        assert 'Grand Hall' not in names

        response = couple_client.get(_url(project, 'catalog/?include_unavailable=true'))
        names = {item['name'] for item in response.data['results']}
        assert 'Photography Package' in names

    def test_page_size_is_clamped(self, couple_client, project, design, vendor):
        for index in range(8):
            _make_listing(vendor, name=f'Service {index}')

        response = couple_client.get(_url(project, 'catalog/?page_size=1'))

        assert response.status_code == 200
        assert len(response.data['results']) == 5

    def test_catalog_needs_wedding_date(self, couple_client, couple, venue_listing):
        project = _make_project(couple, venue=venue_listing)
        response = couple_client.get(_url(project, 'catalog/'))
        assert response.status_code == 400

    def test_availability(self, couple_client, other_couple, project, chairs_listing, vendor, wedding_date):
        _make_booking(other_couple, vendor, wedding_date, [(chairs_listing, 6, 120)], status=BOOKING_STATUS_CONFIRMED)

        response = couple_client.get(_url(project, f'availability/?service_listing_ids={chairs_listing.id}'))

        assert response.status_code == 200
        result = response.data['availability'][str(chairs_listing.id)]
        assert result['available'] is True
        assert result['available_quantity'] == 4

    def test_availability_requires_ids(self, couple_client, project):
        response = couple_client.get(_url(project, 'availability/'))
        assert response.status_code == 400


class TestTables:

    def _tables(self, client, project, listing, count):
        return [_add(client, project, listing).data['placed_elements'][0]['id'] for _ in range(count)]

    def test_tag_and_count(self, couple_client, project, design, budget, table_listing, linen_listing):
        ids = self._tables(couple_client, project, table_listing, 3)

        response = couple_client.post(
            _url(project, 'tables/tag/'),
            {'placed_element_ids': ids, 'service_listing_ids': [str(linen_listing.id)]},
            format='json',
        )
        assert response.status_code == 200
        assert response.data['updated_count'] == 3

        counted = couple_client.get(_url(project, f'tables/?service_listing_id={linen_listing.id}'))
        assert counted.data['table_count'] == 3
        assert ProjectService.objects.filter(project=project, service_listing=linen_listing).exists()

        untagged = couple_client.post(
            _url(project, 'tables/untag/'),
            {'placed_element_ids': ids[:1], 'service_listing_ids': [str(linen_listing.id)]},
            format='json',
        )
        assert untagged.status_code == 200
        budget.refresh_from_db()
        expense = budget.categories.get().expenses.get()
        assert expense.table_count == 2
        assert expense.estimated_cost == Decimal('30.00')

    def test_deleting_tagged_table_updates_budget(self, couple_client, project, design, budget,
                                                  table_listing, linen_listing):
        ids = self._tables(couple_client, project, table_listing, 3)
        couple_client.post(
            _url(project, 'tables/tag/'),
            {'placed_element_ids': ids, 'service_listing_ids': [str(linen_listing.id)]},
            format='json',
        )

        response = couple_client.delete(_url(project, f'elements/{ids[2]}/'))

        assert response.status_code == 200
        # venue 5000 + tables 2 x 40 + linen 2 x 15
        assert response.data['budget']['planned_spend'] == '5110.00'
        expense = budget.categories.get().expenses.get()
        assert expense.table_count == 2
        assert expense.estimated_cost == Decimal('30.00')

    def test_tagging_non_table(self, couple_client, project, design, chairs_listing, linen_listing):
        chair = _add(couple_client, project, chairs_listing).data['placed_elements'][0]['id']

        response = couple_client.post(
            _url(project, 'tables/tag/'),
            {'placed_element_ids': [chair], 'service_listing_ids': [str(linen_listing.id)]},
            format='json',
        )
        assert response.status_code == 400


class TestCheckout:

    def test_summary_groups_by_vendor(self, couple_client, project, design, chairs_listing):
        _add(couple_client, project, chairs_listing)
        _add(couple_client, project, chairs_listing)

        response = couple_client.get(_url(project, 'checkout-summary/'))

        assert response.status_code == 200
        groups = {group['vendor_name']: group for group in response.data['grouped_by_vendor']}
        chairs = groups['Vendor Co']['items'][0]
        assert chairs['quantity'] == 2
        assert chairs['display_name'] == 'Chiavari Chairs x 2'
        assert Decimal(str(chairs['price'])) == Decimal('40.00')
        assert Decimal(str(groups['Grand Hall']['total'])) == Decimal('5000.00')

    def test_booked_quantity_is_subtracted(self, couple_client, couple, project, design, chairs_listing, vendor, wedding_date):
        for _ in range(3):
            _add(couple_client, project, chairs_listing)
        _make_booking(couple, vendor, wedding_date, [(chairs_listing, 2, 40)], project=project)

        response = couple_client.get(_url(project, 'checkout-summary/'))

        groups = {group['vendor_name']: group for group in response.data['grouped_by_vendor']}
        chairs = groups['Vendor Co']['items'][0]
        assert chairs['already_booked_quantity'] == 2
        assert chairs['quantity'] == 1

    def test_summary_needs_wedding_date(self, couple_client, couple, venue_listing):
        project = _make_project(couple, venue=venue_listing)
        response = couple_client.get(_url(project, 'checkout-summary/'))
        assert response.status_code == 400

    def test_remove_project_service(self, couple_client, project, design, exclusive_listing):
        _add(couple_client, project, exclusive_listing)

        response = couple_client.delete(_url(project, f'project-services/{exclusive_listing.id}/'))

        assert response.status_code == 204
        assert not ProjectService.objects.filter(project=project).exists()
