from decimal import Decimal

import pytest

from apps.budgets.models import Budget, Expense
from apps.venue_designs.models import PlacementMeta, VenueDesign
from apps.venue_designs.services.design_service import venue_design_service
from tests.conftest import _make_project

pytestmark = pytest.mark.django_db

BUDGETS_URL = '/api/v1/budgets/'


def _create_budget(client, project, total='20000.00'):
    return client.post(BUDGETS_URL, {'project_id': str(project.id), 'total_budget': total}, format='json')


def test_create_budget_counts_unbooked_venue(couple_client, project):
    response = _create_budget(couple_client, project)

    assert response.status_code == 201
    assert response.data['planned_spend'] == '5000.00'
    assert response.data['total_remaining'] == '15000.00'


def test_duplicate_budget_conflicts(couple_client, project, budget):
    response = _create_budget(couple_client, project)
    assert response.status_code == 409


def test_total_budget_must_be_positive(couple_client, project):
    response = _create_budget(couple_client, project, total='0')
    assert response.status_code == 400


def test_get_creates_empty_budget(couple_client, couple):
    project = _make_project(couple)

    response = couple_client.get(f'{BUDGETS_URL}project/{project.id}/')

    assert response.status_code == 200
    assert response.data['total_budget'] == '0.00'
    assert response.data['categories'] == []
    assert Budget.objects.filter(project=project).count() == 1


def test_other_couple_cannot_read(api_client, other_couple, project, budget):
    api_client.force_authenticate(user=other_couple.user)
    response = api_client.get(f'{BUDGETS_URL}project/{project.id}/')
    assert response.status_code == 404


def test_update_total_budget(couple_client, project, budget):
    response = couple_client.patch(f'{BUDGETS_URL}{budget.id}/', {'total_budget': '25000.00'}, format='json')

    assert response.status_code == 200
    assert response.data['total_remaining'] == '20000.00'


def test_ledger_crud_keeps_totals(couple_client, project, budget):
    category = couple_client.post(
        f'{BUDGETS_URL}{budget.id}/categories/', {'category_name': 'Flowers'}, format='json'
    )
    assert category.status_code == 201
    category_url = f"{BUDGETS_URL}{budget.id}/categories/{category.data['id']}/"

    expense = couple_client.post(
        f'{category_url}expenses/',
        {'expense_name': 'Bridal bouquet', 'estimated_cost': '800.00', 'actual_cost': '750.00'},
        format='json',
    )
    assert expense.status_code == 201

    budget.refresh_from_db()
    assert budget.total_spent == Decimal('750.00')
    assert budget.planned_spend == Decimal('5000.00')
    assert budget.total_remaining == Decimal('14250.00')

    updated = couple_client.patch(
        f"{category_url}expenses/{expense.data['id']}/", {'actual_cost': '900.00'}, format='json'
    )
    assert updated.status_code == 200
    assert updated.data['estimated_cost'] == '800.00'
    budget.refresh_from_db()
    assert budget.total_spent == Decimal('900.00')

    renamed = couple_client.patch(category_url, {'category_name': 'Florals'}, format='json')
    assert renamed.data['category_name'] == 'Florals'

    assert couple_client.delete(category_url).status_code == 204
    assert not Expense.objects.exists()
    budget.refresh_from_db()
    assert budget.total_spent == Decimal('0.00')
    assert budget.total_remaining == Decimal('15000.00')


def test_expense_validation(couple_client, budget):
    category = couple_client.post(
        f'{BUDGETS_URL}{budget.id}/categories/', {'category_name': 'Music'}, format='json'
    )
    url = f"{BUDGETS_URL}{budget.id}/categories/{category.data['id']}/expenses/"

    assert couple_client.post(url, {'expense_name': '', 'estimated_cost': '10'}, format='json').status_code == 400
    assert couple_client.post(url, {'expense_name': 'DJ', 'estimated_cost': '-1'}, format='json').status_code == 400


def test_recalculate(couple_client, project, budget):
    Budget.objects.filter(pk=budget.pk).update(planned_spend=Decimal('1.00'), total_remaining=Decimal('1.00'))

    response = couple_client.post(f'{BUDGETS_URL}project/{project.id}/recalculate/')

    assert response.status_code == 200
    assert response.data['planned_spend'] == '5000.00'
    assert response.data['total_remaining'] == '15000.00'


def test_vendor_forbidden(vendor_client, project):
    response = vendor_client.get(f'{BUDGETS_URL}project/{project.id}/')
    assert response.status_code == 403


def test_recalculate_rebuilds_placements_meta(couple_client, project, design, budget, chairs_listing):
    placement = venue_design_service.add_element(project, design, chairs_listing.id)['placements'][0]
    VenueDesign.objects.filter(pk=design.pk).update(layout_data={'placementsMeta': {'stale': {}}, 'grid': True})

    response = couple_client.post(f'{BUDGETS_URL}project/{project.id}/recalculate/')

    assert response.status_code == 200
    design.refresh_from_db()
    placements_meta = design.layout_data['placementsMeta']
    rows = PlacementMeta.objects.filter(placed_element__venue_design=design)
    assert set(placements_meta) == {str(meta.placed_element_id) for meta in rows}
    assert placements_meta[str(placement.id)]['serviceListingId'] == str(chairs_listing.id)
    assert design.layout_data['grid'] is True
