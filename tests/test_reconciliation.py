from decimal import Decimal

import pytest

from apps.budgets.models import Budget, BudgetCategory, Expense
from apps.budgets.services.reconciliation import (
    derive_planned_spend,
    design_quantities,
    recompute_planned_spend,
    sync_per_table_expenses,
    venue_is_booked,
)
from apps.core.utils.constants import (
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_REJECTED,
    DESIGN_EXPENSE_CATEGORY_NAME,
    PRICING_PER_UNIT,
)
from apps.listings.models import ServiceComponent
from apps.venue_designs.models import PlacedElement
from apps.venue_designs.services.design_service import venue_design_service
from apps.venue_designs.services.table_count import tag_tables, untag_tables
from tests.conftest import _make_booking, _make_element, _make_listing

pytestmark = pytest.mark.django_db


def _place(project, design, listing, times=1):
    placements = []
    for _ in range(times):
        placements.extend(venue_design_service.add_element(project, design, listing.id)['placements'])
    return placements


def test_no_budget_is_skipped(project, design):
    assert recompute_planned_spend(project.id) is None


def test_venue_counts_until_booked(project, design, budget, venue_listing, venue_vendor):
    assert recompute_planned_spend(project.id) == Decimal('5000.00')

    _make_booking(project.couple, venue_vendor, project.wedding_date, [(venue_listing, 1, 5000)],
                  project=project, status=BOOKING_STATUS_CONFIRMED)

    assert venue_is_booked(project)
    assert recompute_planned_spend(project.id) == Decimal('0.00')


def test_released_venue_booking_counts_again(project, design, budget, venue_listing, venue_vendor):
    _make_booking(project.couple, venue_vendor, project.wedding_date, [(venue_listing, 1, 5000)],
                  project=project, status=BOOKING_STATUS_REJECTED)
    assert not venue_is_booked(project)
    assert recompute_planned_spend(project.id) == Decimal('5000.00')


def test_bundles_count_once(project, design, vendor):
    table = _make_element(vendor, name='Banquet Table', element_type='table')
    chair = _make_element(vendor, name='Banquet Chair')
    listing = _make_listing(vendor, name='Banquet Set', pricing_policy=PRICING_PER_UNIT,
                            availability_type='reusable', price=Decimal('80.00'), design_element=table)
    ServiceComponent.objects.create(service_listing=listing, design_element=chair, quantity_per_unit=4, role='chair')

    placements = _place(project, design, listing, times=2)

    assert len(placements) == 10
    assert design_quantities(project, design)[str(listing.id)]['quantity'] == 2


def test_planned_spend_prices_each_policy(project, design, budget, chairs_listing, vendor):
    _place(project, design, chairs_listing, times=3)
    dj = _make_listing(vendor, name='DJ Set', price=Decimal('900.00'))
    venue_design_service.add_element(project, design, dj.id)

    # venue 5000 + chairs 3 x 20 + DJ 900
    assert recompute_planned_spend(project.id) == Decimal('5960.00')

    budget.refresh_from_db()
    assert budget.planned_spend == Decimal('5960.00')
    assert budget.total_spent == Decimal('0.00')
    assert budget.total_remaining == Decimal('14040.00')


def test_recompute_is_idempotent(project, design, budget, chairs_listing):
    _place(project, design, chairs_listing, times=2)
    first = recompute_planned_spend(project.id)
    second = recompute_planned_spend(project.id)
    assert first == second

    budget.refresh_from_db()
    assert budget.planned_spend == second


def test_listing_with_expense_is_not_counted_twice(project, design, budget, chairs_listing):
    _place(project, design, chairs_listing, times=2)
    category = BudgetCategory.objects.create(budget=budget, category_name='Decor')
    Expense.objects.create(
        category=category,
        expense_name='Chairs deposit',
        estimated_cost=Decimal('40.00'),
        actual_cost=Decimal('40.00'),
        service_listing=chairs_listing,
    )

    assert derive_planned_spend(project, budget) == Decimal('5000.00')
    recompute_planned_spend(project.id)
    budget.refresh_from_db()
    assert budget.total_spent == Decimal('40.00')
    assert budget.total_remaining == Decimal('14960.00')


def test_pricing_failure_falls_back_to_base_price(project, design, budget, vendor):
    band = _make_listing(vendor, name='Live Band', pricing_policy='time_based', price=Decimal('700.00'))
    venue_design_service.add_element(project, design, band.id)

    # no event times, so the duration is unknown and the base price is used
    assert recompute_planned_spend(project.id) == Decimal('5700.00')


def test_per_table_expense_follows_tag_count(project, design, budget, table_listing, linen_listing):
    tables = _place(project, design, table_listing, times=3)
    table_ids = [t.id for t in tables]

    tag_tables(design, table_ids, [linen_listing.id])
    sync_per_table_expenses(design, [linen_listing.id])

    expense = Expense.objects.get(service_listing=linen_listing, from_3d_design=True)
    assert expense.category.category_name == DESIGN_EXPENSE_CATEGORY_NAME
    assert expense.estimated_cost == Decimal('45.00')
    assert expense.table_count == 3
    budget.refresh_from_db()
    before = budget.planned_spend

    untag_tables(design, table_ids[2:], [linen_listing.id])
    sync_per_table_expenses(design, [linen_listing.id])

    expense.refresh_from_db()
    assert expense.estimated_cost == Decimal('30.00')
    assert expense.table_count == 2
    budget.refresh_from_db()
    assert budget.planned_spend - before == Decimal('-15.00')


def test_per_table_expense_counted_once_in_full_recompute(project, design, budget, table_listing, linen_listing):
    tables = _place(project, design, table_listing, times=2)
    tag_tables(design, [t.id for t in tables], [linen_listing.id])
    sync_per_table_expenses(design, [linen_listing.id])

    # venue 5000 + tables 2 x 40 + linen expense estimate 2 x 15
    assert recompute_planned_spend(project.id) == Decimal('5110.00')
    assert recompute_planned_spend(project.id) == Decimal('5110.00')


def test_untagging_every_table_removes_the_expense(project, design, budget, table_listing, linen_listing):
    tables = _place(project, design, table_listing, times=2)
    table_ids = [t.id for t in tables]
    tag_tables(design, table_ids, [linen_listing.id])
    sync_per_table_expenses(design, [linen_listing.id])

    untag_tables(design, table_ids, [linen_listing.id])
    sync_per_table_expenses(design, [linen_listing.id])

    assert not Expense.objects.filter(service_listing=linen_listing).exists()


def test_actual_cost_is_rescaled(project, design, budget, table_listing, linen_listing):
    tables = _place(project, design, table_listing, times=4)
    table_ids = [t.id for t in tables]
    tag_tables(design, table_ids, [linen_listing.id])
    sync_per_table_expenses(design, [linen_listing.id])
    Expense.objects.filter(service_listing=linen_listing).update(actual_cost=Decimal('80.00'))

    untag_tables(design, table_ids[:1], [linen_listing.id])
    sync_per_table_expenses(design, [linen_listing.id])

    expense = Expense.objects.get(service_listing=linen_listing)
    assert expense.actual_cost == Decimal('60.00')
    budget.refresh_from_db()
    assert budget.total_spent == Decimal('60.00')


def test_expense_sync_without_budget_is_silent(project, design, table_listing, linen_listing):
    tables = _place(project, design, table_listing)
    tag_tables(design, [tables[0].id], [linen_listing.id])
    sync_per_table_expenses(design, [linen_listing.id])
    assert not Budget.objects.filter(project=project).exists()
    assert not Expense.objects.exists()


def _tagged_tables(project, design, table_listing, linen_listing, times):
    tables = _place(project, design, table_listing, times=times)
    tag_tables(design, [t.id for t in tables], [linen_listing.id])
    sync_per_table_expenses(design, [linen_listing.id])
    return tables


def test_deleting_tagged_table_rescales_expense(project, design, budget, table_listing, linen_listing):
    tables = _tagged_tables(project, design, table_listing, linen_listing, times=3)

    venue_design_service.delete_element(design, tables[2].id)

    expense = Expense.objects.get(service_listing=linen_listing, from_3d_design=True)
    assert expense.table_count == 2
    assert expense.estimated_cost == Decimal('30.00')
    assert recompute_planned_spend(project.id) == Decimal('5110.00')


def test_duplicating_tagged_table_rescales_expense(project, design, budget, table_listing, linen_listing):
    tables = _tagged_tables(project, design, table_listing, linen_listing, times=1)

    venue_design_service.duplicate_element(project, design, tables[0].id)

    expense = Expense.objects.get(service_listing=linen_listing, from_3d_design=True)
    assert expense.table_count == 2
    assert expense.estimated_cost == Decimal('30.00')


def test_recompute_resyncs_drifted_table_expense(project, design, budget, table_listing, linen_listing):
    tables = _tagged_tables(project, design, table_listing, linen_listing, times=3)
    PlacedElement.objects.filter(id=tables[2].id).delete()

    assert recompute_planned_spend(project.id) == Decimal('5110.00')

    expense = Expense.objects.get(service_listing=linen_listing, from_3d_design=True)
    assert expense.table_count == 2
    assert expense.estimated_cost == Decimal('30.00')
