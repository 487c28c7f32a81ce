"""
Budget reconciliation.

planned_spend is derived from the project's current design: placed 3D
bundles, per-table tags, non-3D project services and the venue. Listings
that already have an expense in the ledger are left out of the derived part
so they are never counted twice. Design-generated expenses that have no
actual cost yet are still planned, so their estimate is added back in.

Everything here is best-effort: failures are logged and never raised to
the caller, and a full recompute always re-derives the figures from scratch.
"""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, Optional

from django.db import transaction
from django.db.models import Sum

from apps.bookings.models import Booking
from apps.budgets.models import Budget, BudgetCategory, Expense
from apps.listings.models import ServiceListing
from apps.listings.services.pricing import PricingError, calculate_price, fallback_price, project_event_duration
from apps.projects.models import ProjectService, WeddingProject
from apps.venue_designs.models import PlacedElement, VenueDesign
from apps.venue_designs.services.table_count import get_table_count, get_tables
from apps.core.utils.constants import (
    ACTIVE_BOOKING_STATUSES,
    DESIGN_EXPENSE_CATEGORY_NAME,
    PRICING_PER_TABLE,
)
from apps.core.utils.helpers import quantize_money, to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def _placement_quantities(design, exclude_listing_id=None) -> Dict[str, int]:
    """
    Units per listing from placed elements: each bundle counts once and each
    bundle-less placement counts once.
    """
    bundles = defaultdict(set)
    loose = defaultdict(int)
    placements = PlacedElement.objects.filter(
        venue_design=design, meta__isnull=False
    ).values_list('meta__service_listing_id', 'meta__bundle_id')

    for listing_id, bundle_id in placements:
        key = str(listing_id)
        if exclude_listing_id and key == str(exclude_listing_id):
            continue
        if bundle_id:
            bundles[key].add(bundle_id)
        else:
            loose[key] += 1

    quantities = defaultdict(int)
    for key, bundle_ids in bundles.items():
        quantities[key] += len(bundle_ids)
    for key, count in loose.items():
        quantities[key] += count
    return dict(quantities)


def _table_tag_counts(design) -> Dict[str, int]:
    counts = defaultdict(int)
    for table in get_tables(design):
        for listing_id in table.service_listing_ids or []:
            counts[str(listing_id)] += 1
    return dict(counts)


def venue_is_booked(project) -> bool:
    if not project.venue_service_listing_id:
        return False
    return Booking.objects.filter(
        project=project,
        status__in=ACTIVE_BOOKING_STATUSES,
        selected_services__service_listing_id=project.venue_service_listing_id,
    ).exists()


def design_quantities(project, design=None) -> Dict[str, dict]:
    """
    Listing id -> {'quantity': int, 'table_count': int} for everything the
    project's design and service list currently call for.
    """
    design = design if design is not None else VenueDesign.objects.filter(project=project).first()
    venue_id = str(project.venue_service_listing_id) if project.venue_service_listing_id else None
    items: Dict[str, dict] = {}

    def add(listing_id, quantity=0, table_count=0):
        entry = items.setdefault(str(listing_id), {'quantity': 0, 'table_count': 0})
        entry['quantity'] += quantity
        entry['table_count'] += table_count

    if design is not None:
        for listing_id, quantity in _placement_quantities(design, exclude_listing_id=venue_id).items():
            add(listing_id, quantity=quantity)
        for listing_id, count in _table_tag_counts(design).items():
            add(listing_id, table_count=count)

    project_services = ProjectService.objects.filter(project=project).select_related('service_listing')
    for project_service in project_services:
        if project_service.service_listing.pricing_policy == PRICING_PER_TABLE:
            continue
        add(project_service.service_listing_id, quantity=project_service.quantity)

    if venue_id and not venue_is_booked(project):
        items.setdefault(venue_id, {'quantity': 1, 'table_count': 0})

    return items


def price_listing(listing, quantity: int = 0, table_count: int = 0, event_duration=None) -> Decimal:
    """Price a listing for the given context, falling back to the base price."""
    try:
        return calculate_price(
            listing,
            quantity=quantity,
            table_count=table_count,
            event_duration=event_duration,
        )
    except PricingError as e:
        logger.warning(f"Pricing failed for listing {listing.id}, using fallback: {e}")
        units = table_count if listing.pricing_policy == PRICING_PER_TABLE else quantity
        return fallback_price(listing, units or 1)


def _expense_listing_ids(budget) -> set:
    return {
        str(listing_id)
        for listing_id in Expense.objects.filter(
            category__budget=budget, service_listing__isnull=False
        ).values_list('service_listing_id', flat=True)
    }


def _pending_design_estimates(budget) -> Decimal:
    total = Expense.objects.filter(
        category__budget=budget,
        from_3d_design=True,
        actual_cost__isnull=True,
    ).aggregate(total=Sum('estimated_cost'))['total']
    return total or ZERO


def derive_planned_spend(project, budget) -> Decimal:
    items = design_quantities(project)
    represented = _expense_listing_ids(budget)
    listing_ids = [listing_id for listing_id in items if listing_id not in represented]

    listings = ServiceListing.objects.in_bulk(listing_ids)
    duration = project_event_duration(project)

    planned = Decimal('0')
    for listing in listings.values():
        entry = items[str(listing.id)]
        planned += price_listing(listing, entry['quantity'], entry['table_count'], duration)
    planned += _pending_design_estimates(budget)
    return quantize_money(planned)


def recompute_totals(budget: Budget, save: bool = True) -> Budget:
    """
    Re-derive total_spent from actual costs and total_remaining from the
    current planned_spend.
    """
    spent = Expense.objects.filter(
        category__budget=budget, actual_cost__isnull=False
    ).aggregate(total=Sum('actual_cost'))['total'] or ZERO

    budget.total_spent = quantize_money(spent)
    budget.total_remaining = quantize_money(
        to_decimal(budget.total_budget) - budget.total_spent - to_decimal(budget.planned_spend)
    )
    if save:
        budget.save(update_fields=['total_spent', 'total_remaining', 'updated_at'])
    return budget


def resync_design_expenses(project, budget) -> int:
    """
    Re-sync every design-generated per-table expense with the live tag
    count of the project's design. Returns the number of expenses checked.
    """
    design = VenueDesign.objects.filter(project=project).first()
    if design is None:
        return 0

    listings = ServiceListing.objects.filter(
        id__in=Expense.objects.filter(
            category__budget=budget, from_3d_design=True
        ).values('service_listing_id'),
        pricing_policy=PRICING_PER_TABLE,
    )
    synced = 0
    with transaction.atomic():
        for listing in listings:
            _sync_listing_expense(budget, design, listing)
            synced += 1
    return synced


def recompute_planned_spend(project_id) -> Optional[Decimal]:
    """
    Re-derive planned_spend, total_spent and total_remaining for a project.

    Design-generated per-table expenses are re-synced with the design first.

    Returns the new planned_spend, or None when the project has no budget
    or the recompute failed.
    """
    try:
        project = WeddingProject.objects.select_related('venue_service_listing').get(id=project_id)
        budget = Budget.objects.filter(project=project).first()
        if budget is None:
            return None

        resync_design_expenses(project, budget)
        budget.planned_spend = derive_planned_spend(project, budget)
        recompute_totals(budget, save=False)
        budget.save(update_fields=['planned_spend', 'total_spent', 'total_remaining', 'updated_at'])

        logger.info(f"Recomputed planned spend for project {project_id}: {budget.planned_spend}")
        return budget.planned_spend
    except Exception:
        logger.exception(f"Failed to recompute planned spend for project {project_id}")
        return None


def _design_category(budget) -> BudgetCategory:
    category, _ = BudgetCategory.objects.get_or_create(
        budget=budget,
        category_name=DESIGN_EXPENSE_CATEGORY_NAME,
    )
    return category


def _sync_listing_expense(budget, design, listing) -> Decimal:
    """
    Bring the design-generated expense for one per-table listing in line
    with its tag count. Returns the change in pending planned spend.
    """
    count = get_table_count(design, listing.id)
    expense = Expense.objects.filter(
        category__budget=budget,
        service_listing=listing,
        from_3d_design=True,
    ).first()

    if count == 0:
        if expense is None:
            return ZERO
        delta = -expense.estimated_cost if expense.actual_cost is None else ZERO
        expense.delete()
        logger.info(f"Removed design expense for {listing.name}, no tables tagged")
        return delta

    if expense is None:
        estimated = quantize_money(to_decimal(listing.price) * count)
        Expense.objects.create(
            category=_design_category(budget),
            expense_name=listing.name,
            estimated_cost=estimated,
            remark=f"{count} tagged tables",
            service_listing=listing,
            from_3d_design=True,
            table_count=count,
        )
        logger.info(f"Created design expense for {listing.name}: {estimated}")
        return estimated

    old_estimate = expense.estimated_cost
    if expense.table_count:
        new_estimate = quantize_money(old_estimate * count / expense.table_count)
    else:
        new_estimate = quantize_money(to_decimal(listing.price) * count)

    update_fields = ['estimated_cost', 'table_count', 'remark', 'updated_at']
    if expense.actual_cost is not None and expense.table_count:
        expense.actual_cost = quantize_money(expense.actual_cost * count / expense.table_count)
        update_fields.append('actual_cost')

    expense.estimated_cost = new_estimate
    expense.table_count = count
    expense.remark = f"{count} tagged tables"
    expense.save(update_fields=update_fields)

    return new_estimate - old_estimate if expense.actual_cost is None else ZERO


def sync_per_table_expenses(venue_design, service_listing_ids: Iterable) -> None:
    """
    Keep design-generated expenses of per-table services in step with the
    number of tables tagged with them.
    """
    try:
        budget = Budget.objects.filter(project_id=venue_design.project_id).first()
        if budget is None:
            return

        listings = ServiceListing.objects.filter(
            id__in=[str(listing_id) for listing_id in service_listing_ids],
            pricing_policy=PRICING_PER_TABLE,
        )

        with transaction.atomic():
            delta = ZERO
            for listing in listings:
                delta += _sync_listing_expense(budget, venue_design, listing)

            budget.planned_spend = quantize_money(to_decimal(budget.planned_spend) + delta)
            recompute_totals(budget, save=False)
            budget.save(update_fields=['planned_spend', 'total_spent', 'total_remaining', 'updated_at'])
    except Exception:
        logger.exception(f"Failed to sync per-table expenses for design {venue_design.id}")
