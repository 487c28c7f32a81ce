"""
Table counting and per-table service tags.

Per-table services (linens, centrepieces, ...) are priced by the number of
tables in the design tagged with them. A placement counts as a table when
its own element type, or its design element's type, is "table", or when the
design element's name contains "table".
"""
import logging
from typing import Iterable, List, Optional

from django.db import transaction

from apps.listings.models import ServiceListing
from apps.projects.models import ProjectService
from apps.venue_designs.models import PlacedElement
from apps.core.utils.constants import PRICING_PER_TABLE

logger = logging.getLogger(__name__)


class TableTaggingError(ValueError):
    """Raised for invalid tag/untag requests."""


def _placements(design):
    return PlacedElement.objects.filter(venue_design=design).select_related('design_element')


def get_tables(design) -> List[PlacedElement]:
    """All table placements of a design, oldest first."""
    return [placement for placement in _placements(design) if placement.is_table]


def get_table_count(design, service_listing_id=None) -> int:
    """Number of tables, or of tables tagged with `service_listing_id`."""
    tables = get_tables(design)
    if service_listing_id is None:
        return len(tables)
    listing_key = str(service_listing_id)
    return sum(1 for table in tables if listing_key in (table.service_listing_ids or []))


def _require_ids(values: Optional[Iterable], label: str) -> List[str]:
    ids = [str(value) for value in (values or [])]
    if not ids:
        raise TableTaggingError(f"{label} array is required")
    return ids


def _load_tables(design, placed_element_ids: List[str]) -> List[PlacedElement]:
    found = list(_placements(design).filter(id__in=placed_element_ids))
    found_ids = {str(placement.id) for placement in found}
    missing = [pid for pid in placed_element_ids if pid not in found_ids]
    if missing:
        raise TableTaggingError(f"Some placed elements not found: {', '.join(missing)}")
    return found


def tag_tables(design, placed_element_ids, service_listing_ids) -> int:
    """
    Replace the tags on the given tables with `service_listing_ids`.

    Per-table listings get a ProjectService row (quantity 0, since the
    quantity comes from the tags) so they show up at checkout.
    Returns the number of tables updated.
    """
    placed_element_ids = _require_ids(placed_element_ids, 'Placed element IDs')
    service_listing_ids = _require_ids(service_listing_ids, 'Service listing IDs')

    tables = _load_tables(design, placed_element_ids)
    non_tables = [str(placement.id) for placement in tables if not placement.is_table]
    if non_tables:
        raise TableTaggingError(f"Some placed elements are not tables: {', '.join(non_tables)}")

    listings = list(ServiceListing.objects.filter(id__in=service_listing_ids))
    if len(listings) != len(set(service_listing_ids)):
        raise TableTaggingError('Some service listings not found')

    with transaction.atomic():
        for listing in listings:
            if listing.pricing_policy == PRICING_PER_TABLE:
                ProjectService.objects.get_or_create(
                    project_id=design.project_id,
                    service_listing=listing,
                    defaults={'quantity': 0},
                )

        for table in tables:
            table.service_listing_ids = list(dict.fromkeys(service_listing_ids))
            table.save(update_fields=['service_listing_ids', 'updated_at'])

    logger.info(f"Tagged {len(tables)} tables in design {design.id} with {service_listing_ids}")
    return len(tables)


def untag_tables(design, placed_element_ids, service_listing_ids) -> int:
    """Remove `service_listing_ids` from the given tables' tags."""
    placed_element_ids = _require_ids(placed_element_ids, 'Placed element IDs')
    service_listing_ids = set(_require_ids(service_listing_ids, 'Service listing IDs'))

    tables = _load_tables(design, placed_element_ids)
    with transaction.atomic():
        for table in tables:
            table.service_listing_ids = [
                tag for tag in (table.service_listing_ids or []) if tag not in service_listing_ids
            ]
            table.save(update_fields=['service_listing_ids', 'updated_at'])

    logger.info(f"Untagged {len(tables)} tables in design {design.id}")
    return len(tables)
