"""
Keeps the design items of a project in step with its bookings.

While a booking is active, the placed elements and project services it covers
are flagged as booked and point at it. When it is cancelled or rejected the
flags are cleared again. The sync is idempotent and only ever touches items
of the booking's own project.
"""
import logging
from dataclasses import dataclass

from apps.core.utils.constants import ACTIVE_BOOKING_STATUSES, RELEASED_BOOKING_STATUSES

logger = logging.getLogger(__name__)


@dataclass
class LinkageResult:
    """Number of rows changed per item kind."""
    placements: int = 0
    project_services: int = 0

    @property
    def total(self) -> int:
        return self.placements + self.project_services


def _project_design(project):
    from apps.venue_designs.models import VenueDesign

    return VenueDesign.objects.filter(project=project).first()


def _link(booking) -> LinkageResult:
    from apps.projects.models import ProjectService
    from apps.venue_designs.models import PlacedElement

    listing_ids = booking.service_listing_ids()
    result = LinkageResult()
    if not listing_ids:
        return result

    design = _project_design(booking.project)
    if design is not None:
        result.placements = PlacedElement.objects.filter(
            venue_design=design,
            meta__service_listing_id__in=listing_ids,
        ).update(is_booked=True, booking=booking)

    result.project_services = ProjectService.objects.filter(
        project=booking.project,
        service_listing_id__in=listing_ids,
    ).update(is_booked=True, booking=booking)
    return result


def _unlink(booking) -> LinkageResult:
    from apps.projects.models import ProjectService
    from apps.venue_designs.models import PlacedElement

    return LinkageResult(
        placements=PlacedElement.objects.filter(booking=booking).update(is_booked=False, booking=None),
        project_services=ProjectService.objects.filter(booking=booking).update(is_booked=False, booking=None),
    )


def sync_linked_items(booking, new_status=None) -> LinkageResult:
    """
    Apply `new_status` (defaults to the booking's current status) to the
    project items the booking covers.

    Must be called inside the transaction that changes the booking status.
    """
    status = new_status or booking.status

    if not booking.project_id:
        return LinkageResult()

    if status in ACTIVE_BOOKING_STATUSES:
        result = _link(booking)
    elif status in RELEASED_BOOKING_STATUSES:
        result = _unlink(booking)
    else:
        return LinkageResult()

    logger.info(
        f"Synced booking {booking.id} ({status}): "
        f"{result.placements} placements, {result.project_services} project services"
    )
    return result
