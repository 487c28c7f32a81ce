"""
Venue design service.

This module handles:
- Creating a project's design around its venue
- Adding, moving, duplicating and removing placed elements
- Keeping PlacementMeta rows and their layout_data mirror in step
- Camera and layout saves
- Catalog, availability and checkout views of the design
"""
import logging
import uuid
from decimal import Decimal
from typing import Dict, List, Optional

from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound

from apps.bookings.models import SelectedService
from apps.budgets.services.reconciliation import (
    design_quantities,
    price_listing,
    sync_per_table_expenses,
    venue_is_booked,
)
from apps.listings.models import ServiceListing
from apps.listings.services.pricing import project_event_duration
from apps.projects.models import ProjectService, WeddingProject
from apps.schedules.services.availability import check_availability, check_many
from apps.venue_designs.models import VenueDesign, PlacedElement, PlacementMeta
from apps.venue_designs.services.placement import (
    find_bundle_offset,
    find_non_overlapping_position,
    footprint_radius,
)
from apps.core.exceptions import BookingLocked, InvalidOperation, ProjectLocked
from apps.core.utils.constants import (
    ACTIVE_BOOKING_STATUSES,
    AVAILABILITY_EXCLUSIVE,
    AVAILABILITY_QUANTITY_BASED,
    PRICING_PER_TABLE,
    VENDOR_CATEGORY_VENUE,
)
from apps.core.utils.helpers import quantize_money

logger = logging.getLogger(__name__)

ROLE_PRIMARY = 'primary'
ROLE_COMPONENT = 'component'
ROLE_VENUE = 'venue'

# Spacing between the elements of one new bundle along x
DESCRIPTOR_SPACING = 0.5

SERVER_OWNED_LAYOUT_KEYS = ('placementsMeta',)


def new_bundle_id() -> str:
    return f"bnd_{uuid.uuid4().hex}"


class VenueDesignService:
    """
    Operations on a project's 3D venue design.

    Every mutating operation expects the caller to have checked
    check_project_can_be_modified first.
    """

    # ------------------------------------------------------------------
    # Project access
    # ------------------------------------------------------------------

    @staticmethod
    def get_project_for_couple(project_id, couple) -> WeddingProject:
        try:
            return WeddingProject.objects.select_related(
                'venue_service_listing__design_element', 'venue_service_listing__vendor'
            ).get(id=project_id, couple=couple)
        except (WeddingProject.DoesNotExist, ValueError):
            raise NotFound('Project not found')

    @staticmethod
    def check_project_can_be_modified(project: WeddingProject):
        """Completed projects and past weddings are read-only."""
        if project.is_locked:
            raise ProjectLocked('This project is completed or its wedding date has passed and can no longer be modified.')

    # ------------------------------------------------------------------
    # Design lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def get_or_create_design(project: WeddingProject) -> VenueDesign:
        """
        Fetch the project's design, creating it around the venue's 3D model
        on first access.
        """
        design = VenueDesign.objects.filter(project=project).first()
        if design is None:
            venue = project.venue_service_listing
            if venue is None:
                raise InvalidOperation('Project does not have a venue assigned yet.')
            if not venue.is_active or venue.category != VENDOR_CATEGORY_VENUE:
                raise NotFound('Selected venue listing is not available.')
            if not venue.design_element_id:
                raise InvalidOperation('Selected venue does not have a 3D model yet.')

            with transaction.atomic():
                design, created = VenueDesign.objects.get_or_create(
                    project=project,
                    defaults={'venue_name': venue.name},
                )
                if created:
                    logger.info(f"Created venue design {design.id} for project {project.id}")

        VenueDesignService.ensure_venue_placement(design, project)
        return design

    @staticmethod
    def ensure_venue_placement(design: VenueDesign, project: WeddingProject) -> Optional[PlacedElement]:
        """Make sure the venue's own model is placed (locked, at the origin)."""
        venue = project.venue_service_listing
        if venue is None or not venue.design_element_id:
            return None

        existing = PlacedElement.objects.filter(
            venue_design=design, meta__role=ROLE_VENUE
        ).select_related('meta').first()
        if existing is not None:
            if existing.meta.service_listing_id == venue.id:
                return existing
            # Venue changed: replace the old venue placement
            VenueDesignService._remove_placements(design, [existing])

        with transaction.atomic():
            placement = PlacedElement.objects.create(
                venue_design=design,
                design_element_id=venue.design_element_id,
                element_type=ROLE_VENUE,
                is_locked=True,
            )
            meta = PlacementMeta.objects.create(
                placed_element=placement,
                service_listing=venue,
                role=ROLE_VENUE,
                unit_price=venue.price,
            )
            VenueDesignService._mirror_meta(design, upserts={placement.id: meta})
        return placement

    # ------------------------------------------------------------------
    # layout_data mirror of PlacementMeta
    # ------------------------------------------------------------------

    @staticmethod
    def _mirror_meta(design: VenueDesign, upserts: Dict = None, removed: List = None):
        layout = dict(design.layout_data or {})
        placements_meta = dict(layout.get('placementsMeta') or {})
        for placement_id, meta in (upserts or {}).items():
            placements_meta[str(placement_id)] = meta.as_layout_entry()
        for placement_id in removed or []:
            placements_meta.pop(str(placement_id), None)
        layout['placementsMeta'] = placements_meta
        layout['lastSavedAt'] = timezone.now().isoformat()
        design.layout_data = layout
        design.save(update_fields=['layout_data', 'updated_at'])

    @staticmethod
    def rebuild_placements_meta(design: VenueDesign) -> dict:
        """Regenerate layout_data['placementsMeta'] from the PlacementMeta rows."""
        metas = PlacementMeta.objects.filter(placed_element__venue_design=design)
        layout = dict(design.layout_data or {})
        layout['placementsMeta'] = {str(meta.placed_element_id): meta.as_layout_entry() for meta in metas}
        layout['lastSavedAt'] = timezone.now().isoformat()
        design.layout_data = layout
        design.save(update_fields=['layout_data', 'updated_at'])
        return layout['placementsMeta']

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    @staticmethod
    def _check_wedding_date_availability(project, listing):
        if not project.wedding_date:
            return
        result = check_availability(listing.id, project.wedding_date)
        if not result.available:
            raise InvalidOperation(result.reason or 'Service is unavailable on the selected wedding date')

    @staticmethod
    def _instance_count(design, listing) -> int:
        """Placed instances of a listing: bundles count once, loose placements each."""
        rows = PlacementMeta.objects.filter(
            placed_element__venue_design=design, service_listing=listing
        ).values_list('bundle_id', 'placed_element_id')
        return len({bundle_id or f"single_{placement_id}" for bundle_id, placement_id in rows})

    @staticmethod
    def _obstacles(design):
        placements = PlacedElement.objects.filter(venue_design=design).exclude(
            meta__role=ROLE_VENUE
        ).select_related('design_element')
        return [(placement.position, footprint_radius(placement.design_element)) for placement in placements]

    @staticmethod
    def _descriptors(listing) -> List[dict]:
        descriptors = []
        if listing.design_element_id:
            descriptors.append({
                'design_element': listing.design_element,
                'role': ROLE_PRIMARY,
                'quantity': 1,
            })
        for component in listing.components.select_related('design_element'):
            if component.design_element_id:
                descriptors.append({
                    'design_element': component.design_element,
                    'role': component.role or ROLE_COMPONENT,
                    'quantity': component.quantity_per_unit or 1,
                })
        return descriptors

    @staticmethod
    def _add_project_service(project, listing) -> ProjectService:
        is_per_table = listing.pricing_policy == PRICING_PER_TABLE
        with transaction.atomic():
            project_service, created = ProjectService.objects.select_for_update().get_or_create(
                project=project,
                service_listing=listing,
                defaults={'quantity': 0 if is_per_table else 1},
            )
            if not created and not is_per_table:
                project_service.quantity += 1
                project_service.save(update_fields=['quantity', 'updated_at'])
        return project_service

    @staticmethod
    def add_element(project, design, service_listing_id, position=None, rotation=0) -> dict:
        """
        Add a listing to the design.

        Listings without a 3D model become (or increment) a project service.
        Otherwise the primary element and every component are placed as one
        bundle, each nudged clear of existing placements.
        """
        try:
            listing = ServiceListing.objects.select_related('design_element').get(
                id=service_listing_id, is_active=True
            )
        except (ServiceListing.DoesNotExist, ValueError):
            raise NotFound('Service listing not found or inactive')

        if listing.category == VENDOR_CATEGORY_VENUE:
            raise InvalidOperation('Venue listings cannot be placed inside another venue.')

        VenueDesignService._check_wedding_date_availability(project, listing)

        if listing.availability_type == AVAILABILITY_EXCLUSIVE:
            already_there = (
                VenueDesignService._instance_count(design, listing) > 0
                or ProjectService.objects.filter(project=project, service_listing=listing).exists()
            )
            if already_there:
                raise InvalidOperation(
                    f"This is an exclusive service ({listing.name}). Only one instance can be placed in the design."
                )

        descriptors = VenueDesignService._descriptors(listing)
        if not descriptors:
            project_service = VenueDesignService._add_project_service(project, listing)
            return {
                'placements': [],
                'project_service': project_service,
                'is_per_table': listing.pricing_policy == PRICING_PER_TABLE,
            }

        base = {'x': 0.0, 'y': 0.0, 'z': 0.0}
        base.update({key: float(value) for key, value in (position or {}).items() if key in base})
        bundle_id = new_bundle_id()
        obstacles = VenueDesignService._obstacles(design)
        created = []
        metas = {}

        with transaction.atomic():
            offset_index = 0
            for descriptor in descriptors:
                element = descriptor['design_element']
                radius = footprint_radius(element)
                for index in range(descriptor['quantity']):
                    desired = {
                        'x': base['x'] + offset_index * DESCRIPTOR_SPACING,
                        'y': base['y'],
                        'z': base['z'],
                    }
                    final = find_non_overlapping_position(desired, obstacles, radius)

                    placement = PlacedElement(
                        venue_design=design,
                        design_element=element,
                        rotation=rotation or 0,
                        element_type=element.element_type or '',
                    )
                    placement.set_position(final)
                    placement.save()
                    obstacles.append((final, radius))

                    metas[placement.id] = PlacementMeta.objects.create(
                        placed_element=placement,
                        service_listing=listing,
                        bundle_id=bundle_id,
                        role=descriptor['role'],
                        quantity_index=index + 1 if descriptor['quantity'] > 1 else None,
                        unit_price=listing.price,
                    )
                    created.append(placement)
                    offset_index += 1

            VenueDesignService._mirror_meta(design, upserts=metas)

        logger.info(f"Placed {len(created)} elements for listing {listing.id} in design {design.id}")
        return {'placements': created, 'project_service': None, 'is_per_table': False}

    @staticmethod
    def get_placement(design, element_id) -> PlacedElement:
        try:
            return PlacedElement.objects.select_related('design_element', 'meta').get(
                id=element_id, venue_design=design
            )
        except (PlacedElement.DoesNotExist, ValueError):
            raise NotFound('Placed element not found')

    @staticmethod
    def _is_descendant(candidate: PlacedElement, ancestor: PlacedElement) -> bool:
        seen = set()
        node = candidate
        while node is not None and node.id not in seen:
            if node.id == ancestor.id:
                return True
            seen.add(node.id)
            node = node.parent_element
        return False

    @staticmethod
    def update_element(design, element_id, data: dict) -> PlacedElement:
        """
        Apply a partial update: position, rotation, is_locked,
        parent_element_id and metadata (role, quantity_index).
        """
        if not data:
            raise InvalidOperation('Nothing to update')

        placement = VenueDesignService.get_placement(design, element_id)
        moves = 'position' in data or 'parent_element_id' in data
        if moves and placement.is_booked:
            raise BookingLocked('This element is part of a booking and cannot be moved.')

        update_fields = ['updated_at']
        if 'position' in data:
            placement.set_position(data['position'])
            update_fields += ['position_x', 'position_y', 'position_z']
        if 'rotation' in data:
            placement.rotation = data['rotation']
            update_fields.append('rotation')
        if 'is_locked' in data:
            placement.is_locked = data['is_locked']
            update_fields.append('is_locked')
        if 'parent_element_id' in data:
            parent_id = data['parent_element_id']
            parent = None
            if parent_id is not None:
                if str(parent_id) == str(placement.id):
                    raise InvalidOperation('Element cannot be its own parent')
                parent = PlacedElement.objects.filter(id=parent_id, venue_design=design).first()
                if parent is None:
                    raise InvalidOperation('Parent element not found')
                if VenueDesignService._is_descendant(parent, placement):
                    raise InvalidOperation('Element cannot be parented to one of its own children')
            placement.parent_element = parent
            update_fields.append('parent_element')

        with transaction.atomic():
            placement.save(update_fields=update_fields)

            metadata = data.get('metadata')
            if metadata:
                meta = getattr(placement, 'meta', None)
                if meta is None:
                    raise InvalidOperation('Element has no service metadata to update')
                meta_fields = ['updated_at']
                if 'role' in metadata:
                    meta.role = metadata['role'] or ''
                    meta_fields.append('role')
                if 'quantity_index' in metadata:
                    meta.quantity_index = metadata['quantity_index']
                    meta_fields.append('quantity_index')
                meta.save(update_fields=meta_fields)
                VenueDesignService._mirror_meta(design, upserts={placement.id: meta})

        return placement

    @staticmethod
    def _table_tags(placements: List[PlacedElement]) -> set:
        """Per-table listing ids tagged on the table placements among `placements`."""
        tags = set()
        for placement in placements:
            if placement.is_table:
                tags.update(str(listing_id) for listing_id in placement.service_listing_ids or [])
        return tags

    @staticmethod
    def _remove_placements(design, placements: List[PlacedElement]):
        ids = [placement.id for placement in placements]
        with transaction.atomic():
            PlacedElement.objects.filter(id__in=ids).delete()
            VenueDesignService._mirror_meta(design, removed=ids)

    @staticmethod
    def delete_element(design, element_id, scope: str = 'single') -> dict:
        """
        Remove one placement, or its whole bundle when scope is "bundle".
        Refused when any targeted placement is booked.
        """
        placement = VenueDesignService.get_placement(design, element_id)
        meta = getattr(placement, 'meta', None)

        if meta is not None and meta.role == ROLE_VENUE:
            raise InvalidOperation('The venue cannot be removed from its own design.')

        targets = [placement]
        bundle_id = meta.bundle_id if meta is not None else None
        if scope == 'bundle' and bundle_id:
            targets = list(PlacedElement.objects.filter(
                venue_design=design, meta__bundle_id=bundle_id
            ))

        if any(target.is_booked for target in targets):
            raise BookingLocked(
                'One or more selected elements are part of a booking and cannot be removed. '
                'Please contact your vendor if you need to change a booked service.'
            )

        tags = VenueDesignService._table_tags(targets)
        removed_ids = [str(target.id) for target in targets]
        VenueDesignService._remove_placements(design, targets)
        if tags:
            sync_per_table_expenses(design, tags)
        logger.info(f"Removed {len(removed_ids)} placements from design {design.id}")
        return {
            'removed_placement_ids': removed_ids,
            'removed_bundle': bundle_id if scope == 'bundle' else None,
        }

    @staticmethod
    def duplicate_element(project, design, element_id) -> List[PlacedElement]:
        """Copy the element's whole bundle next to the original."""
        placement = VenueDesignService.get_placement(design, element_id)
        meta = getattr(placement, 'meta', None)
        if meta is not None and meta.role == ROLE_VENUE:
            raise InvalidOperation('The venue cannot be duplicated.')

        if meta is not None and meta.bundle_id:
            bundle = list(PlacedElement.objects.filter(
                venue_design=design, meta__bundle_id=meta.bundle_id
            ).select_related('meta', 'design_element'))
        else:
            bundle = [placement]

        listing = meta.service_listing if meta is not None else None
        if listing is not None:
            instances = VenueDesignService._instance_count(design, listing)
            if listing.availability_type == AVAILABILITY_EXCLUSIVE and instances >= 1:
                raise InvalidOperation(
                    f"This is an exclusive service ({listing.name}). Only one instance can be placed in the design."
                )
            if (listing.availability_type == AVAILABILITY_QUANTITY_BASED
                    and listing.max_quantity and instances >= listing.max_quantity):
                raise InvalidOperation(
                    f"Maximum quantity ({listing.max_quantity}) for this service has been reached."
                )
            VenueDesignService._check_wedding_date_availability(project, listing)

        bundle_ids = {item.id for item in bundle}
        others = [
            other.position
            for other in PlacedElement.objects.filter(venue_design=design).exclude(meta__role=ROLE_VENUE)
            if other.id not in bundle_ids
        ]
        offset = find_bundle_offset([item.position for item in bundle], others)
        copy_bundle_id = new_bundle_id() if meta is not None and meta.bundle_id else ''

        created = []
        metas = {}
        with transaction.atomic():
            for original in bundle:
                copy = PlacedElement(
                    venue_design=design,
                    design_element_id=original.design_element_id,
                    rotation=original.rotation,
                    is_locked=False,
                    parent_element_id=original.parent_element_id,
                    element_type=original.element_type,
                    service_listing_ids=list(original.service_listing_ids or []),
                )
                copy.set_position({
                    'x': original.position_x + offset['x'],
                    'y': original.position_y,
                    'z': original.position_z + offset['z'],
                })
                copy.save()
                created.append(copy)

                original_meta = getattr(original, 'meta', None)
                if original_meta is not None:
                    metas[copy.id] = PlacementMeta.objects.create(
                        placed_element=copy,
                        service_listing_id=original_meta.service_listing_id,
                        bundle_id=copy_bundle_id,
                        role=original_meta.role,
                        quantity_index=original_meta.quantity_index,
                        unit_price=original_meta.unit_price,
                    )
            VenueDesignService._mirror_meta(design, upserts=metas)

        tags = VenueDesignService._table_tags(created)
        if tags:
            sync_per_table_expenses(design, tags)
        logger.info(f"Duplicated {len(created)} placements in design {design.id}")
        return created

    # ------------------------------------------------------------------
    # Camera and layout
    # ------------------------------------------------------------------

    @staticmethod
    def update_camera(design, position=None, zoom_level=None) -> VenueDesign:
        if position is None and zoom_level is None:
            raise InvalidOperation('Camera position or zoom level is required')

        if position is not None:
            design.camera_position_x = float(position['x'])
            design.camera_position_y = float(position['y'])
            design.camera_position_z = float(position['z'])
        if zoom_level is not None:
            design.zoom_level = zoom_level

        layout = dict(design.layout_data or {})
        layout['lastSavedAt'] = timezone.now().isoformat()
        design.layout_data = layout
        design.save()
        return design

    @staticmethod
    def save_layout(design, layout_data: Optional[dict] = None) -> dict:
        """Merge client layout keys; placementsMeta stays server-owned."""
        layout = dict(design.layout_data or {})
        for key, value in (layout_data or {}).items():
            if key in SERVER_OWNED_LAYOUT_KEYS:
                continue
            layout[key] = value
        layout.setdefault('placementsMeta', {})
        layout['lastSavedAt'] = timezone.now().isoformat()
        design.layout_data = layout
        design.save(update_fields=['layout_data', 'updated_at'])
        return layout

    # ------------------------------------------------------------------
    # Catalog, availability and checkout
    # ------------------------------------------------------------------

    @staticmethod
    def catalog_queryset(search=None, category=None, has_3d_model=None):
        if category == VENDOR_CATEGORY_VENUE:
            raise InvalidOperation('Venue listings cannot be placed inside another venue.')

        queryset = ServiceListing.objects.filter(is_active=True).exclude(
            category=VENDOR_CATEGORY_VENUE
        ).select_related('vendor__user', 'design_element').prefetch_related('components__design_element')

        if category:
            queryset = queryset.filter(category=category)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search)
                | Q(description__icontains=search)
                | Q(vendor__business_name__icontains=search)
            )
        if has_3d_model is not None:
            with_model = Q(design_element__isnull=False) | Q(components__isnull=False)
            queryset = queryset.filter(with_model) if has_3d_model else queryset.exclude(with_model)
        return queryset.distinct().order_by('-created_at')

    @staticmethod
    def availability_for(project, service_listing_ids) -> dict:
        if not project.wedding_date:
            raise InvalidOperation('Wedding date is not set for this project')
        return check_many(service_listing_ids, project.wedding_date)

    @staticmethod
    def booked_quantities(project) -> Dict[str, int]:
        """Quantities per listing already claimed by the project's active bookings."""
        filters = {
            'booking__project': project,
            'booking__status__in': ACTIVE_BOOKING_STATUSES,
        }
        if project.wedding_date:
            filters['booking__reserved_date'] = project.wedding_date
        rows = SelectedService.objects.filter(**filters).values('service_listing_id').annotate(
            total=Sum('quantity')
        )
        return {str(row['service_listing_id']): row['total'] or 0 for row in rows}

    @staticmethod
    def checkout_summary(project, design) -> dict:
        """
        What is left to book: design quantities minus quantities already
        claimed by active bookings, grouped by vendor.
        """
        if not project.wedding_date:
            raise InvalidOperation('Wedding date is not set for this project')

        items = design_quantities(project, design)
        booked = VenueDesignService.booked_quantities(project)
        listings = {
            str(listing.id): listing
            for listing in ServiceListing.objects.select_related('vendor__user').filter(id__in=list(items.keys()))
        }
        availability = check_many(list(items.keys()), project.wedding_date)
        duration = project_event_duration(project)

        vendors = {}
        for listing_id, entry in items.items():
            listing = listings.get(listing_id)
            if listing is None:
                continue

            is_per_table = listing.pricing_policy == PRICING_PER_TABLE
            design_quantity = entry['table_count'] if is_per_table else entry['quantity']
            already_booked = booked.get(listing_id, 0)
            remaining = max(0, design_quantity - already_booked)
            if remaining <= 0:
                continue

            price = price_listing(
                listing,
                quantity=remaining,
                table_count=remaining if is_per_table else 0,
                event_duration=duration,
            )

            vendor_key = str(listing.vendor_id)
            group = vendors.setdefault(vendor_key, {
                'vendor_id': vendor_key,
                'vendor_name': listing.vendor.display_name,
                'items': [],
                'total': Decimal('0.00'),
            })
            result = availability.get(listing_id)
            group['items'].append({
                'service_listing_id': listing_id,
                'name': listing.name,
                'display_name': f"{listing.name} x {remaining}" if remaining > 1 else listing.name,
                'quantity': remaining,
                'design_quantity': design_quantity,
                'already_booked_quantity': already_booked,
                'unit_price': quantize_money(listing.price),
                'price': quantize_money(price),
                'pricing_policy': listing.pricing_policy,
                'availability': result.to_dict() if result else None,
            })
            group['total'] = quantize_money(group['total'] + price)

        return {
            'grouped_by_vendor': list(vendors.values()),
            'wedding_date': project.wedding_date.isoformat(),
            'event_start_time': project.event_start_time,
            'event_end_time': project.event_end_time,
            'venue_booked': venue_is_booked(project),
        }

    # ------------------------------------------------------------------
    # Project services
    # ------------------------------------------------------------------

    @staticmethod
    def remove_project_service(project, service_listing_id):
        project_service = ProjectService.objects.filter(
            project=project, service_listing_id=service_listing_id
        ).first()
        if project_service is None:
            raise NotFound('Project service not found')
        if project_service.is_booked:
            raise BookingLocked('This service is part of a booking and cannot be removed.')
        project_service.delete()
        logger.info(f"Removed project service {service_listing_id} from project {project.id}")


# Singleton instance
venue_design_service = VenueDesignService()
