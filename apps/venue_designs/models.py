"""
3D venue design models
"""
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel, BookableItemModel
from apps.core.utils.constants import ELEMENT_TYPE_TABLE


def default_layout_data():
    return {
        'grid': {
            'size': 1,
            'visible': True,
            'snapToGrid': True,
        },
        'sidebar': {
            'collapsed': False,
        },
        'placementsMeta': {},
        'lastSavedAt': timezone.now().isoformat(),
    }


class VenueDesign(BaseModel):
    """
    The 3D layout of a project's venue
    """
    project = models.OneToOneField(
        'projects.WeddingProject',
        on_delete=models.CASCADE,
        related_name='venue_design'
    )

    venue_name = models.CharField(max_length=255, blank=True)
    layout_data = models.JSONField(default=default_layout_data)

    camera_position_x = models.FloatField(default=0)
    camera_position_y = models.FloatField(default=3)
    camera_position_z = models.FloatField(default=8)
    zoom_level = models.FloatField(default=1.2)

    class Meta:
        db_table = 'venue_designs'
        verbose_name = 'Venue Design'
        verbose_name_plural = 'Venue Designs'

    def __str__(self):
        return f"Design for {self.project.project_name}"

    @property
    def camera_position(self):
        return {
            'x': self.camera_position_x,
            'y': self.camera_position_y,
            'z': self.camera_position_z,
        }


class PlacedElement(BookableItemModel):
    """
    One 3D object instance in a venue design
    """
    venue_design = models.ForeignKey(
        VenueDesign,
        on_delete=models.CASCADE,
        related_name='placed_elements'
    )
    design_element = models.ForeignKey(
        'listings.DesignElement',
        on_delete=models.PROTECT,
        related_name='placements'
    )

    position_x = models.FloatField(default=0)
    position_y = models.FloatField(default=0)
    position_z = models.FloatField(default=0)
    rotation = models.FloatField(default=0)
    is_locked = models.BooleanField(default=False)

    parent_element = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='children'
    )

    element_type = models.CharField(max_length=50, blank=True)

    # Per-table services tagged on this element (service listing ids)
    service_listing_ids = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'placed_elements'
        verbose_name = 'Placed Element'
        verbose_name_plural = 'Placed Elements'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['venue_design', 'is_booked']),
        ]

    def __str__(self):
        return f"{self.design_element.name} @ ({self.position_x}, {self.position_y}, {self.position_z})"

    @property
    def position(self):
        return {'x': self.position_x, 'y': self.position_y, 'z': self.position_z}

    def set_position(self, position):
        self.position_x = float(position.get('x', 0))
        self.position_y = float(position.get('y', 0))
        self.position_z = float(position.get('z', 0))

    @property
    def is_table(self):
        if self.element_type == ELEMENT_TYPE_TABLE:
            return True
        return self.design_element.is_table


class PlacementMeta(BaseModel):
    """
    Which service listing and bundle a placement belongs to.

    Source of truth for the placement -> listing association; the
    layout_data['placementsMeta'] map on the design mirrors these rows.
    """
    placed_element = models.OneToOneField(
        PlacedElement,
        on_delete=models.CASCADE,
        related_name='meta'
    )
    service_listing = models.ForeignKey(
        'listings.ServiceListing',
        on_delete=models.CASCADE,
        related_name='placement_metas'
    )
    bundle_id = models.CharField(max_length=64, blank=True, db_index=True)
    role = models.CharField(max_length=50, blank=True)
    quantity_index = models.PositiveIntegerField(null=True, blank=True)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    class Meta:
        db_table = 'placement_meta'
        verbose_name = 'Placement Metadata'
        verbose_name_plural = 'Placement Metadata'

    def __str__(self):
        return f"{self.placed_element_id} -> {self.service_listing_id}"

    def as_layout_entry(self):
        return {
            'serviceListingId': str(self.service_listing_id),
            'bundleId': self.bundle_id or None,
            'role': self.role or None,
            'quantityIndex': self.quantity_index,
            'unitPrice': float(self.unit_price) if self.unit_price is not None else None,
        }
