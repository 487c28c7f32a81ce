"""
Service listing and 3D design element models
"""
from django.core.exceptions import ValidationError
from django.db import models

from apps.core.models import BaseModel
from apps.core.validators import (
    validate_non_negative_decimal,
    validate_cancellation_fee_tiers,
)
from apps.core.utils.constants import (
    AVAILABILITY_TYPES,
    AVAILABILITY_EXCLUSIVE,
    AVAILABILITY_QUANTITY_BASED,
    PRICING_POLICIES,
    PRICING_FIXED_PACKAGE,
    PRICING_TIME_BASED,
    VENDOR_CATEGORIES,
    VENDOR_CATEGORY_OTHER,
    VENDOR_CATEGORY_VENUE,
    ELEMENT_TYPE_TABLE,
)


class DesignElement(BaseModel):
    """
    A 3D model that can be placed in a venue design
    """
    vendor = models.ForeignKey(
        'vendors.Vendor',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='design_elements'
    )

    name = models.CharField(max_length=255)
    element_type = models.CharField(max_length=50, blank=True, db_index=True)
    model_file = models.CharField(max_length=500, blank=True)

    # {"width": 1.2, "height": 0.8, "depth": 1.2} in metres
    dimensions = models.JSONField(default=dict, blank=True)
    is_stackable = models.BooleanField(default=False)

    class Meta:
        db_table = 'design_elements'
        verbose_name = 'Design Element'
        verbose_name_plural = 'Design Elements'
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def is_table(self):
        return self.element_type == ELEMENT_TYPE_TABLE or 'table' in (self.name or '').lower()

    @property
    def footprint_radius(self):
        """Half the larger of width/depth, or None when dimensions are unknown"""
        dims = self.dimensions or {}
        try:
            width = float(dims.get('width') or 0)
            depth = float(dims.get('depth') or 0)
        except (TypeError, ValueError):
            return None
        radius = max(width, depth) / 2
        return radius if radius > 0 else None


class ServiceListing(BaseModel):
    """
    A service or item a vendor offers to couples
    """
    vendor = models.ForeignKey(
        'vendors.Vendor',
        on_delete=models.CASCADE,
        related_name='service_listings'
    )

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(
        max_length=30,
        choices=VENDOR_CATEGORIES,
        default=VENDOR_CATEGORY_OTHER,
        db_index=True
    )

    # Availability
    availability_type = models.CharField(
        max_length=20,
        choices=AVAILABILITY_TYPES,
        default=AVAILABILITY_EXCLUSIVE
    )
    max_quantity = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text='Units available per date (quantity_based listings only)'
    )

    # Pricing
    pricing_policy = models.CharField(
        max_length=20,
        choices=PRICING_POLICIES,
        default=PRICING_FIXED_PACKAGE
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[validate_non_negative_decimal]
    )
    hourly_rate = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[validate_non_negative_decimal]
    )

    # Cancellation
    cancellation_policy = models.TextField(blank=True)
    cancellation_fee_tiers = models.JSONField(
        null=True,
        blank=True,
        validators=[validate_cancellation_fee_tiers]
    )

    # 3D representation
    design_element = models.ForeignKey(
        DesignElement,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='service_listings'
    )

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'service_listings'
        verbose_name = 'Service Listing'
        verbose_name_plural = 'Service Listings'
        ordering = ['name']
        indexes = [
            models.Index(fields=['vendor', 'is_active']),
            models.Index(fields=['category', 'is_active']),
        ]

    def __str__(self):
        return f"{self.name} ({self.vendor})"

    @property
    def is_venue(self):
        return self.category == VENDOR_CATEGORY_VENUE

    @property
    def has_3d_model(self):
        if self.design_element_id:
            return True
        return self.components.exists()

    def clean(self):
        errors = {}
        if self.is_venue:
            self.availability_type = AVAILABILITY_EXCLUSIVE
            self.pricing_policy = PRICING_FIXED_PACKAGE

        if self.availability_type == AVAILABILITY_QUANTITY_BASED:
            if not self.max_quantity:
                errors['max_quantity'] = 'Max quantity is required for quantity-based listings.'
        elif self.max_quantity is not None:
            self.max_quantity = None

        if self.pricing_policy == PRICING_TIME_BASED and not self.hourly_rate:
            errors['hourly_rate'] = 'Hourly rate is required for time-based pricing.'

        if errors:
            raise ValidationError(errors)


class ServiceComponent(BaseModel):
    """
    Extra 3D element placed together with a listing's primary element
    (e.g. chairs that come with a table)
    """
    service_listing = models.ForeignKey(
        ServiceListing,
        on_delete=models.CASCADE,
        related_name='components'
    )
    design_element = models.ForeignKey(
        DesignElement,
        on_delete=models.CASCADE,
        related_name='components'
    )
    quantity_per_unit = models.PositiveIntegerField(default=1)
    role = models.CharField(max_length=50, blank=True)

    class Meta:
        db_table = 'service_components'
        verbose_name = 'Service Component'
        verbose_name_plural = 'Service Components'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.service_listing.name}: {self.quantity_per_unit} x {self.design_element.name}"


class ServiceAvailability(BaseModel):
    """
    Per-date max quantity override for quantity-based listings
    """
    service_listing = models.ForeignKey(
        ServiceListing,
        on_delete=models.CASCADE,
        related_name='availability_overrides'
    )
    date = models.DateField()
    max_quantity = models.PositiveIntegerField()

    class Meta:
        db_table = 'service_availability'
        verbose_name = 'Service Availability'
        verbose_name_plural = 'Service Availability'
        ordering = ['date']
        constraints = [
            models.UniqueConstraint(
                fields=['service_listing', 'date'],
                name='unique_listing_availability_date'
            ),
        ]

    def __str__(self):
        return f"{self.service_listing.name} on {self.date}: {self.max_quantity}"
