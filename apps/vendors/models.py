"""
Vendor profile model
"""
from django.db import models
from apps.core.models import BaseModel
from apps.core.validators import validate_phone_number
from apps.core.utils.constants import VENDOR_CATEGORIES, VENDOR_CATEGORY_OTHER


class Vendor(BaseModel):
    """
    Vendor profile (photographer, venue, caterer, ...)
    """
    user = models.OneToOneField(
        'authentication.User',
        on_delete=models.CASCADE,
        related_name='vendor_profile'
    )

    business_name = models.CharField(max_length=255, blank=True)
    category = models.CharField(
        max_length=30,
        choices=VENDOR_CATEGORIES,
        default=VENDOR_CATEGORY_OTHER
    )
    phone = models.CharField(max_length=20, validators=[validate_phone_number], blank=True)
    location = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)

    class Meta:
        db_table = 'vendors'
        verbose_name = 'Vendor'
        verbose_name_plural = 'Vendors'

    def __str__(self):
        return f"{self.display_name} - {self.user.email}"

    @property
    def display_name(self):
        return self.business_name or self.user.full_name
