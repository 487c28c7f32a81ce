"""
Couple profile model
"""
from django.db import models
from apps.core.models import BaseModel
from apps.core.validators import validate_phone_number


class Couple(BaseModel):
    """
    Couple profile
    """
    user = models.OneToOneField(
        'authentication.User',
        on_delete=models.CASCADE,
        related_name='couple_profile'
    )

    partner_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, validators=[validate_phone_number], blank=True)

    class Meta:
        db_table = 'couples'
        verbose_name = 'Couple'
        verbose_name_plural = 'Couples'

    def __str__(self):
        return f"{self.user.full_name} - {self.user.email}"
