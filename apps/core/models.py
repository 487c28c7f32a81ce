"""
Core abstract models for inheritance
"""
import uuid
from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract base model with created_at and updated_at timestamps
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UUIDModel(models.Model):
    """
    Abstract base model with UUID primary key
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


class BaseModel(UUIDModel, TimeStampedModel):
    """
    Abstract base model combining UUID and timestamps
    """
    class Meta:
        abstract = True


class BookableItemModel(BaseModel):
    """
    Abstract base for project items that an active booking can lock.

    is_booked/booking are denormalized from the booking lifecycle and only
    written by the booking linkage service.
    """
    is_booked = models.BooleanField(default=False, db_index=True)
    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_set'
    )

    class Meta:
        abstract = True
