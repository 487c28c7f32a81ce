"""
Vendor TimeSlot model
"""
from django.db import models
from apps.core.models import BaseModel
from apps.core.utils.constants import SLOT_STATUSES, SLOT_STATUS_PERSONAL_TIME_OFF


class TimeSlot(BaseModel):
    """
    A vendor's calendar day that is taken: either held by an accepted booking
    or blocked by the vendor as personal time off. One slot per vendor per date.
    """
    vendor = models.ForeignKey(
        'vendors.Vendor',
        on_delete=models.CASCADE,
        related_name='time_slots'
    )

    date = models.DateField(db_index=True)

    status = models.CharField(
        max_length=20,
        choices=SLOT_STATUSES,
        default=SLOT_STATUS_PERSONAL_TIME_OFF,
        db_index=True
    )

    reason = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = 'time_slots'
        verbose_name = 'Time Slot'
        verbose_name_plural = 'Time Slots'
        ordering = ['date']
        constraints = [
            models.UniqueConstraint(fields=['vendor', 'date'], name='unique_vendor_time_slot_date'),
        ]
        indexes = [
            models.Index(fields=['vendor', 'date', 'status']),
        ]

    def __str__(self):
        return f"{self.vendor} {self.date} - {self.status}"
