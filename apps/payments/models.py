"""
Booking payment models.

Payments are recorded against a booking with a type that gates the
booking lifecycle:
- deposit: moves the booking to confirmed
- final: moves the booking to completed
- cancellation_fee: settles the outstanding part of a cancellation fee
"""
from django.db import models
from apps.core.models import BaseModel
from apps.core.utils.constants import PAYMENT_TYPES, PAYMENT_METHODS
from apps.core.validators import validate_positive_decimal


class Payment(BaseModel):
    """
    A payment made by the couple for a booking
    """
    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.CASCADE,
        related_name='payments',
        help_text="Booking this payment belongs to"
    )

    payment_type = models.CharField(
        max_length=20,
        choices=PAYMENT_TYPES,
        db_index=True
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[validate_positive_decimal]
    )
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHODS)
    payment_date = models.DateTimeField(auto_now_add=True)

    # Reference to an uploaded receipt (URL or storage key)
    receipt = models.CharField(max_length=500, blank=True)

    # Payout tracking
    released_to_vendor = models.BooleanField(default=False)
    released_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'payments'
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'
        ordering = ['-payment_date']
        indexes = [
            models.Index(fields=['booking', 'payment_type']),
        ]

    def __str__(self):
        return f"{self.payment_type} {self.amount} for {self.booking_id}"
