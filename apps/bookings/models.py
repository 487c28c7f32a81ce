"""
Booking models
"""
from decimal import Decimal

from django.db import models
from django.db.models import Sum

from apps.core.models import BaseModel
from apps.core.utils.constants import (
    BOOKING_STATUSES,
    BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
    ACTIVE_BOOKING_STATUSES,
    CANCELLED_BY_CHOICES,
)


class Booking(BaseModel):
    """
    A couple's booking of one vendor's services for one date
    """
    couple = models.ForeignKey(
        'couples.Couple',
        on_delete=models.CASCADE,
        related_name='bookings'
    )

    vendor = models.ForeignKey(
        'vendors.Vendor',
        on_delete=models.CASCADE,
        related_name='bookings'
    )

    project = models.ForeignKey(
        'projects.WeddingProject',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bookings'
    )

    booking_date = models.DateTimeField(auto_now_add=True)
    reserved_date = models.DateField(db_index=True)
    status = models.CharField(
        max_length=30,
        choices=BOOKING_STATUSES,
        default=BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
        db_index=True
    )

    deposit_due_date = models.DateField(null=True, blank=True)
    final_due_date = models.DateField(null=True, blank=True)

    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'bookings'
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'
        ordering = ['-booking_date']
        indexes = [
            models.Index(fields=['couple', 'status']),
            models.Index(fields=['vendor', 'reserved_date']),
            models.Index(fields=['reserved_date', 'status']),
        ]

    def __str__(self):
        return f"{self.couple} - {self.vendor} - {self.reserved_date} ({self.status})"

    @property
    def is_active(self):
        return self.status in ACTIVE_BOOKING_STATUSES

    @property
    def total_amount(self) -> Decimal:
        total = self.selected_services.aggregate(total=Sum('total_price'))['total']
        return total or Decimal('0.00')

    @property
    def amount_paid(self) -> Decimal:
        total = self.payments.aggregate(total=Sum('amount'))['total']
        return total or Decimal('0.00')

    def service_listing_ids(self):
        return list(self.selected_services.values_list('service_listing_id', flat=True))


class SelectedService(models.Model):
    """
    One service listing line on a booking
    """
    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name='selected_services'
    )
    service_listing = models.ForeignKey(
        'listings.ServiceListing',
        on_delete=models.PROTECT,
        related_name='selected_services'
    )
    quantity = models.PositiveIntegerField(default=1)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'selected_services'
        verbose_name = 'Selected Service'
        verbose_name_plural = 'Selected Services'
        constraints = [
            models.UniqueConstraint(
                fields=['booking', 'service_listing'],
                name='unique_booking_service_listing'
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.service_listing.name}"


class Cancellation(BaseModel):
    """
    Record of a cancelled booking and any fee owed
    """
    booking = models.OneToOneField(
        Booking,
        on_delete=models.CASCADE,
        related_name='cancellation'
    )
    cancelled_at = models.DateTimeField(auto_now_add=True, db_index=True)
    cancelled_by = models.CharField(max_length=20, choices=CANCELLED_BY_CHOICES, db_index=True)
    cancellation_reason = models.TextField(blank=True)

    cancellation_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    # Part of the fee not covered by earlier payments
    fee_outstanding = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    fee_payment = models.OneToOneField(
        'payments.Payment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cancellation'
    )

    class Meta:
        db_table = 'cancellations'
        verbose_name = 'Cancellation'
        verbose_name_plural = 'Cancellations'
        ordering = ['-cancelled_at']

    def __str__(self):
        return f"Cancellation of {self.booking_id} by {self.cancelled_by}"
