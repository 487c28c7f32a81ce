"""
Payment app admin interface.
"""
from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Admin interface for booking payments."""
    list_display = ['booking', 'payment_type', 'amount', 'payment_method', 'payment_date', 'released_to_vendor']
    search_fields = ['booking__id', 'booking__couple__user__email', 'booking__vendor__business_name']
    list_filter = ['payment_type', 'payment_method', 'released_to_vendor']
    readonly_fields = ['payment_date', 'created_at', 'updated_at']
    ordering = ['-payment_date']

    fieldsets = (
        ('Payment', {
            'fields': ('booking', 'payment_type', 'amount', 'payment_method', 'receipt', 'payment_date')
        }),
        ('Payout', {
            'fields': ('released_to_vendor', 'released_at')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
