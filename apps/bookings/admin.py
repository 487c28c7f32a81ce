from django.contrib import admin
from .models import Booking, SelectedService, Cancellation


class SelectedServiceInline(admin.TabularInline):
    model = SelectedService
    extra = 0


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['couple', 'vendor', 'reserved_date', 'status', 'deposit_due_date', 'final_due_date']
    search_fields = ['couple__user__email', 'vendor__business_name']
    list_filter = ['status', 'reserved_date', 'created_at']
    inlines = [SelectedServiceInline]


@admin.register(Cancellation)
class CancellationAdmin(admin.ModelAdmin):
    list_display = ['booking', 'cancelled_by', 'cancellation_fee', 'fee_outstanding', 'cancelled_at']
    list_filter = ['cancelled_by', 'cancelled_at']
    readonly_fields = ['cancelled_at']
