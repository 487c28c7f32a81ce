from django.contrib import admin
from .models import TimeSlot


@admin.register(TimeSlot)
class TimeSlotAdmin(admin.ModelAdmin):
    list_display = ['vendor', 'date', 'status', 'reason']
    search_fields = ['vendor__business_name', 'vendor__user__email']
    list_filter = ['status', 'date']
