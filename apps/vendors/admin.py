from django.contrib import admin
from .models import Vendor


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ['user', 'business_name', 'category', 'created_at']
    search_fields = ['business_name', 'user__email']
    list_filter = ['category', 'created_at']
