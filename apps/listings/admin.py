from django.contrib import admin
from .models import DesignElement, ServiceListing, ServiceComponent, ServiceAvailability


class ServiceComponentInline(admin.TabularInline):
    model = ServiceComponent
    extra = 0


@admin.register(ServiceListing)
class ServiceListingAdmin(admin.ModelAdmin):
    list_display = ['name', 'vendor', 'category', 'availability_type', 'pricing_policy', 'price', 'is_active']
    search_fields = ['name', 'vendor__business_name', 'vendor__user__email']
    list_filter = ['category', 'availability_type', 'pricing_policy', 'is_active']
    inlines = [ServiceComponentInline]


@admin.register(DesignElement)
class DesignElementAdmin(admin.ModelAdmin):
    list_display = ['name', 'element_type', 'vendor', 'is_stackable']
    search_fields = ['name']
    list_filter = ['element_type']


@admin.register(ServiceAvailability)
class ServiceAvailabilityAdmin(admin.ModelAdmin):
    list_display = ['service_listing', 'date', 'max_quantity']
    list_filter = ['date']
