from django.contrib import admin
from .models import VenueDesign, PlacedElement, PlacementMeta


class PlacedElementInline(admin.TabularInline):
    model = PlacedElement
    extra = 0
    fk_name = 'venue_design'
    fields = ['design_element', 'element_type', 'position_x', 'position_y', 'position_z', 'is_locked', 'is_booked']
    readonly_fields = ['is_booked']


@admin.register(VenueDesign)
class VenueDesignAdmin(admin.ModelAdmin):
    list_display = ['project', 'venue_name', 'updated_at']
    search_fields = ['project__project_name', 'venue_name']
    inlines = [PlacedElementInline]


@admin.register(PlacementMeta)
class PlacementMetaAdmin(admin.ModelAdmin):
    list_display = ['placed_element', 'service_listing', 'bundle_id', 'role', 'quantity_index']
    search_fields = ['bundle_id']
