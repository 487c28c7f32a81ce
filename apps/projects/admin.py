from django.contrib import admin
from .models import WeddingProject, ProjectService


class ProjectServiceInline(admin.TabularInline):
    model = ProjectService
    extra = 0
    readonly_fields = ['is_booked', 'booking']


@admin.register(WeddingProject)
class WeddingProjectAdmin(admin.ModelAdmin):
    list_display = ['project_name', 'couple', 'wedding_date', 'venue_service_listing', 'status']
    search_fields = ['project_name', 'couple__user__email']
    list_filter = ['status', 'wedding_date']
    inlines = [ProjectServiceInline]
