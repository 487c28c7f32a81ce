from django.contrib import admin
from .models import Couple


@admin.register(Couple)
class CoupleAdmin(admin.ModelAdmin):
    list_display = ['user', 'partner_name', 'created_at']
    search_fields = ['partner_name', 'user__email']
    list_filter = ['created_at']
