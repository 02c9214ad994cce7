from django.contrib import admin
from .models import NurseryLocation


@admin.register(NurseryLocation)
class NurseryLocationAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'site', 'org', 'is_covered', 'is_active']
    list_filter = ['org', 'site', 'is_covered', 'is_active']
    search_fields = ['name', 'code', 'site']
