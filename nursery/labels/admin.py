from django.contrib import admin
from .models import LabelPrinter


@admin.register(LabelPrinter)
class LabelPrinterAdmin(admin.ModelAdmin):
    list_display = ['name', 'org', 'host', 'port', 'dpi', 'is_default', 'is_active']
    list_filter = ['org', 'is_default', 'is_active']
    search_fields = ['name', 'host']
