from django.contrib import admin
from .models import Batch


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ['batch_number', 'variety', 'size', 'location', 'quantity', 'status', 'planted_at']
    list_filter = ['org', 'status', 'size', 'location']
    search_fields = ['batch_number', 'variety__name', 'product__name']
    raw_id_fields = ['product', 'variety', 'size', 'location']
