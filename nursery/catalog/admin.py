from django.contrib import admin
from .models import PlantVariety, PlantSize, Product


@admin.register(PlantVariety)
class PlantVarietyAdmin(admin.ModelAdmin):
    list_display = ['name', 'family', 'genus', 'org', 'is_active']
    list_filter = ['org', 'is_active', 'family']
    search_fields = ['name', 'family', 'genus']


@admin.register(PlantSize)
class PlantSizeAdmin(admin.ModelAdmin):
    list_display = ['name', 'container_type', 'shelf_quantity', 'org']
    list_filter = ['org']
    search_fields = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'variety', 'size', 'unit_price', 'vat_rate', 'rrp', 'is_active']
    list_filter = ['org', 'is_active', 'size']
    search_fields = ['name', 'sku', 'barcode']
    raw_id_fields = ['variety', 'size']
