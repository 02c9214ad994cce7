from django.contrib import admin
from .models import OrgFee, PriceList, PriceListItem


@admin.register(OrgFee)
class OrgFeeAdmin(admin.ModelAdmin):
    list_display = ['name', 'fee_type', 'amount', 'unit', 'vat_rate', 'min_order_value', 'is_default', 'is_active']
    list_filter = ['org', 'fee_type', 'is_default', 'is_active']
    search_fields = ['name']


class PriceListItemInline(admin.TabularInline):
    model = PriceListItem
    extra = 0
    raw_id_fields = ['product']


@admin.register(PriceList)
class PriceListAdmin(admin.ModelAdmin):
    list_display = ['name', 'org', 'currency', 'is_active', 'valid_from', 'valid_to']
    list_filter = ['org', 'is_active']
    search_fields = ['name']
    inlines = [PriceListItemInline]
