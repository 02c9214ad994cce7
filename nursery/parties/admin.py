from django.contrib import admin
from .models import Customer, CustomerAddress, CustomerContact


class CustomerAddressInline(admin.StackedInline):
    model = CustomerAddress
    extra = 0


class CustomerContactInline(admin.TabularInline):
    model = CustomerContact
    extra = 0


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'store', 'country_code', 'currency', 'pricing_tier', 'is_active', 'created_at']
    list_filter = ['org', 'country_code', 'currency', 'requires_pre_pricing', 'is_active']
    search_fields = ['name', 'code', 'email', 'store', 'account_code']
    raw_id_fields = ['default_price_list']
    inlines = [CustomerAddressInline, CustomerContactInline]
