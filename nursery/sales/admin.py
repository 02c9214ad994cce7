from django.contrib import admin
from .models import Order, OrderItem, OrderFee, PickList, PickItem, PickItemBatch


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    raw_id_fields = ['product']


class OrderFeeInline(admin.TabularInline):
    model = OrderFee
    extra = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer', 'status', 'total_inc_vat', 'requested_delivery_date', 'created_at']
    list_filter = ['org', 'status', 'created_at']
    search_fields = ['order_number', 'customer__name']
    raw_id_fields = ['customer', 'ship_to_address', 'created_by']
    inlines = [OrderItemInline, OrderFeeInline]


class PickItemInline(admin.TabularInline):
    model = PickItem
    extra = 0
    raw_id_fields = ['order_item']


@admin.register(PickList)
class PickListAdmin(admin.ModelAdmin):
    list_display = ['order', 'status', 'started_at', 'completed_at']
    list_filter = ['org', 'status']
    search_fields = ['order__order_number']
    inlines = [PickItemInline]


@admin.register(PickItemBatch)
class PickItemBatchAdmin(admin.ModelAdmin):
    list_display = ['pick_item', 'batch', 'quantity', 'picked_by', 'picked_at']
    raw_id_fields = ['pick_item', 'batch', 'picked_by']
