from django.contrib import admin
from .models import IpmProduct, IpmProgram, IpmProgramStep, IpmBottle, IpmStockMovement


@admin.register(IpmProduct)
class IpmProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'pcs_number', 'active_ingredient', 'use_restriction', 'low_stock_threshold', 'is_active']
    list_filter = ['org', 'use_restriction', 'is_active']
    search_fields = ['name', 'pcs_number', 'active_ingredient']


class IpmProgramStepInline(admin.TabularInline):
    model = IpmProgramStep
    extra = 0


@admin.register(IpmProgram)
class IpmProgramAdmin(admin.ModelAdmin):
    list_display = ['name', 'schedule_type', 'interval_days', 'duration_weeks', 'is_active']
    list_filter = ['org', 'schedule_type', 'is_active']
    inlines = [IpmProgramStepInline]


@admin.register(IpmBottle)
class IpmBottleAdmin(admin.ModelAdmin):
    list_display = ['bottle_code', 'product', 'status', 'remaining_ml', 'volume_ml', 'expiry_date']
    list_filter = ['org', 'status']
    search_fields = ['bottle_code', 'product__name', 'batch_number']


@admin.register(IpmStockMovement)
class IpmStockMovementAdmin(admin.ModelAdmin):
    list_display = ['bottle', 'movement_type', 'quantity_ml', 'remaining_after_ml', 'recorded_by', 'recorded_at']
    list_filter = ['movement_type', 'recorded_at']
    readonly_fields = ['recorded_at']
