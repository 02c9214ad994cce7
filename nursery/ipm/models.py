from django.db import models
from decimal import Decimal
from django.conf import settings


def default_application_methods():
    return ['Foliar Spray']


class IpmProduct(models.Model):
    """Plant protection products"""
    USE_RESTRICTION_CHOICES = [
        ('indoor', 'Indoor'),
        ('outdoor', 'Outdoor'),
        ('both', 'Both'),
    ]

    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='ipm_products')
    name = models.CharField(max_length=200)
    pcs_number = models.CharField(max_length=50, blank=True, null=True, help_text="Pesticide Control Service registration number")
    active_ingredient = models.CharField(max_length=200, blank=True, null=True)
    target_pests = models.JSONField(default=list, blank=True)
    suggested_rate = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    suggested_rate_unit = models.CharField(max_length=20, blank=True, null=True)
    max_rate = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    harvest_interval_days = models.PositiveIntegerField(null=True, blank=True)
    rei_hours = models.PositiveIntegerField(default=0, help_text="Re-entry interval in hours")
    use_restriction = models.CharField(max_length=10, choices=USE_RESTRICTION_CHOICES, default='both')
    application_methods = models.JSONField(default=default_application_methods, blank=True)
    target_stock_bottles = models.PositiveIntegerField(default=5)
    low_stock_threshold = models.PositiveIntegerField(default=2)
    default_bottle_volume_ml = models.PositiveIntegerField(default=1000)
    notes = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'ipm_products'
        ordering = ['name']


class IpmProgram(models.Model):
    """Treatment programmes made of ordered steps"""
    SCHEDULE_TYPE_CHOICES = [
        ('interval_based', 'Interval Based'),
        ('week_based', 'Week Based'),
    ]

    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='ipm_programs')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    interval_days = models.PositiveIntegerField(default=7)
    duration_weeks = models.PositiveIntegerField(default=8)
    schedule_type = models.CharField(max_length=20, choices=SCHEDULE_TYPE_CHOICES, default='interval_based')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'ipm_programs'
        ordering = ['name']


class IpmProgramStep(models.Model):
    program = models.ForeignKey(IpmProgram, on_delete=models.CASCADE, related_name='steps')
    product = models.ForeignKey(IpmProduct, on_delete=models.PROTECT, related_name='program_steps')
    step_order = models.PositiveIntegerField(default=1)
    week_number = models.PositiveIntegerField(default=0)
    rate = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    rate_unit = models.CharField(max_length=20, blank=True, null=True)
    method = models.CharField(max_length=100, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    def __str__(self):
        return f"{self.program.name} #{self.step_order}: {self.product.name}"

    class Meta:
        db_table = 'ipm_program_steps'
        ordering = ['step_order', 'id']


class IpmBottle(models.Model):
    """One physical bottle of a product"""
    STATUS_CHOICES = [
        ('sealed', 'Sealed'),
        ('open', 'Open'),
        ('empty', 'Empty'),
        ('disposed', 'Disposed'),
        ('expired', 'Expired'),
    ]

    # Bottles that still count as stock
    IN_STOCK_STATUSES = ['sealed', 'open']

    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='ipm_bottles')
    product = models.ForeignKey(IpmProduct, on_delete=models.CASCADE, related_name='bottles')
    bottle_code = models.CharField(max_length=50)
    volume_ml = models.DecimalField(max_digits=10, decimal_places=2)
    remaining_ml = models.DecimalField(max_digits=10, decimal_places=2)
    batch_number = models.CharField(max_length=100, blank=True, null=True)
    expiry_date = models.DateField(null=True, blank=True)
    purchase_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='sealed')
    opened_at = models.DateTimeField(null=True, blank=True)
    emptied_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='ipm_bottles')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.bottle_code

    class Meta:
        db_table = 'ipm_bottles'
        ordering = ['-created_at']
        unique_together = [('org', 'bottle_code')]
        indexes = [
            models.Index(fields=['product', 'status'], name='idx_bottle_product_status'),
        ]


class IpmStockMovement(models.Model):
    """Signed change in a bottle's contents"""
    MOVEMENT_TYPE_CHOICES = [
        ('open', 'Open'),
        ('usage', 'Usage'),
        ('adjustment', 'Adjustment'),
        ('disposal', 'Disposal'),
    ]

    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='ipm_stock_movements')
    bottle = models.ForeignKey(IpmBottle, on_delete=models.CASCADE, related_name='movements')
    product = models.ForeignKey(IpmProduct, on_delete=models.CASCADE, related_name='stock_movements')
    movement_type = models.CharField(max_length=20, choices=MOVEMENT_TYPE_CHOICES)
    quantity_ml = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    remaining_after_ml = models.DecimalField(max_digits=10, decimal_places=2)
    location = models.ForeignKey('locations.NurseryLocation', on_delete=models.SET_NULL, null=True, blank=True, related_name='ipm_stock_movements')
    notes = models.TextField(blank=True, null=True)
    recorded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='ipm_stock_movements')
    recorded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.bottle.bottle_code} {self.movement_type} {self.quantity_ml}ml"

    class Meta:
        db_table = 'ipm_stock_movements'
        ordering = ['-recorded_at', '-id']
