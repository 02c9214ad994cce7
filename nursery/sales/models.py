from django.db import models
from decimal import Decimal
from django.conf import settings


class Order(models.Model):
    """Sales orders"""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('confirmed', 'Confirmed'),
        ('picking', 'Picking'),
        ('ready', 'Ready'),
        ('packed', 'Packed'),
        ('dispatched', 'Dispatched'),
        ('delivered', 'Delivered'),
        ('cancelled', 'Cancelled'),
        ('void', 'Void'),
    ]

    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='orders')
    order_number = models.CharField(max_length=50, unique=True)
    customer = models.ForeignKey('parties.Customer', on_delete=models.PROTECT, related_name='orders')
    ship_to_address = models.ForeignKey('parties.CustomerAddress', on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    requested_delivery_date = models.DateField(null=True, blank=True)
    currency = models.CharField(max_length=3, default='EUR')
    subtotal_ex_vat = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    fees_ex_vat = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    vat_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_inc_vat = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.order_number

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['org', 'status'], name='idx_order_org_status'),
        ]


class OrderItem(models.Model):
    """Order lines"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='order_items')
    description = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('13.50'))
    rrp = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    multibuy_qty_2 = models.PositiveIntegerField(null=True, blank=True, help_text="Units in the multibuy offer, e.g. 3")
    multibuy_price_2 = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, help_text="Price for the multibuy quantity, e.g. 10.00")
    requires_pre_pricing = models.BooleanField(default=False)
    line_net = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    line_vat = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    line_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    def __str__(self):
        return f"{self.order.order_number} - {self.description} x {self.quantity}"

    class Meta:
        db_table = 'order_items'
        ordering = ['id']


class OrderFee(models.Model):
    """Fee lines charged on an order"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='fees')
    fee = models.ForeignKey('pricing.OrgFee', on_delete=models.SET_NULL, null=True, blank=True, related_name='order_fees')
    fee_type = models.CharField(max_length=30)
    name = models.CharField(max_length=200)
    quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('1.000'))
    unit_amount = models.DecimalField(max_digits=10, decimal_places=4, default=Decimal('0.0000'))
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    net = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    vat = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    waived = models.BooleanField(default=False)

    def __str__(self):
        return f"{self.order.order_number} - {self.name}"

    class Meta:
        db_table = 'order_fees'
        ordering = ['id']


class PickList(models.Model):
    """Picking work for one order"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='pick_lists')
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name='pick_list')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    started_at = models.DateTimeField(null=True, blank=True)
    started_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='pick_lists_started')
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='pick_lists_completed')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Pick list for {self.order.order_number}"

    class Meta:
        db_table = 'pick_lists'
        ordering = ['created_at']


class PickItem(models.Model):
    """One order line to pick"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('picked', 'Picked'),
        ('short', 'Short'),
        ('substituted', 'Substituted'),
    ]

    pick_list = models.ForeignKey(PickList, on_delete=models.CASCADE, related_name='items')
    order_item = models.ForeignKey(OrderItem, on_delete=models.CASCADE, related_name='pick_items')
    target_qty = models.PositiveIntegerField()
    picked_qty = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    notes = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.order_item.description}: {self.picked_qty}/{self.target_qty}"

    class Meta:
        db_table = 'pick_items'
        ordering = ['id']


class PickItemBatch(models.Model):
    """Units taken from one batch for a pick item"""
    pick_item = models.ForeignKey(PickItem, on_delete=models.CASCADE, related_name='batch_picks')
    batch = models.ForeignKey('inventory.Batch', on_delete=models.PROTECT, related_name='picks')
    quantity = models.PositiveIntegerField()
    picked_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='batch_picks')
    picked_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.batch.batch_number} x {self.quantity}"

    class Meta:
        db_table = 'pick_item_batches'
        ordering = ['picked_at', 'id']
