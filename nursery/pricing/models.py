from django.conf import settings
from django.db import models
from decimal import Decimal


def default_fee_vat_rate():
    return settings.DEFAULT_FEE_VAT_RATE


class OrgFee(models.Model):
    """Configurable charges added to orders"""
    FEE_TYPE_CHOICES = [
        ('pre_pricing', 'Pre-pricing (RRP Labels)'),
        ('delivery_flat', 'Delivery (Flat)'),
        ('delivery_per_km', 'Delivery (Per KM)'),
        ('handling', 'Handling'),
        ('rush_order', 'Rush Order'),
    ]

    UNIT_CHOICES = [
        ('per_unit', 'Per Unit'),
        ('flat', 'Flat Rate'),
        ('per_km', 'Per Kilometer'),
    ]

    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='fees')
    fee_type = models.CharField(max_length=30, choices=FEE_TYPE_CHOICES)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    amount = models.DecimalField(max_digits=10, decimal_places=4, default=Decimal('0.0000'))
    unit = models.CharField(max_length=20, choices=UNIT_CHOICES, default='flat')
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=default_fee_vat_rate)
    min_order_value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, help_text="Fee is waived when goods net reaches this value")
    is_default = models.BooleanField(default=False, help_text="Applied automatically to new orders")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'org_fees'
        ordering = ['fee_type', 'name']


class PriceList(models.Model):
    """Named price lists assigned to customers"""
    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='price_lists')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    currency = models.CharField(max_length=3, default='EUR')
    is_active = models.BooleanField(default=True)
    valid_from = models.DateField(null=True, blank=True)
    valid_to = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def price_for(self, product):
        """Unit price of ``product`` on this list, or None"""
        item = self.items.filter(product=product).first()
        return item.price if item else None

    class Meta:
        db_table = 'price_lists'
        ordering = ['name']
        unique_together = [('org', 'name')]


class PriceListItem(models.Model):
    """Price list items"""
    price_list = models.ForeignKey(PriceList, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='price_list_items')
    price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = 'price_list_items'
        unique_together = [['price_list', 'product']]
