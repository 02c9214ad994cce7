from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class PlantVariety(models.Model):
    """Plant varieties grown by the nursery"""
    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='varieties')
    name = models.CharField(max_length=255)
    family = models.CharField(max_length=200, blank=True)
    genus = models.CharField(max_length=200, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'plant_varieties'
        ordering = ['name']


class PlantSize(models.Model):
    """Pot or container sizes (e.g. 10.5cm, 2L, 3L)"""
    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='plant_sizes')
    name = models.CharField(max_length=100)
    container_type = models.CharField(max_length=100, blank=True)
    shelf_quantity = models.PositiveIntegerField(null=True, blank=True, help_text="Units that fit on one trolley shelf")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'plant_sizes'
        ordering = ['name']


class Product(models.Model):
    """Saleable SKU: a variety in a size at a wholesale price"""
    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=100)
    variety = models.ForeignKey(PlantVariety, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    size = models.ForeignKey(PlantSize, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))])
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('13.50'), help_text="VAT percentage")
    rrp = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, help_text="Recommended retail price")
    barcode = models.CharField(max_length=100, null=True, blank=True, help_text="EAN or Code128 payload printed on sale labels")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku})"

    class Meta:
        db_table = 'products'
        ordering = ['name']
        unique_together = [('org', 'sku')]
