from django.db import models


class Batch(models.Model):
    """A crop of one variety in one size, grown together at one location"""
    STATUS_GROWING = 'Growing'
    STATUS_READY = 'Ready'
    STATUS_LOOKING_GOOD = 'Looking Good'
    STATUS_ARCHIVED = 'Archived'

    STATUS_CHOICES = [
        (STATUS_GROWING, 'Growing'),
        (STATUS_READY, 'Ready'),
        (STATUS_LOOKING_GOOD, 'Looking Good'),
        (STATUS_ARCHIVED, 'Archived'),
    ]

    # Only these statuses can be offered to pickers
    SALEABLE_STATUSES = [STATUS_READY, STATUS_LOOKING_GOOD]

    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='batches')
    batch_number = models.CharField(max_length=100)
    product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='batches')
    variety = models.ForeignKey('catalog.PlantVariety', on_delete=models.SET_NULL, null=True, blank=True, related_name='batches')
    size = models.ForeignKey('catalog.PlantSize', on_delete=models.SET_NULL, null=True, blank=True, related_name='batches')
    location = models.ForeignKey('locations.NurseryLocation', on_delete=models.SET_NULL, null=True, blank=True, related_name='batches')
    quantity = models.PositiveIntegerField(default=0, help_text="Units available to sell")
    reserved_quantity = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_GROWING)
    planted_at = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.batch_number

    @property
    def is_saleable(self):
        return self.quantity > 0 and self.status in self.SALEABLE_STATUSES

    class Meta:
        db_table = 'batches'
        ordering = ['planted_at', 'id']
        unique_together = [('org', 'batch_number')]
        indexes = [
            models.Index(fields=['org', 'status'], name='idx_batch_org_status'),
            models.Index(fields=['product', 'status'], name='idx_batch_product_status'),
        ]
