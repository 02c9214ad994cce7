from django.db import models


class LabelPrinter(models.Model):
    """Network label printers"""
    PRINTER_TYPE_CHOICES = [
        ('zebra', 'Zebra (ZPL)'),
    ]

    CONNECTION_TYPE_CHOICES = [
        ('network', 'Network'),
    ]

    DPI_CHOICES = [
        (203, '203 dpi'),
        (300, '300 dpi'),
        (600, '600 dpi'),
    ]

    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='label_printers')
    name = models.CharField(max_length=100)
    printer_type = models.CharField(max_length=20, choices=PRINTER_TYPE_CHOICES, default='zebra')
    connection_type = models.CharField(max_length=20, choices=CONNECTION_TYPE_CHOICES, default='network')
    host = models.CharField(max_length=255)
    port = models.PositiveIntegerField(default=9100)
    dpi = models.PositiveIntegerField(choices=DPI_CHOICES, default=203)
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.host}:{self.port})"

    def save(self, *args, **kwargs):
        # One default printer per organisation
        if self.is_default:
            LabelPrinter.objects.filter(org_id=self.org_id, is_default=True).exclude(pk=self.pk).update(is_default=False)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'label_printers'
        ordering = ['name']
