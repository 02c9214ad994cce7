from django.db import models


class NurseryLocation(models.Model):
    """A growing area: tunnel, glasshouse bay or outdoor bed"""
    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='locations')
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=50)
    site = models.CharField(max_length=200, blank=True, help_text="Site or holding the location belongs to")
    is_covered = models.BooleanField(default=False, help_text="Indoor (tunnel/glasshouse) rather than outdoor")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.code})"

    class Meta:
        db_table = 'nursery_locations'
        ordering = ['site', 'name']
        unique_together = [('org', 'code')]
