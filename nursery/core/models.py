from django.contrib.auth.models import AbstractUser
from django.db import models


class Organisation(models.Model):
    """A nursery business; every business row belongs to one"""
    CURRENCY_CHOICES = [
        ('EUR', 'Euro'),
        ('GBP', 'Pound Sterling'),
    ]

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=100, unique=True)
    country_code = models.CharField(max_length=2, default='IE')
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='EUR')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'organisations'
        ordering = ['name']


class User(AbstractUser):
    """Extended user model with organisation membership"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    org = models.ForeignKey(
        Organisation, on_delete=models.SET_NULL, null=True, blank=True, related_name='users',
        help_text="Organisation this user works for (empty for platform admins)"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class Setting(models.Model):
    """Key/value setting belonging to one organisation"""
    org = models.ForeignKey(Organisation, on_delete=models.CASCADE, related_name='settings')
    key = models.CharField(max_length=100)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.org_id}:{self.key}"

    class Meta:
        db_table = 'settings'
        ordering = ['key']
        unique_together = [('org', 'key')]


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('order_create', 'Order Created'),
        ('order_status', 'Order Status Changed'),
        ('order_void', 'Order Void'),
        ('pick', 'Batch Picked'),
        ('bottle_usage', 'Bottle Usage Recorded'),
        ('label_print', 'Label Printed'),
        ('csv_import', 'CSV Import'),
    ]

    org = models.ForeignKey(Organisation, on_delete=models.CASCADE, null=True, blank=True, related_name='audit_logs')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., customer name, order number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., order number, batch number, bottle code)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_7c1f0e_idx'),
            models.Index(fields=['action'], name='audit_logs_action_5b2d4a_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_9e3a61_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__c48d27_idx'),
        ]
