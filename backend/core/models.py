from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    """Application user (site engineers, accountants, managers)"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class Setting(models.Model):
    """System settings"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'


class AuditLog(models.Model):
    """Audit trail for financial records"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('view', 'View'),
        ('attendance_record', 'Attendance Recorded'),
        ('fund_transfer', 'Fund Transfer'),
        ('project_transfer', 'Project Transfer'),
        ('worker_transfer', 'Worker Transfer'),
        ('material_purchase', 'Material Purchase'),
        ('supplier_payment', 'Supplier Payment'),
        ('equipment_transfer', 'Equipment Transfer'),
        ('equipment_maintenance', 'Equipment Maintenance'),
        ('balances_recalculate', 'Balances Recalculated'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., worker name, project name)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., invoice number, transfer number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model'),
            models.Index(fields=['object_reference'], name='idx_audit_reference'),
        ]


class AutocompleteEntry(models.Model):
    """Remembered form values per category (sender names, transport descriptions ...)"""
    category = models.CharField(max_length=100)
    value = models.CharField(max_length=255)
    usage_count = models.PositiveIntegerField(default=1)
    last_used = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.category}: {self.value}"

    class Meta:
        db_table = 'autocomplete_entries'
        ordering = ['-usage_count', '-last_used']
        unique_together = [['category', 'value']]
        indexes = [
            models.Index(fields=['category', '-usage_count'], name='idx_autocomplete_category'),
        ]
