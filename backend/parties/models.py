from django.db import models
from decimal import Decimal
from backend.core.models import User


class Supplier(models.Model):
    """Material suppliers"""
    name = models.CharField(max_length=200, unique=True)
    contact_person = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    payment_terms = models.CharField(max_length=100, default='نقد')
    # Credit purchases minus payments; refreshed by signals
    total_debt = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'suppliers'
        ordering = ['name']


class SupplierPayment(models.Model):
    """Payment made to a supplier against deferred purchases"""
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'نقد'),
        ('bank', 'تحويل بنكي'),
        ('cheque', 'شيك'),
        ('hawaleh', 'حولة'),
    ]

    supplier = models.ForeignKey(Supplier, on_delete=models.CASCADE, related_name='payments')
    project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='supplier_payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    payment_date = models.DateField()
    reference_number = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='supplier_payments')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.supplier} - {self.amount} ({self.payment_date})"

    class Meta:
        db_table = 'supplier_payments'
        ordering = ['-payment_date', '-created_at']
        indexes = [
            models.Index(fields=['supplier', 'payment_date'], name='idx_spay_supplier_date'),
        ]
