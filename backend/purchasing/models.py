from django.db import models
from decimal import Decimal
from backend.core.models import User

PURCHASE_TYPE_ALIASES = {
    'cash': 'cash',
    'نقد': 'cash',
    'نقدي': 'cash',
    'credit': 'credit',
    'آجل': 'credit',
    'أجل': 'credit',
    'supply': 'supply',
    'توريد': 'supply',
}


def normalize_purchase_type(value):
    """
    Map the purchase type labels used by data entry to a stored key.

    Unknown values are returned unchanged so the serializer can reject them.
    Any label containing 'جل' counts as credit (spelling variants of آجل).
    """
    if value is None:
        return value
    cleaned = str(value).strip()
    key = PURCHASE_TYPE_ALIASES.get(cleaned.lower(), PURCHASE_TYPE_ALIASES.get(cleaned))
    if key:
        return key
    if 'جل' in cleaned:
        return 'credit'
    return cleaned


class Material(models.Model):
    """Construction material catalogue"""
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=100, blank=True)
    unit = models.CharField(max_length=50)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.unit})"

    class Meta:
        db_table = 'materials'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['name', 'unit'], name='uniq_material_name_unit'),
        ]


class MaterialPurchase(models.Model):
    """Material bought for a project (cash, deferred or supplied)"""
    PURCHASE_TYPE_CHOICES = [
        ('cash', 'نقد'),
        ('credit', 'آجل'),
        ('supply', 'توريد'),
    ]

    project = models.ForeignKey('projects.Project', on_delete=models.CASCADE, related_name='material_purchases')
    material = models.ForeignKey(Material, on_delete=models.PROTECT, related_name='purchases')
    supplier = models.ForeignKey('parties.Supplier', on_delete=models.SET_NULL, null=True, blank=True, related_name='purchases')
    # Free-text name when the supplier is not registered
    supplier_name = models.CharField(max_length=200, blank=True)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, blank=True)
    purchase_type = models.CharField(max_length=20, choices=PURCHASE_TYPE_CHOICES, default='cash')
    invoice_number = models.CharField(max_length=100, blank=True)
    invoice_date = models.DateField(null=True, blank=True)
    invoice_photo = models.ImageField(upload_to='invoices/%Y/%m/', null=True, blank=True)
    notes = models.TextField(blank=True)
    purchase_date = models.DateField()
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='material_purchases')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.material} x {self.quantity} - {self.project}"

    def save(self, *args, **kwargs):
        if self.total_amount is None:
            self.total_amount = (self.quantity * self.unit_price).quantize(Decimal('0.01'))
        if self.supplier_id and not self.supplier_name:
            self.supplier_name = self.supplier.name
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'material_purchases'
        ordering = ['-purchase_date', '-created_at']
        indexes = [
            models.Index(fields=['project', 'purchase_date'], name='idx_mpur_project_date'),
            models.Index(fields=['supplier', 'purchase_type'], name='idx_mpur_supplier_type'),
        ]


class TransportationExpense(models.Model):
    """Transport costs of a project day"""
    project = models.ForeignKey('projects.Project', on_delete=models.CASCADE, related_name='transportation_expenses')
    worker = models.ForeignKey('workers.Worker', on_delete=models.SET_NULL, null=True, blank=True, related_name='transportation_expenses')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.CharField(max_length=255)
    date = models.DateField()
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='transportation_expenses')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.description} - {self.amount} ({self.date})"

    class Meta:
        db_table = 'transportation_expenses'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['project', 'date'], name='idx_transport_project_date'),
        ]
