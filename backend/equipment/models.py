from django.db import models
from decimal import Decimal
from backend.core.models import User


class Equipment(models.Model):
    """Tools and machines owned by the company"""
    STATUS_CHOICES = [
        ('available', 'متاح'),
        ('in_use', 'قيد الاستخدام'),
        ('maintenance', 'في الصيانة'),
        ('damaged', 'تالف'),
        ('retired', 'خارج الخدمة'),
    ]
    CONDITION_CHOICES = [
        ('excellent', 'ممتاز'),
        ('good', 'جيد'),
        ('fair', 'مقبول'),
        ('poor', 'سيء'),
    ]

    code = models.CharField(max_length=20, unique=True, blank=True)
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    purchase_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    purchase_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='available')
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, default='good')
    current_project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='equipment')
    maintenance_interval_days = models.PositiveIntegerField(default=90)
    last_maintenance_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.code} - {self.name}"

    @staticmethod
    def next_code():
        """EQ-0001, EQ-0002, ... continuing after the highest numeric code"""
        highest = 0
        for code in Equipment.objects.filter(code__startswith='EQ-').values_list('code', flat=True):
            suffix = code[3:]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"EQ-{highest + 1:04d}"

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = Equipment.next_code()
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'equipment'
        ordering = ['code']
        indexes = [
            models.Index(fields=['status'], name='idx_equipment_status'),
            models.Index(fields=['current_project', 'status'], name='idx_equipment_project_status'),
        ]


class EquipmentMovement(models.Model):
    """Equipment moved between projects (or back to the store)"""
    equipment = models.ForeignKey(Equipment, on_delete=models.CASCADE, related_name='movements')
    from_project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='equipment_moved_out')
    to_project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='equipment_moved_in')
    moved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='equipment_movements')
    reason = models.CharField(max_length=255, blank=True)
    movement_date = models.DateField()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.equipment.code}: {self.from_project} → {self.to_project}"

    class Meta:
        db_table = 'equipment_movements'
        ordering = ['-movement_date', '-created_at']


class EquipmentMaintenance(models.Model):
    MAINTENANCE_TYPE_CHOICES = [
        ('preventive', 'وقائية'),
        ('corrective', 'إصلاحية'),
        ('inspection', 'فحص'),
    ]

    equipment = models.ForeignKey(Equipment, on_delete=models.CASCADE, related_name='maintenance_records')
    maintenance_type = models.CharField(max_length=20, choices=MAINTENANCE_TYPE_CHOICES, default='preventive')
    cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    performed_at = models.DateField()
    next_due_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='equipment_maintenance')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.equipment.code} - {self.get_maintenance_type_display()} ({self.performed_at})"

    class Meta:
        db_table = 'equipment_maintenance'
        ordering = ['-performed_at', '-created_at']


class EquipmentUsage(models.Model):
    equipment = models.ForeignKey(Equipment, on_delete=models.CASCADE, related_name='usage_records')
    project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='equipment_usage')
    usage_date = models.DateField()
    hours = models.DecimalField(max_digits=5, decimal_places=2)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.equipment.code} - {self.hours}h ({self.usage_date})"

    class Meta:
        db_table = 'equipment_usage'
        ordering = ['-usage_date', '-created_at']
        indexes = [
            models.Index(fields=['equipment', 'usage_date'], name='idx_equsage_equipment_date'),
        ]
