from django.db import models
from django.utils import timezone
from decimal import Decimal
from backend.core.models import User
from backend.projects.models import Project


class WorkerType(models.Model):
    """Worker trades offered for autocomplete (معلم، عامل، حداد ...)"""
    name = models.CharField(max_length=100, unique=True)
    usage_count = models.PositiveIntegerField(default=1)
    last_used = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'worker_types'
        ordering = ['-usage_count', 'name']


class Worker(models.Model):
    """Workers"""
    name = models.CharField(max_length=200)
    type = models.CharField(max_length=100)
    daily_wage = models.DecimalField(max_digits=10, decimal_places=2)
    phone = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'workers'
        ordering = ['name']


class WorkerAttendance(models.Model):
    """Daily attendance of a worker on a project, with the wage paid that day"""
    PAYMENT_TYPE_CHOICES = [
        ('full', 'دفع كامل'),
        ('partial', 'دفع جزئي'),
        ('credit', 'على الحساب'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='attendance')
    worker = models.ForeignKey(Worker, on_delete=models.CASCADE, related_name='attendance')
    date = models.DateField()
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    work_description = models.TextField(blank=True)
    is_present = models.BooleanField(default=True)
    work_days = models.DecimalField(max_digits=4, decimal_places=2, default=Decimal('1.00'))
    daily_wage = models.DecimalField(max_digits=10, decimal_places=2)
    actual_wage = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    remaining_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    payment_type = models.CharField(max_length=20, choices=PAYMENT_TYPE_CHOICES, default='partial')
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='attendance_records')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def calculate_amounts(self):
        """actual = daily wage x work days; full days pay it all, credit days pay nothing"""
        if self.work_days is None:
            self.work_days = Decimal('1.00')
        self.actual_wage = (self.daily_wage * self.work_days).quantize(Decimal('0.01'))
        if self.payment_type == 'credit':
            self.paid_amount = Decimal('0.00')
            self.remaining_amount = self.actual_wage
        else:
            if self.payment_type == 'full':
                self.paid_amount = self.actual_wage
            self.remaining_amount = self.actual_wage - (self.paid_amount or Decimal('0.00'))

    def save(self, *args, **kwargs):
        if self.daily_wage is None and self.worker_id:
            self.daily_wage = self.worker.daily_wage
        self.calculate_amounts()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.worker} - {self.project} - {self.date}"

    class Meta:
        db_table = 'worker_attendance'
        ordering = ['-date', '-created_at']
        unique_together = [['worker', 'project', 'date']]
        indexes = [
            models.Index(fields=['project', 'date'], name='idx_attendance_project_date'),
            models.Index(fields=['worker', 'date'], name='idx_attendance_worker_date'),
        ]


class WorkerTransfer(models.Model):
    """Money sent from a worker's account to their family (حوالات الأهل)"""
    TRANSFER_METHOD_CHOICES = [
        ('hawaleh', 'حولة'),
        ('bank', 'تحويل بنكي'),
        ('cash', 'نقدي'),
    ]

    worker = models.ForeignKey(Worker, on_delete=models.CASCADE, related_name='transfers')
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='worker_transfers')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    recipient_name = models.CharField(max_length=200)
    recipient_phone = models.CharField(max_length=20, blank=True)
    transfer_method = models.CharField(max_length=20, choices=TRANSFER_METHOD_CHOICES, default='hawaleh')
    transfer_number = models.CharField(max_length=100, blank=True)
    transfer_date = models.DateField()
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='worker_transfers')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.worker} → {self.recipient_name}: {self.amount}"

    class Meta:
        db_table = 'worker_transfers'
        ordering = ['-transfer_date', '-created_at']
        indexes = [
            models.Index(fields=['worker', 'transfer_date'], name='idx_wtransfer_worker_date'),
        ]


class WorkerMiscExpense(models.Model):
    """Petty site expenses (نثريات) paid from the project's cash box"""
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='misc_expenses')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.CharField(max_length=255)
    date = models.DateField()
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='misc_expenses')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.project} - {self.description}: {self.amount}"

    class Meta:
        db_table = 'worker_misc_expenses'
        ordering = ['-date', '-created_at']
