from django.db import models
from decimal import Decimal
from backend.core.models import User


class Project(models.Model):
    """Construction project"""
    STATUS_CHOICES = [
        ('active', 'نشط'),
        ('completed', 'مكتمل'),
        ('paused', 'متوقف'),
    ]

    name = models.CharField(max_length=200)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    start_date = models.DateField(null=True, blank=True)
    budget = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='projects')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'projects'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_project_status'),
        ]


class FundTransfer(models.Model):
    """Custody money sent into a project (تحويلات العهدة)"""
    TRANSFER_TYPE_CHOICES = [
        ('hawaleh', 'حولة'),
        ('manual', 'تسليم يدوي'),
        ('exchange', 'صراف'),
        ('bank', 'تحويل بنكي'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='fund_transfers')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    sender_name = models.CharField(max_length=200, blank=True)
    transfer_number = models.CharField(max_length=100, blank=True, null=True)
    transfer_type = models.CharField(max_length=20, choices=TRANSFER_TYPE_CHOICES, default='hawaleh')
    transfer_date = models.DateField()
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='fund_transfers')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.project} - {self.amount} ({self.transfer_date})"

    class Meta:
        db_table = 'fund_transfers'
        ordering = ['-transfer_date', '-created_at']
        indexes = [
            models.Index(fields=['project', 'transfer_date'], name='idx_fund_project_date'),
        ]


class ProjectFundTransfer(models.Model):
    """Money moved from one project's cash box to another"""
    from_project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='outgoing_transfers')
    to_project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='incoming_transfers')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    transfer_reason = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    transfer_date = models.DateField()
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='project_fund_transfers')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.from_project} → {self.to_project}: {self.amount}"

    class Meta:
        db_table = 'project_fund_transfers'
        ordering = ['-transfer_date', '-created_at']
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(from_project=models.F('to_project')),
                name='chk_project_transfer_distinct',
            ),
        ]


class DailyExpenseSummary(models.Model):
    """Per-project, per-day cash box summary with carried-forward balance"""
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='daily_summaries')
    date = models.DateField()
    carried_forward_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_fund_transfers = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_incoming_project_transfers = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_outgoing_project_transfers = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_worker_wages = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_material_costs = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_transportation_costs = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_worker_transfers = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_worker_misc_expenses = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_income = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_expenses = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    remaining_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.project} - {self.date}: {self.remaining_balance}"

    class Meta:
        db_table = 'daily_expense_summaries'
        ordering = ['project', 'date']
        unique_together = [['project', 'date']]
        indexes = [
            models.Index(fields=['project', 'date'], name='idx_summary_project_date'),
        ]
