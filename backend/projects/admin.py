from django.contrib import admin
from .models import Project, FundTransfer, ProjectFundTransfer, DailyExpenseSummary


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'status', 'location', 'start_date', 'budget', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'location', 'description']
    ordering = ['-created_at']


@admin.register(FundTransfer)
class FundTransferAdmin(admin.ModelAdmin):
    list_display = ['project', 'amount', 'transfer_type', 'sender_name', 'transfer_number', 'transfer_date']
    list_filter = ['transfer_type', 'project', 'transfer_date']
    search_fields = ['sender_name', 'transfer_number', 'notes', 'project__name']
    date_hierarchy = 'transfer_date'


@admin.register(ProjectFundTransfer)
class ProjectFundTransferAdmin(admin.ModelAdmin):
    list_display = ['from_project', 'to_project', 'amount', 'transfer_reason', 'transfer_date']
    list_filter = ['transfer_date']
    search_fields = ['from_project__name', 'to_project__name', 'transfer_reason']
    date_hierarchy = 'transfer_date'


@admin.register(DailyExpenseSummary)
class DailyExpenseSummaryAdmin(admin.ModelAdmin):
    list_display = ['project', 'date', 'carried_forward_amount', 'total_income', 'total_expenses', 'remaining_balance']
    list_filter = ['project']
    date_hierarchy = 'date'
    readonly_fields = [f.name for f in DailyExpenseSummary._meta.fields]
