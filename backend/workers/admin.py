from django.contrib import admin
from .models import WorkerType, Worker, WorkerAttendance, WorkerTransfer, WorkerMiscExpense


@admin.register(WorkerType)
class WorkerTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'usage_count', 'last_used']
    search_fields = ['name']


@admin.register(Worker)
class WorkerAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'daily_wage', 'phone', 'is_active', 'created_at']
    list_filter = ['type', 'is_active']
    search_fields = ['name', 'phone']


@admin.register(WorkerAttendance)
class WorkerAttendanceAdmin(admin.ModelAdmin):
    list_display = ['worker', 'project', 'date', 'is_present', 'work_days', 'actual_wage',
                    'paid_amount', 'remaining_amount', 'payment_type']
    list_filter = ['project', 'payment_type', 'is_present']
    search_fields = ['worker__name', 'project__name', 'work_description']
    date_hierarchy = 'date'
    readonly_fields = ['actual_wage', 'remaining_amount', 'created_at', 'updated_at']


@admin.register(WorkerTransfer)
class WorkerTransferAdmin(admin.ModelAdmin):
    list_display = ['worker', 'project', 'amount', 'recipient_name', 'transfer_method', 'transfer_date']
    list_filter = ['transfer_method', 'project']
    search_fields = ['worker__name', 'recipient_name', 'transfer_number']
    date_hierarchy = 'transfer_date'


@admin.register(WorkerMiscExpense)
class WorkerMiscExpenseAdmin(admin.ModelAdmin):
    list_display = ['project', 'description', 'amount', 'date']
    list_filter = ['project']
    search_fields = ['description', 'notes']
    date_hierarchy = 'date'
