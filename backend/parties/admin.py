from django.contrib import admin
from .models import Supplier, SupplierPayment


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_person', 'phone', 'payment_terms', 'total_debt', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'contact_person', 'phone']
    readonly_fields = ['total_debt']
    ordering = ['name']


@admin.register(SupplierPayment)
class SupplierPaymentAdmin(admin.ModelAdmin):
    list_display = ['id', 'supplier', 'project', 'amount', 'payment_method', 'payment_date', 'created_by']
    list_filter = ['payment_method', 'payment_date']
    search_fields = ['supplier__name', 'reference_number', 'notes']
    ordering = ['-payment_date']
    date_hierarchy = 'payment_date'
