from django.contrib import admin
from .models import Material, MaterialPurchase, TransportationExpense


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'unit', 'created_at']
    list_filter = ['category']
    search_fields = ['name', 'category']
    ordering = ['name']


@admin.register(MaterialPurchase)
class MaterialPurchaseAdmin(admin.ModelAdmin):
    list_display = ['material', 'project', 'supplier_name', 'quantity', 'unit_price', 'get_total', 'purchase_type', 'purchase_date']
    list_filter = ['purchase_type', 'project', 'purchase_date']
    search_fields = ['material__name', 'supplier_name', 'invoice_number', 'notes']
    ordering = ['-purchase_date', '-created_at']
    readonly_fields = ['created_at', 'updated_at']

    def get_total(self, obj):
        return f"{obj.total_amount:,.2f}"
    get_total.short_description = 'Total'


@admin.register(TransportationExpense)
class TransportationExpenseAdmin(admin.ModelAdmin):
    list_display = ['description', 'project', 'worker', 'amount', 'date']
    list_filter = ['project', 'date']
    search_fields = ['description', 'notes']
    ordering = ['-date']
