from django.contrib import admin
from .models import Equipment, EquipmentMovement, EquipmentMaintenance, EquipmentUsage


class EquipmentMaintenanceInline(admin.TabularInline):
    model = EquipmentMaintenance
    extra = 0
    fields = ['maintenance_type', 'cost', 'performed_at', 'next_due_date']


@admin.register(Equipment)
class EquipmentAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'category', 'status', 'condition', 'current_project', 'last_maintenance_date']
    list_filter = ['status', 'condition', 'category']
    search_fields = ['code', 'name', 'category']
    readonly_fields = ['code', 'created_at', 'updated_at']
    ordering = ['code']
    inlines = [EquipmentMaintenanceInline]


@admin.register(EquipmentMovement)
class EquipmentMovementAdmin(admin.ModelAdmin):
    list_display = ['equipment', 'from_project', 'to_project', 'moved_by', 'movement_date']
    list_filter = ['movement_date']
    search_fields = ['equipment__code', 'equipment__name', 'reason']
    date_hierarchy = 'movement_date'


@admin.register(EquipmentUsage)
class EquipmentUsageAdmin(admin.ModelAdmin):
    list_display = ['equipment', 'project', 'usage_date', 'hours']
    list_filter = ['usage_date']
    search_fields = ['equipment__code', 'equipment__name']
