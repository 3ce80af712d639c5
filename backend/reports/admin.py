from django.contrib import admin
from .models import ReportTemplate


@admin.register(ReportTemplate)
class ReportTemplateAdmin(admin.ModelAdmin):
    list_display = ['template_name', 'company_name', 'is_active', 'updated_at']
    list_filter = ['is_active']
    search_fields = ['template_name', 'company_name']
