from django.urls import path
from . import views

urlpatterns = [
    path('reports/daily-expenses/', views.daily_expenses, name='daily-expenses'),
    path('reports/daily-expenses/export/', views.daily_expenses, {'export': True}, name='daily-expenses-export'),
    path('reports/daily-expenses-range/', views.daily_expenses_range, name='daily-expenses-range'),
    path('reports/daily-expenses-range/export/', views.daily_expenses_range, {'export': True}, name='daily-expenses-range-export'),
    path('reports/material-purchases/', views.material_purchases, name='material-purchases-report'),
    path('reports/material-purchases/export/', views.material_purchases, {'export': True}, name='material-purchases-export'),
    path('reports/project-summary/', views.project_summary, name='project-summary'),
    path('reports/advanced/', views.advanced_report, name='advanced-report'),
    path('reports/advanced/export/', views.advanced_report, {'export': True}, name='advanced-report-export'),
    path('reports/workers-settlement/', views.workers_settlement, name='workers-settlement'),
    path('reports/workers-settlement/export/', views.workers_settlement, {'export': True}, name='workers-settlement-export'),
    path('reports/unified-transactions/', views.unified_transactions, name='unified-transactions'),
    path('reports/worker-statement/<int:worker_id>/', views.worker_statement_export, name='worker-statement-export'),
    path('reports/supplier-statement/<int:supplier_id>/', views.supplier_statement_export, name='supplier-statement-export'),

    path('report-templates/', views.report_template_list_create, name='report-template-list-create'),
    path('report-templates/active/', views.report_template_active, name='report-template-active'),
    path('report-templates/<int:pk>/', views.report_template_detail, name='report-template-detail'),
]
