from django.urls import path
from .views import (
    project_list_create, project_detail, project_stats, project_list_with_stats,
    fund_transfer_list_create, fund_transfer_detail,
    project_fund_transfer_list_create, project_fund_transfer_detail,
    daily_summary, previous_balance, recalculate_balances
)

urlpatterns = [
    # Project endpoints
    path('projects/', project_list_create, name='project-list-create'),
    path('projects/with-stats/', project_list_with_stats, name='project-list-with-stats'),
    path('projects/<int:pk>/', project_detail, name='project-detail'),
    path('projects/<int:pk>/stats/', project_stats, name='project-stats'),

    # Daily cash-box summaries
    path('projects/<int:pk>/daily-summary/<str:date>/', daily_summary, name='project-daily-summary'),
    path('projects/<int:pk>/previous-balance/<str:date>/', previous_balance, name='project-previous-balance'),
    path('projects/<int:pk>/recalculate-balances/', recalculate_balances, name='project-recalculate-balances'),

    # Custody transfers into a project
    path('fund-transfers/', fund_transfer_list_create, name='fund-transfer-list-create'),
    path('fund-transfers/<int:pk>/', fund_transfer_detail, name='fund-transfer-detail'),

    # Transfers between projects
    path('project-fund-transfers/', project_fund_transfer_list_create, name='project-fund-transfer-list-create'),
    path('project-fund-transfers/<int:pk>/', project_fund_transfer_detail, name='project-fund-transfer-detail'),
]
