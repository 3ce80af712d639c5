from django.urls import path
from .views import (
    worker_type_list_create,
    worker_list_create, worker_detail, worker_balance, worker_account_statement,
    worker_projects, worker_multi_project_statement,
    attendance_list_create, attendance_detail,
    worker_transfer_list_create, worker_transfer_detail,
    misc_expense_list_create, misc_expense_detail
)

urlpatterns = [
    path('worker-types/', worker_type_list_create, name='worker-type-list-create'),

    # Worker endpoints
    path('workers/', worker_list_create, name='worker-list-create'),
    path('workers/<int:pk>/', worker_detail, name='worker-detail'),
    path('workers/<int:pk>/balance/', worker_balance, name='worker-balance'),
    path('workers/<int:pk>/account-statement/', worker_account_statement, name='worker-account-statement'),
    path('workers/<int:pk>/projects/', worker_projects, name='worker-projects'),
    path('workers/<int:pk>/multi-project-statement/', worker_multi_project_statement, name='worker-multi-project-statement'),

    # Attendance endpoints
    path('worker-attendance/', attendance_list_create, name='attendance-list-create'),
    path('worker-attendance/<int:pk>/', attendance_detail, name='attendance-detail'),

    # Family transfers
    path('worker-transfers/', worker_transfer_list_create, name='worker-transfer-list-create'),
    path('worker-transfers/<int:pk>/', worker_transfer_detail, name='worker-transfer-detail'),

    # Petty site expenses
    path('worker-misc-expenses/', misc_expense_list_create, name='misc-expense-list-create'),
    path('worker-misc-expenses/<int:pk>/', misc_expense_detail, name='misc-expense-detail'),
]
