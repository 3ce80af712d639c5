from django.urls import path
from .views import (
    supplier_list_create, supplier_detail, supplier_account_statement, supplier_statistics,
    supplier_payment_list_create, supplier_payment_detail
)

urlpatterns = [
    # Supplier endpoints
    path('suppliers/', supplier_list_create, name='supplier-list-create'),
    path('suppliers/statistics/', supplier_statistics, name='supplier-statistics'),
    path('suppliers/<int:pk>/', supplier_detail, name='supplier-detail'),
    path('suppliers/<int:pk>/account-statement/', supplier_account_statement, name='supplier-account-statement'),

    # Payment endpoints
    path('supplier-payments/', supplier_payment_list_create, name='supplier-payment-list-create'),
    path('supplier-payments/<int:pk>/', supplier_payment_detail, name='supplier-payment-detail'),
]
