from django.urls import path
from .views import (
    material_list_create, material_detail,
    material_purchase_list_create, material_purchase_detail,
    transportation_list_create, transportation_detail
)

urlpatterns = [
    path('materials/', material_list_create, name='material-list-create'),
    path('materials/<int:pk>/', material_detail, name='material-detail'),
    path('material-purchases/', material_purchase_list_create, name='material-purchase-list-create'),
    path('material-purchases/<int:pk>/', material_purchase_detail, name='material-purchase-detail'),
    path('transportation-expenses/', transportation_list_create, name='transportation-list-create'),
    path('transportation-expenses/<int:pk>/', transportation_detail, name='transportation-detail'),
]
