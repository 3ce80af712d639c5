from django.urls import path
from .views import (
    equipment_list_create, equipment_detail, equipment_transfer, equipment_movements,
    equipment_maintenance, equipment_usage, equipment_label,
    equipment_predictive_maintenance, equipment_recommendations
)

urlpatterns = [
    path('equipment/', equipment_list_create, name='equipment-list-create'),
    path('equipment/predictive-maintenance/', equipment_predictive_maintenance, name='equipment-predictive-maintenance'),
    path('equipment/recommendations/', equipment_recommendations, name='equipment-recommendations'),
    path('equipment/<int:pk>/', equipment_detail, name='equipment-detail'),
    path('equipment/<int:pk>/transfer/', equipment_transfer, name='equipment-transfer'),
    path('equipment/<int:pk>/movements/', equipment_movements, name='equipment-movements'),
    path('equipment/<int:pk>/maintenance/', equipment_maintenance, name='equipment-maintenance'),
    path('equipment/<int:pk>/usage/', equipment_usage, name='equipment-usage'),
    path('equipment/<int:pk>/label/', equipment_label, name='equipment-label'),
]
