from django.urls import path
from .views import (
    notification_list_create, notification_mark_read, notification_mark_all_read,
    notification_delete, notification_stats
)

urlpatterns = [
    path('notifications/', notification_list_create, name='notification-list-create'),
    path('notifications/stats/', notification_stats, name='notification-stats'),
    path('notifications/mark-all-read/', notification_mark_all_read, name='notification-mark-all-read'),
    path('notifications/<int:pk>/', notification_delete, name='notification-delete'),
    path('notifications/<int:pk>/mark-read/', notification_mark_read, name='notification-mark-read'),
]
