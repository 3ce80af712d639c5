from django.contrib import admin
from .models import Notification, NotificationReadState


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'priority', 'project', 'created_by', 'created_at']
    list_filter = ['type', 'priority', 'created_at']
    search_fields = ['title', 'body']
    ordering = ['-created_at']


@admin.register(NotificationReadState)
class NotificationReadStateAdmin(admin.ModelAdmin):
    list_display = ['notification', 'user', 'is_read', 'read_at']
    list_filter = ['is_read']
