from django.db import models
from backend.core.models import User


class Notification(models.Model):
    """In-app notification; an empty recipients list means every user"""
    TYPE_CHOICES = [
        ('system', 'نظام'),
        ('safety', 'سلامة'),
        ('task', 'مهمة'),
        ('payroll', 'رواتب'),
        ('announcement', 'إعلان'),
        ('maintenance', 'صيانة'),
    ]
    PRIORITY_EMERGENCY = 1
    PRIORITY_HIGH = 2
    PRIORITY_MEDIUM = 3
    PRIORITY_LOW = 4
    PRIORITY_INFO = 5
    PRIORITY_CHOICES = [
        (PRIORITY_EMERGENCY, 'طارئ'),
        (PRIORITY_HIGH, 'عالي'),
        (PRIORITY_MEDIUM, 'متوسط'),
        (PRIORITY_LOW, 'منخفض'),
        (PRIORITY_INFO, 'معلومة'),
    ]

    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='system')
    title = models.CharField(max_length=255)
    body = models.TextField(blank=True)
    payload = models.JSONField(default=dict, blank=True)
    priority = models.PositiveSmallIntegerField(choices=PRIORITY_CHOICES, default=PRIORITY_MEDIUM)
    project = models.ForeignKey('projects.Project', on_delete=models.CASCADE, null=True, blank=True, related_name='notifications')
    recipients = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='sent_notifications')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"[{self.type}] {self.title}"

    def is_for(self, user):
        return not self.recipients or user.id in self.recipients or str(user.id) in self.recipients

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['type', 'created_at'], name='idx_notification_type_created'),
        ]


class NotificationReadState(models.Model):
    notification = models.ForeignKey(Notification, on_delete=models.CASCADE, related_name='read_states')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notification_read_states')
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.user} - {self.notification_id} ({'read' if self.is_read else 'unread'})"

    class Meta:
        db_table = 'notification_read_states'
        unique_together = [['notification', 'user']]
