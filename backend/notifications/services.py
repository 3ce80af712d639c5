"""
Notification creation and per-user read tracking.

Recipients are stored as a list of user ids on the notification; an empty
list addresses every user. Read state lives in NotificationReadState rows
that are created on first read.
"""
import logging

from django.db.models import Q
from django.utils import timezone

from .models import Notification, NotificationReadState

logger = logging.getLogger(__name__)


def create_notification(type, title, body='', payload=None, priority=Notification.PRIORITY_MEDIUM,
                        project=None, recipients=None, created_by=None):
    notification = Notification.objects.create(
        type=type,
        title=title,
        body=body,
        payload=payload or {},
        priority=priority,
        project=project,
        recipients=list(recipients or []),
        created_by=created_by,
    )
    logger.info(f"Notification {notification.id} created: [{type}] {title}")
    return notification


def notify_credit_attendance(attendance):
    """Payroll notice for a work day recorded on credit"""
    worker = attendance.worker
    return create_notification(
        type='payroll',
        title='أجر مستحق',
        body=f'تم تسجيل يوم عمل آجل للعامل {worker.name} بمبلغ {attendance.actual_wage}',
        payload={
            'worker_id': worker.id,
            'attendance_id': attendance.id,
            'amount': str(attendance.actual_wage),
            'date': attendance.date.isoformat(),
            'action': 'open_payroll',
        },
        priority=Notification.PRIORITY_MEDIUM,
        project=attendance.project,
        created_by=attendance.created_by,
    )


def notify_critical_maintenance(prediction):
    """
    Safety alert for a critical maintenance prediction.

    At most one alert per equipment per day; returns None when today's alert
    already exists.
    """
    today = timezone.localdate()
    existing = Notification.objects.filter(type='safety', created_at__date=today)
    for notification in existing:
        if notification.payload.get('equipment_id') == prediction['equipment_id']:
            return None

    from backend.projects.models import Project
    project = None
    if prediction.get('project_id'):
        project = Project.objects.filter(pk=prediction['project_id']).first()

    return create_notification(
        type='safety',
        title=f"صيانة عاجلة: {prediction['equipment_name']}",
        body=(
            f"المعدة {prediction['equipment_code']} تحتاج صيانة خلال "
            f"{prediction['days_until_maintenance']} يوم (درجة الخطورة {prediction['risk_score']})"
        ),
        payload={
            'equipment_id': prediction['equipment_id'],
            'severity': 'critical',
            'predicted_date': prediction['predicted_date'],
            'risk_factors': prediction.get('risk_factors', []),
            'action': 'open_equipment',
        },
        priority=Notification.PRIORITY_EMERGENCY,
        project=project,
    )


def visible_notifications(user, type=None, project_id=None):
    """Notifications addressed to the user (or to everyone), newest first"""
    queryset = Notification.objects.all()
    if type:
        queryset = queryset.filter(type=type)
    if project_id:
        queryset = queryset.filter(Q(project_id=project_id) | Q(project__isnull=True))
    return [n for n in queryset.order_by('-created_at', '-id') if n.is_for(user)]


def read_ids(user, notifications):
    return set(
        NotificationReadState.objects.filter(
            user=user, is_read=True, notification__in=[n.id for n in notifications]
        ).values_list('notification_id', flat=True)
    )


def get_user_notifications(user, type=None, project_id=None, unread_only=False, limit=50, offset=0):
    notifications = visible_notifications(user, type, project_id)
    already_read = read_ids(user, notifications)
    unread = [n for n in notifications if n.id not in already_read]
    rows = unread if unread_only else notifications
    return {
        'notifications': rows[offset:offset + limit],
        'read_ids': already_read,
        'unreadCount': len(unread),
        'total': len(rows),
    }


def mark_as_read(notification, user):
    state, _ = NotificationReadState.objects.get_or_create(notification=notification, user=user)
    if not state.is_read:
        state.is_read = True
        state.read_at = timezone.now()
        state.save(update_fields=['is_read', 'read_at'])
    return state


def mark_all_as_read(user, project_id=None):
    """Returns how many notifications changed to read"""
    notifications = visible_notifications(user, project_id=project_id)
    already_read = read_ids(user, notifications)
    count = 0
    for notification in notifications:
        if notification.id not in already_read:
            mark_as_read(notification, user)
            count += 1
    logger.debug(f"Marked {count} notifications read for user {user.id}")
    return count


def get_notification_stats(user):
    notifications = visible_notifications(user)
    already_read = read_ids(user, notifications)
    by_type = {}
    by_priority = {}
    for notification in notifications:
        by_type[notification.type] = by_type.get(notification.type, 0) + 1
        by_priority[str(notification.priority)] = by_priority.get(str(notification.priority), 0) + 1
    return {
        'total': len(notifications),
        'unread': len([n for n in notifications if n.id not in already_read]),
        'byType': by_type,
        'byPriority': by_priority,
    }
