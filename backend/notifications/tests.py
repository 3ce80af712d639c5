"""
Test suite for notifications: addressing, read state and statistics
"""
from django.test import TestCase
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.notifications.models import Notification, NotificationReadState
from backend.notifications.services import (
    create_notification, get_user_notifications, mark_as_read, mark_all_as_read,
    get_notification_stats, notify_critical_maintenance
)


class NotificationServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()

    def test_broadcast_visible_to_everyone(self):
        create_notification(type='announcement', title='Site closed Friday')
        self.assertEqual(get_user_notifications(self.user)['total'], 1)
        self.assertEqual(get_user_notifications(self.other)['total'], 1)

    def test_addressed_notification(self):
        create_notification(type='task', title='Check rebar', recipients=[self.user.id])
        self.assertEqual(get_user_notifications(self.user)['total'], 1)
        self.assertEqual(get_user_notifications(self.other)['total'], 0)

    def test_read_state_is_per_user(self):
        notification = create_notification(type='system', title='Backup done')
        mark_as_read(notification, self.user)
        self.assertEqual(get_user_notifications(self.user)['unreadCount'], 0)
        self.assertEqual(get_user_notifications(self.other)['unreadCount'], 1)

    def test_mark_as_read_is_idempotent(self):
        notification = create_notification(type='system', title='Backup done')
        first = mark_as_read(notification, self.user)
        second = mark_as_read(notification, self.user)
        self.assertEqual(first.read_at, second.read_at)
        self.assertEqual(NotificationReadState.objects.count(), 1)

    def test_mark_all_as_read(self):
        create_notification(type='system', title='One')
        create_notification(type='system', title='Two')
        create_notification(type='task', title='Not mine', recipients=[self.other.id])
        self.assertEqual(mark_all_as_read(self.user), 2)
        self.assertEqual(mark_all_as_read(self.user), 0)

    def test_unread_only_and_paging(self):
        first = create_notification(type='system', title='One')
        create_notification(type='system', title='Two')
        create_notification(type='system', title='Three')
        mark_as_read(first, self.user)
        result = get_user_notifications(self.user, unread_only=True, limit=1)
        self.assertEqual(result['total'], 2)
        self.assertEqual(len(result['notifications']), 1)

    def test_project_filter_keeps_global(self):
        project = TestDataFactory.create_project()
        other_project = TestDataFactory.create_project()
        create_notification(type='system', title='Global')
        create_notification(type='system', title='Mine', project=project)
        create_notification(type='system', title='Theirs', project=other_project)
        titles = [n.title for n in get_user_notifications(self.user, project_id=project.id)['notifications']]
        self.assertEqual(sorted(titles), ['Global', 'Mine'])

    def test_stats(self):
        create_notification(type='safety', title='Helmet', priority=Notification.PRIORITY_EMERGENCY)
        read = create_notification(type='payroll', title='Wages')
        mark_as_read(read, self.user)
        stats = get_notification_stats(self.user)
        self.assertEqual(stats['total'], 2)
        self.assertEqual(stats['unread'], 1)
        self.assertEqual(stats['byType'], {'safety': 1, 'payroll': 1})
        self.assertEqual(stats['byPriority']['1'], 1)

    def test_critical_maintenance_deduplicated(self):
        prediction = {
            'equipment_id': 7,
            'equipment_code': 'EQ-0007',
            'equipment_name': 'Generator',
            'project_id': None,
            'days_until_maintenance': 1,
            'risk_score': 105,
            'predicted_date': '2030-01-01',
        }
        self.assertIsNotNone(notify_critical_maintenance(prediction))
        self.assertIsNone(notify_critical_maintenance(prediction))
        notification = Notification.objects.get()
        self.assertEqual(notification.type, 'safety')
        self.assertEqual(notification.priority, Notification.PRIORITY_EMERGENCY)


class NotificationAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_list(self):
        data = {'type': 'announcement', 'title': 'Concrete pour at 7', 'priority': 2}
        response = self.client.post('/api/v1/notifications/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], self.user.id)

        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['unreadCount'], 1)
        self.assertFalse(response.data['notifications'][0]['is_read'])

    def test_invalid_recipients(self):
        data = {'type': 'task', 'title': 'x', 'recipients': ['abc']}
        response = self.client.post('/api/v1/notifications/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('recipients', response.data)

    def test_invalid_limit(self):
        response = self.client.get('/api/v1/notifications/', {'limit': 'many'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for params in ({'limit': 0}, {'offset': -2}, {'project': 'tower'}):
            response = self.client.get('/api/v1/notifications/', params)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_read(self):
        notification = create_notification(type='system', title='Hello')
        response = self.client.post(f'/api/v1/notifications/{notification.id}/mark-read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])
        response = self.client.get('/api/v1/notifications/')
        self.assertTrue(response.data['notifications'][0]['is_read'])

    def test_mark_read_not_addressed(self):
        other = TestDataFactory.create_user()
        notification = create_notification(type='task', title='Private', recipients=[other.id])
        response = self.client.post(f'/api/v1/notifications/{notification.id}/mark-read/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_read(self):
        create_notification(type='system', title='One')
        create_notification(type='system', title='Two')
        response = self.client.post('/api/v1/notifications/mark-all-read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['marked'], 2)

    def test_delete_requires_creator_or_admin(self):
        other = TestDataFactory.create_user()
        notification = create_notification(type='system', title='Theirs', created_by=other)
        response = self.client.delete(f'/api/v1/notifications/{notification.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        mine = create_notification(type='system', title='Mine', created_by=self.user)
        response = self.client.delete(f'/api/v1/notifications/{mine.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_stats_endpoint(self):
        create_notification(type='safety', title='Scaffold check')
        response = self.client.get('/api/v1/notifications/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['unread'], 1)
