"""
Test suite for core: authentication, users, settings, audit logs and search
"""
from decimal import Decimal
from io import StringIO
from urllib.parse import quote

from django.contrib.auth.models import Group
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.models import AuditLog, AutocompleteEntry, Setting
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log, parse_id_list, parse_positive_int, money


class AuthenticationTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_register_returns_tokens(self):
        data = {
            'username': 'site_owner',
            'email': 'owner@test.com',
            'password': 'Rebar-Strong-2024',
            'password_confirm': 'Rebar-Strong-2024',
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'site_owner')

    def test_register_password_mismatch(self):
        data = {
            'username': 'site_owner',
            'password': 'Rebar-Strong-2024',
            'password_confirm': 'Rebar-Strong-2025',
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login(self):
        TestDataFactory.create_user(username='engineer', password='testpass123')
        response = self.client.post(
            '/api/v1/auth/login/', {'username': 'engineer', 'password': 'testpass123'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='engineer', password='testpass123')
        response = self.client.post(
            '/api/v1/auth/login/', {'username': 'engineer', 'password': 'nope'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserMeFlagsTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def get_me(self, user):
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return response.data

    def test_accountant(self):
        data = self.get_me(TestDataFactory.create_user(groups=['Accountant']))
        self.assertEqual(data['groups'], ['Accountant'])
        self.assertFalse(data['is_admin'])
        self.assertTrue(data['can_access_reports'])
        self.assertFalse(data['can_manage_projects'])
        self.assertTrue(data['can_manage_suppliers'])

    def test_site_engineer_has_no_reports(self):
        data = self.get_me(TestDataFactory.create_user(groups=['SiteEngineer']))
        self.assertFalse(data['can_access_reports'])
        self.assertFalse(data['can_manage_suppliers'])

    def test_staff_without_group(self):
        data = self.get_me(TestDataFactory.create_user(is_staff=True))
        self.assertTrue(data['is_admin'])
        self.assertTrue(data['can_manage_projects'])

    def test_plain_user(self):
        data = self.get_me(TestDataFactory.create_user())
        self.assertFalse(data['is_admin'])
        self.assertFalse(data['can_access_reports'])


class UserAdminTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_users_forbidden_for_non_staff(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_creates_user(self):
        self.client.authenticate_user(TestDataFactory.create_user(is_staff=True))
        data = {
            'username': 'foreman',
            'password': 'Scaffold-Strong-2024',
            'password_confirm': 'Scaffold-Strong-2024',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)

    def test_settings_crud(self):
        self.client.authenticate_user(TestDataFactory.create_user(is_staff=True))
        response = self.client.post(
            '/api/v1/settings/', {'key': 'currency', 'value': 'YER'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        setting_id = response.data['id']

        response = self.client.patch(f'/api/v1/settings/{setting_id}/', {'value': 'SAR'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Setting.objects.get(key='currency').value, 'SAR')

        response = self.client.delete(f'/api/v1/settings/{setting_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_setting_key_normalized(self):
        self.client.authenticate_user(TestDataFactory.create_user(is_staff=True))
        response = self.client.post(
            '/api/v1/settings/', {'key': ' Report.Currency ', 'value': 'YER'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['key'], 'report.currency')

        response = self.client.post('/api/v1/settings/', {'key': 'bad key!', 'value': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('key', response.data)

    def test_staff_assigns_groups_by_name(self):
        self.client.authenticate_user(TestDataFactory.create_user(is_staff=True))
        Group.objects.create(name='SiteEngineer')
        engineer = TestDataFactory.create_user(first_name='Salem', last_name='Ali')
        response = self.client.patch(
            f'/api/v1/users/{engineer.id}/', {'groups': ['SiteEngineer']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['groups'], ['SiteEngineer'])
        self.assertEqual(response.data['full_name'], 'Salem Ali')
        self.assertNotIn('is_superuser', response.data)

    def test_register_cannot_grant_groups(self):
        Group.objects.create(name='Admin')
        data = {
            'username': 'walk_in',
            'password': 'Scaffold-Strong-2024',
            'password_confirm': 'Scaffold-Strong-2024',
            'groups': ['Admin'],
        }
        response = APIClient().post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['groups'], [])


class AuditLogTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_skipped_without_required_fields(self):
        self.assertIsNone(create_audit_log(action=None, model_name='Project', object_id=1))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_changes_made_json_safe(self):
        from decimal import Decimal
        log = create_audit_log(
            action='fund_transfer', model_name='FundTransfer', object_id=3,
            user=self.user, changes={'amount': Decimal('10.50')}
        )
        self.assertEqual(log.changes, {'amount': '10.50'})
        self.assertEqual(log.object_id, '3')

    def test_non_staff_sees_own_logs(self):
        create_audit_log(action='create', model_name='Project', object_id=1, user=self.user)
        create_audit_log(action='create', model_name='Project', object_id=2, user=self.other)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['object_id'], '1')
        self.assertEqual(response.data[0]['user_username'], self.user.username)
        self.assertEqual(response.data[0]['action_display'], 'Create')

    def test_filter_by_action(self):
        create_audit_log(action='create', model_name='Project', object_id=1, user=self.user)
        create_audit_log(action='delete', model_name='Project', object_id=1, user=self.user)
        response = self.client.get('/api/v1/audit-logs/', {'action': 'delete'})
        self.assertEqual(len(response.data), 1)

    def test_detail_of_other_user_forbidden(self):
        log = create_audit_log(action='create', model_name='Project', object_id=2, user=self.other)
        response = self.client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_api_writes_audit_log(self):
        response = self.client.post('/api/v1/projects/', {'name': 'Tower B'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        log = AuditLog.objects.get(model_name='Project')
        self.assertEqual(log.action, 'create')
        self.assertEqual(log.user, self.user)


class GlobalSearchTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_empty_query(self):
        response = self.client.get('/api/v1/search/', {'q': '  '})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['projects'], [])
        self.assertEqual(response.data['equipment'], [])

    def test_finds_across_models(self):
        TestDataFactory.create_project(name='Harbor villa')
        TestDataFactory.create_worker(name='Harbor crew lead')
        TestDataFactory.create_project(name='School')
        response = self.client.get('/api/v1/search/', {'q': 'harbor'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['projects']), 1)
        self.assertEqual(len(response.data['workers']), 1)
        self.assertEqual(response.data['suppliers'], [])


class HelperTests(TestCase):

    def test_parse_id_list(self):
        self.assertEqual(parse_id_list('1, 2,x,3'), [1, 2, 3])
        self.assertEqual(parse_id_list(''), [])

    def test_money(self):
        self.assertEqual(money(None), '0.00')
        self.assertEqual(money(5), '5.00')
        self.assertEqual(money(Decimal('200')), '200.00')

    def test_parse_positive_int(self):
        self.assertEqual(parse_positive_int(None, 50), 50)
        self.assertEqual(parse_positive_int('7', 50), 7)
        self.assertEqual(parse_positive_int('900', 50, maximum=200), 200)
        with self.assertRaises(ValueError):
            parse_positive_int('0', 50)
        with self.assertRaises(ValueError):
            parse_positive_int('abc', 50)


class AutocompleteTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def save(self, category, value):
        return self.client.post('/api/v1/autocomplete/', {'category': category, 'value': value}, format='json')

    def test_repeated_value_increments_usage(self):
        response = self.save('senderNames', ' أبو خالد ')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['value'], 'أبو خالد')

        response = self.save('senderNames', 'أبو خالد')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['usage_count'], 2)
        self.assertEqual(AutocompleteEntry.objects.count(), 1)

    def test_list_ordered_by_usage_within_category(self):
        self.save('senderNames', 'أحمد')
        self.save('senderNames', 'محمد')
        self.save('senderNames', 'محمد')
        self.save('transportDescriptions', 'نقل حديد')
        response = self.client.get('/api/v1/autocomplete/senderNames/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['value'] for entry in response.data], ['محمد', 'أحمد'])

        response = self.client.get('/api/v1/autocomplete/senderNames/', {'limit': 1})
        self.assertEqual(len(response.data), 1)

    def test_invalid_limit_rejected(self):
        response = self.client.get('/api/v1/autocomplete/senderNames/', {'limit': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_short_value_rejected(self):
        response = self.save('senderNames', ' a ')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('value', response.data)

    def test_remove_value(self):
        self.save('notes', 'تسليم الموقع')
        response = self.client.delete(f'/api/v1/autocomplete/notes/{quote("تسليم الموقع")}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(AutocompleteEntry.objects.exists())

        response = self.client.delete(f'/api/v1/autocomplete/notes/{quote("تسليم الموقع")}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CreateUserGroupsCommandTests(TestCase):

    def test_creates_groups_once(self):
        call_command('create_user_groups', stdout=StringIO())
        call_command('create_user_groups', stdout=StringIO())
        names = set(Group.objects.values_list('name', flat=True))
        self.assertEqual(names, {'Admin', 'ProjectManager', 'Accountant', 'SiteEngineer'})
