"""
Test suite for workers: wages, attendance, family transfers and account statements
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.notifications.models import Notification
from backend.workers.models import WorkerType, WorkerAttendance
from backend.workers.services import get_worker_balance, get_worker_projects, get_multi_project_statement


class WorkerAttendanceModelTests(TestCase):
    """Wage arithmetic done on save"""

    def setUp(self):
        self.project = TestDataFactory.create_project()
        self.worker = TestDataFactory.create_worker(daily_wage=Decimal('120.00'))

    def test_full_payment_pays_whole_wage(self):
        attendance = TestDataFactory.create_attendance(self.worker, self.project, payment_type='full')
        self.assertEqual(attendance.actual_wage, Decimal('120.00'))
        self.assertEqual(attendance.paid_amount, Decimal('120.00'))
        self.assertEqual(attendance.remaining_amount, Decimal('0.00'))

    def test_partial_payment(self):
        attendance = TestDataFactory.create_attendance(
            self.worker, self.project, payment_type='partial', paid_amount=Decimal('50.00')
        )
        self.assertEqual(attendance.remaining_amount, Decimal('70.00'))

    def test_credit_pays_nothing(self):
        attendance = TestDataFactory.create_attendance(
            self.worker, self.project, payment_type='credit', paid_amount=Decimal('30.00')
        )
        self.assertEqual(attendance.paid_amount, Decimal('0.00'))
        self.assertEqual(attendance.remaining_amount, Decimal('120.00'))

    def test_half_day(self):
        attendance = TestDataFactory.create_attendance(
            self.worker, self.project, payment_type='full', work_days=Decimal('0.5')
        )
        self.assertEqual(attendance.actual_wage, Decimal('60.00'))

    def test_wage_snapshot_survives_raise(self):
        attendance = TestDataFactory.create_attendance(self.worker, self.project, payment_type='full')
        self.worker.daily_wage = Decimal('200.00')
        self.worker.save()
        attendance.refresh_from_db()
        self.assertEqual(attendance.daily_wage, Decimal('120.00'))

    def test_absent_day_keeps_wage(self):
        attendance = TestDataFactory.create_attendance(
            self.worker, self.project, payment_type='credit', is_present=False
        )
        self.assertEqual(attendance.actual_wage, Decimal('120.00'))


class WorkerBalanceServiceTests(TestCase):

    def setUp(self):
        self.project = TestDataFactory.create_project(name='A')
        self.other = TestDataFactory.create_project(name='B')
        self.worker = TestDataFactory.create_worker(daily_wage=Decimal('100.00'))
        today = timezone.now().date()
        TestDataFactory.create_attendance(
            self.worker, self.project, date=today, payment_type='partial', paid_amount=Decimal('40.00')
        )
        TestDataFactory.create_attendance(
            self.worker, self.other, date=today - timedelta(days=1), payment_type='credit'
        )
        TestDataFactory.create_worker_transfer(self.worker, self.project, amount=Decimal('25.00'))

    def test_balance_all_projects(self):
        balance = get_worker_balance(self.worker.id)
        self.assertEqual(balance['total_earned'], Decimal('200.00'))
        self.assertEqual(balance['total_paid'], Decimal('40.00'))
        self.assertEqual(balance['total_transferred'], Decimal('25.00'))
        self.assertEqual(balance['current_balance'], Decimal('135.00'))

    def test_balance_one_project(self):
        balance = get_worker_balance(self.worker.id, self.other.id)
        self.assertEqual(balance['current_balance'], Decimal('100.00'))

    def test_worker_projects(self):
        projects = get_worker_projects(self.worker.id)
        self.assertEqual([p['name'] for p in projects], ['A', 'B'])
        self.assertEqual(projects[0]['attendance_count'], 1)

    def test_multi_project_statement(self):
        sections, overall = get_multi_project_statement(self.worker.id)
        self.assertEqual(len(sections), 2)
        self.assertEqual(overall['remaining_balance'], Decimal('135.00'))


class WorkerAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project()

    def test_create_worker_records_type(self):
        data = {'name': 'Ahmad', 'type': 'نجار', 'daily_wage': '90.00'}
        response = self.client.post('/api/v1/workers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(WorkerType.objects.filter(name='نجار').exists())

    def test_create_worker_zero_wage(self):
        data = {'name': 'Ahmad', 'type': 'نجار', 'daily_wage': '0'}
        response = self.client.post('/api/v1/workers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('daily_wage', response.data)

    def test_search_workers(self):
        TestDataFactory.create_worker(name='Khaled')
        TestDataFactory.create_worker(name='Omar')
        response = self.client.get('/api/v1/workers/', {'search': 'khal'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_worker_type_bump(self):
        self.client.post('/api/v1/worker-types/', {'name': 'حداد'}, format='json')
        response = self.client.post('/api/v1/worker-types/', {'name': 'حداد'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['usage_count'], 2)

    def test_record_attendance_defaults_wage(self):
        worker = TestDataFactory.create_worker(daily_wage=Decimal('75.00'))
        data = {
            'project': self.project.id,
            'worker': worker.id,
            'date': timezone.now().date().isoformat(),
            'payment_type': 'full',
        }
        response = self.client.post('/api/v1/worker-attendance/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['actual_wage'], '75.00')
        self.assertEqual(response.data['paid_amount'], '75.00')

    def test_duplicate_attendance_rejected(self):
        worker = TestDataFactory.create_worker()
        TestDataFactory.create_attendance(worker, self.project)
        data = {
            'project': self.project.id,
            'worker': worker.id,
            'date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/worker-attendance/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_work_days_out_of_range(self):
        worker = TestDataFactory.create_worker()
        data = {
            'project': self.project.id,
            'worker': worker.id,
            'date': timezone.now().date().isoformat(),
            'work_days': '3',
        }
        response = self.client.post('/api/v1/worker-attendance/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('work_days', response.data)

    def test_credit_attendance_notifies_payroll(self):
        worker = TestDataFactory.create_worker()
        data = {
            'project': self.project.id,
            'worker': worker.id,
            'date': timezone.now().date().isoformat(),
            'payment_type': 'credit',
        }
        response = self.client.post('/api/v1/worker-attendance/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        notification = Notification.objects.get(type='payroll')
        self.assertEqual(notification.payload['attendance_id'], response.data['id'])

    def test_attendance_filters(self):
        worker = TestDataFactory.create_worker()
        today = timezone.now().date()
        TestDataFactory.create_attendance(worker, self.project, date=today)
        TestDataFactory.create_attendance(worker, self.project, date=today - timedelta(days=10))
        response = self.client.get('/api/v1/worker-attendance/', {
            'project': self.project.id,
            'date_from': (today - timedelta(days=2)).isoformat(),
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_update_attendance_recomputes(self):
        worker = TestDataFactory.create_worker(daily_wage=Decimal('100.00'))
        attendance = TestDataFactory.create_attendance(worker, self.project, payment_type='full')
        response = self.client.patch(
            f'/api/v1/worker-attendance/{attendance.id}/',
            {'payment_type': 'partial', 'paid_amount': '30.00'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        attendance.refresh_from_db()
        self.assertEqual(attendance.remaining_amount, Decimal('70.00'))

    def test_worker_transfer_rejects_zero(self):
        worker = TestDataFactory.create_worker()
        data = {
            'worker': worker.id,
            'project': self.project.id,
            'amount': '0',
            'recipient_name': 'Family',
            'transfer_date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/worker-transfers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_misc_expense_create(self):
        data = {
            'project': self.project.id,
            'amount': '15.00',
            'description': 'ماء',
            'date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/worker-misc-expenses/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_transfer_list_filters(self):
        worker = TestDataFactory.create_worker()
        other = TestDataFactory.create_worker()
        TestDataFactory.create_worker_transfer(worker, self.project, amount=Decimal('30.00'))
        TestDataFactory.create_worker_transfer(other, self.project, amount=Decimal('40.00'))
        response = self.client.get('/api/v1/worker-transfers/', {'worker': worker.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/v1/worker-transfers/', {'worker': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/worker-misc-expenses/', {'date': 'yesterday'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_balance_endpoint(self):
        worker = TestDataFactory.create_worker(daily_wage=Decimal('100.00'))
        TestDataFactory.create_attendance(worker, self.project, payment_type='credit')
        TestDataFactory.create_worker_transfer(worker, self.project, amount=Decimal('30.00'))
        response = self.client.get(f'/api/v1/workers/{worker.id}/balance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['current_balance'], '70.00')

    def test_projects_endpoint_formats_totals(self):
        worker = TestDataFactory.create_worker(daily_wage=Decimal('100'))
        TestDataFactory.create_attendance(worker, self.project, payment_type='credit')
        response = self.client.get(f'/api/v1/workers/{worker.id}/projects/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['total_earned'], '100.00')

    def test_account_statement(self):
        worker = TestDataFactory.create_worker(daily_wage=Decimal('100.00'))
        TestDataFactory.create_attendance(worker, self.project, payment_type='full')
        response = self.client.get(f'/api/v1/workers/{worker.id}/account-statement/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['attendance']), 1)
        self.assertEqual(response.data['summary']['remaining_balance'], '0.00')

    def test_multi_project_statement_endpoint(self):
        worker = TestDataFactory.create_worker()
        other = TestDataFactory.create_project()
        TestDataFactory.create_attendance(worker, self.project)
        TestDataFactory.create_attendance(worker, other)
        response = self.client.get(
            f'/api/v1/workers/{worker.id}/multi-project-statement/', {'projects': str(other.id)}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['projects']), 1)

    def test_delete_attendance(self):
        worker = TestDataFactory.create_worker()
        attendance = TestDataFactory.create_attendance(worker, self.project)
        response = self.client.delete(f'/api/v1/worker-attendance/{attendance.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(WorkerAttendance.objects.filter(id=attendance.id).exists())
