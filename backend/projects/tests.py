"""
Test suite for projects: cash-box summaries, custody transfers and statistics
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.projects.models import Project, DailyExpenseSummary
from backend.projects.services import (
    compute_daily_totals, update_daily_summary_for_date, get_previous_balance,
    get_project_statistics, recalculate_all_balances
)


class DailySummaryServiceTests(TestCase):
    """Daily cash-box arithmetic and carry-forward chaining"""

    def setUp(self):
        self.project = TestDataFactory.create_project()
        self.today = timezone.now().date()
        self.yesterday = self.today - timedelta(days=1)

    def test_totals_for_one_day(self):
        worker = TestDataFactory.create_worker(daily_wage=Decimal('100.00'))
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('1000.00'), transfer_date=self.today)
        TestDataFactory.create_attendance(worker, self.project, date=self.today, payment_type='full')
        TestDataFactory.create_material_purchase(
            self.project, quantity=Decimal('2'), unit_price=Decimal('50.00'), purchase_date=self.today
        )
        TestDataFactory.create_transportation(self.project, amount=Decimal('30.00'), date=self.today)
        TestDataFactory.create_misc_expense(self.project, amount=Decimal('10.00'), date=self.today)
        TestDataFactory.create_worker_transfer(worker, self.project, amount=Decimal('20.00'), transfer_date=self.today)

        totals = compute_daily_totals(self.project.id, self.today)
        self.assertEqual(totals['total_fund_transfers'], Decimal('1000.00'))
        self.assertEqual(totals['total_worker_wages'], Decimal('100.00'))
        self.assertEqual(totals['total_material_costs'], Decimal('100.00'))
        self.assertEqual(totals['total_expenses'], Decimal('260.00'))
        self.assertEqual(totals['remaining_balance'], Decimal('740.00'))

    def test_credit_purchase_not_paid_from_cash_box(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('500.00'), transfer_date=self.today)
        TestDataFactory.create_material_purchase(
            self.project, purchase_type='credit', purchase_date=self.today
        )
        totals = compute_daily_totals(self.project.id, self.today)
        self.assertEqual(totals['total_material_costs'], Decimal('0.00'))
        self.assertEqual(totals['remaining_balance'], Decimal('500.00'))

    def test_outgoing_transfer_reduces_income(self):
        other = TestDataFactory.create_project()
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('300.00'), transfer_date=self.today)
        TestDataFactory.create_project_transfer(self.project, other, amount=Decimal('100.00'), transfer_date=self.today)

        mine = compute_daily_totals(self.project.id, self.today)
        theirs = compute_daily_totals(other.id, self.today)
        self.assertEqual(mine['total_income'], Decimal('200.00'))
        self.assertEqual(theirs['total_income'], Decimal('100.00'))

    def test_carry_forward_from_previous_day(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('400.00'), transfer_date=self.yesterday)
        TestDataFactory.create_misc_expense(self.project, amount=Decimal('50.00'), date=self.today)

        summary = DailyExpenseSummary.objects.get(project=self.project, date=self.today)
        self.assertEqual(summary.carried_forward_amount, Decimal('400.00'))
        self.assertEqual(summary.remaining_balance, Decimal('350.00'))
        self.assertEqual(get_previous_balance(self.project.id, self.today), Decimal('400.00'))

    def test_edit_of_earlier_day_cascades(self):
        transfer = TestDataFactory.create_fund_transfer(
            self.project, amount=Decimal('400.00'), transfer_date=self.yesterday
        )
        TestDataFactory.create_misc_expense(self.project, amount=Decimal('50.00'), date=self.today)

        transfer.amount = Decimal('600.00')
        transfer.save()

        summary = DailyExpenseSummary.objects.get(project=self.project, date=self.today)
        self.assertEqual(summary.carried_forward_amount, Decimal('600.00'))
        self.assertEqual(summary.remaining_balance, Decimal('550.00'))

    def test_moving_record_refreshes_old_day(self):
        expense = TestDataFactory.create_misc_expense(self.project, amount=Decimal('70.00'), date=self.yesterday)
        expense.date = self.today
        expense.save()

        old = DailyExpenseSummary.objects.get(project=self.project, date=self.yesterday)
        self.assertEqual(old.total_worker_misc_expenses, Decimal('0.00'))

    def test_delete_refreshes_summary(self):
        transfer = TestDataFactory.create_fund_transfer(self.project, amount=Decimal('250.00'), transfer_date=self.today)
        transfer.delete()
        summary = DailyExpenseSummary.objects.get(project=self.project, date=self.today)
        self.assertEqual(summary.total_income, Decimal('0.00'))

    def test_empty_day_upserts_zero_summary(self):
        summary = update_daily_summary_for_date(self.project.id, self.today)
        self.assertEqual(summary.total_income, Decimal('0.00'))
        self.assertEqual(summary.remaining_balance, Decimal('0.00'))
        self.assertEqual(DailyExpenseSummary.objects.filter(project=self.project).count(), 1)

    def test_recalculate_all_balances(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('100.00'), transfer_date=self.yesterday)
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('100.00'), transfer_date=self.today)
        DailyExpenseSummary.objects.filter(project=self.project).update(remaining_balance=Decimal('0.00'))

        self.assertEqual(recalculate_all_balances(self.project.id), 2)
        summary = DailyExpenseSummary.objects.get(project=self.project, date=self.today)
        self.assertEqual(summary.remaining_balance, Decimal('200.00'))

    def test_project_delete_removes_summaries(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('100.00'), transfer_date=self.today)
        project_id = self.project.id
        self.project.delete()
        self.assertFalse(DailyExpenseSummary.objects.filter(project_id=project_id).exists())


class ProjectStatisticsTests(TestCase):

    def setUp(self):
        cache.clear()
        self.project = TestDataFactory.create_project()

    def test_statistics(self):
        worker = TestDataFactory.create_worker(daily_wage=Decimal('80.00'))
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('1000.00'))
        TestDataFactory.create_attendance(worker, self.project, payment_type='full')
        TestDataFactory.create_material_purchase(self.project, purchase_type='credit')

        stats = get_project_statistics(self.project.id, use_cache=False)
        self.assertEqual(stats['totalWorkers'], 1)
        self.assertEqual(stats['totalIncome'], '1000.00')
        self.assertEqual(stats['totalExpenses'], '80.00')
        self.assertEqual(stats['currentBalance'], '920.00')
        self.assertEqual(stats['materialPurchases'], 1)
        self.assertEqual(stats['lastActivity'], timezone.now().date().isoformat())

    def test_statistics_cache_invalidated_on_change(self):
        first = get_project_statistics(self.project.id)
        self.assertEqual(first['totalIncome'], '0.00')
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('75.00'))
        second = get_project_statistics(self.project.id)
        self.assertEqual(second['totalIncome'], '75.00')


class ProjectAPITests(TestCase):
    """Project, transfer and summary endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project(name='Villa')

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/projects/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_project(self):
        response = self.client.post('/api/v1/projects/', {'name': 'Tower', 'status': 'active'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], self.user.id)
        self.assertTrue(AuditLog.objects.filter(model_name='Project', action='create').exists())

    def test_create_project_blank_name(self):
        response = self.client.post('/api/v1/projects/', {'name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_list_filters_by_status(self):
        TestDataFactory.create_project(status='completed')
        response = self.client.get('/api/v1/projects/', {'status': 'completed'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_delete_project_requires_admin(self):
        response = self.client.delete(f'/api/v1/projects/{self.project.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin = TestDataFactory.create_user(is_staff=True)
        self.client.authenticate_user(admin)
        response = self.client.delete(f'/api/v1/projects/{self.project.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Project.objects.filter(id=self.project.id).exists())

    def test_project_stats_endpoint(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('500.00'))
        response = self.client.get(f'/api/v1/projects/{self.project.id}/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats']['totalIncome'], '500.00')

    def test_projects_with_stats(self):
        response = self.client.get('/api/v1/projects/with-stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('stats', response.data[0])

    def test_create_fund_transfer(self):
        data = {
            'project': self.project.id,
            'amount': '1500.00',
            'sender_name': 'Owner',
            'transfer_type': 'hawaleh',
            'transfer_date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/fund-transfers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(AuditLog.objects.filter(action='fund_transfer').exists())

    def test_fund_transfer_rejects_non_positive_amount(self):
        data = {
            'project': self.project.id,
            'amount': '0',
            'transfer_date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/fund-transfers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

    def test_project_transfer_to_same_project_rejected(self):
        data = {
            'from_project': self.project.id,
            'to_project': self.project.id,
            'amount': '100.00',
            'transfer_date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/project-fund-transfers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('to_project', response.data)

    def test_project_transfer_filter_by_project(self):
        other = TestDataFactory.create_project()
        TestDataFactory.create_project_transfer(self.project, other)
        response = self.client.get('/api/v1/project-fund-transfers/', {'project': other.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_daily_summary_endpoint(self):
        today = timezone.now().date()
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('200.00'), transfer_date=today)
        response = self.client.get(f'/api/v1/projects/{self.project.id}/daily-summary/{today.isoformat()}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['remaining_balance'], '200.00')

    def test_daily_summary_invalid_date(self):
        response = self.client.get(f'/api/v1/projects/{self.project.id}/daily-summary/not-a-date/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_previous_balance_endpoint(self):
        today = timezone.now().date()
        TestDataFactory.create_fund_transfer(
            self.project, amount=Decimal('90.00'), transfer_date=today - timedelta(days=3)
        )
        response = self.client.get(f'/api/v1/projects/{self.project.id}/previous-balance/{today.isoformat()}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['previous_balance'], '90.00')

    def test_recalculate_balances_endpoint(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('90.00'))
        response = self.client.post(f'/api/v1/projects/{self.project.id}/recalculate-balances/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['recalculated'], 1)
        self.assertTrue(AuditLog.objects.filter(action='balances_recalculate').exists())


class RecalculateBalancesCommandTests(TestCase):

    def test_command_recalculates_every_project(self):
        project = TestDataFactory.create_project()
        TestDataFactory.create_fund_transfer(project, amount=Decimal('10.00'))
        out = StringIO()
        call_command('recalculate_balances', stdout=out)
        self.assertIn(project.name, out.getvalue())
