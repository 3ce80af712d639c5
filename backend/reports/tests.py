"""
Test suite for reports: daily cash-box reports, categorised reports,
workers settlement, unified transactions, xlsx exports and templates
"""
from datetime import timedelta
from decimal import Decimal
from io import BytesIO

from django.test import TestCase
from django.utils import timezone
from openpyxl import load_workbook
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.reports import services
from backend.reports.exporters import XLSX_CONTENT_TYPE, build_workbook, col
from backend.reports.models import ReportTemplate


def sheet_values(ws):
    return [cell for row in ws.iter_rows(values_only=True) for cell in row if cell is not None]


class ReportServiceTests(TestCase):

    def setUp(self):
        self.project = TestDataFactory.create_project(name='Clinic')
        self.worker = TestDataFactory.create_worker(name='Sami', daily_wage=Decimal('100.00'))
        self.today = timezone.now().date()

    def test_daily_report_groups_records(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('500.00'), transfer_date=self.today)
        TestDataFactory.create_attendance(self.worker, self.project, date=self.today, payment_type='full')
        report = services.daily_report(self.project, self.today)
        self.assertEqual(report['fund_transfers'].count(), 1)
        self.assertEqual(report['attendance'].count(), 1)
        self.assertEqual(report['summary'].remaining_balance, Decimal('400.00'))

    def test_activity_dates(self):
        TestDataFactory.create_misc_expense(self.project, date=self.today - timedelta(days=3))
        TestDataFactory.create_transportation(self.project, date=self.today)
        TestDataFactory.create_transportation(self.project, date=self.today - timedelta(days=30))
        dates = services.activity_dates(self.project.id, self.today - timedelta(days=7), self.today)
        self.assertEqual(dates, [self.today - timedelta(days=3), self.today])

    def test_material_purchases_totals(self):
        TestDataFactory.create_material_purchase(self.project, purchase_type='cash')
        TestDataFactory.create_material_purchase(self.project, purchase_type='credit')
        TestDataFactory.create_material_purchase(self.project, purchase_type='supply')
        report = services.material_purchases_report(self.project.id)
        self.assertEqual(report['totals']['total'], Decimal('600.00'))
        self.assertEqual(report['totals']['credit'], Decimal('200.00'))

    def test_project_summary(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('1000.00'))
        TestDataFactory.create_attendance(
            self.worker, self.project, payment_type='partial', paid_amount=Decimal('60.00')
        )
        TestDataFactory.create_material_purchase(self.project, purchase_type='credit')
        report = services.project_summary_report(self.project)
        self.assertEqual(report['total_income'], Decimal('1000.00'))
        self.assertEqual(report['total_expenses'], Decimal('60.00'))
        self.assertEqual(report['net_balance'], Decimal('940.00'))
        self.assertEqual(report['deferred']['unpaid_wages'], Decimal('40.00'))
        self.assertEqual(report['deferred']['materials_credit'], Decimal('200.00'))

    def test_advanced_expenses(self):
        TestDataFactory.create_attendance(self.worker, self.project, date=self.today, payment_type='full')
        TestDataFactory.create_material_purchase(self.project, purchase_date=self.today)
        TestDataFactory.create_material_purchase(self.project, purchase_type='credit', purchase_date=self.today)
        TestDataFactory.create_misc_expense(self.project, amount=Decimal('5.00'), date=self.today)
        report = services.advanced_report(self.project, 'expenses', self.today, self.today)
        self.assertEqual(len(report['rows']), 3)
        self.assertEqual(report['totalExpenses'], Decimal('305.00'))
        self.assertEqual(report['categoryTotals'][services.WAGES], Decimal('100.00'))

    def test_advanced_income(self):
        other = TestDataFactory.create_project()
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('300.00'), transfer_date=self.today)
        TestDataFactory.create_project_transfer(other, self.project, amount=Decimal('50.00'), transfer_date=self.today)
        report = services.advanced_report(self.project, 'income', self.today, self.today)
        self.assertEqual(report['totalIncome'], Decimal('350.00'))
        self.assertNotIn('categoryTotals', report)

    def test_workers_settlement(self):
        idle = TestDataFactory.create_worker(name='Idle')
        other_project = TestDataFactory.create_project()
        TestDataFactory.create_attendance(self.worker, self.project, payment_type='credit')
        TestDataFactory.create_attendance(
            self.worker, other_project, date=self.today - timedelta(days=1), payment_type='credit'
        )
        TestDataFactory.create_worker_transfer(self.worker, self.project, amount=Decimal('30.00'))

        report = services.workers_settlement([self.project])
        self.assertEqual(len(report['workers']), 1)
        row = report['workers'][0]
        self.assertEqual(row['worker_name'], 'Sami')
        self.assertEqual(row['total_earned'], Decimal('100.00'))
        self.assertEqual(row['final_balance'], Decimal('70.00'))
        self.assertEqual(report['totals']['workers_count'], 1)
        self.assertNotIn(idle.id, [r['worker_id'] for r in report['workers']])

        both = services.workers_settlement([self.project, other_project])
        self.assertEqual(both['totals']['total_earned'], Decimal('200.00'))

    def test_unified_transactions(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('400.00'))
        TestDataFactory.create_attendance(self.worker, self.project, payment_type='full')
        TestDataFactory.create_material_purchase(self.project, purchase_type='credit')
        TestDataFactory.create_transportation(self.project, amount=Decimal('20.00'))

        result = services.unified_transactions(project_id=self.project.id)
        totals = result['totals']
        self.assertEqual(totals['income'], Decimal('400.00'))
        self.assertEqual(totals['expenses'], Decimal('120.00'))
        self.assertEqual(totals['deferred'], Decimal('200.00'))
        self.assertEqual(totals['net'], Decimal('280.00'))
        self.assertEqual(totals['count'], 4)

        deferred = services.unified_transactions(project_id=self.project.id, type='deferred')
        self.assertEqual(deferred['totals']['count'], 1)

    def test_unified_transactions_search(self):
        TestDataFactory.create_attendance(self.worker, self.project, payment_type='full')
        TestDataFactory.create_transportation(self.project)
        result = services.unified_transactions(search='sami')
        self.assertEqual(result['totals']['count'], 1)

    def test_unified_transactions_same_day_newest_first(self):
        expenses = [TestDataFactory.create_transportation(self.project) for _ in range(11)]
        result = services.unified_transactions(project_id=self.project.id)
        self.assertEqual(
            [row['id'] for row in result['transactions']],
            [f'transport-{expense.id}' for expense in reversed(expenses)]
        )


class ExporterTests(TestCase):

    def test_workbook_layout(self):
        template = ReportTemplate.get_active()
        wb = build_workbook([{
            'title': 'Test report',
            'sheet_name': 'x' * 40,
            'columns': [col('name', 'Name'), col('amount', 'Amount', kind='money')],
            'rows': [{'name': 'a', 'amount': Decimal('1.50')}],
            'totals': {'amount': Decimal('1.50')},
        }], template=template)
        ws = wb.worksheets[0]
        self.assertEqual(len(ws.title), 31)
        self.assertTrue(ws.sheet_view.rightToLeft)
        values = sheet_values(ws)
        self.assertIn('Test report', values)
        self.assertIn(template.company_name, values)
        self.assertIn(template.footer_text, values)
        self.assertIn('الإجمالي', values)


class ReportAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project(name='School')
        self.worker = TestDataFactory.create_worker(name='Nader', daily_wage=Decimal('100.00'))
        self.today = timezone.now().date()

    def load(self, response):
        self.assertEqual(response['Content-Type'], XLSX_CONTENT_TYPE)
        return load_workbook(BytesIO(response.content))

    def test_daily_expenses(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('250.00'), transfer_date=self.today)
        response = self.client.get('/api/v1/reports/daily-expenses/', {
            'project': self.project.id, 'date': self.today.isoformat()
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['fund_transfers']), 1)
        self.assertEqual(response.data['summary']['remaining_balance'], '250.00')

    def test_daily_expenses_missing_params(self):
        response = self.client.get('/api/v1/reports/daily-expenses/', {'project': self.project.id})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date', response.data['error'])

    def test_daily_expenses_unknown_project(self):
        response = self.client.get('/api/v1/reports/daily-expenses/', {
            'project': 99999, 'date': self.today.isoformat()
        })
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_daily_expenses_xlsx(self):
        TestDataFactory.create_attendance(self.worker, self.project, date=self.today, payment_type='full')
        response = self.client.get('/api/v1/reports/daily-expenses/', {
            'project': self.project.id, 'date': self.today.isoformat(), 'format': 'xlsx'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        wb = self.load(response)
        self.assertIn('Nader', sheet_values(wb.worksheets[0]))

    def test_daily_expenses_export_url(self):
        response = self.client.get('/api/v1/reports/daily-expenses/export/', {
            'project': self.project.id, 'date': self.today.isoformat()
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('attachment', response['Content-Disposition'])

    def test_daily_expenses_range(self):
        TestDataFactory.create_misc_expense(self.project, date=self.today - timedelta(days=2))
        TestDataFactory.create_misc_expense(self.project, date=self.today)
        params = {
            'project': self.project.id,
            'date_from': (self.today - timedelta(days=5)).isoformat(),
            'date_to': self.today.isoformat(),
        }
        response = self.client.get('/api/v1/reports/daily-expenses-range/', params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['days']), 2)

        response = self.client.get('/api/v1/reports/daily-expenses-range/export/', params)
        self.assertEqual(len(self.load(response).worksheets), 2)

    def test_daily_expenses_range_reversed(self):
        response = self.client.get('/api/v1/reports/daily-expenses-range/', {
            'project': self.project.id,
            'date_from': self.today.isoformat(),
            'date_to': (self.today - timedelta(days=1)).isoformat(),
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_material_purchases(self):
        TestDataFactory.create_material_purchase(self.project, purchase_type='credit')
        response = self.client.get('/api/v1/reports/material-purchases/', {'project': self.project.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['totals']['credit'], '200.00')

        response = self.client.get('/api/v1/reports/material-purchases/export/')
        self.load(response)

    def test_project_summary(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('100.00'))
        response = self.client.get('/api/v1/reports/project-summary/', {'project': self.project.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['net_balance'], '100.00')

    def test_project_summary_requires_project(self):
        response = self.client.get('/api/v1/reports/project-summary/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_advanced_report(self):
        TestDataFactory.create_misc_expense(self.project, amount=Decimal('12.00'), date=self.today)
        params = {
            'project': self.project.id,
            'report_type': 'expenses',
            'date_from': self.today.isoformat(),
            'date_to': self.today.isoformat(),
        }
        response = self.client.get('/api/v1/reports/advanced/', params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalExpenses'], '12.00')
        self.assertEqual(response.data['rows'][0]['amount'], '12.00')

        response = self.client.get('/api/v1/reports/advanced/', {**params, 'format': 'xlsx'})
        self.load(response)

    def test_advanced_report_bad_type(self):
        response = self.client.get('/api/v1/reports/advanced/', {
            'project': self.project.id,
            'report_type': 'profit',
            'date_from': self.today.isoformat(),
            'date_to': self.today.isoformat(),
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_workers_settlement(self):
        TestDataFactory.create_attendance(self.worker, self.project, payment_type='credit')
        response = self.client.get('/api/v1/reports/workers-settlement/', {'project_ids': 'all'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['workers'][0]['final_balance'], '100.00')
        self.assertEqual(response.data['totals']['workers_count'], 1)

        response = self.client.get('/api/v1/reports/workers-settlement/export/', {
            'project_ids': str(self.project.id)
        })
        self.assertIn('Nader', sheet_values(self.load(response).worksheets[0]))

    def test_workers_settlement_params(self):
        response = self.client.get('/api/v1/reports/workers-settlement/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/reports/workers-settlement/', {'project_ids': '99999'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unified_transactions(self):
        TestDataFactory.create_fund_transfer(self.project, amount=Decimal('80.00'))
        response = self.client.get('/api/v1/reports/unified-transactions/', {'type': 'income'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totals']['income'], '80.00')
        self.assertEqual(response.data['transactions'][0]['type'], 'income')

    def test_unified_transactions_bad_type(self):
        response = self.client.get('/api/v1/reports/unified-transactions/', {'type': 'refund'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_worker_statement_export(self):
        TestDataFactory.create_attendance(self.worker, self.project, payment_type='full')
        TestDataFactory.create_worker_transfer(self.worker, self.project)
        response = self.client.get(f'/api/v1/reports/worker-statement/{self.worker.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        wb = self.load(response)
        self.assertEqual(wb.sheetnames, ['الحضور', 'الحوالات'])

    def test_supplier_statement_export(self):
        supplier = TestDataFactory.create_supplier(name='Pipes Co')
        TestDataFactory.create_material_purchase(self.project, supplier=supplier, purchase_type='credit')
        TestDataFactory.create_supplier_payment(supplier, amount=Decimal('50.00'))
        response = self.client.get(f'/api/v1/reports/supplier-statement/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        values = sheet_values(self.load(response).worksheets[0])
        self.assertIn(150, values)


class ReportTemplateAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_active_template_created_on_demand(self):
        response = self.client.get('/api/v1/report-templates/active/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_active'])
        self.assertEqual(ReportTemplate.objects.count(), 1)

    def test_only_one_active(self):
        first = ReportTemplate.objects.create(template_name='first', is_active=True)
        response = self.client.post('/api/v1/report-templates/', {
            'template_name': 'second', 'is_active': True, 'primary_color': '#1a2b3c'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['primary_color'], '1A2B3C')
        first.refresh_from_db()
        self.assertFalse(first.is_active)

    def test_invalid_color(self):
        response = self.client.post('/api/v1/report-templates/', {
            'template_name': 'bad', 'primary_color': 'blue'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('primary_color', response.data)

    def test_update_and_delete(self):
        template = ReportTemplate.objects.create(template_name='t')
        response = self.client.patch(
            f'/api/v1/report-templates/{template.id}/', {'company_name': 'New Co'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['company_name'], 'New Co')
        response = self.client.delete(f'/api/v1/report-templates/{template.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
