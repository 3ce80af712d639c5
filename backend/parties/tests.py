"""
Test suite for suppliers: debt tracking, payments and account statements
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.parties.models import Supplier
from backend.parties.services import get_supplier_statement, get_supplier_statistics


class SupplierDebtTests(TestCase):
    """total_debt follows credit purchases and payments"""

    def setUp(self):
        self.project = TestDataFactory.create_project()
        self.supplier = TestDataFactory.create_supplier(name='Al Noor')

    def debt(self):
        self.supplier.refresh_from_db()
        return self.supplier.total_debt

    def test_credit_purchase_adds_debt(self):
        TestDataFactory.create_material_purchase(
            self.project, supplier=self.supplier, purchase_type='credit',
            quantity=Decimal('3'), unit_price=Decimal('100.00')
        )
        self.assertEqual(self.debt(), Decimal('300.00'))

    def test_cash_purchase_adds_no_debt(self):
        TestDataFactory.create_material_purchase(self.project, supplier=self.supplier, purchase_type='cash')
        self.assertEqual(self.debt(), Decimal('0.00'))

    def test_payment_reduces_debt(self):
        TestDataFactory.create_material_purchase(self.project, supplier=self.supplier, purchase_type='credit')
        TestDataFactory.create_supplier_payment(self.supplier, amount=Decimal('50.00'))
        self.assertEqual(self.debt(), Decimal('150.00'))

    def test_purchase_matched_by_name(self):
        TestDataFactory.create_material_purchase(
            self.project, supplier_name='al noor', purchase_type='credit'
        )
        self.assertEqual(self.debt(), Decimal('200.00'))

    def test_changing_type_updates_debt(self):
        purchase = TestDataFactory.create_material_purchase(
            self.project, supplier=self.supplier, purchase_type='credit'
        )
        purchase.purchase_type = 'cash'
        purchase.save()
        self.assertEqual(self.debt(), Decimal('0.00'))

    def test_deleting_purchase_updates_debt(self):
        purchase = TestDataFactory.create_material_purchase(
            self.project, supplier=self.supplier, purchase_type='credit'
        )
        purchase.delete()
        self.assertEqual(self.debt(), Decimal('0.00'))

    def test_moving_purchase_to_other_supplier(self):
        other = TestDataFactory.create_supplier()
        purchase = TestDataFactory.create_material_purchase(
            self.project, supplier=self.supplier, purchase_type='credit'
        )
        purchase.supplier = other
        purchase.save()
        other.refresh_from_db()
        self.assertEqual(self.debt(), Decimal('0.00'))
        self.assertEqual(other.total_debt, Decimal('200.00'))


class SupplierStatementTests(TestCase):

    def setUp(self):
        self.project = TestDataFactory.create_project()
        self.supplier = TestDataFactory.create_supplier()
        self.today = timezone.now().date()

    def test_running_ledger(self):
        TestDataFactory.create_material_purchase(
            self.project, supplier=self.supplier, purchase_type='credit',
            purchase_date=self.today - timedelta(days=2)
        )
        TestDataFactory.create_material_purchase(
            self.project, supplier=self.supplier, purchase_type='cash',
            purchase_date=self.today - timedelta(days=1)
        )
        TestDataFactory.create_supplier_payment(self.supplier, amount=Decimal('120.00'), payment_date=self.today)

        statement = get_supplier_statement(self.supplier)
        balances = [entry['running_balance'] for entry in statement['ledger']]
        self.assertEqual(balances, [Decimal('200.00'), Decimal('200.00'), Decimal('80.00')])
        self.assertEqual(statement['totals']['totalPurchases'], Decimal('400.00'))
        self.assertEqual(statement['totals']['remainingDebt'], Decimal('80.00'))

    def test_statement_date_filter(self):
        TestDataFactory.create_material_purchase(
            self.project, supplier=self.supplier, purchase_type='credit',
            purchase_date=self.today - timedelta(days=30)
        )
        statement = get_supplier_statement(self.supplier, date_from=self.today - timedelta(days=7))
        self.assertEqual(statement['ledger'], [])

    def test_statistics(self):
        TestDataFactory.create_material_purchase(self.project, supplier=self.supplier, purchase_type='credit')
        TestDataFactory.create_material_purchase(self.project, supplier=self.supplier, purchase_type='cash')
        TestDataFactory.create_supplier_payment(self.supplier, amount=Decimal('50.00'))

        stats = get_supplier_statistics()
        self.assertEqual(stats['totalCashPurchases'], Decimal('200.00'))
        self.assertEqual(stats['totalCreditPurchases'], Decimal('200.00'))
        self.assertEqual(stats['remainingDebt'], Decimal('150.00'))
        self.assertEqual(stats['activeSuppliers'], 1)


class SupplierAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project()

    def test_create_supplier(self):
        response = self.client.post('/api/v1/suppliers/', {'name': 'Cement Co'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_debt'], '0.00')

    def test_create_picks_up_earlier_purchases_by_name(self):
        TestDataFactory.create_material_purchase(
            self.project, purchase_type='credit', supplier_name='Block Factory'
        )
        response = self.client.post('/api/v1/suppliers/', {'name': 'Block Factory'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_debt'], '200.00')

    def test_rename_recomputes_debt(self):
        supplier = TestDataFactory.create_supplier(name='Old Name')
        TestDataFactory.create_material_purchase(
            self.project, purchase_type='credit', supplier_name='Gravel Yard',
            quantity=Decimal('1.000'), unit_price=Decimal('50.00')
        )
        response = self.client.patch(f'/api/v1/suppliers/{supplier.id}/', {'name': 'Gravel Yard'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_debt'], '50.00')
        supplier.refresh_from_db()
        self.assertEqual(supplier.total_debt, Decimal('50.00'))

    def test_duplicate_supplier_name(self):
        TestDataFactory.create_supplier(name='Cement Co')
        response = self.client.post('/api/v1/suppliers/', {'name': 'cement co'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_total_debt_is_read_only(self):
        supplier = TestDataFactory.create_supplier()
        self.client.patch(f'/api/v1/suppliers/{supplier.id}/', {'total_debt': '999.00'}, format='json')
        supplier.refresh_from_db()
        self.assertEqual(supplier.total_debt, Decimal('0.00'))

    def test_search_suppliers(self):
        TestDataFactory.create_supplier(name='Steel House')
        TestDataFactory.create_supplier(name='Sand Yard')
        response = self.client.get('/api/v1/suppliers/', {'search': 'steel'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_record_payment(self):
        supplier = TestDataFactory.create_supplier()
        TestDataFactory.create_material_purchase(self.project, supplier=supplier, purchase_type='credit')
        data = {
            'supplier': supplier.id,
            'project': self.project.id,
            'amount': '75.00',
            'payment_date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/supplier-payments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        supplier.refresh_from_db()
        self.assertEqual(supplier.total_debt, Decimal('125.00'))

    def test_payment_must_be_positive(self):
        supplier = TestDataFactory.create_supplier()
        data = {
            'supplier': supplier.id,
            'amount': '-5.00',
            'payment_date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/supplier-payments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

    def test_account_statement_endpoint(self):
        supplier = TestDataFactory.create_supplier()
        TestDataFactory.create_material_purchase(self.project, supplier=supplier, purchase_type='credit')
        TestDataFactory.create_supplier_payment(supplier, amount=Decimal('20.00'))
        response = self.client.get(f'/api/v1/suppliers/{supplier.id}/account-statement/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['ledger']), 2)
        self.assertEqual(response.data['final_balance'], '180.00')
        self.assertEqual(response.data['totals']['remainingDebt'], '180.00')

    def test_statistics_endpoint(self):
        supplier = TestDataFactory.create_supplier()
        TestDataFactory.create_material_purchase(self.project, supplier=supplier, purchase_type='credit')
        response = self.client.get('/api/v1/suppliers/statistics/', {'purchase_type': 'آجل'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalCreditPurchases'], '200.00')
        self.assertEqual(response.data['totalSuppliers'], 1)


class RepairSupplierDebtsCommandTests(TestCase):

    def setUp(self):
        project = TestDataFactory.create_project()
        self.supplier = TestDataFactory.create_supplier()
        TestDataFactory.create_material_purchase(project, supplier=self.supplier, purchase_type='credit')
        Supplier.objects.filter(pk=self.supplier.pk).update(total_debt=Decimal('1.00'))

    def test_dry_run_keeps_value(self):
        call_command('repair_supplier_debts', '--dry-run', stdout=StringIO())
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.total_debt, Decimal('1.00'))

    def test_repair(self):
        call_command('repair_supplier_debts', stdout=StringIO())
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.total_debt, Decimal('200.00'))
