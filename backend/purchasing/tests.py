"""
Test suite for purchasing: materials, material purchases and transportation
"""
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.purchasing.models import Material, MaterialPurchase, normalize_purchase_type


class PurchaseTypeTests(TestCase):

    def test_aliases(self):
        self.assertEqual(normalize_purchase_type('نقد'), 'cash')
        self.assertEqual(normalize_purchase_type('آجل'), 'credit')
        self.assertEqual(normalize_purchase_type('توريد'), 'supply')
        self.assertEqual(normalize_purchase_type(' CASH '), 'cash')

    def test_credit_spelling_variants(self):
        self.assertEqual(normalize_purchase_type('اجل'), 'credit')

    def test_unknown_returned_unchanged(self):
        self.assertEqual(normalize_purchase_type('barter'), 'barter')
        self.assertIsNone(normalize_purchase_type(None))


class MaterialPurchaseModelTests(TestCase):

    def setUp(self):
        self.project = TestDataFactory.create_project()

    def test_total_defaults_to_quantity_times_price(self):
        purchase = TestDataFactory.create_material_purchase(
            self.project, quantity=Decimal('2.5'), unit_price=Decimal('10.00')
        )
        self.assertEqual(purchase.total_amount, Decimal('25.00'))

    def test_supplier_name_filled_from_supplier(self):
        supplier = TestDataFactory.create_supplier(name='Gravel Ltd')
        purchase = TestDataFactory.create_material_purchase(self.project, supplier=supplier)
        self.assertEqual(purchase.supplier_name, 'Gravel Ltd')

    def test_material_with_purchases_is_protected(self):
        from django.db.models import ProtectedError
        material = TestDataFactory.create_material()
        TestDataFactory.create_material_purchase(self.project, material=material)
        with self.assertRaises(ProtectedError):
            material.delete()


class MaterialAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_material(self):
        response = self.client.post('/api/v1/materials/', {'name': 'اسمنت', 'unit': 'كيس'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_duplicate_name_and_unit(self):
        TestDataFactory.create_material(name='حديد', unit='طن')
        response = self.client.post('/api/v1/materials/', {'name': 'حديد', 'unit': 'طن'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_same_name_other_unit_allowed(self):
        TestDataFactory.create_material(name='حديد', unit='طن')
        response = self.client.post('/api/v1/materials/', {'name': 'حديد', 'unit': 'كغ'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_delete_material_in_use(self):
        material = TestDataFactory.create_material()
        TestDataFactory.create_material_purchase(TestDataFactory.create_project(), material=material)
        response = self.client.delete(f'/api/v1/materials/{material.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_unused_material(self):
        material = TestDataFactory.create_material()
        response = self.client.delete(f'/api/v1/materials/{material.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class MaterialPurchaseAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project()
        self.material = TestDataFactory.create_material()
        self.today = timezone.now().date().isoformat()

    def test_create_purchase(self):
        data = {
            'project': self.project.id,
            'material': self.material.id,
            'quantity': '4',
            'unit_price': '12.50',
            'purchase_type': 'cash',
            'purchase_date': self.today,
        }
        response = self.client.post('/api/v1/material-purchases/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_amount'], '50.00')
        self.assertEqual(response.data['created_by'], self.user.id)
        self.assertTrue(AuditLog.objects.filter(action='material_purchase').exists())

    def test_create_with_material_name(self):
        data = {
            'project': self.project.id,
            'material_name': 'رمل',
            'material_unit': 'متر',
            'quantity': '1',
            'unit_price': '80.00',
            'purchase_date': self.today,
        }
        response = self.client.post('/api/v1/material-purchases/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Material.objects.filter(name='رمل', unit='متر').exists())

    def test_material_name_without_unit(self):
        data = {
            'project': self.project.id,
            'material_name': 'رمل',
            'quantity': '1',
            'unit_price': '80.00',
            'purchase_date': self.today,
        }
        response = self.client.post('/api/v1/material-purchases/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('material_unit', response.data)

    def test_arabic_purchase_type(self):
        data = {
            'project': self.project.id,
            'material': self.material.id,
            'quantity': '1',
            'unit_price': '10.00',
            'purchase_type': 'آجل',
            'purchase_date': self.today,
        }
        response = self.client.post('/api/v1/material-purchases/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['purchase_type'], 'credit')

    def test_unknown_purchase_type(self):
        data = {
            'project': self.project.id,
            'material': self.material.id,
            'quantity': '1',
            'unit_price': '10.00',
            'purchase_type': 'barter',
            'purchase_date': self.today,
        }
        response = self.client.post('/api/v1/material-purchases/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('purchase_type', response.data)

    def test_supplier_linked_by_name(self):
        supplier = TestDataFactory.create_supplier(name='Blocks Co')
        data = {
            'project': self.project.id,
            'material': self.material.id,
            'supplier_name': 'blocks co',
            'quantity': '1',
            'unit_price': '10.00',
            'purchase_type': 'credit',
            'purchase_date': self.today,
        }
        response = self.client.post('/api/v1/material-purchases/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['supplier'], supplier.id)

    def test_zero_quantity_rejected(self):
        data = {
            'project': self.project.id,
            'material': self.material.id,
            'quantity': '0',
            'unit_price': '10.00',
            'purchase_date': self.today,
        }
        response = self.client.post('/api/v1/material-purchases/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)

    def test_list_paginated_and_filtered(self):
        for _ in range(3):
            TestDataFactory.create_material_purchase(self.project, material=self.material)
        TestDataFactory.create_material_purchase(self.project, material=self.material, purchase_type='credit')
        response = self.client.get('/api/v1/material-purchases/', {'limit': 2, 'purchase_type': 'نقد'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['next'], 2)

    def test_list_rejects_bad_paging(self):
        for params in ({'limit': 0}, {'limit': 'ten'}, {'page': -1}):
            response = self.client.get('/api/v1/material-purchases/', params)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_page_past_end_reports_last_page(self):
        TestDataFactory.create_material_purchase(self.project, material=self.material)
        response = self.client.get('/api/v1/material-purchases/', {'page': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['page'], 1)

    def test_update_recomputes_total(self):
        purchase = TestDataFactory.create_material_purchase(self.project, material=self.material)
        response = self.client.patch(
            f'/api/v1/material-purchases/{purchase.id}/', {'quantity': '5'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        purchase.refresh_from_db()
        self.assertEqual(purchase.total_amount, Decimal('500.00'))

    def test_delete_purchase(self):
        purchase = TestDataFactory.create_material_purchase(self.project, material=self.material)
        response = self.client.delete(f'/api/v1/material-purchases/{purchase.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(MaterialPurchase.objects.filter(id=purchase.id).exists())


class TransportationAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project()

    def test_create_transportation(self):
        data = {
            'project': self.project.id,
            'amount': '45.00',
            'description': 'نقل حديد',
            'date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/transportation-expenses/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_negative_amount(self):
        data = {
            'project': self.project.id,
            'amount': '-1',
            'description': 'نقل',
            'date': timezone.now().date().isoformat(),
        }
        response = self.client.post('/api/v1/transportation-expenses/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_project(self):
        TestDataFactory.create_transportation(self.project)
        TestDataFactory.create_transportation(TestDataFactory.create_project())
        response = self.client.get('/api/v1/transportation-expenses/', {'project': self.project.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
