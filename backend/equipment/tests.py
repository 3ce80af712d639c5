"""
Test suite for equipment: codes, transfers, maintenance, predictions and recommendations
"""
from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.equipment.analytics import (
    risk_score, risk_factors, recommendations_for, classify, estimate_cost,
    predict_maintenance, build_recommendations
)
from backend.equipment.models import Equipment, EquipmentMovement, EquipmentUsage
from backend.notifications.models import Notification


class EquipmentCodeTests(TestCase):

    def test_codes_are_sequential(self):
        first = TestDataFactory.create_equipment()
        second = TestDataFactory.create_equipment()
        self.assertEqual(first.code, 'EQ-0001')
        self.assertEqual(second.code, 'EQ-0002')

    def test_code_continues_after_highest(self):
        TestDataFactory.create_equipment(code='EQ-0041')
        self.assertEqual(Equipment.next_code(), 'EQ-0042')

    def test_non_numeric_codes_ignored(self):
        TestDataFactory.create_equipment(code='EQ-OLD')
        self.assertEqual(Equipment.next_code(), 'EQ-0001')


class RiskScoringTests(TestCase):
    """Pure scoring rules"""

    def test_risk_score_components(self):
        self.assertEqual(risk_score(0, 4, 0, 'excellent', 90), 0)
        self.assertEqual(risk_score(100, 7, 1200, 'fair', 90), 20 + 15 + 15 + 20 + 30)
        self.assertEqual(risk_score(200, 9, 2000, 'poor', 365), 40 + 30 + 25 + 35)

    def test_classify(self):
        self.assertEqual(classify(105), ('critical', 1, 95))
        self.assertEqual(classify(60), ('high', 8, 85))
        self.assertEqual(classify(40), ('medium', 22, 75))
        self.assertEqual(classify(0), ('low', 60, 65))

    def test_estimate_cost(self):
        self.assertEqual(estimate_cost(Decimal('1000.00'), 'low'), Decimal('50'))
        self.assertEqual(estimate_cost(Decimal('1000.00'), 'critical'), Decimal('100'))
        self.assertEqual(estimate_cost(Decimal('0.00'), 'high'), Decimal('750'))

    def test_risk_factors_describe_score(self):
        factors = risk_factors(200, 7, 1200, 'fair', 90)
        self.assertEqual([points for points, _ in factors], [40, 15, 15, 20, 30])
        self.assertEqual(factors[0][1], 'لم يتم صيانتها منذ أكثر من 6 أشهر')
        self.assertEqual(risk_factors(0, 4, 0, 'excellent', 90), [])

    def test_recommendations_per_urgency(self):
        self.assertEqual(len(recommendations_for('critical')), 3)
        self.assertEqual(recommendations_for('high')[0], 'جدولة صيانة خلال الأسبوع القادم')
        self.assertEqual(recommendations_for('medium'), recommendations_for('low'))


class PredictionTests(TestCase):

    def setUp(self):
        cache.clear()
        self.today = timezone.localdate()

    def test_poor_unmaintained_tool_is_critical(self):
        tool = TestDataFactory.create_equipment(condition='poor', status='in_use')
        predictions = predict_maintenance(today=self.today)
        self.assertEqual(len(predictions), 1)
        self.assertEqual(predictions[0]['equipment_id'], tool.id)
        self.assertEqual(predictions[0]['urgency'], 'critical')
        self.assertEqual(predictions[0]['risk_score'], 105)
        self.assertEqual(
            predictions[0]['risk_factors'],
            ['لم يتم صيانتها منذ أكثر من 6 أشهر', 'حالة ضعيفة', 'تجاوزت الفترة المحددة للصيانة']
        )
        self.assertIn('جدولة صيانة فورية', predictions[0]['recommendations'])

    def test_retired_and_damaged_excluded(self):
        TestDataFactory.create_equipment(status='retired')
        TestDataFactory.create_equipment(status='damaged')
        self.assertEqual(predict_maintenance(today=self.today), [])

    def test_ordered_by_urgency(self):
        TestDataFactory.create_equipment(
            name='fresh', condition='excellent', purchase_date=self.today, last_maintenance_date=self.today
        )
        TestDataFactory.create_equipment(name='worn', condition='poor')
        predictions = predict_maintenance(today=self.today)
        self.assertEqual([p['equipment_name'] for p in predictions], ['worn', 'fresh'])

    def test_filters(self):
        TestDataFactory.create_equipment(
            condition='excellent', purchase_date=self.today, last_maintenance_date=self.today
        )
        TestDataFactory.create_equipment(condition='poor')
        self.assertEqual(len(predict_maintenance(urgency='critical', today=self.today)), 1)
        self.assertEqual(len(predict_maintenance(timeframe=7, today=self.today)), 1)

    def test_usage_hours_raise_score(self):
        tool = TestDataFactory.create_equipment(
            condition='excellent', purchase_date=self.today, last_maintenance_date=self.today
        )
        EquipmentUsage.objects.create(equipment=tool, usage_date=self.today, hours=Decimal('10'))
        prediction = predict_maintenance(today=self.today)[0]
        self.assertEqual(prediction['risk_score'], 30)

    def test_cache_invalidated_by_equipment_change(self):
        tool = TestDataFactory.create_equipment(condition='poor')
        self.assertEqual(predict_maintenance(today=self.today)[0]['urgency'], 'critical')
        tool.condition = 'excellent'
        tool.last_maintenance_date = self.today
        tool.purchase_date = self.today
        tool.save()
        self.assertEqual(predict_maintenance(today=self.today)[0]['urgency'], 'low')


class RecommendationTests(TestCase):

    def setUp(self):
        cache.clear()
        self.today = timezone.localdate()

    def test_empty_fleet_without_projects(self):
        self.assertEqual(build_recommendations(self.today), [])

    def test_unused_and_unmaintained(self):
        TestDataFactory.create_equipment(purchase_price=Decimal('1000.00'))
        types = [r['type'] for r in build_recommendations(self.today)]
        self.assertIn('cost_optimization', types)
        self.assertIn('preventive_action', types)
        self.assertNotIn('efficiency_improvement', types)

    def test_old_equipment(self):
        TestDataFactory.create_equipment(purchase_date=self.today - timedelta(days=1200))
        recommendation = next(
            r for r in build_recommendations(self.today) if r['type'] == 'efficiency_improvement'
        )
        self.assertEqual(recommendation['estimated_savings'], '8000')

    def test_projects_short_of_equipment(self):
        TestDataFactory.create_project(status='active')
        types = [r['type'] for r in build_recommendations(self.today)]
        self.assertIn('investment_opportunity', types)
        self.assertIn('resource_allocation', types)

    def test_sorted_by_priority(self):
        TestDataFactory.create_project(status='active')
        TestDataFactory.create_equipment()
        priorities = [r['priority'] for r in build_recommendations(self.today)]
        self.assertEqual(priorities, sorted(priorities, key=['high', 'medium', 'low'].index))


class EquipmentAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project()

    def test_create_equipment_assigns_code(self):
        data = {'name': 'Concrete mixer', 'purchase_price': '2500.00', 'code': 'MINE'}
        response = self.client.post('/api/v1/equipment/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'EQ-0001')

    def test_filter_by_status(self):
        TestDataFactory.create_equipment(status='available')
        TestDataFactory.create_equipment(status='maintenance')
        response = self.client.get('/api/v1/equipment/', {'status': 'maintenance'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_transfer_to_project(self):
        tool = TestDataFactory.create_equipment()
        response = self.client.post(
            f'/api/v1/equipment/{tool.id}/transfer/', {'to_project': self.project.id, 'reason': 'site'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tool.refresh_from_db()
        self.assertEqual(tool.current_project_id, self.project.id)
        self.assertEqual(tool.status, 'in_use')
        self.assertEqual(EquipmentMovement.objects.filter(equipment=tool).count(), 1)
        self.assertTrue(AuditLog.objects.filter(action='equipment_transfer').exists())

    def test_transfer_back_to_store(self):
        tool = TestDataFactory.create_equipment(status='in_use', current_project=self.project)
        response = self.client.post(f'/api/v1/equipment/{tool.id}/transfer/', {'to_project': None}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['movement']['to_project'])
        tool.refresh_from_db()
        self.assertEqual(tool.status, 'available')

    def test_transfer_to_current_project_rejected(self):
        tool = TestDataFactory.create_equipment(status='in_use', current_project=self.project)
        response = self.client.post(
            f'/api/v1/equipment/{tool.id}/transfer/', {'to_project': self.project.id}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('to_project', response.data)

    def test_transfer_to_unknown_project(self):
        tool = TestDataFactory.create_equipment()
        response = self.client.post(f'/api/v1/equipment/{tool.id}/transfer/', {'to_project': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_record_maintenance(self):
        tool = TestDataFactory.create_equipment(status='maintenance')
        today = timezone.localdate().isoformat()
        data = {'maintenance_type': 'corrective', 'cost': '150.00', 'performed_at': today}
        response = self.client.post(f'/api/v1/equipment/{tool.id}/maintenance/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        tool.refresh_from_db()
        self.assertEqual(tool.last_maintenance_date.isoformat(), today)
        self.assertEqual(tool.status, 'available')

    def test_usage_hours_validated(self):
        tool = TestDataFactory.create_equipment()
        data = {'usage_date': timezone.localdate().isoformat(), 'hours': '25'}
        response = self.client.post(f'/api/v1/equipment/{tool.id}/usage/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('hours', response.data)

    def test_usage_defaults_to_current_project(self):
        tool = TestDataFactory.create_equipment(status='in_use', current_project=self.project)
        data = {'usage_date': timezone.localdate().isoformat(), 'hours': '6'}
        response = self.client.post(f'/api/v1/equipment/{tool.id}/usage/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['project'], self.project.id)

    def test_label(self):
        tool = TestDataFactory.create_equipment(current_project=self.project)
        response = self.client.get(f'/api/v1/equipment/{tool.id}/label/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['code'], tool.code)
        self.assertTrue(response.data['image'].startswith('data:image/png;base64,'))

    def test_predictive_maintenance_notifies_once(self):
        TestDataFactory.create_equipment(condition='poor')
        response = self.client.get('/api/v1/equipment/predictive-maintenance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['critical'], 1)
        self.client.get('/api/v1/equipment/predictive-maintenance/')
        self.assertEqual(Notification.objects.filter(type='safety').count(), 1)

    def test_predictive_maintenance_bad_params(self):
        response = self.client.get('/api/v1/equipment/predictive-maintenance/', {'urgency': 'urgent'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/equipment/predictive-maintenance/', {'timeframe': 'soon'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_recommendations_endpoint(self):
        TestDataFactory.create_equipment(purchase_price=Decimal('500.00'))
        response = self.client.get('/api/v1/equipment/recommendations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['fleet']['total'], 1)
        self.assertEqual(response.data['total'], len(response.data['recommendations']))
