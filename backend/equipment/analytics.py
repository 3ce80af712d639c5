"""
Maintenance predictions and equipment recommendations.

Both are rule based: a risk score built from time since maintenance,
daily usage hours, age and condition drives the urgency of each
prediction, and simple fleet-wide checks produce the recommendations.
"""
import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone

from backend.core.cache_utils import cached_query, PREDICTIONS_CACHE_TTL, PREDICTIONS_PREFIX
from backend.core.utils import money
from .models import Equipment

logger = logging.getLogger(__name__)

URGENCY_ORDER = {'critical': 0, 'high': 1, 'medium': 2, 'low': 3}
PRIORITY_ORDER = {'high': 0, 'medium': 1, 'low': 2}
COST_MULTIPLIER = {'critical': Decimal('2'), 'high': Decimal('1.5')}

DEFAULT_DAYS_SINCE_MAINTENANCE = 365
DEFAULT_DAILY_HOURS = 4
DEFAULT_AGE_DAYS = 730
DEFAULT_MAINTENANCE_COST = Decimal('500')


URGENCY_RECOMMENDATIONS = {
    'critical': ['جدولة صيانة فورية', 'فحص شامل للأداة', 'تقييم إمكانية الاستبدال'],
    'high': ['جدولة صيانة خلال الأسبوع القادم', 'فحص الأجزاء الأساسية'],
}
ROUTINE_RECOMMENDATIONS = ['مراقبة الأداء', 'صيانة وقائية منتظمة']


def risk_factors(days_since, avg_hours, age_days, condition, interval):
    """(points, description) for every factor that raises the risk score"""
    factors = []
    if days_since > 180:
        factors.append((40, 'لم يتم صيانتها منذ أكثر من 6 أشهر'))
    elif days_since > 90:
        factors.append((20, 'لم يتم صيانتها منذ أكثر من 3 أشهر'))
    if avg_hours > 8:
        factors.append((30, 'استخدام مكثف (أكثر من 8 ساعات يومياً)'))
    elif avg_hours > 6:
        factors.append((15, 'استخدام عالي (6-8 ساعات يومياً)'))
    if age_days > 1825:
        factors.append((25, 'أداة قديمة (أكثر من 5 سنوات)'))
    elif age_days > 1095:
        factors.append((15, 'أداة متوسطة العمر (3-5 سنوات)'))
    if condition == 'poor':
        factors.append((35, 'حالة ضعيفة'))
    elif condition == 'fair':
        factors.append((20, 'حالة مقبولة'))
    if days_since > interval:
        factors.append((30, 'تجاوزت الفترة المحددة للصيانة'))
    return factors


def risk_score(days_since, avg_hours, age_days, condition, interval):
    return sum(points for points, _ in risk_factors(days_since, avg_hours, age_days, condition, interval))


def recommendations_for(urgency):
    return list(URGENCY_RECOMMENDATIONS.get(urgency, ROUTINE_RECOMMENDATIONS))


def classify(score):
    """Returns (urgency, days until maintenance, confidence)"""
    if score >= 80:
        return 'critical', max(1, 7 - score // 15), 95
    if score >= 60:
        return 'high', max(7, 14 - score // 10), 85
    if score >= 40:
        return 'medium', max(14, 30 - score // 5), 75
    return 'low', max(30, 60 - score), 65


def estimate_cost(purchase_price, urgency):
    base = purchase_price * Decimal('0.05') if purchase_price else DEFAULT_MAINTENANCE_COST
    cost = base * COST_MULTIPLIER.get(urgency, Decimal('1'))
    return cost.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def predict_for(equipment, today, avg_hours=None):
    if equipment.last_maintenance_date:
        days_since = (today - equipment.last_maintenance_date).days
    else:
        days_since = DEFAULT_DAYS_SINCE_MAINTENANCE
    if avg_hours is None:
        avg_hours = DEFAULT_DAILY_HOURS
    age_days = (today - equipment.purchase_date).days if equipment.purchase_date else DEFAULT_AGE_DAYS
    interval = equipment.maintenance_interval_days or 90

    factors = risk_factors(days_since, avg_hours, age_days, equipment.condition, interval)
    score = sum(points for points, _ in factors)
    urgency, days, confidence = classify(score)
    return {
        'equipment_id': equipment.id,
        'equipment_code': equipment.code,
        'equipment_name': equipment.name,
        'project_id': equipment.current_project_id,
        'urgency': urgency,
        'risk_score': score,
        'days_until_maintenance': days,
        'predicted_date': (today + timedelta(days=days)).isoformat(),
        'confidence': confidence,
        'estimated_cost': str(estimate_cost(equipment.purchase_price, urgency)),
        'reason_code': f'RISK_{score}',
        'risk_factors': [description for _, description in factors],
        'recommendations': recommendations_for(urgency),
        'days_since_maintenance': days_since,
        'avg_daily_hours': float(avg_hours),
        'age_days': age_days,
    }


@cached_query(cache_ttl=PREDICTIONS_CACHE_TTL, key_prefix=PREDICTIONS_PREFIX)
def get_predictions(today_iso):
    """All predictions for equipment in service, cached per day"""
    today = date.fromisoformat(today_iso)
    equipment = Equipment.objects.filter(status__in=['in_use', 'available']).annotate(
        avg_hours=Avg('usage_records__hours')
    )
    predictions = [predict_for(item, today, item.avg_hours) for item in equipment]
    predictions.sort(key=lambda p: (URGENCY_ORDER[p['urgency']], p['days_until_maintenance']))
    logger.info(f"Computed {len(predictions)} maintenance predictions for {today_iso}")
    return predictions


def predict_maintenance(urgency=None, timeframe=None, today=None):
    today = today or timezone.localdate()
    predictions = get_predictions(today.isoformat())
    if urgency:
        predictions = [p for p in predictions if p['urgency'] == urgency]
    if timeframe is not None:
        predictions = [p for p in predictions if p['days_until_maintenance'] <= timeframe]
    return predictions


def build_recommendations(today=None):
    from backend.projects.models import Project

    today = today or timezone.localdate()
    recent = today - timedelta(days=90)
    equipment = list(
        Equipment.objects.exclude(status='retired').annotate(
            recent_usage=Count('usage_records', filter=Q(usage_records__usage_date__gte=recent), distinct=True),
            recent_moves=Count('movements', filter=Q(movements__movement_date__gte=recent), distinct=True),
        )
    )
    recommendations = []

    underused = [e for e in equipment if e.recent_usage + e.recent_moves < 3]
    if underused:
        savings = sum((e.purchase_price for e in underused), Decimal('0')) * Decimal('0.1')
        recommendations.append({
            'id': 'cost_opt_1',
            'type': 'cost_optimization',
            'priority': 'high',
            'title': 'تحسين استخدام الأدوات المهملة',
            'description': f'يوجد {len(underused)} أداة قليلة الاستخدام. يمكن تحسين استخدامها أو إعادة توزيعها.',
            'impact_score': 85,
            'estimated_savings': str(savings.quantize(Decimal('0.01'))),
            'affected_equipment': [e.code for e in underused],
            'action_items': [
                'تحليل أسباب قلة الاستخدام',
                'إعادة توزيع الأدوات على المشاريع النشطة',
                'وضع جدول استخدام محسّن',
            ],
        })

    old = [e for e in equipment if e.purchase_date and (today - e.purchase_date).days > 1095]
    if old:
        recommendations.append({
            'id': 'eff_imp_1',
            'type': 'efficiency_improvement',
            'priority': 'medium',
            'title': 'تحديث الأدوات القديمة',
            'description': f'{len(old)} أداة تحتاج تحديث لتحسين الكفاءة والإنتاجية.',
            'impact_score': 75,
            'estimated_savings': str(Decimal(len(old) * 8000)),
            'affected_equipment': [e.code for e in old],
            'action_items': ['تقييم حالة الأدوات القديمة', 'دراسة البدائل الحديثة', 'وضع خطة تحديث مرحلية'],
        })

    overdue = [
        e for e in equipment
        if not e.last_maintenance_date or (today - e.last_maintenance_date).days > 90
    ]
    if overdue:
        recommendations.append({
            'id': 'prev_act_1',
            'type': 'preventive_action',
            'priority': 'high',
            'title': 'برنامج صيانة وقائية شامل',
            'description': f'{len(overdue)} أداة تحتاج صيانة وقائية لتجنب الأعطال المكلفة.',
            'impact_score': 90,
            'estimated_savings': str(Decimal(len(overdue) * 2000)),
            'affected_equipment': [e.code for e in overdue],
            'action_items': ['جدولة صيانة فورية للأدوات', 'وضع برنامج صيانة دورية', 'متابعة دورية للحالة'],
        })

    active_projects = Project.objects.filter(status='active').annotate(
        equipment_count=Count('equipment', filter=~Q(equipment__status='retired'))
    )
    available = [e for e in equipment if e.status == 'available']
    if active_projects.count() > len(available):
        recommendations.append({
            'id': 'inv_opp_1',
            'type': 'investment_opportunity',
            'priority': 'medium',
            'title': 'توسيع مخزون الأدوات',
            'description': 'المشاريع النشطة تحتاج المزيد من الأدوات لتحسين الإنتاجية.',
            'impact_score': 70,
            'estimated_savings': '120000.00',
            'affected_equipment': [],
            'action_items': ['تحليل احتياجات المشاريع النشطة', 'وضع ميزانية الاستثمار', 'تنفيذ خطة الشراء'],
        })

    unbalanced = [p for p in active_projects if p.equipment_count < 3 or p.equipment_count > 10]
    if unbalanced:
        recommendations.append({
            'id': 'res_all_1',
            'type': 'resource_allocation',
            'priority': 'low',
            'title': 'إعادة توزيع الأدوات بين المشاريع',
            'description': f'{len(unbalanced)} مشروع يحتاج إعادة توزيع الأدوات لتحسين الكفاءة.',
            'impact_score': 60,
            'estimated_savings': '5000.00',
            'affected_equipment': [e.code for e in available],
            'affected_projects': [p.name for p in unbalanced],
            'action_items': ['تحليل احتياجات كل مشروع', 'إعادة توزيع الأدوات المتاحة', 'تقييم النتائج'],
        })

    recommendations.sort(key=lambda r: (PRIORITY_ORDER[r['priority']], -r['impact_score']))
    return recommendations


def equipment_summary():
    """Counts per status and the fleet value"""
    by_status = dict(Equipment.objects.values_list('status').annotate(total=Count('id')))
    total_value = Equipment.objects.aggregate(total=Sum('purchase_price'))['total'] or Decimal('0.00')
    return {
        'total': sum(by_status.values()),
        'byStatus': by_status,
        'totalValue': money(total_value),
    }
