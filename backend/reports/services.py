"""
Report builders.

Each builder returns plain dicts (Decimals kept as Decimal) that the views
render as JSON or hand to the xlsx exporters.
"""
import logging
from decimal import Decimal

from django.db.models import Q

from backend.projects.models import FundTransfer, ProjectFundTransfer, DailyExpenseSummary
from backend.projects.services import get_or_create_daily_summary, sum_field
from backend.workers.models import Worker, WorkerAttendance, WorkerTransfer, WorkerMiscExpense
from backend.workers.services import attendance_for, transfers_for, summarize
from backend.purchasing.models import MaterialPurchase, TransportationExpense

logger = logging.getLogger('backend.reports')

ZERO = Decimal('0.00')

WAGES = 'عمالة'
MATERIALS = 'مشتريات'
TRANSPORT = 'مواصلات'
WORKER_TRANSFERS = 'تحويلات عمال'
MISC = 'نثريات'


def _range(queryset, field, date_from=None, date_to=None):
    if date_from:
        queryset = queryset.filter(**{f'{field}__gte': date_from})
    if date_to:
        queryset = queryset.filter(**{f'{field}__lte': date_to})
    return queryset


def day_records(project_id, date):
    """Every record of a project on one day, grouped by kind"""
    return {
        'fund_transfers': FundTransfer.objects.filter(project_id=project_id, transfer_date=date),
        'incoming_transfers': ProjectFundTransfer.objects.filter(
            to_project_id=project_id, transfer_date=date).select_related('from_project'),
        'outgoing_transfers': ProjectFundTransfer.objects.filter(
            from_project_id=project_id, transfer_date=date).select_related('to_project'),
        'attendance': WorkerAttendance.objects.filter(
            project_id=project_id, date=date).select_related('worker', 'project'),
        'material_purchases': MaterialPurchase.objects.filter(
            project_id=project_id, purchase_date=date).select_related('material', 'project', 'supplier'),
        'transportation': TransportationExpense.objects.filter(
            project_id=project_id, date=date).select_related('worker', 'project'),
        'worker_transfers': WorkerTransfer.objects.filter(
            project_id=project_id, transfer_date=date).select_related('worker', 'project'),
        'misc_expenses': WorkerMiscExpense.objects.filter(project_id=project_id, date=date),
    }


def daily_report(project, date):
    summary = get_or_create_daily_summary(project.id, date)
    return {'project': project, 'date': date, 'summary': summary, **day_records(project.id, date)}


def activity_dates(project_id, date_from, date_to):
    """Days in the range with any record or a stored summary"""
    sources = [
        (FundTransfer.objects.filter(project_id=project_id), 'transfer_date'),
        (ProjectFundTransfer.objects.filter(Q(from_project_id=project_id) | Q(to_project_id=project_id)), 'transfer_date'),
        (WorkerAttendance.objects.filter(project_id=project_id), 'date'),
        (WorkerTransfer.objects.filter(project_id=project_id), 'transfer_date'),
        (WorkerMiscExpense.objects.filter(project_id=project_id), 'date'),
        (MaterialPurchase.objects.filter(project_id=project_id), 'purchase_date'),
        (TransportationExpense.objects.filter(project_id=project_id), 'date'),
        (DailyExpenseSummary.objects.filter(project_id=project_id), 'date'),
    ]
    dates = set()
    for queryset, field in sources:
        dates.update(_range(queryset, field, date_from, date_to).values_list(field, flat=True).distinct())
    return sorted(dates)


def daily_range_report(project, date_from, date_to):
    return [daily_report(project, date) for date in activity_dates(project.id, date_from, date_to)]


def material_purchases_report(project_id=None, date_from=None, date_to=None):
    purchases = MaterialPurchase.objects.select_related('material', 'project', 'supplier')
    if project_id:
        purchases = purchases.filter(project_id=project_id)
    purchases = _range(purchases, 'purchase_date', date_from, date_to).order_by('purchase_date', 'id')
    totals = {'total': sum_field(purchases, 'total_amount')}
    for key, _label in MaterialPurchase.PURCHASE_TYPE_CHOICES:
        totals[key] = sum_field(purchases.filter(purchase_type=key), 'total_amount')
    return {'purchases': purchases, 'totals': totals}


def project_summary_report(project, date_from=None, date_to=None):
    """Income and expense categories of a project over a period"""
    pid = project.id
    fund = sum_field(_range(FundTransfer.objects.filter(project_id=pid), 'transfer_date', date_from, date_to), 'amount')
    incoming = sum_field(_range(ProjectFundTransfer.objects.filter(to_project_id=pid), 'transfer_date', date_from, date_to), 'amount')
    outgoing = sum_field(_range(ProjectFundTransfer.objects.filter(from_project_id=pid), 'transfer_date', date_from, date_to), 'amount')
    attendance = _range(WorkerAttendance.objects.filter(project_id=pid), 'date', date_from, date_to)
    purchases = _range(MaterialPurchase.objects.filter(project_id=pid), 'purchase_date', date_from, date_to)

    expenses = {
        'worker_wages': sum_field(attendance, 'paid_amount'),
        'materials_cash': sum_field(purchases.filter(purchase_type='cash'), 'total_amount'),
        'transportation': sum_field(_range(TransportationExpense.objects.filter(project_id=pid), 'date', date_from, date_to), 'amount'),
        'worker_transfers': sum_field(_range(WorkerTransfer.objects.filter(project_id=pid), 'transfer_date', date_from, date_to), 'amount'),
        'misc_expenses': sum_field(_range(WorkerMiscExpense.objects.filter(project_id=pid), 'date', date_from, date_to), 'amount'),
        'outgoing_project_transfers': outgoing,
    }
    income = {'fund_transfers': fund, 'incoming_project_transfers': incoming}
    total_income = sum(income.values(), ZERO)
    total_expenses = sum(expenses.values(), ZERO)
    return {
        'project': project,
        'income': income,
        'expenses': expenses,
        'deferred': {
            'unpaid_wages': sum_field(attendance, 'remaining_amount'),
            'materials_credit': sum_field(purchases.filter(purchase_type='credit'), 'total_amount'),
        },
        'counts': {
            'attendance_days': attendance.count(),
            'workers': attendance.values('worker_id').distinct().count(),
            'material_purchases': purchases.count(),
        },
        'total_income': total_income,
        'total_expenses': total_expenses,
        'net_balance': total_income - total_expenses,
    }


def _row(date, category, subcategory, description, amount, source, source_id):
    return {
        'date': date,
        'category': category,
        'subcategory': subcategory,
        'description': description,
        'amount': amount,
        'source': source,
        'source_id': source_id,
    }


def expense_rows(project_id, date_from, date_to):
    rows = []
    attendance = _range(
        WorkerAttendance.objects.filter(project_id=project_id, is_present=True, paid_amount__gt=0),
        'date', date_from, date_to).select_related('worker')
    for record in attendance:
        rows.append(_row(record.date, WAGES, record.worker.type, record.worker.name,
                         record.paid_amount, 'attendance', record.id))

    purchases = _range(
        MaterialPurchase.objects.filter(project_id=project_id, purchase_type='cash'),
        'purchase_date', date_from, date_to).select_related('material')
    for purchase in purchases:
        rows.append(_row(purchase.purchase_date, MATERIALS, purchase.material.category or purchase.material.name,
                         f"{purchase.material.name} - {purchase.quantity} {purchase.material.unit}",
                         purchase.total_amount, 'material_purchase', purchase.id))

    for expense in _range(TransportationExpense.objects.filter(project_id=project_id), 'date', date_from, date_to):
        rows.append(_row(expense.date, TRANSPORT, 'أجور نقل', expense.description,
                         expense.amount, 'transportation', expense.id))

    transfers = _range(WorkerTransfer.objects.filter(project_id=project_id), 'transfer_date',
                       date_from, date_to).select_related('worker')
    for transfer in transfers:
        rows.append(_row(transfer.transfer_date, WORKER_TRANSFERS, transfer.get_transfer_method_display(),
                         f"{transfer.worker.name} ← {transfer.recipient_name}",
                         transfer.amount, 'worker_transfer', transfer.id))

    for expense in _range(WorkerMiscExpense.objects.filter(project_id=project_id), 'date', date_from, date_to):
        rows.append(_row(expense.date, MISC, MISC, expense.description,
                         expense.amount, 'misc_expense', expense.id))

    rows.sort(key=lambda r: (r['date'], r['source'], r['source_id']))
    return rows


def income_rows(project_id, date_from, date_to):
    rows = []
    for transfer in _range(FundTransfer.objects.filter(project_id=project_id), 'transfer_date', date_from, date_to):
        rows.append(_row(transfer.transfer_date, 'تحويلات عهدة', transfer.get_transfer_type_display(),
                         transfer.sender_name or transfer.transfer_number or '',
                         transfer.amount, 'fund_transfer', transfer.id))
    incoming = _range(ProjectFundTransfer.objects.filter(to_project_id=project_id), 'transfer_date',
                      date_from, date_to).select_related('from_project')
    for transfer in incoming:
        rows.append(_row(transfer.transfer_date, 'ترحيل من مشروع', transfer.from_project.name,
                         transfer.transfer_reason or transfer.description,
                         transfer.amount, 'project_transfer', transfer.id))
    rows.sort(key=lambda r: (r['date'], r['source'], r['source_id']))
    return rows


def advanced_report(project, report_type, date_from, date_to):
    """Categorised expense or income rows of a project over a period"""
    if report_type == 'expenses':
        rows = expense_rows(project.id, date_from, date_to)
        totals = {}
        for row in rows:
            totals[row['category']] = totals.get(row['category'], ZERO) + row['amount']
        return {
            'report_type': report_type,
            'rows': rows,
            'categoryTotals': totals,
            'totalExpenses': sum((r['amount'] for r in rows), ZERO),
        }
    rows = income_rows(project.id, date_from, date_to)
    return {
        'report_type': report_type,
        'rows': rows,
        'totalIncome': sum((r['amount'] for r in rows), ZERO),
    }


def workers_settlement(projects, worker_ids=None, date_from=None, date_to=None):
    """
    Per worker totals across the given projects.

    Only active workers with attendance or transfers in the period appear.
    final_balance = earned - paid - transfers
    """
    project_ids = [p.id for p in projects]
    workers = Worker.objects.filter(is_active=True)
    if worker_ids:
        workers = workers.filter(id__in=worker_ids)

    rows = []
    totals = {
        'total_work_days': ZERO,
        'total_earned': ZERO,
        'total_paid': ZERO,
        'total_transfers': ZERO,
        'final_balance': ZERO,
    }
    for worker in workers.order_by('name'):
        attendance = attendance_for(worker.id, project_ids, date_from, date_to)
        transfers = transfers_for(worker.id, project_ids, date_from, date_to)
        if not attendance.exists() and not transfers.exists():
            continue
        summary = summarize(attendance, transfers)
        row = {
            'worker_id': worker.id,
            'worker_name': worker.name,
            'worker_type': worker.type,
            'daily_wage': worker.daily_wage,
            'total_work_days': summary['total_work_days'],
            'total_earned': summary['total_wages_earned'],
            'total_paid': summary['total_paid'],
            'total_transfers': summary['total_transfers'],
            'final_balance': summary['remaining_balance'],
        }
        rows.append(row)
        for key in totals:
            totals[key] += row[key]

    logger.debug(f"Workers settlement: {len(rows)} workers across projects {project_ids}")
    return {
        'projects': [{'id': p.id, 'name': p.name} for p in projects],
        'workers': rows,
        'totals': {**totals, 'workers_count': len(rows)},
    }


def unified_transactions(project_id=None, type=None, category=None, search=None, date_from=None, date_to=None):
    """Income, expenses and deferred purchases in one list, newest first"""
    def scoped(queryset, field):
        if project_id:
            queryset = queryset.filter(project_id=project_id)
        return _range(queryset, field, date_from, date_to).select_related('project')

    rows = []
    for transfer in scoped(FundTransfer.objects.all(), 'transfer_date'):
        rows.append({
            'id': f'fund-{transfer.id}', 'date': transfer.transfer_date, 'type': 'income',
            'category': 'تحويل عهدة', 'amount': transfer.amount,
            'description': transfer.sender_name or transfer.get_transfer_type_display(),
            'project_id': transfer.project_id, 'project_name': transfer.project.name,
            'source_id': transfer.id, 'created_at': transfer.created_at,
        })
    for record in scoped(WorkerAttendance.objects.filter(paid_amount__gt=0), 'date').select_related('worker'):
        rows.append({
            'id': f'wage-{record.id}', 'date': record.date, 'type': 'expense',
            'category': 'أجور العمال', 'amount': record.paid_amount,
            'description': record.worker.name,
            'project_id': record.project_id, 'project_name': record.project.name,
            'source_id': record.id, 'created_at': record.created_at,
        })
    for purchase in scoped(MaterialPurchase.objects.filter(purchase_type__in=['cash', 'credit']),
                           'purchase_date').select_related('material'):
        is_cash = purchase.purchase_type == 'cash'
        rows.append({
            'id': f'material-{purchase.id}', 'date': purchase.purchase_date,
            'type': 'expense' if is_cash else 'deferred',
            'category': 'مشتريات المواد' if is_cash else 'مشتريات آجلة',
            'amount': purchase.total_amount,
            'description': f"{purchase.material.name} ({purchase.supplier_name})" if purchase.supplier_name else purchase.material.name,
            'project_id': purchase.project_id, 'project_name': purchase.project.name,
            'source_id': purchase.id, 'created_at': purchase.created_at,
        })
    for expense in scoped(TransportationExpense.objects.all(), 'date'):
        rows.append({
            'id': f'transport-{expense.id}', 'date': expense.date, 'type': 'expense',
            'category': 'نقل ومواصلات', 'amount': expense.amount,
            'description': expense.description,
            'project_id': expense.project_id, 'project_name': expense.project.name,
            'source_id': expense.id, 'created_at': expense.created_at,
        })

    if type:
        rows = [r for r in rows if r['type'] == type]
    if category:
        rows = [r for r in rows if r['category'] == category]
    if search:
        needle = search.strip().lower()
        rows = [r for r in rows if needle in r['description'].lower() or needle in r['category'].lower()]
    rows.sort(key=lambda r: (r['date'], r['created_at'], r['source_id']), reverse=True)

    income = sum((r['amount'] for r in rows if r['type'] == 'income'), ZERO)
    expenses = sum((r['amount'] for r in rows if r['type'] == 'expense'), ZERO)
    deferred = sum((r['amount'] for r in rows if r['type'] == 'deferred'), ZERO)
    return {
        'transactions': rows,
        'totals': {
            'income': income,
            'expenses': expenses,
            'deferred': deferred,
            'net': income - expenses,
            'count': len(rows),
        },
    }
