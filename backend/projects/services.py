"""
Daily cash-box summaries and project statistics.

A project's cash box is tracked per day. Each DailyExpenseSummary carries the
previous day's remaining balance forward, adds the money received that day
and subtracts the money paid out. Summaries are recomputed whenever a record
that touches the cash box is created, changed or deleted, and every later
summary of the project is recomputed after it so carried-forward amounts
stay chained.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum, Max

from backend.core.cache_utils import get_cached_project_stats, cache_project_stats
from backend.core.utils import money
from .models import FundTransfer, ProjectFundTransfer, DailyExpenseSummary

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def sum_field(queryset, field):
    """Sum a decimal field of a queryset, 0.00 when empty"""
    return queryset.aggregate(total=Sum(field))['total'] or ZERO


def get_previous_balance(project_id, date):
    """Remaining balance of the latest summary strictly before ``date``"""
    previous = (
        DailyExpenseSummary.objects
        .filter(project_id=project_id, date__lt=date)
        .order_by('-date')
        .values_list('remaining_balance', flat=True)
        .first()
    )
    return previous if previous is not None else ZERO


def compute_daily_totals(project_id, date):
    """All cash movements of a project on one day"""
    from backend.workers.models import WorkerAttendance, WorkerTransfer, WorkerMiscExpense
    from backend.purchasing.models import MaterialPurchase, TransportationExpense

    carried = get_previous_balance(project_id, date)
    fund = sum_field(FundTransfer.objects.filter(project_id=project_id, transfer_date=date), 'amount')
    incoming = sum_field(
        ProjectFundTransfer.objects.filter(to_project_id=project_id, transfer_date=date), 'amount'
    )
    outgoing = sum_field(
        ProjectFundTransfer.objects.filter(from_project_id=project_id, transfer_date=date), 'amount'
    )
    wages = sum_field(WorkerAttendance.objects.filter(project_id=project_id, date=date), 'paid_amount')
    # Credit and supply purchases are owed to the supplier, not paid from the cash box
    materials = sum_field(
        MaterialPurchase.objects.filter(project_id=project_id, purchase_date=date, purchase_type='cash'),
        'total_amount',
    )
    transport = sum_field(TransportationExpense.objects.filter(project_id=project_id, date=date), 'amount')
    worker_transfers = sum_field(
        WorkerTransfer.objects.filter(project_id=project_id, transfer_date=date), 'amount'
    )
    misc = sum_field(WorkerMiscExpense.objects.filter(project_id=project_id, date=date), 'amount')

    total_income = carried + fund + incoming - outgoing
    total_expenses = wages + materials + transport + worker_transfers + misc

    return {
        'carried_forward_amount': carried,
        'total_fund_transfers': fund,
        'total_incoming_project_transfers': incoming,
        'total_outgoing_project_transfers': outgoing,
        'total_worker_wages': wages,
        'total_material_costs': materials,
        'total_transportation_costs': transport,
        'total_worker_transfers': worker_transfers,
        'total_worker_misc_expenses': misc,
        'total_income': total_income,
        'total_expenses': total_expenses,
        'remaining_balance': total_income - total_expenses,
    }


def update_daily_summary_for_date(project_id, date, cascade=True):
    """
    Recompute and store the summary of ``project_id`` on ``date``.

    With ``cascade`` every later summary of the project is recomputed too.
    """
    with transaction.atomic():
        totals = compute_daily_totals(project_id, date)
        summary, _ = DailyExpenseSummary.objects.update_or_create(
            project_id=project_id, date=date, defaults=totals
        )
        if cascade:
            later_dates = (
                DailyExpenseSummary.objects
                .filter(project_id=project_id, date__gt=date)
                .order_by('date')
                .values_list('date', flat=True)
            )
            for later in list(later_dates):
                update_daily_summary_for_date(project_id, later, cascade=False)

    logger.debug(
        f"Daily summary updated: project={project_id} date={date} "
        f"remaining={summary.remaining_balance}"
    )
    return summary


def refresh_daily_summaries(pairs):
    """Recompute summaries for a collection of (project_id, date) pairs"""
    by_project = {}
    for project_id, date in pairs:
        if project_id and date:
            by_project.setdefault(project_id, set()).add(date)

    for project_id, dates in by_project.items():
        # Cascading from the earliest date covers every later one
        update_daily_summary_for_date(project_id, min(dates))
        for date in sorted(dates)[1:]:
            if not DailyExpenseSummary.objects.filter(project_id=project_id, date=date).exists():
                update_daily_summary_for_date(project_id, date)


def get_or_create_daily_summary(project_id, date):
    """Stored summary for the day, computed when missing"""
    summary = DailyExpenseSummary.objects.filter(project_id=project_id, date=date).first()
    if summary is None:
        summary = update_daily_summary_for_date(project_id, date)
    return summary


def recalculate_all_balances(project_id):
    """Recompute every existing summary of a project in ascending date order"""
    dates = list(
        DailyExpenseSummary.objects
        .filter(project_id=project_id)
        .order_by('date')
        .values_list('date', flat=True)
    )
    for date in dates:
        update_daily_summary_for_date(project_id, date, cascade=False)
    logger.info(f"Recalculated {len(dates)} daily summaries for project {project_id}")
    return len(dates)


def get_project_statistics(project_id, use_cache=True):
    """
    Income, expenses and activity counters of a project.

    income = fund transfers + incoming project transfers
    expenses = paid wages + cash materials + transport + misc
               + worker transfers + outgoing project transfers
    """
    if use_cache:
        cached = get_cached_project_stats(project_id)
        if cached is not None:
            return cached

    from backend.workers.models import WorkerAttendance, WorkerTransfer, WorkerMiscExpense
    from backend.purchasing.models import MaterialPurchase, TransportationExpense

    attendance = WorkerAttendance.objects.filter(project_id=project_id)
    purchases = MaterialPurchase.objects.filter(project_id=project_id)
    fund_transfers = FundTransfer.objects.filter(project_id=project_id)

    total_income = (
        sum_field(fund_transfers, 'amount')
        + sum_field(ProjectFundTransfer.objects.filter(to_project_id=project_id), 'amount')
    )
    total_expenses = (
        sum_field(attendance, 'paid_amount')
        + sum_field(purchases.filter(purchase_type='cash'), 'total_amount')
        + sum_field(TransportationExpense.objects.filter(project_id=project_id), 'amount')
        + sum_field(WorkerMiscExpense.objects.filter(project_id=project_id), 'amount')
        + sum_field(WorkerTransfer.objects.filter(project_id=project_id), 'amount')
        + sum_field(ProjectFundTransfer.objects.filter(from_project_id=project_id), 'amount')
    )

    activity_dates = [
        attendance.aggregate(last=Max('date'))['last'],
        purchases.aggregate(last=Max('purchase_date'))['last'],
        fund_transfers.aggregate(last=Max('transfer_date'))['last'],
    ]
    activity_dates = [d for d in activity_dates if d]

    stats = {
        'totalWorkers': attendance.values('worker_id').distinct().count(),
        'activeWorkers': attendance.filter(is_present=True).values('worker_id').distinct().count(),
        'totalIncome': money(total_income),
        'totalExpenses': money(total_expenses),
        'currentBalance': money(total_income - total_expenses),
        'completedDays': attendance.values('date').distinct().count(),
        'materialPurchases': purchases.count(),
        'lastActivity': max(activity_dates).isoformat() if activity_dates else None,
    }
    cache_project_stats(project_id, stats)
    return stats


