"""
Worker account calculations.

A worker's balance is never stored: it is earned wages minus what was paid
on site minus what was sent to the family.
"""
from decimal import Decimal

from django.db.models import Sum, Count

from backend.projects.models import Project
from .models import WorkerAttendance, WorkerTransfer

ZERO = Decimal('0.00')


def _filter_range(queryset, field, date_from=None, date_to=None):
    if date_from:
        queryset = queryset.filter(**{f'{field}__gte': date_from})
    if date_to:
        queryset = queryset.filter(**{f'{field}__lte': date_to})
    return queryset


def attendance_for(worker_id, project_ids=None, date_from=None, date_to=None):
    queryset = WorkerAttendance.objects.filter(worker_id=worker_id).select_related('project')
    if project_ids:
        queryset = queryset.filter(project_id__in=project_ids)
    return _filter_range(queryset, 'date', date_from, date_to).order_by('date', 'id')


def transfers_for(worker_id, project_ids=None, date_from=None, date_to=None):
    queryset = WorkerTransfer.objects.filter(worker_id=worker_id).select_related('project')
    if project_ids:
        queryset = queryset.filter(project_id__in=project_ids)
    return _filter_range(queryset, 'transfer_date', date_from, date_to).order_by('transfer_date', 'id')


def summarize(attendance, transfers):
    """Totals of an attendance and a transfer queryset"""
    totals = attendance.aggregate(
        work_days=Sum('work_days'),
        earned=Sum('actual_wage'),
        paid=Sum('paid_amount'),
    )
    earned = totals['earned'] or ZERO
    paid = totals['paid'] or ZERO
    transferred = transfers.aggregate(total=Sum('amount'))['total'] or ZERO
    return {
        'total_work_days': totals['work_days'] or ZERO,
        'total_wages_earned': earned,
        'total_paid': paid,
        'total_transfers': transferred,
        'remaining_balance': earned - paid - transferred,
    }


def get_worker_balance(worker_id, project_id=None):
    """earned - paid - transferred for one worker, optionally on one project"""
    project_ids = [project_id] if project_id else None
    totals = summarize(
        attendance_for(worker_id, project_ids),
        transfers_for(worker_id, project_ids),
    )
    return {
        'worker': worker_id,
        'project': project_id,
        'total_earned': totals['total_wages_earned'],
        'total_paid': totals['total_paid'],
        'total_transferred': totals['total_transfers'],
        'current_balance': totals['remaining_balance'],
    }


def get_worker_projects(worker_id):
    """Projects the worker has attendance in, with attendance counts"""
    rows = (
        WorkerAttendance.objects
        .filter(worker_id=worker_id)
        .values('project_id', 'project__name', 'project__status')
        .annotate(attendance_count=Count('id'), total_earned=Sum('actual_wage'))
        .order_by('project__name')
    )
    return [
        {
            'id': row['project_id'],
            'name': row['project__name'],
            'status': row['project__status'],
            'attendance_count': row['attendance_count'],
            'total_earned': row['total_earned'] or ZERO,
        }
        for row in rows
    ]


def get_multi_project_statement(worker_id, project_ids=None, date_from=None, date_to=None):
    """Per-project attendance, transfers and balance plus overall totals"""
    if not project_ids:
        project_ids = list(
            WorkerAttendance.objects.filter(worker_id=worker_id)
            .values_list('project_id', flat=True).distinct()
        )
    projects = Project.objects.filter(id__in=project_ids).order_by('name')

    sections = []
    for project in projects:
        attendance = attendance_for(worker_id, [project.id], date_from, date_to)
        transfers = transfers_for(worker_id, [project.id], date_from, date_to)
        sections.append({
            'project': {'id': project.id, 'name': project.name},
            'attendance': attendance,
            'transfers': transfers,
            'summary': summarize(attendance, transfers),
        })

    overall = summarize(
        attendance_for(worker_id, project_ids, date_from, date_to),
        transfers_for(worker_id, project_ids, date_from, date_to),
    )
    return sections, overall
