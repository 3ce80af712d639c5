from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.db.models import F

from backend.core.utils import create_audit_log, money, parse_date, parse_id_list
from .filters import WorkerFilter, WorkerAttendanceFilter, WorkerTransferFilter, WorkerMiscExpenseFilter
from .models import WorkerType, Worker, WorkerAttendance, WorkerTransfer, WorkerMiscExpense
from .serializers import (
    WorkerTypeSerializer, WorkerSerializer, WorkerAttendanceSerializer,
    WorkerTransferSerializer, WorkerMiscExpenseSerializer
)
from .services import (
    attendance_for, transfers_for, summarize, get_worker_balance,
    get_worker_projects, get_multi_project_statement
)


def stringify(totals):
    return {key: money(value) for key, value in totals.items()}


# Worker type views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def worker_type_list_create(request):
    """List worker trades (most used first) or add one"""
    if request.method == 'GET':
        serializer = WorkerTypeSerializer(WorkerType.objects.all(), many=True)
        return Response(serializer.data)

    serializer = WorkerTypeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    name = serializer.validated_data['name'].strip()
    existing = WorkerType.objects.filter(name=name).first()
    if existing:
        WorkerType.objects.filter(pk=existing.pk).update(
            usage_count=F('usage_count') + 1, last_used=timezone.now()
        )
        existing.refresh_from_db()
        return Response(WorkerTypeSerializer(existing).data)
    worker_type = WorkerType.objects.create(name=name)
    return Response(WorkerTypeSerializer(worker_type).data, status=status.HTTP_201_CREATED)


# Worker views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def worker_list_create(request):
    """List workers or create a new worker"""
    if request.method == 'GET':
        worker_filter = WorkerFilter(request.query_params, queryset=Worker.objects.all())
        serializer = WorkerSerializer(worker_filter.qs, many=True)
        return Response(serializer.data)
    else:
        serializer = WorkerSerializer(data=request.data)
        if serializer.is_valid():
            worker = serializer.save()
            # Remember the trade for autocomplete
            worker_type, created = WorkerType.objects.get_or_create(name=worker.type)
            if not created:
                WorkerType.objects.filter(pk=worker_type.pk).update(
                    usage_count=F('usage_count') + 1, last_used=timezone.now()
                )
            create_audit_log(
                request=request, action='create', model_name='Worker',
                object_id=worker.id, object_name=worker.name,
                changes={'type': worker.type, 'daily_wage': worker.daily_wage}
            )
            return Response(WorkerSerializer(worker).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def worker_detail(request, pk):
    """Retrieve, update or delete a worker"""
    worker = get_object_or_404(Worker, pk=pk)

    if request.method == 'GET':
        serializer = WorkerSerializer(worker)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = WorkerSerializer(worker, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='Worker',
                object_id=worker.id, object_name=worker.name, changes=dict(request.data)
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='Worker',
            object_id=worker.id, object_name=worker.name
        )
        worker.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def worker_balance(request, pk):
    """Earned, paid, transferred and current balance of a worker"""
    worker = get_object_or_404(Worker, pk=pk)
    project_id = request.query_params.get('project', None)
    balance = get_worker_balance(worker.id, int(project_id) if project_id and project_id.isdigit() else None)
    return Response({
        **balance,
        'worker_name': worker.name,
        'total_earned': money(balance['total_earned']),
        'total_paid': money(balance['total_paid']),
        'total_transferred': money(balance['total_transferred']),
        'current_balance': money(balance['current_balance']),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def worker_account_statement(request, pk):
    """Attendance and transfers of a worker with summary totals"""
    worker = get_object_or_404(Worker, pk=pk)
    project_ids = parse_id_list(request.query_params.get('project', None))
    date_from = parse_date(request.query_params.get('date_from', None))
    date_to = parse_date(request.query_params.get('date_to', None))

    attendance = attendance_for(worker.id, project_ids, date_from, date_to)
    transfers = transfers_for(worker.id, project_ids, date_from, date_to)

    return Response({
        'worker': WorkerSerializer(worker).data,
        'period': {
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
        },
        'attendance': WorkerAttendanceSerializer(attendance, many=True).data,
        'transfers': WorkerTransferSerializer(transfers, many=True).data,
        'summary': stringify(summarize(attendance, transfers)),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def worker_projects(request, pk):
    """Projects the worker has attendance in"""
    worker = get_object_or_404(Worker, pk=pk)
    projects = get_worker_projects(worker.id)
    for project in projects:
        project['total_earned'] = money(project['total_earned'])
    return Response(projects)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def worker_multi_project_statement(request, pk):
    """Per-project statements of a worker plus overall totals"""
    worker = get_object_or_404(Worker, pk=pk)
    project_ids = parse_id_list(request.query_params.get('projects', None))
    date_from = parse_date(request.query_params.get('date_from', None))
    date_to = parse_date(request.query_params.get('date_to', None))

    sections, overall = get_multi_project_statement(worker.id, project_ids, date_from, date_to)
    return Response({
        'worker': WorkerSerializer(worker).data,
        'projects': [
            {
                'project': section['project'],
                'attendance': WorkerAttendanceSerializer(section['attendance'], many=True).data,
                'transfers': WorkerTransferSerializer(section['transfers'], many=True).data,
                'summary': stringify(section['summary']),
            }
            for section in sections
        ],
        'totals': stringify(overall),
    })


# Attendance views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def attendance_list_create(request):
    """List attendance (project, worker, date range filters) or record a day"""
    if request.method == 'GET':
        queryset = WorkerAttendance.objects.select_related('worker', 'project').all()
        attendance_filter = WorkerAttendanceFilter(request.query_params, queryset=queryset)
        if not attendance_filter.is_valid():
            return Response(attendance_filter.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = WorkerAttendanceSerializer(attendance_filter.qs, many=True)
        return Response(serializer.data)
    else:
        serializer = WorkerAttendanceSerializer(data=request.data)
        if serializer.is_valid():
            attendance = serializer.save(created_by=request.user)
            create_audit_log(
                request=request, action='attendance_record', model_name='WorkerAttendance',
                object_id=attendance.id, object_name=attendance.worker.name,
                changes={
                    'date': attendance.date,
                    'actual_wage': attendance.actual_wage,
                    'paid_amount': attendance.paid_amount,
                    'payment_type': attendance.payment_type,
                }
            )
            if attendance.payment_type == 'credit':
                from backend.notifications.services import notify_credit_attendance
                notify_credit_attendance(attendance)
            return Response(WorkerAttendanceSerializer(attendance).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def attendance_detail(request, pk):
    """Retrieve, update or delete an attendance record"""
    attendance = get_object_or_404(WorkerAttendance, pk=pk)

    if request.method == 'GET':
        serializer = WorkerAttendanceSerializer(attendance)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = WorkerAttendanceSerializer(attendance, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='WorkerAttendance',
                object_id=attendance.id, object_name=attendance.worker.name,
                changes=dict(request.data)
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='WorkerAttendance',
            object_id=attendance.id, object_name=attendance.worker.name,
            changes={'date': attendance.date, 'paid_amount': attendance.paid_amount}
        )
        attendance.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Worker transfer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def worker_transfer_list_create(request):
    """List transfers to workers' families or record one"""
    if request.method == 'GET':
        queryset = WorkerTransfer.objects.select_related('worker', 'project').all()
        transfer_filter = WorkerTransferFilter(request.query_params, queryset=queryset)
        if not transfer_filter.is_valid():
            return Response(transfer_filter.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = WorkerTransferSerializer(transfer_filter.qs, many=True)
        return Response(serializer.data)
    else:
        serializer = WorkerTransferSerializer(data=request.data)
        if serializer.is_valid():
            transfer = serializer.save(created_by=request.user)
            create_audit_log(
                request=request, action='worker_transfer', model_name='WorkerTransfer',
                object_id=transfer.id, object_name=transfer.worker.name,
                object_reference=transfer.transfer_number or None,
                changes={'amount': transfer.amount, 'recipient': transfer.recipient_name}
            )
            return Response(WorkerTransferSerializer(transfer).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def worker_transfer_detail(request, pk):
    """Retrieve, update or delete a worker transfer"""
    transfer = get_object_or_404(WorkerTransfer, pk=pk)

    if request.method == 'GET':
        serializer = WorkerTransferSerializer(transfer)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = WorkerTransferSerializer(transfer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='WorkerTransfer',
            object_id=transfer.id, object_name=transfer.worker.name,
            changes={'amount': transfer.amount}
        )
        transfer.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Misc expense views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def misc_expense_list_create(request):
    """List petty site expenses or record one"""
    if request.method == 'GET':
        queryset = WorkerMiscExpense.objects.select_related('project').all()
        expense_filter = WorkerMiscExpenseFilter(request.query_params, queryset=queryset)
        if not expense_filter.is_valid():
            return Response(expense_filter.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = WorkerMiscExpenseSerializer(expense_filter.qs, many=True)
        return Response(serializer.data)
    else:
        serializer = WorkerMiscExpenseSerializer(data=request.data)
        if serializer.is_valid():
            expense = serializer.save(created_by=request.user)
            return Response(WorkerMiscExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def misc_expense_detail(request, pk):
    """Retrieve, update or delete a petty expense"""
    expense = get_object_or_404(WorkerMiscExpense, pk=pk)

    if request.method == 'GET':
        serializer = WorkerMiscExpenseSerializer(expense)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = WorkerMiscExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        expense.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
