import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404

from backend.core.utils import create_audit_log, is_admin_user, money, parse_date
from .models import Project, FundTransfer, ProjectFundTransfer
from .serializers import (
    ProjectSerializer, FundTransferSerializer,
    ProjectFundTransferSerializer, DailyExpenseSummarySerializer
)
from .services import (
    get_project_statistics, get_or_create_daily_summary,
    get_previous_balance, recalculate_all_balances
)

logger = logging.getLogger(__name__)


# Project views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_list_create(request):
    """List projects or create a new project"""
    if request.method == 'GET':
        queryset = Project.objects.all()
        status_filter = request.query_params.get('status', None)
        search = request.query_params.get('search', None)
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(location__icontains=search)
            )
        serializer = ProjectSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = ProjectSerializer(data=request.data)
        if serializer.is_valid():
            project = serializer.save(created_by=request.user)
            create_audit_log(
                request=request, action='create', model_name='Project',
                object_id=project.id, object_name=project.name,
                changes={'status': project.status}
            )
            return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_detail(request, pk):
    """Retrieve, update or delete a project"""
    project = get_object_or_404(Project, pk=pk)

    if request.method == 'GET':
        serializer = ProjectSerializer(project)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProjectSerializer(project, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='Project',
                object_id=project.id, object_name=project.name,
                changes=dict(request.data)
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if not is_admin_user(request.user):
            return Response({'error': 'Only Admin users can delete projects'}, status=status.HTTP_403_FORBIDDEN)
        create_audit_log(
            request=request, action='delete', model_name='Project',
            object_id=project.id, object_name=project.name
        )
        project.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def project_stats(request, pk):
    """Income, expenses, balance and activity counters of one project"""
    project = get_object_or_404(Project, pk=pk)
    stats = get_project_statistics(project.id)
    response = Response({'project': ProjectSerializer(project).data, 'stats': stats})
    response['Cache-Control'] = 'private, max-age=60'
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def project_list_with_stats(request):
    """Every project with its statistics"""
    queryset = Project.objects.all()
    status_filter = request.query_params.get('status', None)
    if status_filter:
        queryset = queryset.filter(status=status_filter)

    results = []
    for project in queryset:
        data = ProjectSerializer(project).data
        data['stats'] = get_project_statistics(project.id)
        results.append(data)
    return Response(results)


# Fund transfer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def fund_transfer_list_create(request):
    """List custody transfers or record a new one"""
    if request.method == 'GET':
        queryset = FundTransfer.objects.select_related('project').all()
        project_id = request.query_params.get('project', None)
        date_from = request.query_params.get('date_from', None)
        date_to = request.query_params.get('date_to', None)
        transfer_date = request.query_params.get('date', None)
        if project_id:
            queryset = queryset.filter(project_id=project_id)
        if transfer_date:
            queryset = queryset.filter(transfer_date=transfer_date)
        if date_from:
            queryset = queryset.filter(transfer_date__gte=date_from)
        if date_to:
            queryset = queryset.filter(transfer_date__lte=date_to)
        serializer = FundTransferSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = FundTransferSerializer(data=request.data)
        if serializer.is_valid():
            transfer = serializer.save(created_by=request.user)
            create_audit_log(
                request=request, action='fund_transfer', model_name='FundTransfer',
                object_id=transfer.id, object_name=transfer.project.name,
                object_reference=transfer.transfer_number,
                changes={'amount': transfer.amount, 'transfer_date': transfer.transfer_date}
            )
            return Response(FundTransferSerializer(transfer).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def fund_transfer_detail(request, pk):
    """Retrieve, update or delete a custody transfer"""
    transfer = get_object_or_404(FundTransfer, pk=pk)

    if request.method == 'GET':
        serializer = FundTransferSerializer(transfer)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = FundTransferSerializer(transfer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='FundTransfer',
                object_id=transfer.id, object_reference=transfer.transfer_number,
                changes=dict(request.data)
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='FundTransfer',
            object_id=transfer.id, object_reference=transfer.transfer_number,
            changes={'amount': transfer.amount, 'transfer_date': transfer.transfer_date}
        )
        transfer.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Project-to-project transfer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_fund_transfer_list_create(request):
    """List transfers between projects or move money between two projects"""
    if request.method == 'GET':
        queryset = ProjectFundTransfer.objects.select_related('from_project', 'to_project').all()
        project_id = request.query_params.get('project', None)
        date_from = request.query_params.get('date_from', None)
        date_to = request.query_params.get('date_to', None)
        if project_id:
            queryset = queryset.filter(Q(from_project_id=project_id) | Q(to_project_id=project_id))
        if date_from:
            queryset = queryset.filter(transfer_date__gte=date_from)
        if date_to:
            queryset = queryset.filter(transfer_date__lte=date_to)
        serializer = ProjectFundTransferSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = ProjectFundTransferSerializer(data=request.data)
        if serializer.is_valid():
            transfer = serializer.save(created_by=request.user)
            create_audit_log(
                request=request, action='project_transfer', model_name='ProjectFundTransfer',
                object_id=transfer.id,
                object_name=f"{transfer.from_project.name} → {transfer.to_project.name}",
                changes={'amount': transfer.amount, 'transfer_date': transfer.transfer_date}
            )
            return Response(ProjectFundTransferSerializer(transfer).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_fund_transfer_detail(request, pk):
    """Retrieve, update or delete a transfer between projects"""
    transfer = get_object_or_404(ProjectFundTransfer, pk=pk)

    if request.method == 'GET':
        serializer = ProjectFundTransferSerializer(transfer)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProjectFundTransferSerializer(transfer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='ProjectFundTransfer',
                object_id=transfer.id, changes=dict(request.data)
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='ProjectFundTransfer',
            object_id=transfer.id, changes={'amount': transfer.amount}
        )
        transfer.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Daily summary views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def daily_summary(request, pk, date):
    """Cash-box summary of a project on one day (computed when missing)"""
    project = get_object_or_404(Project, pk=pk)
    summary_date = parse_date(date)
    if summary_date is None:
        return Response({'error': 'Invalid date, expected YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)
    summary = get_or_create_daily_summary(project.id, summary_date)
    return Response(DailyExpenseSummarySerializer(summary).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def previous_balance(request, pk, date):
    """Balance carried into ``date`` from the latest earlier summary"""
    project = get_object_or_404(Project, pk=pk)
    summary_date = parse_date(date)
    if summary_date is None:
        return Response({'error': 'Invalid date, expected YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)
    balance = get_previous_balance(project.id, summary_date)
    return Response({
        'project': project.id,
        'date': summary_date.isoformat(),
        'previous_balance': money(balance),
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recalculate_balances(request, pk):
    """Recompute every stored daily summary of a project"""
    project = get_object_or_404(Project, pk=pk)
    try:
        count = recalculate_all_balances(project.id)
    except Exception as e:
        logger.error(f"Error recalculating balances for project {project.id}: {str(e)}", exc_info=True)
        return Response({'error': 'خطأ في إعادة حساب الأرصدة'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    create_audit_log(
        request=request, action='balances_recalculate', model_name='Project',
        object_id=project.id, object_name=project.name, changes={'summaries': count}
    )
    return Response({'project': project.id, 'recalculated': count})
