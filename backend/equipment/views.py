import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone

from backend.core.utils import create_audit_log
from .analytics import predict_maintenance, build_recommendations, equipment_summary, URGENCY_ORDER
from .label_generator import generate_equipment_label
from .models import Equipment, EquipmentMovement
from .serializers import (
    EquipmentSerializer, EquipmentMovementSerializer, EquipmentTransferSerializer,
    EquipmentMaintenanceSerializer, EquipmentUsageSerializer
)

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def equipment_list_create(request):
    """List equipment or register a new tool"""
    if request.method == 'GET':
        queryset = Equipment.objects.select_related('current_project')
        status_filter = request.query_params.get('status', None)
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        project = request.query_params.get('project', None)
        if project:
            queryset = queryset.filter(current_project_id=project)
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(code__icontains=search) | Q(category__icontains=search)
            )
        serializer = EquipmentSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = EquipmentSerializer(data=request.data)
        if serializer.is_valid():
            equipment = serializer.save()
            create_audit_log(
                request=request, action='create', model_name='Equipment',
                object_id=equipment.id, object_name=equipment.name, object_reference=equipment.code
            )
            return Response(EquipmentSerializer(equipment).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def equipment_detail(request, pk):
    """Retrieve, update or delete a tool"""
    equipment = get_object_or_404(Equipment, pk=pk)

    if request.method == 'GET':
        return Response(EquipmentSerializer(equipment).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = EquipmentSerializer(equipment, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='Equipment',
                object_id=equipment.id, object_name=equipment.name,
                object_reference=equipment.code, changes=dict(request.data)
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='Equipment',
            object_id=equipment.id, object_name=equipment.name, object_reference=equipment.code
        )
        equipment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def equipment_transfer(request, pk):
    """Move a tool to another project (or back to the store)"""
    equipment = get_object_or_404(Equipment, pk=pk)
    serializer = EquipmentTransferSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    to_project_id = serializer.validated_data['to_project']
    if to_project_id == equipment.current_project_id:
        return Response(
            {'to_project': ['المعدة موجودة في هذا المشروع بالفعل']},
            status=status.HTTP_400_BAD_REQUEST
        )

    with transaction.atomic():
        movement = EquipmentMovement.objects.create(
            equipment=equipment,
            from_project_id=equipment.current_project_id,
            to_project_id=to_project_id,
            moved_by=request.user,
            reason=serializer.validated_data['reason'],
            notes=serializer.validated_data['notes'],
            movement_date=serializer.validated_data.get('movement_date') or timezone.localdate(),
        )
        equipment.current_project_id = to_project_id
        equipment.status = 'in_use' if to_project_id else 'available'
        equipment.save(update_fields=['current_project', 'status', 'updated_at'])

    create_audit_log(
        request=request, action='equipment_transfer', model_name='Equipment',
        object_id=equipment.id, object_name=equipment.name, object_reference=equipment.code,
        changes={'from_project': movement.from_project_id, 'to_project': to_project_id}
    )
    return Response({
        'equipment': EquipmentSerializer(equipment).data,
        'movement': EquipmentMovementSerializer(movement).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def equipment_movements(request, pk):
    equipment = get_object_or_404(Equipment, pk=pk)
    movements = equipment.movements.select_related('from_project', 'to_project', 'moved_by')
    return Response(EquipmentMovementSerializer(movements, many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def equipment_maintenance(request, pk):
    """Maintenance history of a tool, or record a maintenance"""
    equipment = get_object_or_404(Equipment, pk=pk)

    if request.method == 'GET':
        serializer = EquipmentMaintenanceSerializer(equipment.maintenance_records.all(), many=True)
        return Response(serializer.data)

    serializer = EquipmentMaintenanceSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        record = serializer.save(equipment=equipment, created_by=request.user)
        if not equipment.last_maintenance_date or record.performed_at >= equipment.last_maintenance_date:
            equipment.last_maintenance_date = record.performed_at
        if equipment.status == 'maintenance':
            equipment.status = 'in_use' if equipment.current_project_id else 'available'
        equipment.save(update_fields=['last_maintenance_date', 'status', 'updated_at'])

    create_audit_log(
        request=request, action='equipment_maintenance', model_name='Equipment',
        object_id=equipment.id, object_name=equipment.name, object_reference=equipment.code,
        changes={'maintenance_type': record.maintenance_type, 'cost': record.cost}
    )
    return Response(EquipmentMaintenanceSerializer(record).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def equipment_usage(request, pk):
    """Usage hours of a tool"""
    equipment = get_object_or_404(Equipment, pk=pk)

    if request.method == 'GET':
        serializer = EquipmentUsageSerializer(equipment.usage_records.select_related('project'), many=True)
        return Response(serializer.data)

    serializer = EquipmentUsageSerializer(data=request.data)
    if serializer.is_valid():
        project = serializer.validated_data.get('project') or equipment.current_project
        record = serializer.save(equipment=equipment, project=project)
        return Response(EquipmentUsageSerializer(record).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def equipment_label(request, pk):
    """Printable Code128 label of a tool"""
    equipment = get_object_or_404(Equipment.objects.select_related('current_project'), pk=pk)
    try:
        image = generate_equipment_label(
            equipment_name=equipment.name,
            code=equipment.code,
            project_name=equipment.current_project.name if equipment.current_project else None,
            category=equipment.category or None,
        )
    except Exception as e:
        logger.error(f"Label generation failed for equipment {equipment.id}: {e}", exc_info=True)
        return Response({'error': 'Failed to generate label'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({'code': equipment.code, 'image': image})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def equipment_predictive_maintenance(request):
    """
    Maintenance predictions ordered by urgency.

    Query params: urgency (critical/high/medium/low), timeframe (max days).
    Critical predictions raise a safety notification once per day.
    """
    urgency = request.query_params.get('urgency', None)
    if urgency and urgency not in URGENCY_ORDER:
        return Response({'error': f'Unknown urgency: {urgency}'}, status=status.HTTP_400_BAD_REQUEST)
    timeframe = request.query_params.get('timeframe', None)
    if timeframe is not None:
        if not timeframe.isdigit():
            return Response({'error': 'timeframe must be a number of days'}, status=status.HTTP_400_BAD_REQUEST)
        timeframe = int(timeframe)

    predictions = predict_maintenance(urgency=urgency, timeframe=timeframe)

    from backend.notifications.services import notify_critical_maintenance
    for prediction in predictions:
        if prediction['urgency'] == 'critical':
            notify_critical_maintenance(prediction)

    summary = {level: 0 for level in URGENCY_ORDER}
    for prediction in predictions:
        summary[prediction['urgency']] += 1
    return Response({'predictions': predictions, 'summary': summary, 'total': len(predictions)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def equipment_recommendations(request):
    recommendations = build_recommendations()
    return Response({
        'recommendations': recommendations,
        'total': len(recommendations),
        'fleet': equipment_summary(),
    })
