from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404

from backend.core.utils import create_audit_log, is_admin_user, parse_positive_int
from .models import Notification
from .serializers import NotificationSerializer
from .services import (
    get_user_notifications, mark_as_read, mark_all_as_read, get_notification_stats
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def notification_list_create(request):
    """Notifications of the current user, or create one"""
    if request.method == 'GET':
        try:
            limit = parse_positive_int(request.query_params.get('limit'), 50, maximum=200)
            offset = int(request.query_params.get('offset', 0))
            if offset < 0:
                raise ValueError(offset)
            project_id = parse_positive_int(request.query_params.get('project'), None)
        except ValueError:
            return Response(
                {'error': 'limit and project must be positive integers, offset non-negative'},
                status=status.HTTP_400_BAD_REQUEST
            )
        unread_only = request.query_params.get('unread_only', '').lower() in ('true', '1')
        result = get_user_notifications(
            request.user,
            type=request.query_params.get('type', None),
            project_id=project_id,
            unread_only=unread_only,
            limit=limit,
            offset=offset,
        )
        serializer = NotificationSerializer(
            result['notifications'], many=True, context={'read_ids': result['read_ids']}
        )
        return Response({
            'notifications': serializer.data,
            'unreadCount': result['unreadCount'],
            'total': result['total'],
        })
    else:
        serializer = NotificationSerializer(data=request.data)
        if serializer.is_valid():
            notification = serializer.save(created_by=request.user)
            return Response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk)
    if not notification.is_for(request.user):
        return Response({'error': 'Notification not found'}, status=status.HTTP_404_NOT_FOUND)
    state = mark_as_read(notification, request.user)
    return Response({'id': notification.id, 'is_read': state.is_read, 'read_at': state.read_at})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    project_id = request.data.get('project') or request.query_params.get('project', None)
    count = mark_all_as_read(request.user, project_id)
    return Response({'marked': count})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def notification_delete(request, pk):
    """Delete a notification (its creator or an admin)"""
    notification = get_object_or_404(Notification, pk=pk)
    if notification.created_by_id != request.user.id and not is_admin_user(request.user):
        return Response({'error': 'Only Admin users can delete this notification'}, status=status.HTTP_403_FORBIDDEN)
    create_audit_log(
        request=request, action='delete', model_name='Notification',
        object_id=notification.id, object_name=notification.title
    )
    notification.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_stats(request):
    return Response(get_notification_stats(request.user))
