from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import F, Q
from django.utils import timezone
from .models import Setting, AuditLog, AutocompleteEntry
from .serializers import (
    UserSerializer, UserCreateSerializer,
    SettingSerializer, AuditLogSerializer, AutocompleteEntrySerializer
)
from .utils import parse_positive_int

User = get_user_model()

APPLICATION_GROUPS = ('Admin', 'ProjectManager', 'Accountant', 'SiteEngineer')


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['groups'] = list(user.groups.values_list('name', flat=True))
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.all().order_by('username')
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with groups and access flags"""
    user = request.user
    user_data = UserSerializer(user).data
    user_groups = user_data['groups']

    is_admin_group = 'Admin' in user_groups
    is_manager = 'ProjectManager' in user_groups
    is_accountant = 'Accountant' in user_groups

    if any(group in APPLICATION_GROUPS for group in user_groups):
        user_data['is_admin'] = is_admin_group
        # Site engineers record attendance and expenses but do not see reports
        user_data['can_access_reports'] = is_admin_group or is_manager or is_accountant
        user_data['can_manage_projects'] = is_admin_group or is_manager
        user_data['can_manage_suppliers'] = is_admin_group or is_manager or is_accountant
    else:
        # Superusers/staff without an application group keep full access
        is_superuser_or_staff = user.is_superuser or user.is_staff
        user_data['is_admin'] = is_superuser_or_staff
        user_data['can_access_reports'] = is_superuser_or_staff
        user_data['can_manage_projects'] = is_superuser_or_staff
        user_data['can_manage_suppliers'] = is_superuser_or_staff

    return Response(user_data)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def setting_list_create(request):
    """List all settings or create a new setting"""
    if request.method == 'GET':
        settings = Setting.objects.all().order_by('key')
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)
    else:
        serializer = SettingSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        serializer = SettingSerializer(setting)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SettingSerializer(setting, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user').all()

    # Non-admins only see their own actions
    if not request.user.is_staff:
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not request.user.is_staff and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Search projects, workers, suppliers, materials and equipment by name"""
    query = request.query_params.get('q', '').strip()

    if not query:
        return Response({
            'projects': [],
            'workers': [],
            'suppliers': [],
            'materials': [],
            'equipment': [],
        })

    from backend.projects.models import Project
    from backend.workers.models import Worker
    from backend.parties.models import Supplier
    from backend.purchasing.models import Material
    from backend.equipment.models import Equipment
    from backend.projects.serializers import ProjectSerializer
    from backend.workers.serializers import WorkerSerializer
    from backend.parties.serializers import SupplierSerializer
    from backend.purchasing.serializers import MaterialSerializer
    from backend.equipment.serializers import EquipmentSerializer

    results = {}

    projects = Project.objects.filter(
        Q(name__icontains=query) | Q(location__icontains=query)
    )[:20]
    results['projects'] = ProjectSerializer(projects, many=True).data

    workers = Worker.objects.filter(
        Q(name__icontains=query) |
        Q(type__icontains=query) |
        Q(phone__icontains=query)
    )[:20]
    results['workers'] = WorkerSerializer(workers, many=True).data

    suppliers = Supplier.objects.filter(
        Q(name__icontains=query) |
        Q(contact_person__icontains=query) |
        Q(phone__icontains=query)
    )[:20]
    results['suppliers'] = SupplierSerializer(suppliers, many=True).data

    materials = Material.objects.filter(
        Q(name__icontains=query) | Q(category__icontains=query)
    )[:20]
    results['materials'] = MaterialSerializer(materials, many=True).data

    equipment = Equipment.objects.filter(
        Q(name__icontains=query) | Q(code__icontains=query)
    )[:20]
    results['equipment'] = EquipmentSerializer(equipment, many=True, context={'request': request}).data

    return Response(results)


# Autocomplete views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def autocomplete_list(request, category):
    """Remembered values of a category, most used first"""
    try:
        limit = parse_positive_int(request.query_params.get('limit'), 50, maximum=200)
    except ValueError:
        return Response({'error': 'limit must be a positive integer'}, status=status.HTTP_400_BAD_REQUEST)
    entries = AutocompleteEntry.objects.filter(category=category)[:limit]
    return Response(AutocompleteEntrySerializer(entries, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def autocomplete_save(request):
    """Remember a value; repeating one only bumps its usage count"""
    serializer = AutocompleteEntrySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    category = serializer.validated_data['category']
    value = serializer.validated_data['value']
    updated = AutocompleteEntry.objects.filter(category=category, value=value).update(
        usage_count=F('usage_count') + 1, last_used=timezone.now()
    )
    if updated:
        entry = AutocompleteEntry.objects.get(category=category, value=value)
        return Response(AutocompleteEntrySerializer(entry).data)
    entry = serializer.save()
    return Response(AutocompleteEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def autocomplete_remove(request, category, value):
    """Forget a remembered value"""
    deleted, _ = AutocompleteEntry.objects.filter(category=category, value=value.strip()).delete()
    if not deleted:
        return Response({'error': 'Autocomplete value not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(status=status.HTTP_204_NO_CONTENT)
