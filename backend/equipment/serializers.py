from rest_framework import serializers
from .models import Equipment, EquipmentMovement, EquipmentMaintenance, EquipmentUsage


class EquipmentSerializer(serializers.ModelSerializer):
    current_project_name = serializers.CharField(source='current_project.name', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    condition_display = serializers.CharField(source='get_condition_display', read_only=True)

    class Meta:
        model = Equipment
        fields = [
            'id', 'code', 'name', 'category', 'description', 'purchase_price', 'purchase_date',
            'status', 'status_display', 'condition', 'condition_display',
            'current_project', 'current_project_name', 'maintenance_interval_days',
            'last_maintenance_date', 'created_at', 'updated_at'
        ]
        read_only_fields = ['code']

    def validate_purchase_price(self, value):
        if value < 0:
            raise serializers.ValidationError('سعر الشراء لا يمكن أن يكون سالباً')
        return value


class EquipmentMovementSerializer(serializers.ModelSerializer):
    equipment_code = serializers.CharField(source='equipment.code', read_only=True)
    from_project_name = serializers.CharField(source='from_project.name', read_only=True)
    to_project_name = serializers.CharField(source='to_project.name', read_only=True)
    moved_by_username = serializers.CharField(source='moved_by.username', read_only=True)

    class Meta:
        model = EquipmentMovement
        fields = [
            'id', 'equipment', 'equipment_code', 'from_project', 'from_project_name',
            'to_project', 'to_project_name', 'moved_by', 'moved_by_username',
            'reason', 'movement_date', 'notes', 'created_at'
        ]


class EquipmentTransferSerializer(serializers.Serializer):
    """Input of the transfer action; to_project null moves the tool back to the store"""
    to_project = serializers.IntegerField(allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    movement_date = serializers.DateField(required=False)

    def validate_to_project(self, value):
        from backend.projects.models import Project
        if value is not None and not Project.objects.filter(pk=value).exists():
            raise serializers.ValidationError('المشروع غير موجود')
        return value


class EquipmentMaintenanceSerializer(serializers.ModelSerializer):
    class Meta:
        model = EquipmentMaintenance
        fields = [
            'id', 'equipment', 'maintenance_type', 'cost', 'performed_at',
            'next_due_date', 'notes', 'created_by', 'created_at'
        ]
        read_only_fields = ['equipment', 'created_by']


class EquipmentUsageSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)

    class Meta:
        model = EquipmentUsage
        fields = ['id', 'equipment', 'project', 'project_name', 'usage_date', 'hours', 'notes', 'created_at']
        read_only_fields = ['equipment']

    def validate_hours(self, value):
        if value <= 0 or value > 24:
            raise serializers.ValidationError('ساعات الاستخدام يجب أن تكون بين 0 و 24')
        return value
