from decimal import Decimal
from rest_framework import serializers
from .models import WorkerType, Worker, WorkerAttendance, WorkerTransfer, WorkerMiscExpense


class WorkerTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = WorkerType
        fields = ['id', 'name', 'usage_count', 'last_used']
        read_only_fields = ['usage_count', 'last_used']
        # Existing names are bumped by the view instead of rejected
        extra_kwargs = {'name': {'validators': []}}


class WorkerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Worker
        fields = ['id', 'name', 'type', 'daily_wage', 'phone', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_daily_wage(self, value):
        if value <= 0:
            raise serializers.ValidationError("الأجر اليومي يجب أن يكون أكبر من صفر")
        return value


class WorkerAttendanceSerializer(serializers.ModelSerializer):
    worker_name = serializers.CharField(source='worker.name', read_only=True)
    worker_type = serializers.CharField(source='worker.type', read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True)
    daily_wage = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    work_days = serializers.DecimalField(max_digits=4, decimal_places=2, required=False)

    class Meta:
        model = WorkerAttendance
        fields = [
            'id', 'project', 'project_name', 'worker', 'worker_name', 'worker_type', 'date',
            'start_time', 'end_time', 'work_description', 'is_present', 'work_days',
            'daily_wage', 'actual_wage', 'paid_amount', 'remaining_amount', 'payment_type',
            'notes', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['actual_wage', 'remaining_amount', 'created_by', 'created_at', 'updated_at']
        # Uniqueness is checked in validate() with a readable message
        validators = []

    def validate_work_days(self, value):
        if value is not None and (value < 0 or value > Decimal('2')):
            raise serializers.ValidationError("عدد أيام العمل يجب أن يكون بين 0 و 2")
        return value

    def validate_paid_amount(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("المبلغ المدفوع لا يمكن أن يكون سالباً")
        return value

    def validate(self, attrs):
        worker = attrs.get('worker', getattr(self.instance, 'worker', None))
        project = attrs.get('project', getattr(self.instance, 'project', None))
        date = attrs.get('date', getattr(self.instance, 'date', None))

        duplicates = WorkerAttendance.objects.filter(worker=worker, project=project, date=date)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("تم تسجيل حضور هذا العامل في هذا اليوم مسبقاً (already recorded)")

        if self.instance is None and not attrs.get('daily_wage') and worker is not None:
            attrs['daily_wage'] = worker.daily_wage
        if self.instance is None and attrs.get('work_days') is None:
            attrs['work_days'] = Decimal('1.00')
        return attrs


class WorkerTransferSerializer(serializers.ModelSerializer):
    worker_name = serializers.CharField(source='worker.name', read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True)

    class Meta:
        model = WorkerTransfer
        fields = [
            'id', 'worker', 'worker_name', 'project', 'project_name', 'amount',
            'recipient_name', 'recipient_phone', 'transfer_method', 'transfer_number',
            'transfer_date', 'notes', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("المبلغ يجب أن يكون أكبر من صفر")
        return value


class WorkerMiscExpenseSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)

    class Meta:
        model = WorkerMiscExpense
        fields = [
            'id', 'project', 'project_name', 'amount', 'description', 'date', 'notes',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("المبلغ يجب أن يكون أكبر من صفر")
        return value
