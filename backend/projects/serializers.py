from rest_framework import serializers
from .models import Project, FundTransfer, ProjectFundTransfer, DailyExpenseSummary


class ProjectSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = Project
        fields = [
            'id', 'name', 'status', 'description', 'location', 'start_date', 'budget',
            'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("اسم المشروع مطلوب")
        return value


class FundTransferSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)

    class Meta:
        model = FundTransfer
        fields = [
            'id', 'project', 'project_name', 'amount', 'sender_name', 'transfer_number',
            'transfer_type', 'transfer_date', 'notes', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("المبلغ يجب أن يكون أكبر من صفر")
        return value

    def validate_transfer_number(self, value):
        # Empty strings would otherwise collide with each other in lookups
        return value or None


class ProjectFundTransferSerializer(serializers.ModelSerializer):
    from_project_name = serializers.CharField(source='from_project.name', read_only=True)
    to_project_name = serializers.CharField(source='to_project.name', read_only=True)

    class Meta:
        model = ProjectFundTransfer
        fields = [
            'id', 'from_project', 'from_project_name', 'to_project', 'to_project_name',
            'amount', 'transfer_reason', 'description', 'transfer_date',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("المبلغ يجب أن يكون أكبر من صفر")
        return value

    def validate(self, attrs):
        from_project = attrs.get('from_project', getattr(self.instance, 'from_project', None))
        to_project = attrs.get('to_project', getattr(self.instance, 'to_project', None))
        if from_project is not None and from_project == to_project:
            raise serializers.ValidationError({
                'to_project': "لا يمكن التحويل إلى نفس المشروع"
            })
        return attrs


class DailyExpenseSummarySerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)

    class Meta:
        model = DailyExpenseSummary
        fields = [
            'id', 'project', 'project_name', 'date', 'carried_forward_amount',
            'total_fund_transfers', 'total_incoming_project_transfers',
            'total_outgoing_project_transfers', 'total_worker_wages',
            'total_material_costs', 'total_transportation_costs',
            'total_worker_transfers', 'total_worker_misc_expenses',
            'total_income', 'total_expenses', 'remaining_balance', 'updated_at'
        ]
        read_only_fields = fields
