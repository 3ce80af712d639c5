from rest_framework import serializers
from .models import Supplier, SupplierPayment


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'contact_person', 'phone', 'address', 'payment_terms',
            'total_debt', 'is_active', 'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = ['total_debt']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('اسم المورد مطلوب')
        duplicates = Supplier.objects.filter(name__iexact=value)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError('يوجد مورد بهذا الاسم مسبقاً')
        return value


class SupplierPaymentSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = SupplierPayment
        fields = [
            'id', 'supplier', 'supplier_name', 'project', 'project_name', 'amount',
            'payment_method', 'payment_date', 'reference_number', 'notes',
            'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('المبلغ يجب أن يكون أكبر من صفر')
        return value
