from decimal import Decimal

from rest_framework import serializers

from backend.parties.models import Supplier
from .models import Material, MaterialPurchase, TransportationExpense, normalize_purchase_type


class MaterialSerializer(serializers.ModelSerializer):
    class Meta:
        model = Material
        fields = ['id', 'name', 'category', 'unit', 'created_at', 'updated_at']
        # Duplicate (name, unit) is reported on name by validate()
        validators = []

    def validate(self, attrs):
        name = attrs.get('name', getattr(self.instance, 'name', '')).strip()
        unit = attrs.get('unit', getattr(self.instance, 'unit', '')).strip()
        duplicates = Material.objects.filter(name=name, unit=unit)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError({'name': 'هذه المادة مسجلة بنفس الوحدة مسبقاً'})
        attrs['name'] = name
        attrs['unit'] = unit
        return attrs


class MaterialPurchaseSerializer(serializers.ModelSerializer):
    """
    Accepts either a material id or material_name/material_unit (created when
    missing) and any of the Arabic purchase type labels.
    """
    material = serializers.PrimaryKeyRelatedField(queryset=Material.objects.all(), required=False)
    material_name = serializers.CharField(write_only=True, required=False)
    material_unit = serializers.CharField(write_only=True, required=False)
    material_category = serializers.CharField(write_only=True, required=False, allow_blank=True)
    purchase_type = serializers.CharField(required=False)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)

    material_detail = MaterialSerializer(source='material', read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True)
    purchase_type_display = serializers.CharField(source='get_purchase_type_display', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = MaterialPurchase
        fields = [
            'id', 'project', 'project_name', 'material', 'material_detail',
            'material_name', 'material_unit', 'material_category',
            'supplier', 'supplier_name', 'quantity', 'unit_price', 'total_amount',
            'purchase_type', 'purchase_type_display', 'invoice_number', 'invoice_date',
            'invoice_photo', 'notes', 'purchase_date',
            'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by']

    def validate_purchase_type(self, value):
        normalized = normalize_purchase_type(value)
        if normalized not in dict(MaterialPurchase.PURCHASE_TYPE_CHOICES):
            raise serializers.ValidationError(f'نوع الشراء غير معروف: {value}')
        return normalized

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('الكمية يجب أن تكون أكبر من صفر')
        return value

    def validate_unit_price(self, value):
        if value < 0:
            raise serializers.ValidationError('سعر الوحدة لا يمكن أن يكون سالباً')
        return value

    def validate(self, attrs):
        material_name = attrs.pop('material_name', '').strip()
        material_unit = attrs.pop('material_unit', '').strip()
        material_category = attrs.pop('material_category', '').strip()

        if 'material' not in attrs and material_name:
            if not material_unit:
                raise serializers.ValidationError({'material_unit': 'وحدة المادة مطلوبة'})
            material, _ = Material.objects.get_or_create(
                name=material_name, unit=material_unit,
                defaults={'category': material_category}
            )
            attrs['material'] = material
        if self.instance is None and 'material' not in attrs:
            raise serializers.ValidationError({'material': 'المادة مطلوبة'})

        # Link a typed supplier name to the registered supplier
        supplier = attrs.get('supplier')
        supplier_name = attrs.get('supplier_name', '').strip()
        if supplier is None and supplier_name and 'supplier' not in attrs:
            attrs['supplier'] = Supplier.objects.filter(name__iexact=supplier_name).first()
        if supplier is not None and not supplier_name:
            attrs['supplier_name'] = supplier.name

        if 'total_amount' not in attrs and ('quantity' in attrs or 'unit_price' in attrs):
            quantity = attrs.get('quantity', getattr(self.instance, 'quantity', None))
            unit_price = attrs.get('unit_price', getattr(self.instance, 'unit_price', None))
            if quantity is not None and unit_price is not None:
                attrs['total_amount'] = (quantity * unit_price).quantize(Decimal('0.01'))
        return attrs


class TransportationExpenseSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    worker_name = serializers.CharField(source='worker.name', read_only=True)

    class Meta:
        model = TransportationExpense
        fields = [
            'id', 'project', 'project_name', 'worker', 'worker_name', 'amount',
            'description', 'date', 'notes', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('المبلغ يجب أن يكون أكبر من صفر')
        return value
