import re

from rest_framework import serializers
from django.contrib.auth.models import Group
from django.contrib.auth.password_validation import validate_password
from .models import User, Setting, AuditLog, AutocompleteEntry

SETTING_KEY_RE = re.compile(r'^[a-z][a-z0-9_.]*$')
PHONE_RE = re.compile(r'^\+?[0-9 ]{6,20}$')


class UserSerializer(serializers.ModelSerializer):
    """Users as managed by admins; groups are assigned by name"""
    full_name = serializers.SerializerMethodField()
    groups = serializers.SlugRelatedField(
        many=True, slug_field='name', queryset=Group.objects.all(), required=False
    )

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'full_name', 'phone',
                  'groups', 'is_active', 'is_staff', 'last_login', 'created_at', 'updated_at']
        read_only_fields = ['last_login', 'created_at', 'updated_at']

    def get_full_name(self, obj):
        return obj.get_full_name() or obj.username


class UserCreateSerializer(serializers.ModelSerializer):
    """Self-registration; group membership is granted afterwards by an admin"""
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "كلمتا المرور غير متطابقتين"})
        phone = attrs.get('phone')
        if phone and not PHONE_RE.match(phone):
            raise serializers.ValidationError({"phone": "رقم الهاتف غير صالح"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'description', 'updated_at']

    def validate(self, attrs):
        if 'key' in attrs:
            attrs['key'] = attrs['key'].strip().lower()
            if not SETTING_KEY_RE.match(attrs['key']):
                raise serializers.ValidationError({'key': 'المفتاح يقبل الحروف الإنجليزية الصغيرة والأرقام و _ و . فقط'})
            taken = Setting.objects.filter(key=attrs['key'])
            if self.instance is not None:
                taken = taken.exclude(pk=self.instance.pk)
            if taken.exists():
                raise serializers.ValidationError({'key': 'هذا المفتاح مستخدم مسبقاً'})
        return attrs


class AuditLogSerializer(serializers.ModelSerializer):
    user_username = serializers.CharField(source='user.username', read_only=True, default=None)
    action_display = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'user_username', 'action', 'action_display', 'model_name', 'object_id',
                  'object_name', 'object_reference', 'changes', 'ip_address', 'created_at']


class AutocompleteEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = AutocompleteEntry
        fields = ['id', 'category', 'value', 'usage_count', 'last_used', 'created_at']
        read_only_fields = ['usage_count', 'last_used', 'created_at']
        # Saving an existing (category, value) bumps its counter instead of failing
        validators = []

    def validate(self, attrs):
        attrs['category'] = attrs['category'].strip()
        attrs['value'] = attrs['value'].strip()
        if len(attrs['value']) < 2:
            raise serializers.ValidationError({'value': 'قيمة الإكمال التلقائي يجب أن تكون على الأقل حرفين'})
        return attrs
