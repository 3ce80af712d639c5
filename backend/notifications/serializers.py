from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    is_read = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            'id', 'type', 'title', 'body', 'payload', 'priority', 'project', 'project_name',
            'recipients', 'created_by', 'created_at', 'is_read'
        ]
        read_only_fields = ['created_by']

    def get_is_read(self, obj):
        return obj.id in self.context.get('read_ids', set())

    def validate_recipients(self, value):
        if not isinstance(value, list) or not all(isinstance(item, int) or str(item).isdigit() for item in value):
            raise serializers.ValidationError('recipients must be a list of user ids')
        return [int(item) for item in value]
