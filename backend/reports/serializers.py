from rest_framework import serializers
from .models import ReportTemplate


class ReportTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReportTemplate
        fields = [
            'id', 'template_name', 'header_title', 'company_name', 'company_address',
            'company_phone', 'company_email', 'footer_text', 'footer_contact',
            'primary_color', 'secondary_color', 'text_color', 'font_size', 'font_family',
            'page_orientation', 'show_header', 'show_footer', 'show_date', 'is_active',
            'created_at', 'updated_at'
        ]

    def validate(self, attrs):
        for field in ('primary_color', 'secondary_color', 'text_color'):
            value = attrs.get(field)
            if value is None:
                continue
            cleaned = value.lstrip('#')
            if len(cleaned) != 6 or any(ch not in '0123456789abcdefABCDEF' for ch in cleaned):
                raise serializers.ValidationError({field: 'Expected a hex color such as #4472C4'})
        return attrs
