from django.db import models


class ReportTemplate(models.Model):
    """Header, footer and colors applied to exported reports; one template is active"""
    ORIENTATION_CHOICES = [
        ('portrait', 'Portrait'),
        ('landscape', 'Landscape'),
    ]

    template_name = models.CharField(max_length=100, default='default')
    header_title = models.CharField(max_length=255, default='نظام إدارة مشاريع البناء')
    company_name = models.CharField(max_length=255, default='شركة البناء والتطوير')
    company_address = models.CharField(max_length=255, blank=True)
    company_phone = models.CharField(max_length=50, blank=True)
    company_email = models.CharField(max_length=100, blank=True)
    footer_text = models.CharField(max_length=255, default='تم إنشاء هذا التقرير بواسطة نظام إدارة المشاريع')
    footer_contact = models.CharField(max_length=255, blank=True)
    # Hex colors without the leading '#'
    primary_color = models.CharField(max_length=7, default='4472C4')
    secondary_color = models.CharField(max_length=7, default='D6E4F0')
    text_color = models.CharField(max_length=7, default='1F2937')
    font_size = models.PositiveSmallIntegerField(default=11)
    font_family = models.CharField(max_length=50, default='Arial')
    page_orientation = models.CharField(max_length=20, choices=ORIENTATION_CHOICES, default='portrait')
    show_header = models.BooleanField(default=True)
    show_footer = models.BooleanField(default=True)
    show_date = models.BooleanField(default=True)
    is_active = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.template_name}{' (active)' if self.is_active else ''}"

    def save(self, *args, **kwargs):
        for field in ('primary_color', 'secondary_color', 'text_color'):
            setattr(self, field, (getattr(self, field) or '').lstrip('#').upper())
        super().save(*args, **kwargs)
        if self.is_active:
            ReportTemplate.objects.filter(is_active=True).exclude(pk=self.pk).update(is_active=False)

    @classmethod
    def get_active(cls):
        """Latest active template, creating the default one when none is active"""
        template = cls.objects.filter(is_active=True).order_by('-updated_at').first()
        if template is None:
            template = cls.objects.create(is_active=True)
        return template

    class Meta:
        db_table = 'report_templates'
        ordering = ['-created_at']
