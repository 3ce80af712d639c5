from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ReportTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('template_name', models.CharField(default='default', max_length=100)),
                ('header_title', models.CharField(default='نظام إدارة مشاريع البناء', max_length=255)),
                ('company_name', models.CharField(default='شركة البناء والتطوير', max_length=255)),
                ('company_address', models.CharField(blank=True, max_length=255)),
                ('company_phone', models.CharField(blank=True, max_length=50)),
                ('company_email', models.CharField(blank=True, max_length=100)),
                ('footer_text', models.CharField(default='تم إنشاء هذا التقرير بواسطة نظام إدارة المشاريع', max_length=255)),
                ('footer_contact', models.CharField(blank=True, max_length=255)),
                ('primary_color', models.CharField(default='4472C4', max_length=7)),
                ('secondary_color', models.CharField(default='D6E4F0', max_length=7)),
                ('text_color', models.CharField(default='1F2937', max_length=7)),
                ('font_size', models.PositiveSmallIntegerField(default=11)),
                ('font_family', models.CharField(default='Arial', max_length=50)),
                ('page_orientation', models.CharField(choices=[('portrait', 'Portrait'), ('landscape', 'Landscape')], default='portrait', max_length=20)),
                ('show_header', models.BooleanField(default=True)),
                ('show_footer', models.BooleanField(default=True)),
                ('show_date', models.BooleanField(default=True)),
                ('is_active', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'report_templates',
                'ordering': ['-created_at'],
            },
        ),
    ]
