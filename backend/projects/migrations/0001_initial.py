import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('status', models.CharField(choices=[('active', 'نشط'), ('completed', 'مكتمل'), ('paused', 'متوقف')], default='active', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('budget', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='projects', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'projects',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status'], name='idx_project_status')],
            },
        ),
        migrations.CreateModel(
            name='FundTransfer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('sender_name', models.CharField(blank=True, max_length=200)),
                ('transfer_number', models.CharField(blank=True, max_length=100, null=True)),
                ('transfer_type', models.CharField(choices=[('hawaleh', 'حولة'), ('manual', 'تسليم يدوي'), ('exchange', 'صراف'), ('bank', 'تحويل بنكي')], default='hawaleh', max_length=20)),
                ('transfer_date', models.DateField()),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fund_transfers', to=settings.AUTH_USER_MODEL)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fund_transfers', to='projects.project')),
            ],
            options={
                'db_table': 'fund_transfers',
                'ordering': ['-transfer_date', '-created_at'],
                'indexes': [models.Index(fields=['project', 'transfer_date'], name='idx_fund_project_date')],
            },
        ),
        migrations.CreateModel(
            name='ProjectFundTransfer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('transfer_reason', models.CharField(blank=True, max_length=255)),
                ('description', models.TextField(blank=True)),
                ('transfer_date', models.DateField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='project_fund_transfers', to=settings.AUTH_USER_MODEL)),
                ('from_project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='outgoing_transfers', to='projects.project')),
                ('to_project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='incoming_transfers', to='projects.project')),
            ],
            options={
                'db_table': 'project_fund_transfers',
                'ordering': ['-transfer_date', '-created_at'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('from_project', models.F('to_project')), _negated=True), name='chk_project_transfer_distinct'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DailyExpenseSummary',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('carried_forward_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_fund_transfers', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_incoming_project_transfers', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_outgoing_project_transfers', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_worker_wages', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_material_costs', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_transportation_costs', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_worker_transfers', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_worker_misc_expenses', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_income', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_expenses', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('remaining_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='daily_summaries', to='projects.project')),
            ],
            options={
                'db_table': 'daily_expense_summaries',
                'ordering': ['project', 'date'],
                'unique_together': {('project', 'date')},
                'indexes': [models.Index(fields=['project', 'date'], name='idx_summary_project_date')],
            },
        ),
    ]
