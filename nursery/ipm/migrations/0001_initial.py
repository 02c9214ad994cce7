# Generated manually

import django.db.models.deletion
import nursery.ipm.models
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('locations', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='IpmProduct',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('pcs_number', models.CharField(blank=True, help_text='Pesticide Control Service registration number', max_length=50, null=True)),
                ('active_ingredient', models.CharField(blank=True, max_length=200, null=True)),
                ('target_pests', models.JSONField(blank=True, default=list)),
                ('suggested_rate', models.DecimalField(blank=True, decimal_places=3, max_digits=10, null=True)),
                ('suggested_rate_unit', models.CharField(blank=True, max_length=20, null=True)),
                ('max_rate', models.DecimalField(blank=True, decimal_places=3, max_digits=10, null=True)),
                ('harvest_interval_days', models.PositiveIntegerField(blank=True, null=True)),
                ('rei_hours', models.PositiveIntegerField(default=0, help_text='Re-entry interval in hours')),
                ('use_restriction', models.CharField(choices=[('indoor', 'Indoor'), ('outdoor', 'Outdoor'), ('both', 'Both')], default='both', max_length=10)),
                ('application_methods', models.JSONField(blank=True, default=nursery.ipm.models.default_application_methods)),
                ('target_stock_bottles', models.PositiveIntegerField(default=5)),
                ('low_stock_threshold', models.PositiveIntegerField(default=2)),
                ('default_bottle_volume_ml', models.PositiveIntegerField(default=1000)),
                ('notes', models.TextField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ipm_products', to='core.organisation')),
            ],
            options={
                'db_table': 'ipm_products',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='IpmProgram',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, null=True)),
                ('interval_days', models.PositiveIntegerField(default=7)),
                ('duration_weeks', models.PositiveIntegerField(default=8)),
                ('schedule_type', models.CharField(choices=[('interval_based', 'Interval Based'), ('week_based', 'Week Based')], default='interval_based', max_length=20)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ipm_programs', to='core.organisation')),
            ],
            options={
                'db_table': 'ipm_programs',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='IpmProgramStep',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('step_order', models.PositiveIntegerField(default=1)),
                ('week_number', models.PositiveIntegerField(default=0)),
                ('rate', models.DecimalField(blank=True, decimal_places=3, max_digits=10, null=True)),
                ('rate_unit', models.CharField(blank=True, max_length=20, null=True)),
                ('method', models.CharField(blank=True, max_length=100, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('program', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='steps', to='ipm.ipmprogram')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='program_steps', to='ipm.ipmproduct')),
            ],
            options={
                'db_table': 'ipm_program_steps',
                'ordering': ['step_order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='IpmBottle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('bottle_code', models.CharField(max_length=50)),
                ('volume_ml', models.DecimalField(decimal_places=2, max_digits=10)),
                ('remaining_ml', models.DecimalField(decimal_places=2, max_digits=10)),
                ('batch_number', models.CharField(blank=True, max_length=100, null=True)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('purchase_date', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('sealed', 'Sealed'), ('open', 'Open'), ('empty', 'Empty'), ('disposed', 'Disposed'), ('expired', 'Expired')], default='sealed', max_length=20)),
                ('opened_at', models.DateTimeField(blank=True, null=True)),
                ('emptied_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ipm_bottles', to='core.organisation')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bottles', to='ipm.ipmproduct')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ipm_bottles', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'ipm_bottles',
                'ordering': ['-created_at'],
                'unique_together': {('org', 'bottle_code')},
                'indexes': [
                    models.Index(fields=['product', 'status'], name='idx_bottle_product_status'),
                ],
            },
        ),
        migrations.CreateModel(
            name='IpmStockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('movement_type', models.CharField(choices=[('open', 'Open'), ('usage', 'Usage'), ('adjustment', 'Adjustment'), ('disposal', 'Disposal')], max_length=20)),
                ('quantity_ml', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('remaining_after_ml', models.DecimalField(decimal_places=2, max_digits=10)),
                ('notes', models.TextField(blank=True, null=True)),
                ('recorded_at', models.DateTimeField(auto_now_add=True)),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ipm_stock_movements', to='core.organisation')),
                ('bottle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='movements', to='ipm.ipmbottle')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_movements', to='ipm.ipmproduct')),
                ('location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ipm_stock_movements', to='locations.nurserylocation')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ipm_stock_movements', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'ipm_stock_movements',
                'ordering': ['-recorded_at', '-id'],
            },
        ),
    ]
