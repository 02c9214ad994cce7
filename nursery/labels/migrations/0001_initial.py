# Generated manually

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='LabelPrinter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('printer_type', models.CharField(choices=[('zebra', 'Zebra (ZPL)')], default='zebra', max_length=20)),
                ('connection_type', models.CharField(choices=[('network', 'Network')], default='network', max_length=20)),
                ('host', models.CharField(max_length=255)),
                ('port', models.PositiveIntegerField(default=9100)),
                ('dpi', models.PositiveIntegerField(choices=[(203, '203 dpi'), (300, '300 dpi'), (600, '600 dpi')], default=203)),
                ('is_default', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='label_printers', to='core.organisation')),
            ],
            options={
                'db_table': 'label_printers',
                'ordering': ['name'],
            },
        ),
    ]
