# Generated manually

import django.db.models.deletion
import nursery.pricing.models
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='OrgFee',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('fee_type', models.CharField(choices=[('pre_pricing', 'Pre-pricing (RRP Labels)'), ('delivery_flat', 'Delivery (Flat)'), ('delivery_per_km', 'Delivery (Per KM)'), ('handling', 'Handling'), ('rush_order', 'Rush Order')], max_length=30)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('amount', models.DecimalField(decimal_places=4, default=Decimal('0.0000'), max_digits=10)),
                ('unit', models.CharField(choices=[('per_unit', 'Per Unit'), ('flat', 'Flat Rate'), ('per_km', 'Per Kilometer')], default='flat', max_length=20)),
                ('vat_rate', models.DecimalField(decimal_places=2, default=nursery.pricing.models.default_fee_vat_rate, max_digits=5)),
                ('min_order_value', models.DecimalField(blank=True, decimal_places=2, help_text='Fee is waived when goods net reaches this value', max_digits=10, null=True)),
                ('is_default', models.BooleanField(default=False, help_text='Applied automatically to new orders')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fees', to='core.organisation')),
            ],
            options={
                'db_table': 'org_fees',
                'ordering': ['fee_type', 'name'],
            },
        ),
        migrations.CreateModel(
            name='PriceList',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('currency', models.CharField(default='EUR', max_length=3)),
                ('is_active', models.BooleanField(default=True)),
                ('valid_from', models.DateField(blank=True, null=True)),
                ('valid_to', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='price_lists', to='core.organisation')),
            ],
            options={
                'db_table': 'price_lists',
                'ordering': ['name'],
                'unique_together': {('org', 'name')},
            },
        ),
        migrations.CreateModel(
            name='PriceListItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('price_list', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='pricing.pricelist')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='price_list_items', to='catalog.product')),
            ],
            options={
                'db_table': 'price_list_items',
                'unique_together': {('price_list', 'product')},
            },
        ),
    ]
