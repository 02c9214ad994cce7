# Generated manually

import django.db.models.deletion
from django.db import migrations, models


COUNTRY_CHOICES = [('IE', 'Ireland'), ('GB', 'Great Britain'), ('XI', 'Northern Ireland'), ('NL', 'Netherlands')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('pricing', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('code', models.CharField(blank=True, max_length=50, null=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('phone', models.CharField(blank=True, max_length=30, null=True)),
                ('store', models.CharField(blank=True, help_text="Retail group, e.g. Woodie's", max_length=200, null=True)),
                ('accounts_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('country_code', models.CharField(choices=COUNTRY_CHOICES, default='IE', max_length=2)),
                ('vat_number', models.CharField(blank=True, max_length=50, null=True)),
                ('currency', models.CharField(choices=[('EUR', 'Euro'), ('GBP', 'Pound Sterling')], default='EUR', max_length=3)),
                ('payment_terms_days', models.PositiveIntegerField(default=30)),
                ('credit_limit', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('pricing_tier', models.CharField(blank=True, max_length=50, null=True)),
                ('account_code', models.CharField(blank=True, max_length=50, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('requires_pre_pricing', models.BooleanField(default=False, help_text='Plants leave with RRP labels applied')),
                ('pre_pricing_foc', models.BooleanField(default=False, help_text='Pre-pricing is free of charge')),
                ('pre_pricing_cost_per_label', models.DecimalField(blank=True, decimal_places=4, help_text="Overrides the organisation's pre-pricing fee", max_digits=10, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('default_price_list', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customers', to='pricing.pricelist')),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='customers', to='core.organisation')),
            ],
            options={
                'db_table': 'customers',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['org', 'code'], name='idx_customer_org_code')],
            },
        ),
        migrations.CreateModel(
            name='CustomerAddress',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('label', models.CharField(default='Main', max_length=100)),
                ('store_name', models.CharField(blank=True, max_length=200, null=True)),
                ('line1', models.CharField(max_length=255)),
                ('line2', models.CharField(blank=True, max_length=255, null=True)),
                ('city', models.CharField(blank=True, max_length=100, null=True)),
                ('county', models.CharField(blank=True, max_length=100, null=True)),
                ('eircode', models.CharField(blank=True, max_length=20, null=True)),
                ('country_code', models.CharField(choices=COUNTRY_CHOICES, default='IE', max_length=2)),
                ('is_default_shipping', models.BooleanField(default=False)),
                ('is_default_billing', models.BooleanField(default=False)),
                ('contact_name', models.CharField(blank=True, max_length=200, null=True)),
                ('contact_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('contact_phone', models.CharField(blank=True, max_length=30, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='addresses', to='parties.customer')),
            ],
            options={
                'db_table': 'customer_addresses',
                'ordering': ['-is_default_shipping', 'id'],
            },
        ),
        migrations.CreateModel(
            name='CustomerContact',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('role', models.CharField(blank=True, max_length=100, null=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('phone', models.CharField(blank=True, max_length=30, null=True)),
                ('mobile', models.CharField(blank=True, max_length=30, null=True)),
                ('is_primary', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contacts', to='parties.customer')),
            ],
            options={
                'db_table': 'customer_contacts',
                'ordering': ['-is_primary', 'id'],
            },
        ),
    ]
