# Generated manually

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('batch_number', models.CharField(max_length=100)),
                ('quantity', models.PositiveIntegerField(default=0, help_text='Units available to sell')),
                ('reserved_quantity', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=[('Growing', 'Growing'), ('Ready', 'Ready'), ('Looking Good', 'Looking Good'), ('Archived', 'Archived')], default='Growing', max_length=20)),
                ('planted_at', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='batches', to='core.organisation')),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='batches', to='catalog.product')),
                ('variety', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='batches', to='catalog.plantvariety')),
                ('size', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='batches', to='catalog.plantsize')),
                ('location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='batches', to='locations.nurserylocation')),
            ],
            options={
                'db_table': 'batches',
                'ordering': ['planted_at', 'id'],
                'unique_together': {('org', 'batch_number')},
                'indexes': [
                    models.Index(fields=['org', 'status'], name='idx_batch_org_status'),
                    models.Index(fields=['product', 'status'], name='idx_batch_product_status'),
                ],
            },
        ),
    ]
