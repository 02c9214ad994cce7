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
            name='NurseryLocation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('code', models.CharField(max_length=50)),
                ('site', models.CharField(blank=True, help_text='Site or holding the location belongs to', max_length=200)),
                ('is_covered', models.BooleanField(default=False, help_text='Indoor (tunnel/glasshouse) rather than outdoor')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('org', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='locations', to='core.organisation')),
            ],
            options={
                'db_table': 'nursery_locations',
                'ordering': ['site', 'name'],
                'unique_together': {('org', 'code')},
            },
        ),
    ]
