from django.core.management.base import BaseCommand
from django.contrib.auth.models import Group, Permission


class Command(BaseCommand):
    help = 'Create Django user groups for nursery roles: Admin, Office, Picker, Grower'

    # app labels each role may change; Admin gets everything
    GROUPS = [
        {
            'name': 'Admin',
            'description': 'Nursery owners - full access to every area',
            'apps': None,
        },
        {
            'name': 'Office',
            'description': 'Sales office - customers, orders, pricing and labels',
            'apps': ['parties', 'sales', 'pricing', 'catalog', 'labels'],
        },
        {
            'name': 'Picker',
            'description': 'Dispatch yard - pick lists and batch labels',
            'apps': ['sales', 'inventory', 'labels'],
        },
        {
            'name': 'Grower',
            'description': 'Growing team - batches, locations and IPM records',
            'apps': ['inventory', 'locations', 'ipm', 'catalog'],
        },
    ]

    def handle(self, *args, **options):
        created_count = 0
        existing_count = 0

        for group_config in self.GROUPS:
            group, created = Group.objects.get_or_create(name=group_config['name'])

            if created:
                self.stdout.write(self.style.SUCCESS(f'Created group: {group_config["name"]}'))
                created_count += 1
            else:
                self.stdout.write(f'  Group already exists: {group_config["name"]}')
                existing_count += 1

            if group_config['apps'] is None:
                permissions = Permission.objects.all()
            else:
                permissions = Permission.objects.filter(content_type__app_label__in=group_config['apps'])
            group.permissions.set(permissions)
            self.stdout.write(f'  {permissions.count()} permissions set for {group_config["name"]}')

        self.stdout.write(self.style.SUCCESS(
            f'\nCompleted: {created_count} groups created, {existing_count} groups already existed'
        ))
