"""
Management command to import customers from a CSV file
"""
import os
from django.core.management.base import BaseCommand, CommandError
from nursery.core.models import Organisation
from nursery.parties.csv_io import CsvImportError, import_customers


class Command(BaseCommand):
    help = "Imports customers, delivery addresses and contacts from a customer CSV file"

    def add_arguments(self, parser):
        parser.add_argument(
            '--csv-file',
            type=str,
            required=True,
            help='Path to the CSV file (same columns as the customer CSV template)',
        )
        parser.add_argument(
            '--org',
            type=str,
            required=True,
            help='Organisation slug or id to import into',
        )

    def handle(self, *args, **options):
        csv_file = options['csv_file']
        org_ref = options['org']

        org = Organisation.objects.filter(slug=org_ref).first()
        if org is None and org_ref.isdigit():
            org = Organisation.objects.filter(pk=int(org_ref)).first()
        if org is None:
            raise CommandError(f"Organisation '{org_ref}' not found")

        if not os.path.exists(csv_file):
            raise CommandError(f"CSV file not found at {csv_file}")

        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(self.style.SUCCESS(f"IMPORTING CUSTOMERS INTO {org.name}"))
        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(f"CSV File: {csv_file}")

        with open(csv_file, 'r', encoding='utf-8-sig', newline='') as f:
            text = f.read()

        try:
            result = import_customers(org, text)
        except CsvImportError as e:
            raise CommandError(str(e))

        self.stdout.write(f"Customers Created: {result.created}")
        self.stdout.write(f"Customers Updated: {result.updated}")
        self.stdout.write(f"Addresses Written: {result.addresses}")
        self.stdout.write(f"Contacts Written: {result.contacts}")
        if result.failures:
            self.stdout.write(self.style.ERROR(f"Rows Failed: {len(result.failures)}"))
            for name in result.failures:
                self.stdout.write(self.style.ERROR(f"  x {name}"))
        self.stdout.write(self.style.SUCCESS("=" * 60))
