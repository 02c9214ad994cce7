"""
Tests for customers
Tests: customer CRUD, addresses and contacts, CSV template / export / import
"""
import csv
import io
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, TestCase
from rest_framework import status

from nursery.core.models import AuditLog
from nursery.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from nursery.parties.csv_io import (
    CSV_HEADERS, CsvImportError, normalize_header, parse_csv, template_csv, import_customers
)
from nursery.parties.models import Customer, CustomerAddress
from nursery.sales.services import create_order


class CsvParsingTests(SimpleTestCase):
    """CSV reading without the database"""

    def test_normalize_header(self):
        """Test headers match regardless of case and spaces"""
        self.assertEqual(normalize_header('Delivery Line1'), 'deliveryline1')
        self.assertEqual(normalize_header(' accountsEmail '), 'accountsemail')
        self.assertEqual(normalize_header(None), '')

    def test_parse_rows(self):
        """Test rows are keyed by normalised header and short rows are padded"""
        records = parse_csv('\ufeffName,Delivery Line1,Code\nAcme,1 Main St\n\n,,\n')
        self.assertEqual(records, [{'name': 'Acme', 'deliveryline1': '1 Main St', 'code': ''}])

    def test_parse_requires_name_column(self):
        """Test a file without a name column is rejected"""
        with self.assertRaises(CsvImportError):
            parse_csv('code,email\nA,a@b.ie\n')

    def test_parse_empty_file(self):
        """Test an empty file is rejected"""
        with self.assertRaises(CsvImportError):
            parse_csv('')

    def test_template_has_all_columns(self):
        """Test the template header matches the import columns"""
        rows = list(csv.reader(io.StringIO(template_csv('Trade'))))
        self.assertEqual(rows[0], CSV_HEADERS)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[1][CSV_HEADERS.index('defaultPriceList')], 'Trade')


class CustomerImportTests(TestCase):
    """Customer import against the database"""

    def setUp(self):
        self.org = TestDataFactory.create_org()

    def test_import_creates_customer_address_and_contact(self):
        """Test one row creates a customer with its delivery address and contact"""
        price_list = TestDataFactory.create_price_list(self.org, name='Wholesale')
        text = (
            'name,code,countryCode,currency,paymentTermsDays,creditLimit,defaultPriceList,'
            'deliveryLine1,deliveryCity,contactName,contactRole\n'
            'Garden Centre HQ,GC-001,IE,EUR,45,10000,wholesale,Unit 1 Business Park,Dublin,Mary Jones,Buyer\n'
        )
        result = import_customers(self.org, text)
        self.assertEqual(result.as_dict()['created'], 1)
        self.assertEqual(result.addresses, 1)
        self.assertEqual(result.contacts, 1)

        customer = Customer.objects.get(org=self.org, code='GC-001')
        self.assertEqual(customer.payment_terms_days, 45)
        self.assertEqual(customer.credit_limit, Decimal('10000'))
        self.assertEqual(customer.default_price_list, price_list)
        self.assertTrue(customer.primary_address.is_default_shipping)
        self.assertEqual(customer.primary_contact.name, 'Mary Jones')

    def test_import_updates_by_code_then_name(self):
        """Test existing customers are matched by code, then by name"""
        by_code = TestDataFactory.create_customer(self.org, name='Old Name', code='C-1')
        by_name = TestDataFactory.create_customer(self.org, name='Leafy Ltd')
        text = 'name,code,phone\nNew Name,C-1,111\nleafy ltd,,222\n'

        result = import_customers(self.org, text)
        self.assertEqual((result.created, result.updated), (0, 2))
        by_code.refresh_from_db()
        by_name.refresh_from_db()
        self.assertEqual(by_code.name, 'New Name')
        self.assertEqual(by_name.phone, '222')

    def test_import_defaults_and_missing_names(self):
        """Test bad payment terms default to 30 and rows without a name fail"""
        result = import_customers(self.org, 'name,paymentTermsDays\nA,-5\n,10\n')
        self.assertEqual(result.created, 1)
        self.assertEqual(result.failures, ['(missing name)'])
        self.assertEqual(Customer.objects.get(org=self.org, name='A').payment_terms_days, 30)

    def test_import_reuses_address_by_line1(self):
        """Test importing the same address twice does not duplicate it"""
        text = 'name,deliveryLine1,deliveryCity\nAcme,1 Main St,Cork\n'
        import_customers(self.org, text)
        import_customers(self.org, text.replace('Cork', 'Galway'))
        addresses = CustomerAddress.objects.filter(customer__org=self.org)
        self.assertEqual(addresses.count(), 1)
        self.assertEqual(addresses.get().city, 'Galway')


class CustomerAPITests(TestCase):
    """Customer endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        """Test creating a customer"""
        data = {'name': 'Garden World', 'code': 'GW-1', 'email': 'orders@gardenworld.ie', 'requires_pre_pricing': True}
        response = self.client.post('/api/v1/customers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['requires_pre_pricing'])
        self.assertTrue(Customer.objects.filter(org=self.org, code='GW-1').exists())
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Customer').exists())

    def test_create_customer_rejects_foreign_price_list(self):
        """Test a price list of another organisation cannot be assigned"""
        foreign = TestDataFactory.create_price_list(TestDataFactory.create_org())
        response = self.client.post('/api/v1/customers/', {'name': 'X', 'default_price_list': foreign.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_is_scoped_and_searchable(self):
        """Test only the organisation's customers are listed and search narrows them"""
        TestDataFactory.create_customer(self.org, name='Alpha Gardens')
        TestDataFactory.create_customer(self.org, name='Beta Nurseries')
        TestDataFactory.create_customer(TestDataFactory.create_org(), name='Alpha Elsewhere')

        response = self.client.get('/api/v1/customers/')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/customers/', {'search': 'alpha'})
        self.assertEqual([row['name'] for row in response.data], ['Alpha Gardens'])

    def test_customer_of_other_org_is_404(self):
        """Test another organisation's customer is not found"""
        foreign = TestDataFactory.create_customer(TestDataFactory.create_org())
        response = self.client.get(f'/api/v1/customers/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get(f'/api/v1/customers/{foreign.id}/addresses/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_default_shipping_address_is_unique(self):
        """Test a new default shipping address clears the previous one"""
        customer = TestDataFactory.create_customer(self.org)
        first = TestDataFactory.create_address(customer)
        response = self.client.post(f'/api/v1/customers/{customer.id}/addresses/',
                                    {'line1': '2 High St', 'is_default_shipping': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        first.refresh_from_db()
        self.assertFalse(first.is_default_shipping)

    def test_primary_contact_is_unique(self):
        """Test a new primary contact clears the previous one"""
        customer = TestDataFactory.create_customer(self.org)
        url = f'/api/v1/customers/{customer.id}/contacts/'
        self.client.post(url, {'name': 'Ann', 'is_primary': True}, format='json')
        self.client.post(url, {'name': 'Bob', 'is_primary': True}, format='json')
        self.assertEqual(list(customer.contacts.filter(is_primary=True).values_list('name', flat=True)), ['Bob'])

    def test_delete_customer_with_orders_is_400(self):
        """Test a customer with orders cannot be deleted"""
        customer = TestDataFactory.create_customer(self.org)
        product = TestDataFactory.create_product(self.org)
        create_order(self.org, customer, [{'product': product, 'quantity': 1}], fees=[])
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Customer.objects.filter(pk=customer.pk).exists())

    def test_delete_customer(self):
        """Test deleting a customer without orders"""
        customer = TestDataFactory.create_customer(self.org)
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_csv_template_download(self):
        """Test the template downloads as CSV"""
        response = self.client.get('/api/v1/customers/csv-template/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('text/csv', response['Content-Type'])
        self.assertTrue(response.content.decode('utf-8').startswith('name,code,email'))

    def test_export_includes_primary_address(self):
        """Test the export carries the default shipping address and counts"""
        customer = TestDataFactory.create_customer(self.org, name='Acme', code='A-1')
        TestDataFactory.create_address(customer, line1='1 Main Street')
        response = self.client.get('/api/v1/customers/export/')
        rows = list(csv.DictReader(io.StringIO(response.content.decode('utf-8'))))
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['deliveryLine1'], '1 Main Street')
        self.assertEqual(rows[0]['addressCount'], '1')

    def test_import_upload(self):
        """Test importing an uploaded CSV file"""
        upload = SimpleUploadedFile('customers.csv', template_csv().encode('utf-8'), content_type='text/csv')
        response = self.client.post('/api/v1/customers/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(response.data['failed'], 0)
        self.assertTrue(AuditLog.objects.filter(action='csv_import').exists())

    def test_import_without_name_column_is_400(self):
        """Test a CSV without a name column is rejected"""
        response = self.client.post('/api/v1/customers/import/', {'csv': 'code\nA\n'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
