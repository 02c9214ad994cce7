"""
Tests for the plant catalogue
Tests: varieties, sizes and products, product search and organisation scoping
"""
from django.test import TestCase
from rest_framework import status

from nursery.catalog.models import Product
from nursery.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ProductAPITests(TestCase):
    """Product CRUD and filtering"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.client.authenticate_user(self.user)
        self.variety = TestDataFactory.create_variety(self.org, name='Erica carnea')
        self.size = TestDataFactory.create_size(self.org, name='10.5cm')

    def test_create_product(self):
        """Test creating a product with a variety and size"""
        data = {'name': 'Erica carnea 10.5cm', 'sku': 'ERI-105', 'variety': self.variety.id,
                'size': self.size.id, 'unit_price': '2.10', 'rrp': '3.99', 'barcode': '5391000000017'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['variety_name'], 'Erica carnea')
        self.assertEqual(response.data['vat_rate'], '13.50')

    def test_duplicate_sku_rejected(self):
        """Test SKUs are unique within an organisation"""
        TestDataFactory.create_product(self.org, sku='ERI-105')
        response = self.client.post('/api/v1/products/', {'name': 'Dup', 'sku': 'ERI-105'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_same_sku_in_other_org_allowed(self):
        """Test another organisation may use the same SKU"""
        TestDataFactory.create_product(TestDataFactory.create_org(), sku='ERI-105')
        response = self.client.post('/api/v1/products/', {'name': 'Mine', 'sku': 'ERI-105'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_foreign_variety_rejected(self):
        """Test a variety from another organisation cannot be used"""
        foreign = TestDataFactory.create_variety(TestDataFactory.create_org())
        response = self.client.post('/api/v1/products/', {'name': 'X', 'sku': 'X-1', 'variety': foreign.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_matches_every_word(self):
        """Test every search word must match name, SKU, barcode or variety"""
        TestDataFactory.create_product(self.org, name='Heather Pink', variety=self.variety)
        TestDataFactory.create_product(self.org, name='Heather White')
        response = self.client.get('/api/v1/products/', {'search': 'heather erica'})
        self.assertEqual([row['name'] for row in response.data], ['Heather Pink'])

    def test_active_filter(self):
        """Test filtering by active flag"""
        TestDataFactory.create_product(self.org, name='Live')
        retired = TestDataFactory.create_product(self.org, name='Retired')
        Product.objects.filter(pk=retired.pk).update(is_active=False)
        response = self.client.get('/api/v1/products/', {'active': 'true'})
        self.assertEqual([row['name'] for row in response.data], ['Live'])

    def test_product_of_other_org_is_404(self):
        """Test another organisation's product is not found"""
        foreign = TestDataFactory.create_product(TestDataFactory.create_org())
        response = self.client.patch(f'/api/v1/products/{foreign.id}/', {'name': 'Mine now'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class VarietyAndSizeAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.client.authenticate_user(self.user)

    def test_create_and_list_varieties(self):
        """Test varieties are created and listed per organisation"""
        TestDataFactory.create_variety(TestDataFactory.create_org(), name='Elsewhere')
        response = self.client.post('/api/v1/varieties/', {'name': 'Skimmia japonica', 'family': 'Rutaceae'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/varieties/')
        self.assertEqual([row['name'] for row in response.data], ['Skimmia japonica'])

    def test_update_size(self):
        """Test editing a pot size"""
        size = TestDataFactory.create_size(self.user.org, name='9cm')
        response = self.client.patch(f'/api/v1/sizes/{size.id}/', {'shelf_quantity': 60}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shelf_quantity'], 60)
