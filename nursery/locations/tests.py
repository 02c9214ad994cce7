"""
Tests for nursery locations
"""
from django.test import TestCase
from rest_framework import status

from nursery.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from nursery.locations.models import NurseryLocation


class LocationAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.client.authenticate_user(self.user)

    def test_create_location(self):
        """Test creating a location"""
        data = {'name': 'Tunnel 3', 'code': 'T3', 'site': 'Home Farm', 'is_covered': True}
        response = self.client.post('/api/v1/locations/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(NurseryLocation.objects.filter(org=self.org, code='T3', is_covered=True).exists())

    def test_duplicate_code_rejected(self):
        """Test location codes are unique within an organisation"""
        TestDataFactory.create_location(self.org, code='T3')
        response = self.client.post('/api/v1/locations/', {'name': 'Another', 'code': 'T3'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_search_and_active_filter(self):
        """Test the list narrows by search text and active flag"""
        TestDataFactory.create_location(self.org, name='Glasshouse A', code='GH-A')
        closed = TestDataFactory.create_location(self.org, name='Glasshouse B', code='GH-B')
        TestDataFactory.create_location(self.org, name='Outdoor Bed', code='OB-1')
        TestDataFactory.create_location(TestDataFactory.create_org(), name='Glasshouse Z', code='GH-Z')
        NurseryLocation.objects.filter(pk=closed.pk).update(is_active=False)

        response = self.client.get('/api/v1/locations/', {'search': 'glasshouse'})
        self.assertEqual(sorted(row['code'] for row in response.data), ['GH-A', 'GH-B'])
        response = self.client.get('/api/v1/locations/', {'search': 'glasshouse', 'active': 'true'})
        self.assertEqual([row['code'] for row in response.data], ['GH-A'])

    def test_location_of_other_org_is_404(self):
        """Test another organisation's location is not found"""
        foreign = TestDataFactory.create_location(TestDataFactory.create_org())
        response = self.client.get(f'/api/v1/locations/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_and_delete(self):
        """Test editing then removing a location"""
        location = TestDataFactory.create_location(self.org)
        response = self.client.patch(f'/api/v1/locations/{location.id}/', {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])
        response = self.client.delete(f'/api/v1/locations/{location.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
