"""
Tests for core: authentication, organisation scoping, audit logs and user groups
"""
from io import StringIO

from django.contrib.auth.models import Group
from django.core.management import call_command
from django.http import Http404
from django.test import TestCase, RequestFactory
from rest_framework import status
from rest_framework.exceptions import PermissionDenied

from nursery.catalog.models import Product
from nursery.core.models import AuditLog
from nursery.core.tenancy import get_request_org, get_org_object_or_404
from nursery.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from nursery.core.utils import create_audit_log


class TenancyTests(TestCase):
    """Organisation scoping helpers"""

    def setUp(self):
        self.factory = RequestFactory()
        self.user = TestDataFactory.create_user()

    def _request(self, user):
        request = self.factory.get('/')
        request.user = user
        return request

    def test_request_org(self):
        """Test the organisation comes from the authenticated user"""
        self.assertEqual(get_request_org(self._request(self.user)), self.user.org)

    def test_user_without_org_is_denied(self):
        """Test a user outside any organisation cannot use tenant data"""
        orphan = TestDataFactory.create_user(is_superuser=True)
        with self.assertRaises(PermissionDenied):
            get_request_org(self._request(orphan))

    def test_other_org_row_is_404(self):
        """Test rows of another organisation look like they do not exist"""
        own = TestDataFactory.create_product(self.user.org)
        foreign = TestDataFactory.create_product(TestDataFactory.create_org())
        request = self._request(self.user)
        self.assertEqual(get_org_object_or_404(Product, request, own.pk), own)
        with self.assertRaises(Http404):
            get_org_object_or_404(Product, request, foreign.pk)


class AuditLogTests(TestCase):
    """Audit log writes and the audit log API"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.client.authenticate_user(self.user)

    def test_create_audit_log_takes_org_from_user(self):
        """Test an entry records the user's organisation"""
        entry = create_audit_log(user=self.user, action='create', model_name='Product', object_id=5,
                                 object_reference='SKU-5')
        self.assertEqual(entry.org, self.user.org)
        self.assertEqual(entry.object_id, '5')

    def test_missing_fields_skip_entry(self):
        """Test an entry without an action is not written"""
        self.assertIsNone(create_audit_log(user=self.user, model_name='Product', object_id=1))
        self.assertFalse(AuditLog.objects.exists())

    def test_list_only_shows_own_org(self):
        """Test audit logs of another organisation are hidden"""
        create_audit_log(user=self.user, action='create', model_name='Product', object_id=1)
        create_audit_log(user=TestDataFactory.create_user(), action='create', model_name='Product', object_id=2)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['object_id'] for row in response.data], ['1'])

    def test_filter_by_reference(self):
        """Test filtering audit logs by object reference"""
        create_audit_log(user=self.user, action='order_status', model_name='Order', object_id=1, object_reference='ORD-A')
        create_audit_log(user=self.user, action='order_status', model_name='Order', object_id=2, object_reference='ORD-B')
        response = self.client.get('/api/v1/audit-logs/', {'reference': 'ORD-B'})
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['object_id'], '2')


class AuthAPITests(TestCase):
    """Login, registration and the current user"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(username='grower', password='Sph4gnum-moss')

    def test_login_returns_tokens(self):
        """Test logging in returns an access and refresh token"""
        response = self.client.post('/api/v1/auth/login/', {'username': 'grower', 'password': 'Sph4gnum-moss'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_login_wrong_password(self):
        """Test a wrong password is rejected"""
        response = self.client.post('/api/v1/auth/login/', {'username': 'grower', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        """Test a refresh token yields a new access token"""
        tokens = self.client.post('/api/v1/auth/login/', {'username': 'grower', 'password': 'Sph4gnum-moss'}, format='json').data
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_register(self):
        """Test registering a new user"""
        data = {'username': 'newstaff', 'email': 'new@nursery.ie', 'password': 'Calluna-2024!',
                'password_confirm': 'Calluna-2024!', 'org': self.user.org.id}
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['org'], self.user.org.id)

    def test_register_password_mismatch(self):
        """Test mismatched passwords are rejected"""
        data = {'username': 'newstaff', 'password': 'Calluna-2024!', 'password_confirm': 'Erica-2024!'}
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me(self):
        """Test the current user includes the organisation"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['organisation']['id'], self.user.org.id)
        self.assertFalse(response.data['is_admin'])

    def test_user_list_requires_staff(self):
        """Test only staff can manage users, and only their organisation's"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        staff = TestDataFactory.create_user(org=self.user.org, is_staff=True)
        TestDataFactory.create_user()
        self.client.authenticate_user(staff)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(row['id'] for row in response.data), sorted([self.user.id, staff.id]))


class CreateUserGroupsCommandTests(TestCase):
    def test_creates_role_groups(self):
        """Test the command creates every role group and is safe to rerun"""
        call_command('create_user_groups', stdout=StringIO())
        call_command('create_user_groups', stdout=StringIO())
        self.assertEqual(
            set(Group.objects.values_list('name', flat=True)),
            {'Admin', 'Office', 'Picker', 'Grower'},
        )


class OrganisationAndSettingsAPITests(TestCase):
    """The organisation endpoint and per-organisation settings"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_user(org=self.user.org, is_staff=True)

    def test_get_organisation(self):
        """Test any member can read their organisation"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/organisation/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.user.org.id)

    def test_only_admin_edits_organisation(self):
        """Test non-admins cannot edit the organisation and admins can"""
        self.client.authenticate_user(self.user)
        response = self.client.patch('/api/v1/organisation/', {'currency': 'GBP'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.patch('/api/v1/organisation/', {'currency': 'GBP'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['currency'], 'GBP')

    def test_settings_are_per_organisation(self):
        """Test the same key can exist once per organisation"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/settings/', {'key': 'label_copies', 'value': '2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/settings/', {'key': 'label_copies', 'value': '3'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        other_admin = TestDataFactory.create_user(is_staff=True)
        self.client.authenticate_user(other_admin)
        response = self.client.post('/api/v1/settings/', {'key': 'label_copies', 'value': '5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/settings/')
        self.assertEqual([row['value'] for row in response.data], ['5'])

    def test_non_admin_reads_but_cannot_write_settings(self):
        """Test members read settings while only admins change them"""
        self.client.authenticate_user(self.admin)
        setting_id = self.client.post('/api/v1/settings/', {'key': 'site', 'value': 'Home Farm'}, format='json').data['id']

        self.client.authenticate_user(self.user)
        self.assertEqual(self.client.get(f'/api/v1/settings/{setting_id}/').status_code, status.HTTP_200_OK)
        response = self.client.patch(f'/api/v1/settings/{setting_id}/', {'value': 'Elsewhere'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
