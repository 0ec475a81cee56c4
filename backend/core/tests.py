"""
Test suite for the core module
Tests: JWT login, current user, sub-admin management and role checks
"""
from django.test import TestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken
from backend.core.models import User
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.transactions.models import Transaction


class UserModelTests(TestCase):

    def test_roles(self):
        subadmin = TestDataFactory.create_user()
        superadmin = TestDataFactory.create_superadmin()
        root = TestDataFactory.create_user(is_superuser=True)
        self.assertFalse(subadmin.is_superadmin)
        self.assertTrue(superadmin.is_superadmin)
        self.assertTrue(root.is_superadmin)
        self.assertEqual(root.effective_role, User.ROLE_SUPERADMIN)


class AuthAPITests(TestCase):
    """Test login, refresh and me endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_superadmin(username='boss', password='Secret-pass-1')
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_with_claims(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'boss', 'password': 'Secret-pass-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['role'], User.ROLE_SUPERADMIN)
        token = AccessToken(response.data['access'])
        self.assertEqual(token['username'], 'boss')
        self.assertEqual(token['role'], User.ROLE_SUPERADMIN)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'boss', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'boss', 'password': 'Secret-pass-1'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': response.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_with_garbage_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'boss')
        self.assertEqual(response.data['role'], User.ROLE_SUPERADMIN)


class SubAdminAPITests(TestCase):
    """Test superadmin-only sub-admin management"""

    def setUp(self):
        self.admin = TestDataFactory.create_superadmin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_and_list(self):
        response = self.client.post(
            '/api/v1/users/subadmins/',
            {'username': 'clerk', 'email': 'clerk@test.com', 'password': 'Clerk-pass-1'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], User.ROLE_SUBADMIN)
        self.assertTrue(User.objects.get(username='clerk').check_password('Clerk-pass-1'))

        entry = Transaction.objects.get(type=Transaction.TYPE_CREATE_USER)
        self.assertEqual(entry.item_name, 'clerk')
        self.assertEqual(entry.item_category, 'User')
        self.assertEqual(entry.performed_by, self.admin)

        response = self.client.get('/api/v1/users/subadmins/')
        self.assertEqual([row['username'] for row in response.data], ['clerk'])

        response = self.client.get('/api/v1/users/subadmins/count/')
        self.assertEqual(response.data, {'count': 1})

    def test_duplicate_username_rejected(self):
        TestDataFactory.create_user(username='clerk')
        response = self.client.post(
            '/api/v1/users/subadmins/', {'username': 'clerk', 'password': 'Clerk-pass-1'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_subadmin(self):
        clerk = TestDataFactory.create_user(username='clerk')
        response = self.client.delete(f'/api/v1/users/subadmins/{clerk.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=clerk.id).exists())
        entry = Transaction.objects.get(type=Transaction.TYPE_DELETE_USER)
        self.assertEqual(entry.item_name, 'clerk')

    def test_cannot_delete_superadmin(self):
        other = TestDataFactory.create_superadmin()
        response = self.client.delete(f'/api/v1/users/subadmins/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Can only delete sub-admins')
        self.assertTrue(User.objects.filter(pk=other.id).exists())

    def test_change_password(self):
        clerk = TestDataFactory.create_user(username='clerk')
        response = self.client.put(
            f'/api/v1/users/subadmins/{clerk.id}/change-password/', {'newPassword': 'Fresh-pass-2'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        clerk.refresh_from_db()
        self.assertTrue(clerk.check_password('Fresh-pass-2'))

    def test_subadmin_cannot_manage_users(self):
        clerk = TestDataFactory.create_user(username='clerk')
        self.client.authenticate_user(clerk)
        response = self.client.get('/api/v1/users/subadmins/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f'/api/v1/users/subadmins/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
