"""
Test suite for the catalog module
Tests: category CRUD and ledger events
"""
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.catalog.models import Category
from backend.transactions.models import Transaction


class CategoryAPITests(TestCase):
    """Test category endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_category(self):
        response = self.client.post('/api/v1/categories/', {'name': 'Printers', 'description': 'Laser'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Printers')
        entry = Transaction.objects.get(type=Transaction.TYPE_CREATE_CATEGORY)
        self.assertEqual(entry.item_name, 'Printers')
        self.assertIsNone(entry.item_id)
        self.assertEqual(entry.performed_by, self.user)

    def test_name_required_and_unique(self):
        response = self.client.post('/api/v1/categories/', {'description': 'No name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        TestDataFactory.create_category(name='Laptops')
        response = self.client.post('/api/v1/categories/', {'name': 'Laptops'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Transaction.objects.exists())

    def test_list_sorted_by_name(self):
        TestDataFactory.create_category(name='Routers')
        TestDataFactory.create_category(name='Monitors')
        response = self.client.get('/api/v1/categories/')
        self.assertEqual([row['name'] for row in response.data], ['Monitors', 'Routers'])

    def test_update_category(self):
        category = TestDataFactory.create_category(name='Phones')
        response = self.client.patch(f'/api/v1/categories/{category.id}/', {'description': 'Mobile'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['description'], 'Mobile')

    def test_delete_category(self):
        category = TestDataFactory.create_category(name='Tablets')
        response = self.client.delete(f'/api/v1/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Category.objects.filter(pk=category.id).exists())
        entry = Transaction.objects.get(type=Transaction.TYPE_DELETE_CATEGORY)
        self.assertEqual(entry.item_name, 'Tablets')

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
