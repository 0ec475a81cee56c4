"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.catalog.models import Category
from backend.inventory.models import InventoryItem, MAIN_INVENTORY_LOCATION
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role=User.ROLE_SUBADMIN, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_superadmin(username=None, password='testpass123'):
        """Create a test superadmin"""
        return TestDataFactory.create_user(username=username, password=password, role=User.ROLE_SUPERADMIN)

    @staticmethod
    def create_category(name=None, description=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(
            name=name,
            description=description or f'Test category {name}'
        )

    @staticmethod
    def create_item(name=None, category='Laptops', quantity=10, serial_number='', model='', user=None,
                    location=MAIN_INVENTORY_LOCATION):
        """Create a test inventory item"""
        if not name:
            name = f'Item_{TestDataFactory.random_string(6)}'
        return InventoryItem.objects.create(
            name=name,
            category=category,
            quantity=quantity,
            serial_number=serial_number,
            model=model,
            supplier='Test Supplier',
            location=location,
            status=InventoryItem.status_for_quantity(quantity),
            created_by=user,
            last_updated_by=user,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
