"""
Test suite for the inventory module
Tests: item CRUD, serial number splitting, duplicate detection, warranty expiry and ledger events
"""
import datetime
import uuid
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import InventoryItem
from backend.inventory.utils import calculate_warranty_expiry, split_serial_numbers, find_duplicate_serial
from backend.transactions.models import Transaction


class InventoryUtilsTests(SimpleTestCase):
    """Test serial and warranty helpers"""

    def test_split_serial_numbers(self):
        self.assertEqual(split_serial_numbers('SN1, SN2,,SN1 , SN3'), ['SN1', 'SN2', 'SN3'])
        self.assertEqual(split_serial_numbers(''), [])
        self.assertEqual(split_serial_numbers(None), [])

    def test_warranty_expiry(self):
        start = datetime.date(2024, 1, 31)
        self.assertEqual(calculate_warranty_expiry('2 years', start), datetime.date(2026, 1, 31))
        self.assertEqual(calculate_warranty_expiry('1 month', start), datetime.date(2024, 2, 29))
        self.assertEqual(calculate_warranty_expiry('3 weeks', start), datetime.date(2024, 2, 21))
        self.assertEqual(calculate_warranty_expiry('10 days', start), datetime.date(2024, 2, 10))

    def test_warranty_without_period(self):
        self.assertIsNone(calculate_warranty_expiry('lifetime', datetime.date(2024, 1, 1)))
        self.assertIsNone(calculate_warranty_expiry('', datetime.date(2024, 1, 1)))

    def test_status_for_quantity(self):
        self.assertEqual(InventoryItem.status_for_quantity(0), InventoryItem.STATUS_OUT_OF_STOCK)
        self.assertEqual(InventoryItem.status_for_quantity(1), InventoryItem.STATUS_IN_STOCK)


class DuplicateSerialTests(TestCase):

    def test_case_insensitive_match(self):
        TestDataFactory.create_item(name='Laptop A', quantity=1, serial_number='ABC-1, ABC-2')
        self.assertEqual(find_duplicate_serial('xyz, abc-2'), ('abc-2', 'Laptop A'))
        self.assertIsNone(find_duplicate_serial('XYZ'))

    def test_exclude_self(self):
        item = TestDataFactory.create_item(quantity=1, serial_number='ABC-1')
        self.assertIsNone(find_duplicate_serial('ABC-1', exclude_item_id=item.pk))


class InventoryAPITests(TestCase):
    """Test inventory endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _payload(self, **overrides):
        data = {
            'name': 'Latitude 5440',
            'category': 'Laptops',
            'quantity': 4,
            'supplier': 'Dell',
            'model': '5440',
            'warranty': '1 year',
            'purchaseDate': '2024-03-01',
            'location': 'Main Inventory',
        }
        data.update(overrides)
        return data

    def test_create_without_serials(self):
        response = self.client.post('/api/v1/inventory/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity'], 4)
        self.assertEqual(response.data['status'], InventoryItem.STATUS_IN_STOCK)
        self.assertEqual(response.data['warrantyExpiryDate'], '2025-03-01')

        entry = Transaction.objects.get(type=Transaction.TYPE_CREATE_ITEM)
        self.assertEqual(str(entry.item_id), response.data['id'])
        self.assertEqual(entry.reason, 'Item created')
        self.assertEqual(entry.performed_by, self.user)

    def test_create_with_zero_quantity_is_out_of_stock(self):
        response = self.client.post('/api/v1/inventory/', self._payload(quantity=0), format='json')
        self.assertEqual(response.data['status'], InventoryItem.STATUS_OUT_OF_STOCK)

    def test_create_splits_serials(self):
        response = self.client.post('/api/v1/inventory/', self._payload(serialNumber='S1, S2, S3'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], '3 items created successfully')
        self.assertEqual(len(response.data['items']), 3)
        self.assertEqual(InventoryItem.objects.filter(quantity=1).count(), 3)
        entries = Transaction.objects.filter(type=Transaction.TYPE_CREATE_ITEM)
        self.assertEqual(entries.count(), 3)
        self.assertTrue(all(e.reason == 'Item created via batch upload/entry' for e in entries))

    def test_single_serial_creates_one_unit(self):
        response = self.client.post('/api/v1/inventory/', self._payload(serialNumber='S1'), format='json')
        self.assertEqual(response.data['quantity'], 1)
        self.assertEqual(response.data['serialNumber'], 'S1')

    def test_duplicate_serial_rejected(self):
        TestDataFactory.create_item(name='Existing', quantity=1, serial_number='DUP-1')
        response = self.client.post('/api/v1/inventory/', self._payload(serialNumber='dup-1'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "Serial number 'dup-1' already exists in item 'Existing'.")

        response = self.client.post(
            '/api/v1/inventory/', self._payload(serialNumber='dup-1', allowDuplicates=True), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_missing_required_fields(self):
        response = self.client.post('/api/v1/inventory/', {'name': 'Only name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('category', response.data)
        self.assertIn('location', response.data)

    def test_list_newest_first(self):
        first = TestDataFactory.create_item(name='First')
        second = TestDataFactory.create_item(name='Second')
        response = self.client.get('/api/v1/inventory/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['id'] for row in response.data], [str(second.id), str(first.id)])

    def test_retrieve_and_not_found(self):
        item = TestDataFactory.create_item(name='Projector')
        response = self.client.get(f'/api/v1/inventory/{item.id}/')
        self.assertEqual(response.data['name'], 'Projector')
        response = self.client.get(f'/api/v1/inventory/{uuid.uuid4()}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_tracks_changes(self):
        item = TestDataFactory.create_item(name='Projector', quantity=2)
        response = self.client.put(
            f'/api/v1/inventory/{item.id}/', {'name': 'Projector X', 'quantity': 0, 'description': 'ceiling'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], InventoryItem.STATUS_OUT_OF_STOCK)
        entry = Transaction.objects.get(type=Transaction.TYPE_UPDATE_ITEM)
        self.assertEqual(entry.reason, 'Updated: name, quantity')
        self.assertEqual(entry.item_name, 'Projector X')

    def test_update_untracked_field_writes_no_entry(self):
        item = TestDataFactory.create_item()
        self.client.put(f'/api/v1/inventory/{item.id}/', {'description': 'new'}, format='json')
        self.assertFalse(Transaction.objects.filter(type=Transaction.TYPE_UPDATE_ITEM).exists())

    def test_update_duplicate_serial_excludes_self(self):
        item = TestDataFactory.create_item(quantity=1, serial_number='OWN-1')
        TestDataFactory.create_item(name='Other', quantity=1, serial_number='OTHER-1')
        response = self.client.put(f'/api/v1/inventory/{item.id}/', {'serialNumber': 'OWN-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.put(f'/api/v1/inventory/{item.id}/', {'serialNumber': 'other-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete(self):
        item = TestDataFactory.create_item(name='Old Phone', quantity=2)
        response = self.client.delete(f'/api/v1/inventory/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Item removed')
        self.assertFalse(InventoryItem.objects.filter(pk=item.id).exists())
        entry = Transaction.objects.get(type=Transaction.TYPE_DELETE_ITEM)
        self.assertEqual(entry.item_id, item.id)
        self.assertEqual(entry.item_name, 'Old Phone')
