"""
Test suite for the transactions module
Tests: transfers, stock movements, replacement confirmation, branch projection and ledger endpoints
"""
import datetime
import io
import threading
import unittest
import uuid
from django.core.cache import cache
from django.core.management import call_command
from django.db import connection
from django.test import SimpleTestCase, TestCase, TransactionTestCase
from django.utils import timezone
from rest_framework import status
from backend.core.exceptions import InventoryError, ValidationError, NotFoundError, InsufficientStockError
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import InventoryItem, MAIN_INVENTORY_LOCATION
from backend.transactions.models import Transaction, PendingReplacement
from backend.transactions.projections import build_transferred_items, get_transferred_items
from backend.transactions.reasons import parse_transfer_reason, build_confirmation_reason
from backend.transactions.services import transfer_item, stock_move, confirm_replacement


class TransferReasonTests(SimpleTestCase):
    """Test parsing of transfer reasons into kind + note"""

    def test_plain_labels(self):
        self.assertEqual(parse_transfer_reason('New Equipment').kind, Transaction.REASON_NEW_EQUIPMENT)
        self.assertEqual(parse_transfer_reason('Repaired').kind, Transaction.REASON_REPAIRED)
        reason = parse_transfer_reason('Replacement Equipment')
        self.assertEqual(reason.kind, Transaction.REASON_REPLACEMENT_EQUIPMENT)
        self.assertEqual(reason.note, '')
        self.assertTrue(reason.opens_pending_replacement)

    def test_label_with_note(self):
        reason = parse_transfer_reason('Replacement Equipment - screen cracked')
        self.assertEqual(reason.kind, Transaction.REASON_REPLACEMENT_EQUIPMENT)
        self.assertEqual(reason.note, 'screen cracked')
        self.assertEqual(str(reason), 'Replacement Equipment - screen cracked')

    def test_note_accepted_for_every_kind(self):
        self.assertEqual(parse_transfer_reason('Repaired - new fan').note, 'new fan')
        self.assertFalse(parse_transfer_reason('New Equipment - office expansion').opens_pending_replacement)

    def test_empty_reason_means_no_reason(self):
        self.assertIsNone(parse_transfer_reason(''))
        self.assertIsNone(parse_transfer_reason(None))

    def test_invalid_reasons_rejected(self):
        for value in ['Broken', 'replacement equipment', 'Replacement Equipment-cracked', 'Repaired!']:
            with self.assertRaises(ValidationError):
                parse_transfer_reason(value)

    def test_confirmation_reason(self):
        self.assertEqual(
            build_confirmation_reason('Replacement Equipment - screen cracked', 'FDE/IT/7', 'SN-OLD'),
            'Confirmed replacement: Replacement Equipment - screen cracked | Replaced: Asset #FDE/IT/7, S/N: SN-OLD'
        )
        self.assertEqual(
            build_confirmation_reason('Replacement Equipment', replaced_serial_number='SN-OLD'),
            'Confirmed replacement: Replacement Equipment | Replaced: S/N: SN-OLD'
        )
        self.assertEqual(
            build_confirmation_reason('Replacement Equipment'),
            'Confirmed replacement: Replacement Equipment'
        )


class TransferServiceTests(TestCase):
    """Test transfer_item"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.item = TestDataFactory.create_item(name='ThinkPad T14', category='Laptops', quantity=5)

    def test_partial_transfer_decrements(self):
        result = transfer_item(
            item_id=self.item.id, quantity=2, branch='Branch A', item_tracking_id='CRE100',
            asset_number='FDE/IT/1', reason='New Equipment', performed_by=self.user,
        )
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 3)
        self.assertEqual(self.item.status, InventoryItem.STATUS_IN_STOCK)
        self.assertFalse(result.item_deleted)
        self.assertFalse(result.is_direct_transfer)
        self.assertIsNone(result.pending_replacement)

        entry = result.transaction
        self.assertEqual(entry.type, Transaction.TYPE_TRANSFER)
        self.assertEqual(entry.item_id, self.item.id)
        self.assertEqual(entry.item_name, 'ThinkPad T14')
        self.assertEqual(entry.quantity, 2)
        self.assertEqual(entry.reason_kind, Transaction.REASON_NEW_EQUIPMENT)
        self.assertEqual(entry.performed_by, self.user)

    def test_full_transfer_deletes_item(self):
        result = transfer_item(item_id=self.item.id, quantity=5, branch='Branch A', item_tracking_id='CRE101')
        self.assertTrue(result.item_deleted)
        self.assertFalse(InventoryItem.objects.filter(pk=self.item.id).exists())
        self.assertEqual(result.item.pk, self.item.id)
        self.assertEqual(result.item.quantity, 0)
        self.assertEqual(result.item.status, InventoryItem.STATUS_TRANSFERRED)
        self.assertEqual(result.transaction.item_category, 'Laptops')

    def test_insufficient_stock_changes_nothing(self):
        with self.assertRaises(InsufficientStockError):
            transfer_item(item_id=self.item.id, quantity=6, branch='Branch A', item_tracking_id='CRE102')
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 5)
        self.assertFalse(Transaction.objects.filter(type=Transaction.TYPE_TRANSFER).exists())

    def test_tracking_id_must_start_with_prefix(self):
        for tracking_id in ['ABC123', 'cre123', ' CRE1']:
            with self.assertRaises(ValidationError) as ctx:
                transfer_item(item_id=self.item.id, quantity=1, branch='Branch A', item_tracking_id=tracking_id)
            self.assertEqual(ctx.exception.message, 'Item Tracking ID must start with "CRE"')
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 5)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_missing_fields(self):
        with self.assertRaises(ValidationError):
            transfer_item(quantity=1, branch='Branch A', item_tracking_id='CRE1', item_name='Monitor')
        with self.assertRaises(ValidationError):
            transfer_item(item_id=self.item.id, quantity=1, branch='', item_tracking_id='CRE1')
        with self.assertRaises(ValidationError):
            transfer_item(item_id=self.item.id, quantity=0, branch='Branch A', item_tracking_id='CRE1')

    def test_invalid_reason_rejected_before_mutation(self):
        with self.assertRaises(ValidationError) as ctx:
            transfer_item(item_id=self.item.id, quantity=1, branch='Branch A', item_tracking_id='CRE1', reason='Gift')
        self.assertEqual(ctx.exception.message, 'Invalid reason provided')
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 5)

    def test_unknown_item(self):
        with self.assertRaises(NotFoundError):
            transfer_item(item_id=uuid.uuid4(), quantity=1, branch='Branch A', item_tracking_id='CRE1')

    def test_direct_transfer(self):
        result = transfer_item(
            item_name='Dell Monitor', item_category='Monitors', quantity=3,
            branch='Branch B', item_tracking_id='CRE200', serial_number='MON-1',
        )
        self.assertTrue(result.is_direct_transfer)
        self.assertTrue(result.item_deleted)
        self.assertEqual(InventoryItem.objects.filter(name='Dell Monitor').count(), 0)
        self.assertEqual(result.transaction.item_id, result.item.pk)
        self.assertEqual(result.transaction.item_category, 'Monitors')
        self.assertEqual(result.transaction.quantity, 3)

    def test_replacement_reason_opens_pending(self):
        result = transfer_item(
            item_id=self.item.id, quantity=1, branch='Branch A', item_tracking_id='CRE300',
            reason='Replacement Equipment - screen cracked',
        )
        pending = PendingReplacement.objects.get()
        self.assertEqual(result.pending_replacement, pending)
        self.assertEqual(pending.status, PendingReplacement.STATUS_PENDING)
        self.assertEqual(pending.transaction, result.transaction)
        self.assertEqual(pending.item_id, self.item.id)
        self.assertEqual(pending.reason, 'Replacement Equipment - screen cracked')
        self.assertEqual(pending.reason_note, 'screen cracked')

    def test_sequential_transfers_cannot_overdraw(self):
        transfer_item(item_id=self.item.id, quantity=4, branch='Branch A', item_tracking_id='CRE1')
        with self.assertRaises(InsufficientStockError):
            transfer_item(item_id=self.item.id, quantity=4, branch='Branch B', item_tracking_id='CRE2')
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 1)


class ConcurrentTransferTests(TransactionTestCase):
    """Two transfers racing for the same stock from separate connections"""

    def setUp(self):
        if connection.vendor == 'sqlite' and connection.is_in_memory_db():
            raise unittest.SkipTest('Needs a file-backed or server test database')
        cache.clear()
        self.item = TestDataFactory.create_item(name='Docking Station', category='Accessories', quantity=3)

    def test_only_one_transfer_wins(self):
        barrier = threading.Barrier(2)
        outcomes = []
        lock = threading.Lock()

        def run(tracking_id):
            try:
                barrier.wait()
                transfer_item(item_id=self.item.id, quantity=2, branch='B1', item_tracking_id=tracking_id)
                outcome = 'ok'
            except InventoryError as e:
                outcome = type(e).__name__
            finally:
                connection.close()
            with lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=run, args=(tracking_id,)) for tracking_id in ('CRE1', 'CRE2')]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(outcomes), ['InsufficientStockError', 'ok'])
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 1)
        self.assertEqual(Transaction.objects.filter(type=Transaction.TYPE_TRANSFER).count(), 1)


class StockMoveServiceTests(TestCase):
    """Test stock_move for in/out/return"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.item = TestDataFactory.create_item(name='Router', category='Network', quantity=3)

    def test_stock_in(self):
        result = stock_move(item_id=self.item.id, type='in', quantity=4, performed_by=self.user)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 7)
        self.assertEqual(result.transaction.type, Transaction.TYPE_IN)
        self.assertEqual(result.transaction.branch, '')

    def test_out_and_return_require_branch(self):
        for move_type in ['out', 'return']:
            with self.assertRaises(ValidationError) as ctx:
                stock_move(item_id=self.item.id, type=move_type, quantity=1)
            self.assertEqual(ctx.exception.message, 'Branch is required for "out" and "return" transactions')

    def test_invalid_type(self):
        with self.assertRaises(ValidationError):
            stock_move(item_id=self.item.id, type='transfer', quantity=1, branch='B1')

    def test_out_insufficient_stock(self):
        with self.assertRaises(InsufficientStockError):
            stock_move(item_id=self.item.id, type='out', quantity=4, branch='B1')
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 3)

    def test_out_to_zero_deletes_item(self):
        result = stock_move(item_id=self.item.id, type='out', quantity=3, branch='B1')
        self.assertTrue(result.item_deleted)
        self.assertEqual(result.item.status, InventoryItem.STATUS_OUT_OF_STOCK)
        self.assertFalse(InventoryItem.objects.filter(pk=self.item.id).exists())
        entry = Transaction.objects.get(type=Transaction.TYPE_OUT)
        self.assertEqual(entry.quantity, 3)

    def test_return_after_out_without_transfer_is_not_found(self):
        stock_move(item_id=self.item.id, type='out', quantity=3, branch='B1')
        with self.assertRaises(NotFoundError) as ctx:
            stock_move(item_id=self.item.id, type='return', quantity=3, branch='B1')
        self.assertEqual(ctx.exception.message, 'Original transfer transaction not found')

    def test_return_after_full_transfer_recreates_item(self):
        transfer_item(
            item_id=self.item.id, quantity=3, branch='B1', item_tracking_id='CRE9',
            model='RT-AX', serial_number='SN-R1',
        )
        result = stock_move(item_id=self.item.id, type='return', quantity=2, branch='B1', item_tracking_id='CRE9')
        recreated = InventoryItem.objects.get(pk=self.item.id)
        self.assertEqual(recreated.quantity, 2)
        self.assertEqual(recreated.location, MAIN_INVENTORY_LOCATION)
        self.assertEqual(recreated.name, 'Router')
        self.assertEqual(recreated.category, 'Network')
        self.assertEqual(recreated.model, 'RT-AX')
        self.assertEqual(recreated.serial_number, 'SN-R1')
        self.assertEqual(result.transaction.item_tracking_id, 'CRE9')

    def test_return_with_unmatched_tracking_id(self):
        transfer_item(item_id=self.item.id, quantity=3, branch='B1', item_tracking_id='CRE9')
        with self.assertRaises(NotFoundError):
            stock_move(item_id=self.item.id, type='return', quantity=1, branch='B1', item_tracking_id='CRE10')

    def test_return_to_existing_item_increments(self):
        transfer_item(item_id=self.item.id, quantity=1, branch='B1', item_tracking_id='CRE9')
        stock_move(item_id=self.item.id, type='return', quantity=1, branch='B1', item_tracking_id='CRE9')
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 3)


class ConfirmReplacementServiceTests(TestCase):
    """Test confirm_replacement"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.item = TestDataFactory.create_item(name='Laptop', category='Laptops', quantity=2)
        result = transfer_item(
            item_id=self.item.id, quantity=1, branch='Branch A', item_tracking_id='CRE500',
            asset_number='FDE/IT/NEW', serial_number='SN-NEW',
            reason='Replacement Equipment - screen cracked',
        )
        self.pending = result.pending_replacement

    def test_confirm_appends_entry_and_deletes_pending(self):
        confirmation = confirm_replacement(
            self.pending.id, replacement_asset_number='FDE/IT/OLD',
            replacement_serial_number='SN-OLD', performed_by=self.user,
        )
        self.assertFalse(PendingReplacement.objects.exists())
        self.assertEqual(Transaction.objects.filter(type=Transaction.TYPE_CONFIRMATION).count(), 1)
        self.assertEqual(confirmation.quantity, 1)
        self.assertIn('Confirmed replacement: Replacement Equipment - screen cracked', confirmation.reason)
        self.assertEqual(confirmation.asset_number, 'FDE/IT/NEW')
        self.assertEqual(confirmation.serial_number, 'SN-NEW')
        self.assertEqual(confirmation.replaced_asset_number, 'FDE/IT/OLD')
        self.assertEqual(confirmation.replaced_serial_number, 'SN-OLD')
        self.assertEqual(confirmation.reason_kind, Transaction.REASON_CONFIRMATION)
        self.assertEqual(confirmation.item_category, 'Laptops')
        self.assertEqual(confirmation.item_tracking_id, 'CRE500')

    def test_confirm_unknown_pending(self):
        with self.assertRaises(NotFoundError):
            confirm_replacement(self.pending.id + 1000)

    def test_confirm_twice(self):
        confirm_replacement(self.pending.id)
        with self.assertRaises(NotFoundError):
            confirm_replacement(self.pending.id)


class BranchProjectionTests(TestCase):
    """Test the per-branch net position projection"""

    def setUp(self):
        cache.clear()
        self.item = TestDataFactory.create_item(name='Scanner', category='Peripherals', quantity=20)

    def _items(self, branch):
        for group in build_transferred_items():
            if group['branch'] == branch:
                return group['items']
        return []

    def test_round_trip_removes_position(self):
        transfer_item(item_id=self.item.id, quantity=5, branch='X', item_tracking_id='CRE1')
        stock_move(item_id=self.item.id, type='return', quantity=5, branch='X', item_tracking_id='CRE1')
        self.assertEqual(build_transferred_items(), [])

    def test_partial_return_nets_quantity(self):
        transfer_item(item_id=self.item.id, quantity=5, branch='X', item_tracking_id='CRE1', asset_number='A-1')
        stock_move(item_id=self.item.id, type='return', quantity=2, branch='X', item_tracking_id='CRE1')
        items = self._items('X')
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]['quantity'], 3)
        self.assertEqual(items[0]['id'], self.item.id)
        self.assertEqual(items[0]['item_tracking_id'], 'CRE1')

    def test_positions_keyed_by_tracking_id(self):
        transfer_item(item_id=self.item.id, quantity=2, branch='X', item_tracking_id='CRE1')
        transfer_item(item_id=self.item.id, quantity=3, branch='X', item_tracking_id='CRE2')
        stock_move(item_id=self.item.id, type='return', quantity=2, branch='X', item_tracking_id='CRE1')
        items = self._items('X')
        self.assertEqual([i['item_tracking_id'] for i in items], ['CRE2'])
        self.assertEqual(items[0]['quantity'], 3)

    def test_branches_sorted_and_items_in_first_appearance_order(self):
        other = TestDataFactory.create_item(name='Keyboard', category='Peripherals', quantity=5)
        transfer_item(item_id=self.item.id, quantity=1, branch='Zeta', item_tracking_id='CRE1')
        transfer_item(item_id=other.id, quantity=1, branch='Alpha', item_tracking_id='CRE2')
        transfer_item(item_id=self.item.id, quantity=1, branch='Alpha', item_tracking_id='CRE3')
        projection = build_transferred_items()
        self.assertEqual([group['branch'] for group in projection], ['Alpha', 'Zeta'])
        self.assertEqual([i['name'] for i in projection[0]['items']], ['Keyboard', 'Scanner'])

    def test_display_fields_from_last_entry(self):
        transfer_item(item_id=self.item.id, quantity=1, branch='X', item_tracking_id='CRE1',
                      asset_number='A-1', reason='New Equipment')
        transfer_item(item_id=self.item.id, quantity=1, branch='X', item_tracking_id='CRE1',
                      asset_number='A-2', reason='Repaired')
        items = self._items('X')
        self.assertEqual(items[0]['quantity'], 2)
        self.assertEqual(items[0]['asset_number'], 'A-2')
        self.assertEqual(items[0]['reason'], 'Repaired')

    def test_live_item_name_preferred(self):
        transfer_item(item_id=self.item.id, quantity=1, branch='X', item_tracking_id='CRE1')
        InventoryItem.objects.filter(pk=self.item.id).update(name='Scanner v2')
        self.assertEqual(self._items('X')[0]['name'], 'Scanner v2')

    def test_ledger_name_used_when_item_gone(self):
        transfer_item(item_id=self.item.id, quantity=20, branch='X', item_tracking_id='CRE1')
        self.assertEqual(self._items('X')[0]['name'], 'Scanner')
        self.assertEqual(self._items('X')[0]['category'], 'Peripherals')

    def test_projection_is_idempotent_and_cache_invalidated(self):
        transfer_item(item_id=self.item.id, quantity=2, branch='X', item_tracking_id='CRE1')
        first = get_transferred_items()
        self.assertEqual(first, get_transferred_items())
        self.assertEqual(first, build_transferred_items())

        transfer_item(item_id=self.item.id, quantity=1, branch='Y', item_tracking_id='CRE2')
        self.assertEqual([group['branch'] for group in get_transferred_items()], ['X', 'Y'])


class TransactionAPITests(TestCase):
    """Test the transaction endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.item = TestDataFactory.create_item(name='Printer', category='Office', quantity=4, user=self.user)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/transactions/transferred-items/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_transfer(self):
        data = {
            'itemId': str(self.item.id),
            'quantity': 1,
            'branch': 'Branch A',
            'itemTrackingId': 'CRE42',
            'assetNumber': 'FDE/IT/42',
            'reason': 'New Equipment',
        }
        response = self.client.post('/api/v1/transactions/transfer/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['itemDeleted'])
        self.assertFalse(response.data['isDirectTransfer'])
        self.assertEqual(response.data['item']['quantity'], 3)
        self.assertEqual(response.data['transaction']['itemTrackingId'], 'CRE42')
        self.assertEqual(response.data['transaction']['assetNumber'], 'FDE/IT/42')
        self.assertEqual(response.data['transaction']['performedBy']['username'], self.user.username)

    def test_full_transfer_response(self):
        data = {'itemId': str(self.item.id), 'quantity': 4, 'branch': 'Branch A', 'itemTrackingId': 'CRE42'}
        response = self.client.post('/api/v1/transactions/transfer/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['itemDeleted'])
        self.assertEqual(response.data['item']['status'], InventoryItem.STATUS_TRANSFERRED)
        self.assertEqual(response.data['item']['quantity'], 0)

    def test_transfer_errors(self):
        data = {'itemId': str(self.item.id), 'quantity': 1, 'branch': 'Branch A', 'itemTrackingId': 'XYZ1'}
        response = self.client.post('/api/v1/transactions/transfer/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {
            'error': 'Item Tracking ID must start with "CRE"',
            'message': 'Item Tracking ID must start with "CRE"',
        })

        data['itemTrackingId'] = 'CRE1'
        data['quantity'] = 10
        response = self.client.post('/api/v1/transactions/transfer/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient stock for this transfer')

        data['quantity'] = 1
        data['itemId'] = str(uuid.uuid4())
        response = self.client.post('/api/v1/transactions/transfer/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.post('/api/v1/transactions/transfer/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Missing required fields', response.data['error'])
        self.assertEqual(response.data['message'], response.data['error'])

        data['itemId'] = 'not-a-uuid'
        response = self.client.post('/api/v1/transactions/transfer/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid item id')

    def test_direct_transfer_with_empty_item_id(self):
        data = {
            'itemId': '',
            'itemName': 'Monitor',
            'itemCategory': 'Displays',
            'quantity': 1,
            'branch': 'B1',
            'itemTrackingId': 'CRE9',
            'reason': 'New Equipment',
        }
        response = self.client.post('/api/v1/transactions/transfer/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['isDirectTransfer'])
        self.assertTrue(response.data['itemDeleted'])
        self.assertEqual(response.data['transaction']['itemName'], 'Monitor')
        self.assertFalse(InventoryItem.objects.filter(name='Monitor').exists())

        data['itemId'] = None
        data['itemTrackingId'] = 'CRE10'
        response = self.client.post('/api/v1/transactions/transfer/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['isDirectTransfer'])

    def test_stock_move_with_empty_item_id(self):
        data = {'itemId': '', 'type': 'in', 'quantity': 1}
        response = self.client.post('/api/v1/transactions/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Missing required fields', response.data['error'])

    def test_stock_move(self):
        data = {'itemId': str(self.item.id), 'type': 'out', 'quantity': 2, 'branch': 'Branch C'}
        response = self.client.post('/api/v1/transactions/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['item']['quantity'], 2)
        self.assertFalse(response.data['itemDeleted'])
        self.assertNotIn('isDirectTransfer', response.data)

        response = self.client.get('/api/v1/transactions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['type'], 'out')

    def test_transferred_items(self):
        transfer_item(item_id=self.item.id, quantity=2, branch='Branch A', item_tracking_id='CRE7',
                      serial_number='SN-P1', performed_by=self.user)
        response = self.client.get('/api/v1/transactions/transferred-items/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['branch'], 'Branch A')
        row = response.data[0]['items'][0]
        self.assertEqual(row['id'], str(self.item.id))
        self.assertEqual(row['quantity'], 2)
        self.assertEqual(row['serialNumber'], 'SN-P1')
        self.assertEqual(row['itemTrackingId'], 'CRE7')
        self.assertIn('transferDate', row)

    def test_pending_and_confirm_flow(self):
        data = {
            'itemId': str(self.item.id), 'quantity': 1, 'branch': 'Branch A',
            'itemTrackingId': 'CRE77', 'reason': 'Replacement Equipment - screen cracked',
        }
        self.client.post('/api/v1/transactions/transfer/', data, format='json')

        response = self.client.get('/api/v1/transactions/pending-replacements/')
        self.assertEqual(len(response.data), 1)
        pending = response.data[0]
        self.assertEqual(pending['status'], 'Pending')
        self.assertEqual(pending['itemTrackingId'], 'CRE77')

        response = self.client.put(
            f"/api/v1/transactions/pending-replacements/{pending['id']}/confirm/",
            {'replacementAssetNumber': 'FDE/IT/OLD', 'replacementSerialNumber': 'SN-OLD'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Pending replacement confirmed and removed')

        response = self.client.get('/api/v1/transactions/pending-replacements/')
        self.assertEqual(response.data, [])

        response = self.client.get('/api/v1/transactions/confirmed-replacements/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['replacedSerialNumber'], 'SN-OLD')
        self.assertEqual(response.data[0]['performedBy']['username'], self.user.username)

    def test_confirm_unknown_pending(self):
        response = self.client.put('/api/v1/transactions/pending-replacements/999/confirm/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Pending replacement not found')

    def test_branches_and_branch_items(self):
        stock_move(item_id=self.item.id, type='out', quantity=1, branch='Branch B')
        stock_move(item_id=self.item.id, type='out', quantity=2, branch='Branch B')
        stock_move(item_id=self.item.id, type='in', quantity=5)

        response = self.client.get('/api/v1/transactions/branches/')
        self.assertEqual(response.data, ['Branch B'])

        response = self.client.get('/api/v1/transactions/branch/Branch%20B/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['quantity'], 3)
        self.assertEqual(response.data[0]['name'], 'Printer')

    def test_item_history(self):
        stock_move(item_id=self.item.id, type='in', quantity=1)
        other = TestDataFactory.create_item()
        stock_move(item_id=other.id, type='in', quantity=1)
        response = self.client.get(f'/api/v1/transactions/item/{self.item.id}/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['itemId'], str(self.item.id))


class AuditLogAPITests(TestCase):
    """Test the superadmin-only ledger endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_superadmin()
        self.subadmin = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.item = TestDataFactory.create_item(quantity=10)
        transfer_item(item_id=self.item.id, quantity=1, branch='North', item_tracking_id='CRE1', performed_by=self.admin)
        stock_move(item_id=self.item.id, type='in', quantity=2, performed_by=self.subadmin)

    def test_subadmin_forbidden(self):
        self.client.authenticate_user(self.subadmin)
        response = self.client.get('/api/v1/transactions/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_django_superuser_counts_as_superadmin(self):
        root = TestDataFactory.create_user(is_superuser=True)
        self.client.authenticate_user(root)
        response = self.client.get('/api/v1/transactions/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_list_and_filters(self):
        response = self.client.get('/api/v1/transactions/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        self.assertEqual(response.data[0]['performedBy']['role'], 'subadmin')

        response = self.client.get('/api/v1/transactions/audit-logs/', {'type': 'transfer'})
        self.assertEqual([row['type'] for row in response.data], ['transfer'])

        response = self.client.get('/api/v1/transactions/audit-logs/', {'performedBy': self.subadmin.id})
        self.assertEqual([row['type'] for row in response.data], ['in'])

        response = self.client.get('/api/v1/transactions/audit-logs/', {'itemTrackingId': 'CRE1'})
        self.assertEqual(len(response.data), 1)

        tomorrow = (timezone.now() + datetime.timedelta(days=1)).date().isoformat()
        response = self.client.get('/api/v1/transactions/audit-logs/', {'dateFrom': tomorrow})
        self.assertEqual(response.data, [])

    def test_delete_entry(self):
        entry = Transaction.objects.filter(type=Transaction.TYPE_IN).first()
        response = self.client.delete(f'/api/v1/transactions/audit-logs/{entry.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Transaction.objects.filter(pk=entry.id).exists())

        response = self.client.delete(f'/api/v1/transactions/audit-logs/{entry.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class LedgerImmutabilityTests(TestCase):

    def test_existing_entry_cannot_be_saved(self):
        item = TestDataFactory.create_item()
        entry = stock_move(item_id=item.id, type='in', quantity=1).transaction
        entry.reason = 'edited'
        with self.assertRaises(ValueError):
            entry.save()


class PruneAuditLogsCommandTests(TestCase):

    def setUp(self):
        item = TestDataFactory.create_item(quantity=10)
        self.old = stock_move(item_id=item.id, type='in', quantity=1).transaction
        self.recent = stock_move(item_id=item.id, type='in', quantity=1).transaction
        Transaction.objects.filter(pk=self.old.pk).update(
            created_at=timezone.now() - datetime.timedelta(days=400)
        )

    def test_dry_run_keeps_entries(self):
        cutoff = (timezone.now() - datetime.timedelta(days=30)).date().isoformat()
        out = io.StringIO()
        call_command('prune_audit_logs', '--before', cutoff, '--dry-run', stdout=out)
        self.assertIn('Found 1 ledger entries', out.getvalue())
        self.assertEqual(Transaction.objects.count(), 2)

    def test_dry_run_counts_per_type(self):
        item = TestDataFactory.create_item(quantity=10)
        for entry in (
            stock_move(item_id=item.id, type='out', quantity=1, branch='Branch A').transaction,
            stock_move(item_id=item.id, type='out', quantity=1, branch='Branch B').transaction,
        ):
            Transaction.objects.filter(pk=entry.pk).update(
                created_at=timezone.now() - datetime.timedelta(days=400)
            )
        cutoff = (timezone.now() - datetime.timedelta(days=30)).date().isoformat()
        out = io.StringIO()
        call_command('prune_audit_logs', '--before', cutoff, '--dry-run', stdout=out)
        lines = out.getvalue().splitlines()
        self.assertIn('Found 3 ledger entries', lines[0])
        self.assertEqual(lines[1:3], ['  - in: 1', '  - out: 2'])
        self.assertEqual(Transaction.objects.count(), 4)

    def test_prune(self):
        cutoff = (timezone.now() - datetime.timedelta(days=30)).date().isoformat()
        call_command('prune_audit_logs', '--before', cutoff, stdout=io.StringIO())
        self.assertEqual(list(Transaction.objects.values_list('pk', flat=True)), [self.recent.pk])
