"""
Stock movement engines: branch transfers, in/out/return moves and replacement
confirmation.

Each operation validates its input before touching the database, then runs its
writes (item mutation, ledger append, pending-replacement insert/delete) in one
atomic block with the source item row locked, so readers never observe a ledger
entry without the matching inventory state and two concurrent decrements of the
same item cannot both pass the stock check.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from backend.core.exceptions import (
    ValidationError, NotFoundError, InsufficientStockError, PersistenceError
)
from backend.inventory.models import InventoryItem, MAIN_INVENTORY_LOCATION
from .models import Transaction, PendingReplacement, TRACKING_ID_PREFIX
from .reasons import parse_transfer_reason, build_confirmation_reason

logger = logging.getLogger(__name__)

STOCK_MOVE_TYPES = (Transaction.TYPE_IN, Transaction.TYPE_OUT, Transaction.TYPE_RETURN)

MISSING_TRANSFER_FIELDS = (
    'Missing required fields. Provide either itemId OR (itemName and itemCategory), '
    'plus quantity, branch, and itemTrackingId.'
)


@dataclass
class StockMoveResult:
    transaction: Transaction
    item: InventoryItem
    item_deleted: bool = False
    is_direct_transfer: bool = False
    pending_replacement: Optional[PendingReplacement] = None


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _validate_quantity(quantity):
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError('Quantity must be a positive whole number')
    return quantity


def _coerce_item_id(item_id):
    if isinstance(item_id, uuid.UUID):
        return item_id
    try:
        return uuid.UUID(str(item_id))
    except ValueError:
        raise ValidationError('Invalid item id')


def validate_tracking_id(item_tracking_id):
    if _is_blank(item_tracking_id):
        raise ValidationError('Item Tracking ID is required')
    if not item_tracking_id.startswith(TRACKING_ID_PREFIX):
        raise ValidationError(f'Item Tracking ID must start with "{TRACKING_ID_PREFIX}"')
    return item_tracking_id


def _actor(user):
    if user is not None and getattr(user, 'is_authenticated', False):
        return user
    return None


def _locked_item(item_id):
    return InventoryItem.objects.select_for_update().filter(pk=item_id).first()


def _remove_depleted_item(item, status):
    """Delete a zeroed record but keep the instance usable as a response projection"""
    item_pk = item.pk
    item.delete()
    item.pk = item_pk
    item.quantity = 0
    item.status = status


def _persistence_error(operation, error):
    logger.error(f"{operation} failed at the database layer: {str(error)}", exc_info=True)
    return PersistenceError(f'Database error occurred during {operation}')


def transfer_item(quantity, branch, item_tracking_id, item_id=None, item_name=None,
                  item_category=None, asset_number='', model='', serial_number='',
                  reason=None, performed_by=None):
    """
    Move stock from central inventory to a branch.

    With item_id the existing record is decremented. Without it (direct transfer)
    a transient record holding exactly the transferred quantity is created and
    immediately zeroed. A record that reaches zero is deleted; its history lives
    on in the ledger. A "Replacement Equipment" reason opens a pending replacement.

    Raises ValidationError, NotFoundError, InsufficientStockError or PersistenceError.
    """
    if (_is_blank(item_id) and (_is_blank(item_name) or _is_blank(item_category))) \
            or not quantity or _is_blank(branch) or _is_blank(item_tracking_id):
        raise ValidationError(MISSING_TRANSFER_FIELDS)
    quantity = _validate_quantity(quantity)
    validate_tracking_id(item_tracking_id)
    parsed_reason = parse_transfer_reason(reason)
    if not _is_blank(item_id):
        item_id = _coerce_item_id(item_id)
    actor = _actor(performed_by)

    try:
        with transaction.atomic():
            if not _is_blank(item_id):
                item = _locked_item(item_id)
                if item is None:
                    raise NotFoundError('Inventory item not found')
                is_direct_transfer = False
            else:
                item = InventoryItem.objects.create(
                    name=item_name,
                    category=item_category,
                    quantity=quantity,
                    location=MAIN_INVENTORY_LOCATION,
                    status=InventoryItem.STATUS_IN_STOCK,
                    model=model or '',
                    serial_number=serial_number or '',
                    created_by=actor,
                    last_updated_by=actor,
                )
                is_direct_transfer = True

            if item.quantity < quantity:
                raise InsufficientStockError('Insufficient stock for this transfer')

            item.quantity -= quantity
            item_deleted = item.quantity == 0
            if item_deleted:
                _remove_depleted_item(item, InventoryItem.STATUS_TRANSFERRED)
            else:
                item.refresh_status()
                item.last_updated_by = actor
                item.save()

            ledger_entry = Transaction.objects.create(
                item_id=item.pk,
                item_name=item.name,
                item_category=item.category,
                type=Transaction.TYPE_TRANSFER,
                quantity=quantity,
                branch=branch,
                asset_number=asset_number or '',
                model=model or '',
                serial_number=serial_number or '',
                item_tracking_id=item_tracking_id,
                reason=reason or '',
                reason_kind=parsed_reason.kind if parsed_reason else '',
                reason_note=parsed_reason.note if parsed_reason else '',
                performed_by=actor,
            )

            pending = None
            if parsed_reason and parsed_reason.opens_pending_replacement:
                pending = PendingReplacement.objects.create(
                    transaction=ledger_entry,
                    item_id=item.pk,
                    item_name=item.name,
                    branch=branch,
                    item_tracking_id=item_tracking_id,
                    reason=ledger_entry.reason,
                    reason_note=parsed_reason.note,
                    status=PendingReplacement.STATUS_PENDING,
                )
    except DjangoValidationError as e:
        raise ValidationError('; '.join(e.messages))
    except DatabaseError as e:
        raise _persistence_error('transfer', e) from e

    logger.info(
        f"Transferred {quantity} x '{item.name}' ({item.pk}) to branch '{branch}' "
        f"[tracking={item_tracking_id}, direct={is_direct_transfer}, deleted={item_deleted}, "
        f"pending_replacement={pending.pk if pending else None}]"
    )
    return StockMoveResult(
        transaction=ledger_entry,
        item=item,
        item_deleted=item_deleted,
        is_direct_transfer=is_direct_transfer,
        pending_replacement=pending,
    )


def _recover_transferred_item(item_id, item_tracking_id, actor):
    """
    Rebuild a record that a full transfer removed, from the latest matching
    transfer entry. Returns an unsaved item with quantity 0, or None.
    """
    transfers = Transaction.objects.filter(item_id=item_id, type=Transaction.TYPE_TRANSFER)
    if not _is_blank(item_tracking_id):
        transfers = transfers.filter(item_tracking_id=item_tracking_id)
    transfer_entry = transfers.order_by('-created_at', '-id').first()
    if transfer_entry is None:
        return None

    logger.info(f"Recreating inventory item {item_id} from transfer entry {transfer_entry.pk} for a return")
    return InventoryItem(
        id=item_id,
        name=transfer_entry.item_name,
        category=transfer_entry.item_category,
        quantity=0,
        location=MAIN_INVENTORY_LOCATION,
        supplier='',
        model=transfer_entry.model or '',
        serial_number=transfer_entry.serial_number or '',
        status=InventoryItem.STATUS_IN_STOCK,
        created_by=actor,
        last_updated_by=actor,
    )


def stock_move(item_id, type, quantity, branch=None, item_tracking_id=None, performed_by=None):
    """
    Apply an in/out/return movement to an inventory item and log it.

    A return for an item that a transfer removed from central inventory recreates
    the record from the latest matching transfer entry; without such an entry the
    return fails with NotFoundError. An "out" that empties the item deletes it.
    """
    if _is_blank(item_id) or _is_blank(type) or not quantity:
        raise ValidationError('Missing required fields')
    if type not in STOCK_MOVE_TYPES:
        raise ValidationError(f'Transaction type must be one of: {", ".join(STOCK_MOVE_TYPES)}')
    quantity = _validate_quantity(quantity)
    if type in (Transaction.TYPE_OUT, Transaction.TYPE_RETURN) and _is_blank(branch):
        raise ValidationError('Branch is required for "out" and "return" transactions')
    item_id = _coerce_item_id(item_id)
    actor = _actor(performed_by)

    try:
        with transaction.atomic():
            item = _locked_item(item_id)
            if item is None and type == Transaction.TYPE_RETURN:
                item = _recover_transferred_item(item_id, item_tracking_id, actor)
                if item is None:
                    raise NotFoundError('Original transfer transaction not found')
            if item is None:
                raise NotFoundError('Inventory item not found')

            if type == Transaction.TYPE_OUT:
                if item.quantity < quantity:
                    raise InsufficientStockError('Insufficient stock for this transaction')
                item.quantity -= quantity
            else:
                item.quantity += quantity

            item_deleted = type == Transaction.TYPE_OUT and item.quantity == 0
            if item_deleted:
                _remove_depleted_item(item, InventoryItem.STATUS_OUT_OF_STOCK)
            else:
                item.refresh_status()
                item.last_updated_by = actor
                item.save()

            ledger_entry = Transaction.objects.create(
                item_id=item.pk,
                item_name=item.name,
                item_category=item.category,
                type=type,
                quantity=quantity,
                branch=branch or '',
                item_tracking_id=item_tracking_id or '',
                performed_by=actor,
            )
    except DjangoValidationError as e:
        raise ValidationError('; '.join(e.messages))
    except DatabaseError as e:
        raise _persistence_error(f'"{type}" transaction', e) from e

    logger.info(
        f"Recorded '{type}' of {quantity} for item '{item.name}' ({item.pk}) "
        f"branch='{branch or ''}' remaining={item.quantity} deleted={item_deleted}"
    )
    return StockMoveResult(transaction=ledger_entry, item=item, item_deleted=item_deleted)


def confirm_replacement(pending_id, replacement_asset_number=None, replacement_serial_number=None,
                        performed_by=None):
    """
    Close a pending replacement.

    Appends a ``confirmation`` entry (quantity 1) carrying the installed unit's
    asset/serial numbers from the originating transfer and the replaced unit's
    identifiers given here, then deletes the pending row.
    """
    actor = _actor(performed_by)

    try:
        with transaction.atomic():
            pending = (
                PendingReplacement.objects.select_for_update()
                .select_related('transaction')
                .filter(pk=pending_id)
                .first()
            )
            if pending is None:
                raise NotFoundError('Pending replacement not found')

            original = pending.transaction
            item = InventoryItem.objects.filter(pk=pending.item_id).only('category').first()
            if item is not None:
                category = item.category
            elif original is not None and original.item_category:
                category = original.item_category
            else:
                category = 'Replacement'

            confirmation = Transaction.objects.create(
                item_id=pending.item_id,
                item_name=pending.item_name,
                item_category=category,
                type=Transaction.TYPE_CONFIRMATION,
                quantity=1,
                branch=pending.branch,
                item_tracking_id=pending.item_tracking_id,
                reason=build_confirmation_reason(
                    pending.reason, replacement_asset_number, replacement_serial_number
                ),
                reason_kind=Transaction.REASON_CONFIRMATION,
                reason_note=pending.reason_note,
                asset_number=original.asset_number if original else '',
                serial_number=original.serial_number if original else '',
                replaced_asset_number=replacement_asset_number or '',
                replaced_serial_number=replacement_serial_number or '',
                performed_by=actor,
            )
            pending.delete()
    except DjangoValidationError as e:
        raise ValidationError('; '.join(e.messages))
    except DatabaseError as e:
        raise _persistence_error('replacement confirmation', e) from e

    logger.info(
        f"Confirmed replacement {pending_id} for '{confirmation.item_name}' at '{confirmation.branch}' "
        f"[tracking={confirmation.item_tracking_id}]"
    )
    return confirmation
