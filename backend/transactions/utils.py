"""Utility functions for administrative ledger entries"""
import logging
from django.db import transaction as db_transaction
from .models import Transaction

logger = logging.getLogger(__name__)


def record_event(event_type, request=None, user=None, item=None, item_name=None,
                 item_category=None, quantity=None, branch=None, reason=''):
    """
    Append an administrative entry (create_item, delete_category, create_user, ...)
    to the ledger.

    Args:
        event_type: One of the Transaction.TYPE_* administrative values
        request: DRF request (for the acting user) - optional if user is provided
        user: Optional user override (defaults to request.user)
        item: Optional InventoryItem the event is about; fills id/name/category
        item_name: Human-readable subject (category name, username) when no item
        item_category: Category or subject kind ("User")
        quantity: Quantity snapshot for item events
        branch: Location snapshot for item events
        reason: Free-text description

    The write happens inside its own savepoint so a failure is logged without
    breaking the caller's surrounding transaction. Stock movements never go
    through here; their ledger append must succeed or the movement is rolled back.
    """
    audit_user = user
    if audit_user is None and request is not None and hasattr(request, 'user'):
        audit_user = request.user
    if audit_user is not None and not audit_user.is_authenticated:
        audit_user = None

    try:
        with db_transaction.atomic():
            return Transaction.objects.create(
                type=event_type,
                item_id=item.pk if item is not None else None,
                item_name=item.name if item is not None else (item_name or ''),
                item_category=item.category if item is not None else (item_category or ''),
                quantity=quantity,
                branch=branch or '',
                reason=reason or '',
                performed_by=audit_user,
            )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to record {event_type} ledger entry: {str(e)}", exc_info=True)
        return None
