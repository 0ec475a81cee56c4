"""
Cache invalidation signals
Drop the cached branch projection whenever the ledger or inventory changes
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from backend.inventory.models import InventoryItem
from .models import Transaction
from .projections import invalidate_transferred_items

logger = logging.getLogger(__name__)


def invalidate_transferred_items_manual():
    """Manually invalidate the transferred items projection"""
    try:
        invalidate_transferred_items()
        logger.debug("Invalidated transferred items cache (Manual/Signal)")
    except Exception as e:
        logger.warning(f"Error invalidating transferred items cache: {e}")


@receiver([post_save, post_delete], sender=Transaction)
@receiver([post_save, post_delete], sender=InventoryItem)
def invalidate_transferred_items_cache(sender, instance, **kwargs):
    """Invalidate immediately and again after the DB commit"""
    invalidate_transferred_items_manual()
    transaction.on_commit(invalidate_transferred_items_manual)
