"""
Read-side views derived from the ledger: per-branch net positions of transferred
stock, branch listings and per-branch "out" totals.
"""
import logging
from django.conf import settings
from django.core.cache import cache
from django.db.models import Sum
from backend.inventory.models import InventoryItem
from .models import Transaction

logger = logging.getLogger(__name__)

TRANSFERRED_ITEMS_CACHE_KEY = 'transferred_items'


def _build_positions():
    """
    Replay transfer/return entries oldest first and net them per
    (branch, item, tracking id). Display fields come from the last entry of each group.
    """
    entries = (
        Transaction.objects
        .filter(type__in=[Transaction.TYPE_TRANSFER, Transaction.TYPE_RETURN])
        .order_by('created_at', 'id')
    )

    positions = {}
    for entry in entries.iterator():
        key = (entry.branch, entry.item_id, entry.item_tracking_id)
        signed = entry.quantity or 0
        if entry.type == Transaction.TYPE_RETURN:
            signed = -signed

        position = positions.get(key)
        if position is None:
            position = positions[key] = {'branch': entry.branch, 'id': entry.item_id, 'quantity': 0}
        position['quantity'] += signed
        position.update({
            'name': entry.item_name,
            'category': entry.item_category,
            'asset_number': entry.asset_number,
            'model': entry.model,
            'serial_number': entry.serial_number,
            'item_tracking_id': entry.item_tracking_id,
            'reason': entry.reason,
            'transfer_date': entry.created_at,
        })

    return [position for position in positions.values() if position['quantity'] > 0]


def _enrich_with_live_items(positions):
    item_ids = {position['id'] for position in positions if position['id']}
    live = {
        item.pk: item
        for item in InventoryItem.objects.filter(pk__in=item_ids).only('id', 'name', 'category')
    }
    for position in positions:
        item = live.get(position['id'])
        if item is not None:
            position['name'] = item.name
            position['category'] = item.category
    return positions


def build_transferred_items():
    """Uncached projection: [{'branch': name, 'items': [...]}] sorted by branch name"""
    by_branch = {}
    for position in _enrich_with_live_items(_build_positions()):
        by_branch.setdefault(position['branch'], []).append(position)
    return [{'branch': branch, 'items': by_branch[branch]} for branch in sorted(by_branch)]


def get_transferred_items():
    """Cached projection; invalidated by ledger and inventory writes"""
    data = cache.get(TRANSFERRED_ITEMS_CACHE_KEY)
    if data is not None:
        logger.debug("Cache HIT for transferred items")
        return data

    logger.debug("Cache MISS for transferred items")
    data = build_transferred_items()
    cache.set(TRANSFERRED_ITEMS_CACHE_KEY, data, settings.TRANSFERRED_ITEMS_CACHE_TTL)
    return data


def invalidate_transferred_items():
    cache.delete(TRANSFERRED_ITEMS_CACHE_KEY)


def list_branches():
    """Distinct branch names that have received stock through "out" movements"""
    return list(
        Transaction.objects
        .filter(type=Transaction.TYPE_OUT)
        .exclude(branch='')
        .order_by('branch')
        .values_list('branch', flat=True)
        .distinct()
    )


def items_at_branch(branch):
    """Summed "out" quantity per item at a branch, for items still present centrally"""
    totals = (
        Transaction.objects
        .filter(type=Transaction.TYPE_OUT, branch=branch, item_id__isnull=False)
        .order_by()
        .values('item_id')
        .annotate(total_quantity=Sum('quantity'))
    )
    quantities = {row['item_id']: row['total_quantity'] for row in totals}
    items = InventoryItem.objects.filter(pk__in=quantities.keys()).order_by('name')
    return [
        {
            'id': item.pk,
            'name': item.name,
            'category': item.category,
            'location': item.location,
            'supplier': item.supplier,
            'quantity': quantities[item.pk],
        }
        for item in items
    ]
