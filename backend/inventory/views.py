import datetime
import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from .models import InventoryItem
from .serializers import InventoryItemSerializer, InventoryItemCreateSerializer, InventoryItemUpdateSerializer
from .utils import calculate_warranty_expiry, find_duplicate_serial, split_serial_numbers
from backend.transactions.models import Transaction
from backend.transactions.utils import record_event

logger = logging.getLogger('backend.inventory')

# Fields whose change is worth an update_item ledger entry (wire name -> attribute)
TRACKED_FIELDS = {
    'name': 'name',
    'category': 'category',
    'quantity': 'quantity',
    'maxStock': 'max_stock',
    'supplier': 'supplier',
    'location': 'location',
}

UPDATABLE_FIELDS = {
    **TRACKED_FIELDS,
    'model': 'model',
    'serialNumber': 'serial_number',
    'purchaseDate': 'purchase_date',
    'description': 'description',
}


def _duplicate_serial_response(duplicate):
    serial, existing_name = duplicate
    return Response(
        {'error': f"Serial number '{serial}' already exists in item '{existing_name}'."},
        status=status.HTTP_400_BAD_REQUEST
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def inventory_list_create(request):
    """List all inventory items (newest first) or create new ones"""
    if request.method == 'GET':
        items = InventoryItem.objects.all().order_by('-created_at')
        serializer = InventoryItemSerializer(items, many=True)
        return Response(serializer.data)

    serializer = InventoryItemCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    if not data['allowDuplicates']:
        duplicate = find_duplicate_serial(data['serialNumber'])
        if duplicate:
            logger.warning(f"User {request.user.username} rejected duplicate serial '{duplicate[0]}'")
            return _duplicate_serial_response(duplicate)

    purchase_date = data['purchaseDate'] or datetime.date.today()
    base_fields = {
        'name': data['name'],
        'category': data['category'],
        'max_stock': data['maxStock'],
        'supplier': data['supplier'],
        'model': data['model'],
        'warranty': data['warranty'],
        'warranty_expiry_date': calculate_warranty_expiry(data['warranty'], purchase_date),
        'purchase_date': purchase_date,
        'location': data['location'],
        'description': data['description'],
        'created_by': request.user,
        'last_updated_by': request.user,
    }

    serials = split_serial_numbers(data['serialNumber'])
    with transaction.atomic():
        if serials:
            # Serialized stock: one record per unit
            created = [
                InventoryItem.objects.create(**base_fields, quantity=1, serial_number=serial, status=InventoryItem.STATUS_IN_STOCK)
                for serial in serials
            ]
            reason = 'Item created via batch upload/entry' if len(created) > 1 else 'Item created'
        else:
            quantity = data['quantity']
            created = [InventoryItem.objects.create(
                **base_fields,
                quantity=quantity,
                serial_number='',
                status=InventoryItem.status_for_quantity(quantity),
            )]
            reason = 'Item created'

        for item in created:
            record_event(
                Transaction.TYPE_CREATE_ITEM, request=request, item=item,
                quantity=item.quantity, branch=item.location, reason=reason,
            )

    logger.info(f"User {request.user.username} created {len(created)} inventory item(s) named '{data['name']}'")
    if len(created) > 1:
        return Response({
            'message': f'{len(created)} items created successfully',
            'items': InventoryItemSerializer(created, many=True).data,
        }, status=status.HTTP_201_CREATED)
    return Response(InventoryItemSerializer(created[0]).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def inventory_detail(request, pk):
    """Retrieve, update or delete an inventory item"""
    item = get_object_or_404(InventoryItem, pk=pk)

    if request.method == 'GET':
        return Response(InventoryItemSerializer(item).data)

    if request.method == 'DELETE':
        with transaction.atomic():
            record_event(
                Transaction.TYPE_DELETE_ITEM, request=request, item=item,
                quantity=item.quantity, branch=item.location, reason='Item deleted permanently',
            )
            item.delete()
        logger.info(f"User {request.user.username} deleted inventory item {pk}")
        return Response({'message': 'Item removed'})

    serializer = InventoryItemUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    if 'serialNumber' in data and not data['allowDuplicates']:
        duplicate = find_duplicate_serial(data['serialNumber'], exclude_item_id=item.pk)
        if duplicate:
            return _duplicate_serial_response(duplicate)

    changes = [
        wire_name for wire_name, attr in TRACKED_FIELDS.items()
        if wire_name in data and data[wire_name] != getattr(item, attr)
    ]

    for wire_name, attr in UPDATABLE_FIELDS.items():
        if wire_name in data:
            setattr(item, attr, data[wire_name])

    if 'warranty' in data:
        item.warranty = data['warranty']
        # Expiry counts from when the record entered the system
        item.warranty_expiry_date = calculate_warranty_expiry(data['warranty'], item.created_at)

    item.last_updated_by = request.user
    item.refresh_status()

    with transaction.atomic():
        item.save()
        if changes:
            record_event(
                Transaction.TYPE_UPDATE_ITEM, request=request, item=item,
                quantity=item.quantity, branch=item.location,
                reason=f"Updated: {', '.join(changes)}",
            )

    return Response(InventoryItemSerializer(item).data)
