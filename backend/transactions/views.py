import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.exceptions import InventoryError
from backend.core.permissions import IsSuperAdmin
from .models import Transaction, PendingReplacement
from .filters import AuditLogFilter
from .projections import get_transferred_items, list_branches, items_at_branch
from .serializers import (
    TransactionSerializer, PendingReplacementSerializer,
    TransferRequestSerializer, StockMoveRequestSerializer, ConfirmReplacementSerializer,
    StockMoveResultSerializer, TransferResultSerializer,
    BranchPositionsSerializer, BranchItemSerializer,
)
from .services import transfer_item, stock_move, confirm_replacement

logger = logging.getLogger('backend.transactions')


def _error_response(error, request, action):
    log = logger.error if error.status_code >= 500 else logger.warning
    log(f"{action} rejected for user {request.user.username}: {error.message}")
    return Response({'error': error.message, 'message': error.message}, status=error.status_code)


def _ledger_queryset():
    return Transaction.objects.select_related('performed_by').order_by('-created_at', '-id')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def transaction_list_create(request):
    """List the ledger (newest first) or record an in/out/return movement"""
    if request.method == 'GET':
        serializer = TransactionSerializer(_ledger_queryset(), many=True)
        return Response(serializer.data)

    serializer = StockMoveRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    try:
        result = stock_move(
            item_id=data.get('itemId'),
            type=data.get('type'),
            quantity=data.get('quantity'),
            branch=data.get('branch'),
            item_tracking_id=data.get('itemTrackingId'),
            performed_by=request.user,
        )
    except InventoryError as e:
        return _error_response(e, request, 'Stock movement')

    return Response(StockMoveResultSerializer(result).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def transfer(request):
    """Transfer stock from central inventory to a branch"""
    serializer = TransferRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    try:
        result = transfer_item(
            item_id=data.get('itemId'),
            item_name=data.get('itemName'),
            item_category=data.get('itemCategory'),
            quantity=data.get('quantity'),
            branch=data.get('branch'),
            item_tracking_id=data.get('itemTrackingId'),
            asset_number=data.get('assetNumber', ''),
            model=data.get('model', ''),
            serial_number=data.get('serialNumber', ''),
            reason=data.get('reason'),
            performed_by=request.user,
        )
    except InventoryError as e:
        return _error_response(e, request, 'Transfer')

    return Response(TransferResultSerializer(result).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transferred_items(request):
    """Net quantities of transferred stock per branch, derived from the ledger"""
    serializer = BranchPositionsSerializer(get_transferred_items(), many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def branch_list(request):
    return Response(list_branches())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def branch_items(request, branch_name):
    """Items sent out to one branch with their summed quantities"""
    serializer = BranchItemSerializer(items_at_branch(branch_name), many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def item_transactions(request, item_id):
    """Ledger history of a single inventory item"""
    queryset = _ledger_queryset().filter(item_id=item_id)
    return Response(TransactionSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pending_replacement_list(request):
    queryset = PendingReplacement.objects.filter(
        status=PendingReplacement.STATUS_PENDING
    ).order_by('-created_at', '-id')
    return Response(PendingReplacementSerializer(queryset, many=True).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def pending_replacement_confirm(request, pk):
    """Confirm a pending replacement with the identifiers of the unit taken out"""
    serializer = ConfirmReplacementSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    try:
        confirmation = confirm_replacement(
            pk,
            replacement_asset_number=data.get('replacementAssetNumber'),
            replacement_serial_number=data.get('replacementSerialNumber'),
            performed_by=request.user,
        )
    except InventoryError as e:
        return _error_response(e, request, 'Replacement confirmation')

    return Response({
        'message': 'Pending replacement confirmed and removed',
        'transaction': TransactionSerializer(confirmation).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def confirmed_replacement_list(request):
    queryset = _ledger_queryset().filter(type=Transaction.TYPE_CONFIRMATION)
    return Response(TransactionSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def audit_log_list(request):
    """Full ledger with filtering (superadmin only)"""
    filterset = AuditLogFilter(request.query_params, queryset=_ledger_queryset())
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer = TransactionSerializer(filterset.qs, many=True)
    return Response(serializer.data)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def audit_log_delete(request, pk):
    """Prune a single ledger entry (superadmin only)"""
    entry = get_object_or_404(Transaction, pk=pk)
    entry.delete()
    logger.info(f"User {request.user.username} pruned ledger entry {pk} ({entry.type})")
    return Response({'message': 'Audit log deleted'})
