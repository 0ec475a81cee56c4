from rest_framework import serializers
from backend.core.models import User
from backend.inventory.serializers import InventoryItemSerializer
from .models import Transaction, PendingReplacement


class PerformerSerializer(serializers.ModelSerializer):
    role = serializers.CharField(source='effective_role', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'role']


class TransactionSerializer(serializers.ModelSerializer):
    itemId = serializers.UUIDField(source='item_id', read_only=True)
    itemName = serializers.CharField(source='item_name', read_only=True)
    itemCategory = serializers.CharField(source='item_category', read_only=True)
    assetNumber = serializers.CharField(source='asset_number', read_only=True)
    replacedAssetNumber = serializers.CharField(source='replaced_asset_number', read_only=True)
    serialNumber = serializers.CharField(source='serial_number', read_only=True)
    replacedSerialNumber = serializers.CharField(source='replaced_serial_number', read_only=True)
    itemTrackingId = serializers.CharField(source='item_tracking_id', read_only=True)
    reasonKind = serializers.CharField(source='reason_kind', read_only=True)
    reasonNote = serializers.CharField(source='reason_note', read_only=True)
    performedBy = PerformerSerializer(source='performed_by', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Transaction
        fields = ['id', 'itemId', 'itemName', 'itemCategory', 'type', 'quantity', 'branch',
                  'assetNumber', 'replacedAssetNumber', 'model', 'serialNumber',
                  'replacedSerialNumber', 'itemTrackingId', 'reason', 'reasonKind', 'reasonNote',
                  'performedBy', 'createdAt']
        read_only_fields = fields


class PendingReplacementSerializer(serializers.ModelSerializer):
    transactionId = serializers.PrimaryKeyRelatedField(source='transaction', read_only=True)
    itemId = serializers.UUIDField(source='item_id', read_only=True)
    itemName = serializers.CharField(source='item_name', read_only=True)
    itemTrackingId = serializers.CharField(source='item_tracking_id', read_only=True)
    reasonNote = serializers.CharField(source='reason_note', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = PendingReplacement
        fields = ['id', 'transactionId', 'itemId', 'itemName', 'branch', 'itemTrackingId',
                  'reason', 'reasonNote', 'status', 'createdAt']
        read_only_fields = fields


class TransferRequestSerializer(serializers.Serializer):
    """Input for POST /transactions/transfer/ (business rules are checked by the engine)"""
    itemId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    itemName = serializers.CharField(required=False, allow_blank=True)
    itemCategory = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.IntegerField(required=False, allow_null=True)
    branch = serializers.CharField(required=False, allow_blank=True)
    itemTrackingId = serializers.CharField(required=False, allow_blank=True)
    assetNumber = serializers.CharField(required=False, allow_blank=True, default='')
    model = serializers.CharField(required=False, allow_blank=True, default='')
    serialNumber = serializers.CharField(required=False, allow_blank=True, default='')
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class StockMoveRequestSerializer(serializers.Serializer):
    """Input for POST /transactions/"""
    itemId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    type = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.IntegerField(required=False, allow_null=True)
    branch = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    itemTrackingId = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ConfirmReplacementSerializer(serializers.Serializer):
    replacementAssetNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    replacementSerialNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class StockMoveResultSerializer(serializers.Serializer):
    transaction = TransactionSerializer(read_only=True)
    item = InventoryItemSerializer(read_only=True)
    itemDeleted = serializers.BooleanField(source='item_deleted', read_only=True)


class TransferResultSerializer(StockMoveResultSerializer):
    isDirectTransfer = serializers.BooleanField(source='is_direct_transfer', read_only=True)
    pendingReplacement = PendingReplacementSerializer(source='pending_replacement', read_only=True, allow_null=True)


class TransferredItemSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    category = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    assetNumber = serializers.CharField(source='asset_number', read_only=True)
    model = serializers.CharField(read_only=True)
    serialNumber = serializers.CharField(source='serial_number', read_only=True)
    itemTrackingId = serializers.CharField(source='item_tracking_id', read_only=True)
    reason = serializers.CharField(read_only=True)
    transferDate = serializers.DateTimeField(source='transfer_date', read_only=True)


class BranchPositionsSerializer(serializers.Serializer):
    branch = serializers.CharField(read_only=True)
    items = TransferredItemSerializer(many=True, read_only=True)


class BranchItemSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    category = serializers.CharField(read_only=True)
    location = serializers.CharField(read_only=True)
    supplier = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
