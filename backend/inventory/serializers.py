from rest_framework import serializers
from .models import InventoryItem


class InventoryItemSerializer(serializers.ModelSerializer):
    maxStock = serializers.IntegerField(source='max_stock', min_value=0, required=False)
    serialNumber = serializers.CharField(source='serial_number', required=False, allow_blank=True)
    warrantyExpiryDate = serializers.DateField(source='warranty_expiry_date', read_only=True)
    purchaseDate = serializers.DateField(source='purchase_date', required=False)
    createdBy = serializers.PrimaryKeyRelatedField(source='created_by', read_only=True)
    lastUpdatedBy = serializers.PrimaryKeyRelatedField(source='last_updated_by', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    # Plain CharField so the synthesized "transferred" status of a removed record serializes
    status = serializers.CharField(read_only=True)

    class Meta:
        model = InventoryItem
        fields = ['id', 'name', 'category', 'quantity', 'maxStock', 'supplier', 'model',
                  'serialNumber', 'warranty', 'warrantyExpiryDate', 'purchaseDate', 'location',
                  'status', 'description', 'createdBy', 'lastUpdatedBy', 'createdAt', 'updatedAt']
        read_only_fields = ['id']
        extra_kwargs = {
            'quantity': {'min_value': 0},
        }


class InventoryItemCreateSerializer(serializers.Serializer):
    """Input for POST /inventory/ (one record per serial number when several are given)"""
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=200)
    quantity = serializers.IntegerField(min_value=0, required=False, default=0)
    maxStock = serializers.IntegerField(min_value=0, required=False, default=0)
    supplier = serializers.CharField(required=False, allow_blank=True, default='')
    model = serializers.CharField(required=False, allow_blank=True, default='')
    serialNumber = serializers.CharField(required=False, allow_blank=True, default='')
    warranty = serializers.CharField(required=False, allow_blank=True, default='')
    purchaseDate = serializers.DateField(required=False, allow_null=True, default=None)
    location = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    allowDuplicates = serializers.BooleanField(required=False, default=False)


class InventoryItemUpdateSerializer(serializers.Serializer):
    """Input for PUT /inventory/<id>/; every field is optional"""
    name = serializers.CharField(max_length=255, required=False)
    category = serializers.CharField(max_length=200, required=False)
    quantity = serializers.IntegerField(min_value=0, required=False)
    maxStock = serializers.IntegerField(min_value=0, required=False)
    supplier = serializers.CharField(required=False, allow_blank=True)
    model = serializers.CharField(required=False, allow_blank=True)
    serialNumber = serializers.CharField(required=False, allow_blank=True)
    warranty = serializers.CharField(required=False, allow_blank=True)
    purchaseDate = serializers.DateField(required=False)
    location = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    allowDuplicates = serializers.BooleanField(required=False, default=False)
