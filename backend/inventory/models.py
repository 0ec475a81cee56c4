import datetime
import uuid
from django.db import models

MAIN_INVENTORY_LOCATION = 'Main Inventory'


class InventoryItem(models.Model):
    """Central inventory record: quantity plus an optional comma-joined serial list"""
    STATUS_IN_STOCK = 'in-stock'
    STATUS_LOW_STOCK = 'low-stock'
    STATUS_OUT_OF_STOCK = 'out-of-stock'
    # Reported on a record that a transfer just removed from central inventory
    STATUS_TRANSFERRED = 'transferred'

    STATUS_CHOICES = [
        (STATUS_IN_STOCK, 'In Stock'),
        # Legacy value kept for existing rows; current writers never set it
        (STATUS_LOW_STOCK, 'Low Stock'),
        (STATUS_OUT_OF_STOCK, 'Out of Stock'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(default=0)
    max_stock = models.PositiveIntegerField(default=0)
    supplier = models.CharField(max_length=255, blank=True)
    model = models.CharField(max_length=200, blank=True)
    serial_number = models.TextField(blank=True)
    warranty = models.CharField(max_length=100, blank=True)
    warranty_expiry_date = models.DateField(null=True, blank=True)
    purchase_date = models.DateField(default=datetime.date.today)
    location = models.CharField(max_length=200, default=MAIN_INVENTORY_LOCATION)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_IN_STOCK)
    description = models.TextField(blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='created_items')
    last_updated_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='updated_items')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.quantity})"

    @staticmethod
    def status_for_quantity(quantity):
        return InventoryItem.STATUS_OUT_OF_STOCK if quantity == 0 else InventoryItem.STATUS_IN_STOCK

    def refresh_status(self):
        self.status = self.status_for_quantity(self.quantity)
        return self.status

    @property
    def serial_numbers(self):
        """Distinct, stripped serial numbers in their stored order"""
        from .utils import split_serial_numbers
        return split_serial_numbers(self.serial_number)

    class Meta:
        db_table = 'inventory_items'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['category'], name='idx_item_category'),
            models.Index(fields=['status'], name='idx_item_status'),
        ]
