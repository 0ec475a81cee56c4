from django.core.exceptions import ValidationError
from django.db import models

TRACKING_ID_PREFIX = 'CRE'


class Transaction(models.Model):
    """Append-only ledger of stock movements and administrative events.

    Rows are never updated once written; the only mutation path is deletion
    through audit-log pruning. Item name/category are captured by value because
    the referenced inventory item may be deleted right after the entry is written.
    """
    TYPE_IN = 'in'
    TYPE_OUT = 'out'
    TYPE_RETURN = 'return'
    TYPE_TRANSFER = 'transfer'
    TYPE_CONFIRMATION = 'confirmation'
    TYPE_CREATE_ITEM = 'create_item'
    TYPE_UPDATE_ITEM = 'update_item'
    TYPE_DELETE_ITEM = 'delete_item'
    TYPE_CREATE_CATEGORY = 'create_category'
    TYPE_DELETE_CATEGORY = 'delete_category'
    TYPE_CREATE_USER = 'create_user'
    TYPE_DELETE_USER = 'delete_user'
    TYPE_SYSTEM_CHANGE = 'system_change'

    TYPE_CHOICES = [
        (TYPE_IN, 'Stock In'),
        (TYPE_OUT, 'Stock Out'),
        (TYPE_RETURN, 'Return'),
        (TYPE_TRANSFER, 'Transfer'),
        (TYPE_CONFIRMATION, 'Replacement Confirmation'),
        (TYPE_CREATE_ITEM, 'Item Created'),
        (TYPE_UPDATE_ITEM, 'Item Updated'),
        (TYPE_DELETE_ITEM, 'Item Deleted'),
        (TYPE_CREATE_CATEGORY, 'Category Created'),
        (TYPE_DELETE_CATEGORY, 'Category Deleted'),
        (TYPE_CREATE_USER, 'User Created'),
        (TYPE_DELETE_USER, 'User Deleted'),
        (TYPE_SYSTEM_CHANGE, 'System Change'),
    ]

    STOCK_TYPES = (TYPE_IN, TYPE_OUT, TYPE_RETURN, TYPE_TRANSFER, TYPE_CONFIRMATION)
    BRANCH_TYPES = (TYPE_OUT, TYPE_RETURN, TYPE_TRANSFER)
    # Events that are not about a particular inventory item
    NON_ITEM_TYPES = (
        TYPE_CREATE_USER, TYPE_DELETE_USER,
        TYPE_CREATE_CATEGORY, TYPE_DELETE_CATEGORY,
        TYPE_SYSTEM_CHANGE,
    )

    REASON_NEW_EQUIPMENT = 'new_equipment'
    REASON_REPLACEMENT_EQUIPMENT = 'replacement_equipment'
    REASON_REPAIRED = 'repaired'
    REASON_CONFIRMATION = 'confirmation'

    REASON_KIND_CHOICES = [
        (REASON_NEW_EQUIPMENT, 'New Equipment'),
        (REASON_REPLACEMENT_EQUIPMENT, 'Replacement Equipment'),
        (REASON_REPAIRED, 'Repaired'),
        (REASON_CONFIRMATION, 'Confirmed replacement'),
    ]

    item_id = models.UUIDField(null=True, blank=True, db_index=True)
    item_name = models.CharField(max_length=255, blank=True)
    item_category = models.CharField(max_length=200, blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    quantity = models.PositiveIntegerField(null=True, blank=True)
    branch = models.CharField(max_length=200, blank=True, db_index=True)
    asset_number = models.CharField(max_length=200, blank=True)
    replaced_asset_number = models.CharField(max_length=200, blank=True)
    model = models.CharField(max_length=200, blank=True)
    serial_number = models.TextField(blank=True)
    replaced_serial_number = models.CharField(max_length=200, blank=True)
    item_tracking_id = models.CharField(max_length=100, blank=True, db_index=True)
    reason = models.TextField(blank=True)
    reason_kind = models.CharField(max_length=30, choices=REASON_KIND_CHOICES, blank=True)
    reason_note = models.TextField(blank=True)
    performed_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"{self.get_type_display()} - {self.item_name or self.item_id}"

    def clean(self):
        errors = {}
        if self.type not in self.NON_ITEM_TYPES and not self.item_id:
            errors['item_id'] = 'Item is required for this transaction type'
        if self.type in self.STOCK_TYPES and self.quantity is None:
            errors['quantity'] = 'Quantity is required for stock transactions'
        if self.type in self.BRANCH_TYPES and not self.branch:
            errors['branch'] = 'Branch is required for "out", "return" and "transfer" transactions'
        if self.type == self.TYPE_TRANSFER:
            if not self.item_tracking_id:
                errors['item_tracking_id'] = 'Item Tracking ID is required for transfers'
            elif not self.item_tracking_id.startswith(TRACKING_ID_PREFIX):
                errors['item_tracking_id'] = f'Item Tracking ID must start with "{TRACKING_ID_PREFIX}"'
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('Ledger entries are immutable once written')
        self.full_clean(exclude=['performed_by'])
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'transactions'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['type', 'created_at'], name='idx_txn_type_created'),
            models.Index(fields=['item_id', 'type', 'item_tracking_id'], name='idx_txn_item_type_tracking'),
        ]


class PendingReplacement(models.Model):
    """Outstanding confirmation for a replacement-equipment transfer.

    Confirming deletes the row; the ``confirmation`` ledger entry is the
    permanent record. ``Completed`` exists as a choice but is never written.
    """
    STATUS_PENDING = 'Pending'
    STATUS_COMPLETED = 'Completed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    transaction = models.ForeignKey(Transaction, on_delete=models.SET_NULL, null=True, blank=True, related_name='pending_replacements')
    item_id = models.UUIDField(db_index=True)
    item_name = models.CharField(max_length=255)
    branch = models.CharField(max_length=200)
    item_tracking_id = models.CharField(max_length=100)
    reason = models.TextField()
    reason_note = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.item_name} @ {self.branch} ({self.item_tracking_id})"

    class Meta:
        db_table = 'pending_replacements'
        ordering = ['-created_at', '-id']
