from django.contrib import admin
from .models import Transaction, PendingReplacement


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ['id', 'type', 'item_name', 'quantity', 'branch', 'item_tracking_id', 'performed_by', 'created_at']
    list_filter = ['type', 'reason_kind', 'branch', 'created_at']
    search_fields = ['item_name', 'item_tracking_id', 'asset_number', 'serial_number', 'reason']
    ordering = ['-created_at']
    readonly_fields = [field.name for field in Transaction._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(PendingReplacement)
class PendingReplacementAdmin(admin.ModelAdmin):
    list_display = ['item_name', 'branch', 'item_tracking_id', 'status', 'created_at']
    list_filter = ['status', 'branch']
    search_fields = ['item_name', 'item_tracking_id', 'reason']
    ordering = ['-created_at']
    readonly_fields = ['transaction', 'created_at', 'updated_at']
