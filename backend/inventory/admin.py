from django.contrib import admin
from .models import InventoryItem


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'quantity', 'status', 'model', 'location', 'supplier', 'updated_at']
    list_filter = ['status', 'category', 'location', 'created_at']
    search_fields = ['name', 'model', 'serial_number', 'supplier']
    ordering = ['-created_at']
    readonly_fields = ['id', 'created_at', 'updated_at']
