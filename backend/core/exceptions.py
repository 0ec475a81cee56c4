"""
Domain errors raised by the inventory engines.

Views translate them into ``{"error": message}`` responses using ``status_code``.
"""
from rest_framework import status


class InventoryError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Inventory operation failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(InventoryError):
    """Missing or malformed input (bad tracking ID, invalid reason, ...)"""
    default_message = 'Missing required fields'


class NotFoundError(InventoryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class InsufficientStockError(InventoryError):
    default_message = 'Insufficient stock for this transaction'


class PersistenceError(InventoryError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Database error occurred'
