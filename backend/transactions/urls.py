from django.urls import path
from .views import (
    transaction_list_create, transfer, transferred_items, branch_list, branch_items,
    item_transactions, pending_replacement_list, pending_replacement_confirm,
    confirmed_replacement_list, audit_log_list, audit_log_delete,
)

urlpatterns = [
    path('transactions/', transaction_list_create, name='transaction-list-create'),
    path('transactions/transfer/', transfer, name='transaction-transfer'),
    path('transactions/transferred-items/', transferred_items, name='transferred-items'),
    path('transactions/branches/', branch_list, name='branch-list'),
    path('transactions/branch/<str:branch_name>/', branch_items, name='branch-items'),
    path('transactions/item/<uuid:item_id>/', item_transactions, name='item-transactions'),
    path('transactions/pending-replacements/', pending_replacement_list, name='pending-replacement-list'),
    path('transactions/pending-replacements/<int:pk>/confirm/', pending_replacement_confirm, name='pending-replacement-confirm'),
    path('transactions/confirmed-replacements/', confirmed_replacement_list, name='confirmed-replacement-list'),
    path('transactions/audit-logs/', audit_log_list, name='audit-log-list'),
    path('transactions/audit-logs/<int:pk>/', audit_log_delete, name='audit-log-delete'),
]
