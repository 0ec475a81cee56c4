"""
URL configuration for the inventory backend.

Every app mounts its endpoints under ``api/v1/``:
    core          auth/ and users/subadmins/
    catalog       categories/
    inventory     inventory/
    transactions  transactions/
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Branch Inventory Admin Panel"
admin.site.site_title = "Branch Inventory Admin Portal"
admin.site.index_title = "Inventory, transfers and replacements"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.catalog.urls')),
    path('api/v1/', include('backend.inventory.urls')),
    path('api/v1/', include('backend.transactions.urls')),
]
