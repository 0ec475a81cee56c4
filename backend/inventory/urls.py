from django.urls import path
from .views import inventory_list_create, inventory_detail

urlpatterns = [
    path('inventory/', inventory_list_create, name='inventory-list-create'),
    path('inventory/<uuid:pk>/', inventory_detail, name='inventory-detail'),
]
