import django_filters
from django.db.models import Q
from .models import Transaction


class AuditLogFilter(django_filters.FilterSet):
    """Filter for the ledger audit view using django-filter"""

    type = django_filters.MultipleChoiceFilter(choices=Transaction.TYPE_CHOICES)
    branch = django_filters.CharFilter(field_name='branch', lookup_expr='iexact')
    itemId = django_filters.UUIDFilter(field_name='item_id')
    itemTrackingId = django_filters.CharFilter(field_name='item_tracking_id', lookup_expr='iexact')
    performedBy = django_filters.NumberFilter(field_name='performed_by_id')
    dateFrom = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    dateTo = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = Transaction
        fields = ['type', 'branch', 'itemId', 'itemTrackingId', 'performedBy', 'dateFrom', 'dateTo', 'search']

    def filter_search(self, queryset, name, value):
        """Search across item name, reason and tracking id"""
        if not value:
            return queryset
        return queryset.filter(
            Q(item_name__icontains=value) |
            Q(reason__icontains=value) |
            Q(item_tracking_id__icontains=value)
        )
