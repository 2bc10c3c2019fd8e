"""
Purchases — Filters

@file purchases/filters.py
"""

import django_filters

from .models import Purchase


class PurchaseFilter(django_filters.FilterSet):
    from_date = django_filters.DateFilter(field_name='purchase_date', lookup_expr='gte')
    to_date = django_filters.DateFilter(field_name='purchase_date', lookup_expr='lte')
    invoice_number = django_filters.CharFilter(lookup_expr='icontains')

    class Meta:
        model = Purchase
        fields = ['status', 'supplier', 'is_active', 'from_date', 'to_date', 'invoice_number']
