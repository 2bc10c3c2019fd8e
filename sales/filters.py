"""
Sales — Filters

@file sales/filters.py
"""

import django_filters

from .models import Sale


class SaleFilter(django_filters.FilterSet):
    from_date = django_filters.DateFilter(field_name='sale_date', lookup_expr='gte')
    to_date = django_filters.DateFilter(field_name='sale_date', lookup_expr='lte')
    invoice_number = django_filters.CharFilter(lookup_expr='icontains')

    class Meta:
        model = Sale
        fields = ['payment_method', 'is_active', 'from_date', 'to_date', 'invoice_number']
