"""
Expenses — Filters

@file expenses/filters.py
"""

import django_filters

from .models import Expense


class ExpenseFilter(django_filters.FilterSet):
    from_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    to_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')
    min_amount = django_filters.NumberFilter(field_name='amount', lookup_expr='gte')
    max_amount = django_filters.NumberFilter(field_name='amount', lookup_expr='lte')

    class Meta:
        model = Expense
        fields = ['category', 'is_active', 'from_date', 'to_date', 'min_amount', 'max_amount']
