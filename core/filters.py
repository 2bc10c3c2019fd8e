"""
Core — Filters

@file core/filters.py
"""

import django_filters

from core.models import AuditLog


class AuditLogFilter(django_filters.FilterSet):
    model_name = django_filters.CharFilter(lookup_expr='iexact')
    date_from = django_filters.DateFilter(field_name='timestamp', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='timestamp', lookup_expr='date__lte')

    class Meta:
        model = AuditLog
        fields = ['action', 'model_name', 'object_id', 'actor', 'date_from', 'date_to']
