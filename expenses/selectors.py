"""
Expenses — Selectors

@file expenses/selectors.py
"""

from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES, ZERO

from .models import Expense


def live_expenses():
    return Expense.objects.filter(is_deleted=False).select_related('created_by')


def total_amount(queryset):
    return queryset.aggregate(total=Coalesce(
        Sum('amount'), Value(ZERO),
        output_field=DecimalField(max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES),
    ))['total']


def group_by_category(queryset) -> dict[str, list[Expense]]:
    """Expenses keyed by category value, in choice order; empty categories omitted."""
    groups = {value: [] for value in Expense.CategoryChoices.values}
    for expense in queryset.order_by('category', '-created_at'):
        groups[expense.category].append(expense)
    return {key: rows for key, rows in groups.items() if rows}
