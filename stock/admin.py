"""
Stock — Django Admin Configuration

Read-only views of stock records and the movement ledger. Both are
written by LedgerService only; the admin never edits or deletes them.

@file stock/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import StockMovement, StockRecord


class ReadOnlyLedgerAdmin(admin.ModelAdmin):
    show_full_result_count = False
    list_per_page = 50

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockRecord)
class StockRecordAdmin(ReadOnlyLedgerAdmin):
    list_display = ('product', 'warehouse', 'expiry_date', 'quantity', 'updated_at')
    list_filter = ('warehouse',)
    search_fields = ('product__name', 'product__code', 'warehouse__code')
    list_select_related = ('product', 'warehouse')
    ordering = ('product__name', 'warehouse__name', 'expiry_date')


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyLedgerAdmin):
    list_display = (
        'id', 'product', 'warehouse', 'expiry_date', 'movement_type',
        'quantity', 'reference_type', 'reference_id', 'created_by', 'created_at',
    )
    list_filter = ('movement_type', 'warehouse', 'created_at')
    search_fields = ('reference_id', 'product__name', 'product__code')
    list_select_related = ('product', 'warehouse', 'created_by')
    date_hierarchy = 'created_at'
    ordering = ('-created_at', '-id')

    fieldsets = (
        (_('Movement'), {
            'fields': ('id', 'product', 'warehouse', 'expiry_date', 'movement_type', 'quantity'),
        }),
        (_('Reference'), {
            'fields': ('reference_type', 'reference_id', 'notes'),
        }),
        (_('Audit'), {
            'fields': ('created_by', 'created_at'),
        }),
    )
