"""
Purchases — Django Admin Configuration

Purchases are browsed here but changed through the API only: every
write must go through PurchaseService to keep the ledger in step.

@file purchases/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Purchase, PurchaseItem


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    can_delete = False
    fields = ('product', 'warehouse', 'quantity', 'unit_price', 'total_price', 'tax_amount', 'expiry_date', 'is_deleted')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'supplier', 'supplier_name', 'purchase_date', 'status', 'grand_total', 'is_deleted')
    list_filter = ('status', 'is_active', 'is_deleted', 'purchase_date')
    search_fields = ('invoice_number', 'supplier__name', 'supplier_name')
    list_select_related = ('supplier',)
    date_hierarchy = 'purchase_date'
    ordering = ('-created_at',)
    inlines = [PurchaseItemInline]
    readonly_fields = (
        'id', 'invoice_number', 'supplier', 'supplier_name', 'purchase_date', 'status',
        'total_amount', 'tax_amount', 'grand_total', 'notes', 'is_active',
        'created_at', 'updated_at', 'created_by', 'updated_by', 'is_deleted', 'deleted_at', 'deleted_by',
    )

    fieldsets = (
        (_('Document'), {
            'fields': ('id', 'invoice_number', 'purchase_date', 'status', 'supplier', 'supplier_name', 'notes'),
        }),
        (_('Totals'), {
            'fields': ('total_amount', 'tax_amount', 'grand_total'),
        }),
        (_('Audit'), {
            'fields': ('is_active', 'created_at', 'updated_at', 'created_by', 'updated_by', 'is_deleted', 'deleted_at', 'deleted_by'),
            'classes': ('collapse',),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
