"""
Sales — Django Admin Configuration

Read-only: sales change stock, so they are edited through SaleService.

@file sales/admin.py
"""

from django.contrib import admin

from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    fields = ('product', 'warehouse', 'expiry_date', 'quantity', 'unit_price', 'total_price', 'tax_amount', 'is_deleted')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'sale_date', 'payment_method', 'grand_total', 'is_active', 'is_deleted')
    list_filter = ('payment_method', 'is_active', 'is_deleted', 'sale_date')
    search_fields = ('invoice_number',)
    date_hierarchy = 'sale_date'
    ordering = ('-created_at',)
    inlines = [SaleItemInline]
    show_full_result_count = False

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
