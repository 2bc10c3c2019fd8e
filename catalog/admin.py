"""
Catalog — Django Admin Configuration

@file catalog/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Category, Product, Supplier, Warehouse

TRACKING_FIELDS = ('id', 'created_at', 'updated_at', 'created_by', 'updated_by', 'deleted_at', 'deleted_by')


class TrackedAdmin(admin.ModelAdmin):
    readonly_fields = TRACKING_FIELDS
    list_per_page = 30
    show_full_result_count = False

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(Category)
class CategoryAdmin(TrackedAdmin):
    list_display = ('name', 'is_active', 'is_deleted', 'created_at')
    list_filter = ('is_active', 'is_deleted')
    search_fields = ('name',)
    ordering = ('name',)


@admin.register(Supplier)
class SupplierAdmin(TrackedAdmin):
    list_display = ('name', 'contact_person', 'phone', 'email', 'is_active')
    list_filter = ('is_active', 'is_deleted')
    search_fields = ('name', 'contact_person', 'phone', 'email')
    ordering = ('name',)


@admin.register(Warehouse)
class WarehouseAdmin(TrackedAdmin):
    list_display = ('name', 'code', 'phone', 'is_active')
    list_filter = ('is_active', 'is_deleted')
    search_fields = ('name', 'code')
    ordering = ('name',)


@admin.register(Product)
class ProductAdmin(TrackedAdmin):
    list_display = (
        'name', 'code', 'category', 'unit', 'selling_price',
        'min_stock', 'has_expiry', 'is_vatable', 'is_active',
    )
    list_filter = ('category', 'has_expiry', 'is_vatable', 'is_active', 'is_deleted')
    search_fields = ('name', 'code', 'barcode')
    list_select_related = ('category',)
    ordering = ('name',)

    fieldsets = (
        (_('Identification'), {
            'fields': ('id', 'name', 'code', 'barcode', 'category', 'unit'),
        }),
        (_('Pricing'), {
            'fields': ('purchase_price', 'selling_price', 'is_vatable'),
        }),
        (_('Stock'), {
            'fields': ('min_stock', 'has_expiry', 'is_active'),
        }),
        (_('Audit'), {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by', 'deleted_at', 'deleted_by'),
            'classes': ('collapse',),
        }),
    )
