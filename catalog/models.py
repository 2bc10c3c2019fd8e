"""
Catalog — Models

Master data referenced by the stock ledger and by documents: product
categories, suppliers, warehouses and products. Rows are soft-deleted so
historical movements keep resolving.

@file catalog/models.py
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES
from core.models import TrackedModel


class Category(TrackedModel):
    name = models.CharField(_('name'), max_length=255)
    description = models.TextField(_('description'), blank=True)

    class Meta:
        verbose_name = _('category')
        verbose_name_plural = _('categories')
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['name'],
                condition=models.Q(is_deleted=False),
                name='unique_active_category_name',
            ),
        ]

    def __str__(self):
        return self.name


class Supplier(TrackedModel):
    name = models.CharField(_('name'), max_length=255)
    contact_person = models.CharField(_('contact person'), max_length=255, blank=True)
    phone = models.CharField(_('phone'), max_length=30, blank=True)
    email = models.EmailField(_('email'), blank=True)
    address = models.TextField(_('address'), blank=True)

    class Meta:
        verbose_name = _('supplier')
        verbose_name_plural = _('suppliers')
        ordering = ['name']

    def __str__(self):
        return self.name


class Warehouse(TrackedModel):
    name = models.CharField(_('name'), max_length=255)
    code = models.CharField(_('code'), max_length=50, unique=True)
    address = models.TextField(_('address'), blank=True)
    phone = models.CharField(_('phone'), max_length=30, blank=True)

    class Meta:
        verbose_name = _('warehouse')
        verbose_name_plural = _('warehouses')
        ordering = ['name']

    def __str__(self):
        return f'{self.name} ({self.code})'


class Product(TrackedModel):
    """
    A stock-keeping unit.

    min_stock is the low-stock threshold compared against the product's
    total on-hand quantity across all warehouses and batches; 0 disables
    alerts. has_expiry marks products whose receipts carry batch dates.
    """

    name = models.CharField(_('name'), max_length=255)
    code = models.CharField(_('code'), max_length=50, unique=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name='products',
        verbose_name=_('category'),
    )
    unit = models.CharField(
        _('unit'), max_length=30,
        help_text=_('pcs, kg, box, ...'),
    )
    barcode = models.CharField(
        _('barcode'), max_length=100, unique=True, null=True, blank=True,
    )
    purchase_price = models.DecimalField(
        _('purchase price'), max_digits=DECIMAL_MAX_DIGITS,
        decimal_places=DECIMAL_PLACES, default=0,
    )
    selling_price = models.DecimalField(
        _('selling price'), max_digits=DECIMAL_MAX_DIGITS,
        decimal_places=DECIMAL_PLACES, default=0,
    )
    min_stock = models.DecimalField(
        _('minimum stock'), max_digits=DECIMAL_MAX_DIGITS,
        decimal_places=DECIMAL_PLACES, default=0,
    )
    has_expiry = models.BooleanField(_('has expiry'), default=False)
    is_vatable = models.BooleanField(_('VAT applicable'), default=False)

    class Meta:
        verbose_name = _('product')
        verbose_name_plural = _('products')
        ordering = ['name']
        indexes = [
            models.Index(fields=['category', 'is_active'], name='product_category_active_idx'),
            models.Index(fields=['is_active', 'is_deleted'], name='product_active_deleted_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(min_stock__gte=0),
                name='product_min_stock_non_negative',
            ),
        ]

    def __str__(self):
        return f'{self.name} [{self.code}]'
