"""
Sales — Models

Point-of-sale documents. Each line records the batch it was sold from
(expiry_date), resolved at posting time, so a later edit or delete
reverses exactly the batch that was drawn.

@file sales/models.py
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES
from core.models import BaseModel, TrackedModel

REFERENCE_TYPE = 'Sale'


class Sale(TrackedModel):

    class PaymentMethod(models.TextChoices):
        CASH = 'cash', _('Cash')
        CARD = 'card', _('Card')
        MOBILE = 'mobile', _('Mobile money')

    invoice_number = models.CharField(_('invoice number'), max_length=100, unique=True)
    sale_date = models.DateField(_('sale date'))
    payment_method = models.CharField(
        _('payment method'), max_length=10, choices=PaymentMethod.choices,
    )
    total_amount = models.DecimalField(
        _('total amount'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES, default=0,
    )
    tax_amount = models.DecimalField(
        _('tax amount'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES, default=0,
    )
    grand_total = models.DecimalField(
        _('grand total'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES, default=0,
    )
    notes = models.TextField(_('notes'), blank=True)

    class Meta:
        verbose_name = _('sale')
        verbose_name_plural = _('sales')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['sale_date', 'payment_method'], name='sale_date_payment_idx'),
        ]

    def __str__(self):
        return f'Sale {self.invoice_number}'


class SaleItem(BaseModel):
    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name=_('sale'),
    )
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.PROTECT,
        related_name='sale_items',
        verbose_name=_('product'),
    )
    warehouse = models.ForeignKey(
        'catalog.Warehouse',
        on_delete=models.PROTECT,
        related_name='sale_items',
        verbose_name=_('warehouse'),
    )
    expiry_date = models.DateField(
        _('expiry date'), null=True, blank=True,
        help_text=_('Batch the line was drawn from; empty for the non-expiring batch'),
    )
    quantity = models.DecimalField(_('quantity'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES)
    unit_price = models.DecimalField(_('unit price'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES)
    total_price = models.DecimalField(_('total price'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES)
    tax_amount = models.DecimalField(
        _('tax amount'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES, default=0,
    )
    is_deleted = models.BooleanField(_('deleted'), default=False, db_index=True)

    class Meta:
        verbose_name = _('sale item')
        verbose_name_plural = _('sale items')
        ordering = ['created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name='sale_item_quantity_positive',
            ),
        ]

    def __str__(self):
        return f'{self.product_id} x {self.quantity}'
