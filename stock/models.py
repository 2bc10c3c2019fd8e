"""
Stock — Models

Balance-plus-ledger stock tracking.

StockRecord holds the on-hand quantity of one batch, keyed by
(product, warehouse, expiry_date). A NULL expiry_date is the explicit
"non-expiring" batch: it gets its own partial unique constraint so two
non-expiring rows can never coexist, whatever the engine's NULL
equality rules.

StockMovement is the append-only ledger. For every batch,
record.quantity == SUM(movement.quantity) over the same key. Both are
written only by stock.services.LedgerService.

@file stock/models.py
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES


@dataclass(frozen=True)
class BatchKey:
    """Identity of one stock line. expiry_date=None is the non-expiring batch."""

    product_id: UUID
    warehouse_id: UUID
    expiry_date: date | None = None

    @property
    def is_dated(self) -> bool:
        return self.expiry_date is not None

    def lookup(self, prefix: str = '') -> dict:
        """ORM filter kwargs matching this key; never compares against NULL."""
        kwargs = {
            f'{prefix}product_id': self.product_id,
            f'{prefix}warehouse_id': self.warehouse_id,
        }
        if self.is_dated:
            kwargs[f'{prefix}expiry_date'] = self.expiry_date
        else:
            kwargs[f'{prefix}expiry_date__isnull'] = True
        return kwargs

    def __str__(self):
        batch = self.expiry_date.isoformat() if self.is_dated else 'no-expiry'
        return f'{self.product_id}/{self.warehouse_id}/{batch}'


class StockRecord(models.Model):
    """Current on-hand quantity for exactly one batch. Never deleted."""

    id = models.BigAutoField(primary_key=True)
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.PROTECT,
        related_name='stock_records',
        verbose_name=_('product'),
    )
    warehouse = models.ForeignKey(
        'catalog.Warehouse',
        on_delete=models.PROTECT,
        related_name='stock_records',
        verbose_name=_('warehouse'),
    )
    expiry_date = models.DateField(_('expiry date'), null=True, blank=True, db_index=True)
    quantity = models.DecimalField(
        _('quantity'), max_digits=DECIMAL_MAX_DIGITS,
        decimal_places=DECIMAL_PLACES, default=0,
    )
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('stock record')
        verbose_name_plural = _('stock records')
        ordering = ['product', 'warehouse', 'expiry_date']
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'warehouse', 'expiry_date'],
                condition=models.Q(expiry_date__isnull=False),
                name='unique_dated_stock_batch',
            ),
            models.UniqueConstraint(
                fields=['product', 'warehouse'],
                condition=models.Q(expiry_date__isnull=True),
                name='unique_undated_stock_batch',
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name='stock_quantity_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['expiry_date', 'quantity'], name='stock_expiry_qty_idx'),
        ]

    def __str__(self):
        return f'{self.batch_key}: {self.quantity}'

    @property
    def batch_key(self) -> BatchKey:
        return BatchKey(self.product_id, self.warehouse_id, self.expiry_date)


class StockMovement(models.Model):
    """
    A single immutable, signed stock movement (insert only).

    Positive quantity is inbound, negative outbound. The auto-increment
    id is the tie-break for movements sharing a created_at, so
    (created_at, id) is a strict total order for running balances.
    """

    class MovementType(models.TextChoices):
        PURCHASE = 'purchase', _('Purchase')
        SALE = 'sale', _('Sale')
        ADJUSTMENT = 'adjustment', _('Adjustment')
        DAMAGE = 'damage', _('Damage')
        LOST = 'lost', _('Lost')
        FOUND = 'found', _('Found')
        OPENING_STOCK = 'opening_stock', _('Opening stock')
        EXPIRED = 'expired', _('Expired')

    id = models.BigAutoField(primary_key=True)
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.PROTECT,
        related_name='stock_movements',
        verbose_name=_('product'),
    )
    warehouse = models.ForeignKey(
        'catalog.Warehouse',
        on_delete=models.PROTECT,
        related_name='stock_movements',
        verbose_name=_('warehouse'),
    )
    expiry_date = models.DateField(_('expiry date'), null=True, blank=True)
    quantity = models.DecimalField(
        _('quantity'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES,
        help_text=_('Signed: positive = inbound, negative = outbound'),
    )
    movement_type = models.CharField(
        _('movement type'), max_length=16,
        choices=MovementType.choices, db_index=True,
    )
    reference_type = models.CharField(
        _('reference type'), max_length=100, blank=True,
        help_text=_('Purchase, Sale, Manual Adjustment, Stock Expiry'),
    )
    reference_id = models.CharField(
        _('reference ID'), max_length=64, null=True, blank=True,
    )
    notes = models.TextField(_('notes'), blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('created by'),
    )
    created_at = models.DateTimeField(
        _('created at'), auto_now_add=True, db_index=True,
    )
    # No updated_at — immutable record.

    class Meta:
        verbose_name = _('stock movement')
        verbose_name_plural = _('stock movements')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['product', 'created_at'], name='movement_product_created_idx'),
            models.Index(
                fields=['product', 'warehouse', 'created_at'],
                name='movement_prod_wh_created_idx',
            ),
            models.Index(fields=['reference_type', 'reference_id'], name='movement_reference_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(quantity=0),
                name='movement_quantity_non_zero',
            ),
        ]

    def __str__(self):
        return f'{self.movement_type} {self.quantity} {self.batch_key}'

    @property
    def batch_key(self) -> BatchKey:
        return BatchKey(self.product_id, self.warehouse_id, self.expiry_date)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise NotImplementedError('StockMovement is insert-only; updates are not allowed.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise NotImplementedError('StockMovement records cannot be deleted.')
