"""
Purchases — Models

Purchase documents from suppliers. A purchase posts stock only once it
is received; pending purchases are orders on paper.

Status machine:
    pending → received   (posts one purchase movement per line)
    pending → cancelled  (no ledger effect)
received and cancelled are terminal.

@file purchases/models.py
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES
from core.models import BaseModel, TrackedModel

REFERENCE_TYPE = 'Purchase'


class Purchase(TrackedModel):

    class StatusChoices(models.TextChoices):
        PENDING = 'pending', _('Pending')
        RECEIVED = 'received', _('Received')
        CANCELLED = 'cancelled', _('Cancelled')

    TRANSITIONS = {
        StatusChoices.PENDING: {StatusChoices.RECEIVED, StatusChoices.CANCELLED},
        StatusChoices.RECEIVED: set(),
        StatusChoices.CANCELLED: set(),
    }

    invoice_number = models.CharField(_('invoice number'), max_length=100, unique=True)
    supplier = models.ForeignKey(
        'catalog.Supplier',
        null=True, blank=True,
        on_delete=models.PROTECT,
        related_name='purchases',
        verbose_name=_('supplier'),
    )
    supplier_name = models.CharField(
        _('supplier name'), max_length=255, blank=True,
        help_text=_('Free-text supplier for walk-in purchases'),
    )
    purchase_date = models.DateField(_('purchase date'))
    status = models.CharField(
        _('status'), max_length=12,
        choices=StatusChoices.choices, default=StatusChoices.PENDING, db_index=True,
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
        verbose_name = _('purchase')
        verbose_name_plural = _('purchases')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'purchase_date'], name='purchase_status_date_idx'),
        ]

    def __str__(self):
        return f'Purchase {self.invoice_number} ({self.status})'

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in self.TRANSITIONS.get(self.status, set())

    @property
    def is_received(self) -> bool:
        return self.status == self.StatusChoices.RECEIVED


class PurchaseItem(BaseModel):
    """
    One purchased line. expiry_date is the batch the line lands in;
    None is the non-expiring batch.
    """

    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name=_('purchase'),
    )
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.PROTECT,
        related_name='purchase_items',
        verbose_name=_('product'),
    )
    warehouse = models.ForeignKey(
        'catalog.Warehouse',
        on_delete=models.PROTECT,
        related_name='purchase_items',
        verbose_name=_('warehouse'),
    )
    quantity = models.DecimalField(_('quantity'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES)
    unit_price = models.DecimalField(_('unit price'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES)
    total_price = models.DecimalField(_('total price'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES)
    tax_amount = models.DecimalField(
        _('tax amount'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES, default=0,
    )
    expiry_date = models.DateField(_('expiry date'), null=True, blank=True)
    is_deleted = models.BooleanField(_('deleted'), default=False, db_index=True)

    class Meta:
        verbose_name = _('purchase item')
        verbose_name_plural = _('purchase items')
        ordering = ['created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name='purchase_item_quantity_positive',
            ),
        ]

    def __str__(self):
        return f'{self.product_id} x {self.quantity}'
