"""
Purchases — Service Layer

Purchase lifecycle and its ledger effects. Every public method runs in
one transaction: the document, its lines and the stock movements commit
together or not at all.

@file purchases/services.py
"""

import logging
from datetime import date

from django.db import transaction

from catalog.models import Supplier
from catalog.selectors import resolve_line_refs
from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_SOFT_DELETE,
    AUDIT_ACTION_STATUS_CHANGE,
)
from core.exceptions import BusinessRuleViolation, InvalidStateTransition, ResourceNotFoundError
from core.pricing import document_totals, price_line
from core.services import AuditService
from stock.models import StockMovement
from stock.posting import LineIntent, lock_for_repost, post_lines, reverse_reference
from stock.watchers import StockWatcher

from .models import REFERENCE_TYPE, Purchase, PurchaseItem

logger = logging.getLogger('stockpoint')

Status = Purchase.StatusChoices

EDITABLE_FIELDS = ('invoice_number', 'supplier_id', 'supplier_name', 'purchase_date', 'notes')


class PurchaseService:

    # --- helpers ---

    @staticmethod
    def _get_locked(purchase_id) -> Purchase:
        try:
            return Purchase.objects.select_for_update().get(pk=purchase_id, is_deleted=False)
        except Purchase.DoesNotExist:
            raise ResourceNotFoundError(detail='Purchase not found.')

    @staticmethod
    def _resolve_supplier(supplier_id):
        if supplier_id is None:
            return None
        supplier = Supplier.objects.filter(pk=supplier_id, is_deleted=False).first()
        if supplier is None:
            raise BusinessRuleViolation(detail='Unknown supplier.')
        return supplier

    @staticmethod
    def _write_items(purchase: Purchase, items, actor=None) -> list[PurchaseItem]:
        """Replace the purchase's active lines and refresh its totals."""
        if not items:
            raise BusinessRuleViolation(detail='A purchase needs at least one item.')
        products, _ = resolve_line_refs(items)

        purchase.items.filter(is_deleted=False).update(is_deleted=True)

        created = []
        for item in items:
            product = products[item['product_id']]
            price = price_line(
                product, item['quantity'], item.get('unit_price'),
                default_price_field='purchase_price',
            )
            created.append(PurchaseItem.objects.create(
                purchase=purchase,
                product=product,
                warehouse_id=item['warehouse_id'],
                quantity=item['quantity'],
                unit_price=price.unit_price,
                total_price=price.total_price,
                tax_amount=price.tax_amount,
                expiry_date=item.get('expiry_date'),
                created_by=actor,
            ))

        totals = document_totals(created)
        purchase.total_amount = totals.total_amount
        purchase.tax_amount = totals.tax_amount
        purchase.grand_total = totals.grand_total
        return created

    @staticmethod
    def _post_receipt(purchase: Purchase, actor=None):
        lines = [
            LineIntent(item.product_id, item.warehouse_id, item.quantity, item.expiry_date)
            for item in purchase.items.filter(is_deleted=False)
        ]
        return post_lines(
            lines,
            movement_type=StockMovement.MovementType.PURCHASE,
            outbound=False,
            reference_type=REFERENCE_TYPE,
            reference_id=purchase.pk,
            created_by=actor,
            notes=f'Purchase {purchase.invoice_number}',
        )

    @staticmethod
    def _reverse(purchase: Purchase, actor=None):
        results = reverse_reference(
            REFERENCE_TYPE, purchase.pk, created_by=actor,
            notes=f'Reversal of purchase {purchase.invoice_number}',
        )
        if results:
            StockWatcher.schedule_low_stock_check(r.movement.product_id for r in results)
        return results

    @staticmethod
    def _transition(purchase: Purchase, to_status: str, actor=None) -> None:
        if not purchase.can_transition_to(to_status):
            raise InvalidStateTransition(
                document_id=purchase.pk, from_status=purchase.status, to_status=to_status,
            )
        old_status = purchase.status
        purchase.status = to_status
        purchase.updated_by = actor
        purchase.save(update_fields=['status', 'updated_by', 'updated_at'])
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STATUS_CHANGE,
            model_name='Purchase',
            object_id=str(purchase.pk),
            old_values={'status': old_status},
            new_values={'status': to_status},
        )
        logger.info('Purchase %s: %s → %s by %s', purchase.invoice_number, old_status, to_status, actor)

    # --- public API ---

    @staticmethod
    @transaction.atomic
    def create_purchase(
        *,
        invoice_number: str,
        items: list[dict],
        purchase_date: date,
        supplier_id=None,
        supplier_name: str = '',
        notes: str = '',
        receive: bool | None = None,
        actor=None,
    ) -> Purchase:
        """
        Record a purchase. Without an explicit `receive`, a purchase from
        a registered supplier starts pending and a walk-in purchase is
        received (and posted) immediately.
        """
        supplier = PurchaseService._resolve_supplier(supplier_id)
        if receive is None:
            receive = supplier is None

        purchase = Purchase(
            invoice_number=invoice_number,
            supplier=supplier,
            supplier_name=supplier_name or '',
            purchase_date=purchase_date,
            status=Status.RECEIVED if receive else Status.PENDING,
            notes=notes or '',
            created_by=actor,
            updated_by=actor,
        )
        purchase.full_clean(exclude=['total_amount', 'tax_amount', 'grand_total'])
        purchase.save()

        PurchaseService._write_items(purchase, items, actor=actor)
        purchase.save(update_fields=['total_amount', 'tax_amount', 'grand_total', 'updated_at'])

        if purchase.is_received:
            PurchaseService._post_receipt(purchase, actor=actor)

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='Purchase',
            object_id=str(purchase.pk),
            new_values=AuditService.snapshot(purchase),
        )
        logger.info(
            'Purchase %s recorded (%s, %d lines) by %s',
            purchase.invoice_number, purchase.status, len(items), actor,
        )
        return purchase

    @staticmethod
    @transaction.atomic
    def receive_purchase(purchase_id, *, actor=None) -> Purchase:
        purchase = PurchaseService._get_locked(purchase_id)
        PurchaseService._transition(purchase, Status.RECEIVED, actor=actor)
        PurchaseService._post_receipt(purchase, actor=actor)
        return purchase

    @staticmethod
    @transaction.atomic
    def cancel_purchase(purchase_id, *, actor=None) -> Purchase:
        purchase = PurchaseService._get_locked(purchase_id)
        PurchaseService._transition(purchase, Status.CANCELLED, actor=actor)
        return purchase

    @staticmethod
    @transaction.atomic
    def update_purchase(purchase_id, *, items: list[dict] | None = None, actor=None, **fields) -> Purchase:
        """
        Edit header fields and optionally replace the lines.

        On a received purchase new lines are applied by reversing what
        was posted and posting the new lines; cancelled purchases are
        read-only.
        """
        purchase = PurchaseService._get_locked(purchase_id)
        if purchase.status == Status.CANCELLED:
            raise InvalidStateTransition(detail='Cannot update a cancelled purchase.', document_id=purchase.pk)

        old_snapshot = AuditService.snapshot(purchase)

        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise BusinessRuleViolation(detail=f'Fields not editable: {", ".join(sorted(unknown))}')
        if 'supplier_id' in fields:
            purchase.supplier = PurchaseService._resolve_supplier(fields.pop('supplier_id'))
        for field, value in fields.items():
            if value is None and field in ('supplier_name', 'notes'):
                value = ''
            setattr(purchase, field, value)

        if items is not None:
            if purchase.is_received:
                lock_for_repost(REFERENCE_TYPE, purchase.pk, items)
                PurchaseService._reverse(purchase, actor=actor)
            PurchaseService._write_items(purchase, items, actor=actor)

        purchase.updated_by = actor
        purchase.full_clean()
        purchase.save()

        if items is not None and purchase.is_received:
            PurchaseService._post_receipt(purchase, actor=actor)

        new_snapshot = AuditService.snapshot(purchase)
        if items is not None:
            new_snapshot['lines_replaced'] = len(items)
        AuditService.log_update(
            actor=actor,
            model_name='Purchase',
            object_id=purchase.pk,
            old_snapshot=old_snapshot,
            new_snapshot=new_snapshot,
        )
        return purchase

    @staticmethod
    @transaction.atomic
    def delete_purchase(purchase_id, *, actor=None) -> Purchase:
        """Received purchases are reversed first; the document is then soft-deleted."""
        purchase = PurchaseService._get_locked(purchase_id)
        if purchase.is_received:
            PurchaseService._reverse(purchase, actor=actor)
        purchase.soft_delete(user=actor)
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_SOFT_DELETE,
            model_name='Purchase',
            object_id=str(purchase.pk),
            old_values={'invoice_number': purchase.invoice_number, 'status': purchase.status},
        )
        logger.info('Purchase %s deleted by %s', purchase.invoice_number, actor)
        return purchase
