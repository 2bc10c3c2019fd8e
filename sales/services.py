"""
Sales — Service Layer

A sale posts one negative `sale` movement per line in a single
transaction; if any line lacks stock the whole sale is rejected.
Editing the lines reverses what the sale posted and posts the new lines;
deleting reverses and soft-deletes.

@file sales/services.py
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from catalog.selectors import resolve_line_refs
from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_SOFT_DELETE,
)
from core.exceptions import BusinessRuleViolation, InsufficientStockError, ResourceNotFoundError
from core.pricing import document_totals, price_line
from core.services import AuditService
from stock import selectors
from stock.models import StockMovement
from stock.posting import LineIntent, lock_for_repost, post_lines, reverse_reference
from stock.watchers import StockWatcher

from .models import REFERENCE_TYPE, Sale, SaleItem

logger = logging.getLogger('stockpoint')

EDITABLE_FIELDS = ('invoice_number', 'sale_date', 'payment_method', 'notes')


class SaleService:

    @staticmethod
    def _get_locked(sale_id) -> Sale:
        try:
            return Sale.objects.select_for_update().get(pk=sale_id, is_deleted=False)
        except Sale.DoesNotExist:
            raise ResourceNotFoundError(detail='Sale not found.')

    @staticmethod
    def _write_items(sale: Sale, items, actor=None) -> list[SaleItem]:
        """
        Replace the sale's active lines. A line without expiry_date gets
        its batch resolved first-expiry-first-out; quantities claimed by
        earlier lines of this sale are taken into account.
        """
        if not items:
            raise BusinessRuleViolation(detail='A sale needs at least one item.')
        products, _ = resolve_line_refs(items)
        today = timezone.localdate()

        sale.items.filter(is_deleted=False).update(is_deleted=True)

        claimed = defaultdict(lambda: defaultdict(Decimal))
        created = []
        for item in items:
            product = products[item['product_id']]
            quantity = Decimal(item['quantity'])
            if quantity <= 0:
                raise BusinessRuleViolation(detail='Sale quantities must be positive.')
            scope = (item['product_id'], item['warehouse_id'])
            if 'expiry_date' in item:
                expiry_date = item['expiry_date']
                if expiry_date is not None and expiry_date < today:
                    raise BusinessRuleViolation(
                        detail=f'Cannot sell {product.name} from a batch that expired on {expiry_date.isoformat()}.',
                    )
            else:
                expiry_date = selectors.resolve_sale_batch(
                    product.pk, item['warehouse_id'], quantity,
                    today=today, claimed=claimed[scope],
                )
            claimed[scope][expiry_date] += quantity

            price = price_line(
                product, quantity, item.get('unit_price'),
                default_price_field='selling_price',
            )
            created.append(SaleItem.objects.create(
                sale=sale,
                product=product,
                warehouse_id=item['warehouse_id'],
                expiry_date=expiry_date,
                quantity=quantity,
                unit_price=price.unit_price,
                total_price=price.total_price,
                tax_amount=price.tax_amount,
                created_by=actor,
            ))

        totals = document_totals(created)
        sale.total_amount = totals.total_amount
        sale.tax_amount = totals.tax_amount
        sale.grand_total = totals.grand_total
        return created

    @staticmethod
    def _post(sale: Sale, sale_items, actor=None):
        lines = [
            LineIntent(item.product_id, item.warehouse_id, item.quantity, item.expiry_date)
            for item in sale_items
        ]
        names = {item.product_id: item.product.name for item in sale_items}
        try:
            results = post_lines(
                lines,
                movement_type=StockMovement.MovementType.SALE,
                outbound=True,
                reference_type=REFERENCE_TYPE,
                reference_id=sale.pk,
                created_by=actor,
                notes=f'Stock sold via invoice: {sale.invoice_number}',
            )
        except InsufficientStockError as exc:
            key = exc.batch_key
            name = names.get(key.product_id, key.product_id) if key else ''
            raise InsufficientStockError(
                detail=f'Insufficient stock for product: {name}',
                batch_key=key, requested=exc.requested, available=exc.available,
            ) from exc
        StockWatcher.schedule_low_stock_check(names)
        return results

    @staticmethod
    def _reverse(sale: Sale, actor=None, notes=''):
        return reverse_reference(REFERENCE_TYPE, sale.pk, created_by=actor, notes=notes)

    @staticmethod
    @transaction.atomic
    def create_sale(
        *,
        invoice_number: str,
        sale_date: date,
        payment_method: str,
        items: list[dict],
        notes: str = '',
        actor=None,
    ) -> Sale:
        sale = Sale(
            invoice_number=invoice_number,
            sale_date=sale_date,
            payment_method=payment_method,
            notes=notes or '',
            created_by=actor,
            updated_by=actor,
        )
        sale.full_clean(exclude=['total_amount', 'tax_amount', 'grand_total'])
        sale.save()

        sale_items = SaleService._write_items(sale, items, actor=actor)
        sale.save(update_fields=['total_amount', 'tax_amount', 'grand_total', 'updated_at'])
        SaleService._post(sale, sale_items, actor=actor)

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='Sale',
            object_id=str(sale.pk),
            new_values=AuditService.snapshot(sale),
        )
        logger.info(
            'Sale %s posted (%d lines, grand_total=%s) by %s',
            sale.invoice_number, len(sale_items), sale.grand_total, actor,
        )
        return sale

    @staticmethod
    @transaction.atomic
    def update_sale(sale_id, *, items: list[dict] | None = None, actor=None, **fields) -> Sale:
        sale = SaleService._get_locked(sale_id)
        old_snapshot = AuditService.snapshot(sale)

        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise BusinessRuleViolation(detail=f'Fields not editable: {", ".join(sorted(unknown))}')
        for field, value in fields.items():
            if value is None and field == 'notes':
                value = ''
            setattr(sale, field, value)

        sale_items = None
        if items is not None:
            lock_for_repost(REFERENCE_TYPE, sale.pk, items)
            SaleService._reverse(
                sale, actor=actor,
                notes=f'Stock reverted due to sale update: {sale.invoice_number}',
            )
            sale_items = SaleService._write_items(sale, items, actor=actor)

        sale.updated_by = actor
        sale.full_clean()
        sale.save()

        if sale_items is not None:
            SaleService._post(sale, sale_items, actor=actor)

        new_snapshot = AuditService.snapshot(sale)
        if items is not None:
            new_snapshot['lines_replaced'] = len(items)
        AuditService.log_update(
            actor=actor,
            model_name='Sale',
            object_id=sale.pk,
            old_snapshot=old_snapshot,
            new_snapshot=new_snapshot,
        )
        return sale

    @staticmethod
    @transaction.atomic
    def delete_sale(sale_id, *, actor=None) -> Sale:
        """Return the sold quantities to their batches, then soft-delete."""
        sale = SaleService._get_locked(sale_id)
        SaleService._reverse(
            sale, actor=actor,
            notes=f'Stock reverted due to sale deletion: {sale.invoice_number}',
        )
        sale.soft_delete(user=actor)
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_SOFT_DELETE,
            model_name='Sale',
            object_id=str(sale.pk),
            old_values={'invoice_number': sale.invoice_number, 'grand_total': str(sale.grand_total)},
        )
        logger.info('Sale %s deleted by %s', sale.invoice_number, actor)
        return sale
