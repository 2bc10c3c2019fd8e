"""
Stock — Document Posting

Turns document lines (purchase or sale items) into ledger movements and
reverses them again on edit or delete. Callers run these inside their
own transaction.atomic block so a multi-line document posts all lines
or none.

Within one pass, lines are applied in batch-key order. An edit makes two
passes (reverse, then post the new lines), so it first takes every lock
it may need in a single ordered query (lock_for_repost); after that both
passes only re-enter rows the transaction already holds.

@file stock/posting.py
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from django.db.models import F, Q, Sum

from core.constants import ZERO

from .models import BatchKey, StockMovement, StockRecord
from .services import LedgerService, MovementResult

logger = logging.getLogger('stockpoint')


@dataclass(frozen=True)
class LineIntent:
    """One document line as the ledger sees it. quantity is a magnitude."""

    product_id: UUID
    warehouse_id: UUID
    quantity: Decimal
    expiry_date: date | None = None

    @property
    def batch_key(self) -> BatchKey:
        return BatchKey(self.product_id, self.warehouse_id, self.expiry_date)


def lock_order(key: BatchKey):
    return (str(key.product_id), str(key.warehouse_id), key.expiry_date is None, key.expiry_date or date.min)


def post_lines(
    lines,
    *,
    movement_type: str,
    outbound: bool,
    reference_type: str,
    reference_id,
    created_by=None,
    notes: str = '',
) -> list[MovementResult]:
    """
    Apply one movement per line. An InsufficientStockError on any line
    propagates and the caller's transaction discards the earlier ones.
    """
    results = []
    for line in sorted(lines, key=lambda ln: lock_order(ln.batch_key)):
        quantity = Decimal(line.quantity)
        results.append(LedgerService.apply_movement(
            product_id=line.product_id,
            warehouse_id=line.warehouse_id,
            expiry_date=line.expiry_date,
            quantity=-quantity if outbound else quantity,
            movement_type=movement_type,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
            created_by=created_by,
        ))
    return results


def outstanding(reference_type: str, reference_id) -> list[tuple[BatchKey, Decimal]]:
    """Net quantity a document still holds on each batch, in lock order, zeros dropped."""
    nets = (
        StockMovement.objects
        .filter(reference_type=reference_type, reference_id=str(reference_id))
        .order_by()
        .values('product_id', 'warehouse_id', 'expiry_date')
        .annotate(net=Sum('quantity'))
    )
    pending = [
        (BatchKey(row['product_id'], row['warehouse_id'], row['expiry_date']), row['net'])
        for row in nets
        if row['net'] != ZERO
    ]
    pending.sort(key=lambda item: lock_order(item[0]))
    return pending


def lock_for_repost(reference_type: str, reference_id, items) -> int:
    """
    Lock every existing batch an edit can touch, in one ordered query:
    the batches the document still holds, plus every batch in the
    product and warehouse of each new line (item dicts with product_id
    and warehouse_id) so first-expiry resolution stays inside the locked
    set. Returns the number of rows locked. A batch with no row yet is
    created later under the unique constraint.
    """
    condition = Q()
    for key, _ in outstanding(reference_type, reference_id):
        condition |= Q(**key.lookup())
    pairs = {(item.get('product_id'), item.get('warehouse_id')) for item in items}
    for product_id, warehouse_id in pairs:
        condition |= Q(product_id=product_id, warehouse_id=warehouse_id)
    if not condition:
        return 0
    # Same order as lock_order: uuid byte order, dated batches before the undated one.
    rows = (
        StockRecord.objects
        .select_for_update()
        .filter(condition)
        .order_by('product_id', 'warehouse_id', F('expiry_date').asc(nulls_last=True))
        .values_list('pk', flat=True)
    )
    return len(list(rows))


def reverse_reference(reference_type: str, reference_id, *, created_by=None, notes: str = '') -> list[MovementResult]:
    """
    Compensate everything a document has posted so far.

    The net of the document's movements is computed per batch and one
    opposite-signed adjustment is appended for each non-zero net, under
    the same reference. Earlier reversals are part of that net, so
    reversing twice never double-counts. Original movements are left
    untouched.
    """
    pending = outstanding(reference_type, reference_id)

    results = []
    for key, net in pending:
        results.append(LedgerService.apply_movement(
            product_id=key.product_id,
            warehouse_id=key.warehouse_id,
            expiry_date=key.expiry_date,
            quantity=-net,
            movement_type=StockMovement.MovementType.ADJUSTMENT,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes or f'Reversal of {reference_type} {reference_id}',
            created_by=created_by,
        ))
    if results:
        logger.info('Reversed %d batch line(s) for %s %s.', len(results), reference_type, reference_id)
    return results
