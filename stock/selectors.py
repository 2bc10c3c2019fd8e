"""
Stock — Selectors

Read-only queries over stock records and the movement ledger, consumed
by the API, the watcher and the expiry jobs.

Running balances order movements by (created_at, id). created_at alone
is not unique; the auto-increment id breaks ties so "balance as of row
N" is reproducible.

@file stock/selectors.py
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

from django.db.models import DecimalField, OuterRef, Q, QuerySet, Subquery, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES, ZERO

from .models import BatchKey, StockMovement, StockRecord

ANY_BATCH = object()

_decimal = DecimalField(max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES)


def _sum_quantity(qs: QuerySet) -> Decimal:
    total = qs.aggregate(total=Sum('quantity'))['total']
    return total if total is not None else ZERO


def get_quantity(product_id: UUID, warehouse_id: UUID | None = None, expiry_date=ANY_BATCH) -> Decimal:
    """
    Current on-hand quantity for a product, optionally narrowed to one
    warehouse and one batch. A batch with no record is simply zero.
    """
    if warehouse_id is not None and expiry_date is not ANY_BATCH:
        key = BatchKey(product_id, warehouse_id, expiry_date)
        return _sum_quantity(StockRecord.objects.filter(**key.lookup()))
    qs = StockRecord.objects.filter(product_id=product_id)
    if warehouse_id is not None:
        qs = qs.filter(warehouse_id=warehouse_id)
    return _sum_quantity(qs)


def get_product_total(product_id: UUID) -> Decimal:
    """Total on-hand across every warehouse and batch."""
    return get_quantity(product_id)


def stock_by_warehouse(product_id: UUID) -> QuerySet:
    """Non-empty batch rows for one product, with warehouse loaded."""
    return (
        StockRecord.objects
        .filter(product_id=product_id, quantity__gt=0)
        .select_related('warehouse')
        .order_by('warehouse__name', 'expiry_date')
    )


def _in_scope(qs: QuerySet, product_id, warehouse_id=None, expiry_date=ANY_BATCH, prefix: str = '') -> QuerySet:
    """
    Narrow qs to a product, a product in one warehouse, or one batch.
    A batch scope needs the warehouse: expiry dates repeat across warehouses.
    """
    if expiry_date is not ANY_BATCH:
        if warehouse_id is None:
            raise ValueError('A batch scope needs a warehouse.')
        return qs.filter(**BatchKey(product_id, warehouse_id, expiry_date).lookup(prefix))
    qs = qs.filter(**{f'{prefix}product_id': product_id})
    if warehouse_id is not None:
        qs = qs.filter(**{f'{prefix}warehouse_id': warehouse_id})
    return qs


def movement_history(
    product_id: UUID,
    warehouse_id: UUID | None = None,
    movement_type: str | None = None,
    expiry_date=ANY_BATCH,
) -> QuerySet:
    """
    Movements for a product, newest first, each annotated with `balance`.

    The balance scope is the product, the product in one warehouse, or
    one batch (warehouse plus expiry_date, None for the undated batch).
    The type filter narrows which rows are listed, not what they sum.
    """
    scope = _in_scope(StockMovement.objects.all(), product_id, warehouse_id, expiry_date)
    balance = (
        scope
        .filter(
            Q(created_at__lt=OuterRef('created_at'))
            | Q(created_at=OuterRef('created_at'), id__lte=OuterRef('id'))
        )
        .order_by()
        .values('product_id')
        .annotate(total=Sum('quantity'))
        .values('total')
    )

    qs = scope
    if movement_type:
        qs = qs.filter(movement_type=movement_type)
    return (
        qs.select_related('warehouse', 'created_by')
        .annotate(balance=Coalesce(Subquery(balance, output_field=_decimal), Value(ZERO), output_field=_decimal))
        .order_by('-created_at', '-id')
    )


def balance_at(product_id: UUID, at: datetime, warehouse_id: UUID | None = None, expiry_date=ANY_BATCH) -> Decimal:
    """Sum of the scope's movements with created_at <= at."""
    qs = _in_scope(StockMovement.objects.filter(created_at__lte=at), product_id, warehouse_id, expiry_date)
    return _sum_quantity(qs)


def balance_as_of(movement: StockMovement, scope: str = 'product') -> Decimal:
    """
    Running balance up to and including one movement. scope is
    'product', 'warehouse' or 'batch', all taken from the movement itself.
    """
    if scope not in ('product', 'warehouse', 'batch'):
        raise ValueError(f'Unknown balance scope: {scope}')
    qs = StockMovement.objects.filter(
        Q(created_at__lt=movement.created_at)
        | Q(created_at=movement.created_at, id__lte=movement.pk)
    )
    qs = _in_scope(
        qs,
        movement.product_id,
        movement.warehouse_id if scope != 'product' else None,
        movement.expiry_date if scope == 'batch' else ANY_BATCH,
    )
    return _sum_quantity(qs)


def movements_for_reference(reference_type: str, reference_id) -> QuerySet:
    return StockMovement.objects.filter(
        reference_type=reference_type,
        reference_id=str(reference_id),
    ).order_by('created_at', 'id')


def expiring_batches(days: int = 30, today: date | None = None) -> QuerySet:
    """Batches with today <= expiry_date <= today + days that still hold stock."""
    today = today or timezone.localdate()
    return (
        StockRecord.objects
        .filter(
            expiry_date__gte=today,
            expiry_date__lte=today + timedelta(days=days),
            quantity__gt=0,
        )
        .select_related('product', 'warehouse')
        .order_by('expiry_date')
    )


def expired_batches(today: date | None = None) -> QuerySet:
    today = today or timezone.localdate()
    return StockRecord.objects.filter(expiry_date__lt=today, quantity__gt=0).order_by('expiry_date', 'pk')


def sellable_batches(product_id: UUID, warehouse_id: UUID, today: date | None = None) -> list[tuple]:
    """
    (expiry_date, quantity) of every unexpired batch with stock, in
    first-expiry-first-out order; the non-expiring batch comes last.
    """
    today = today or timezone.localdate()
    rows = list(
        StockRecord.objects
        .filter(product_id=product_id, warehouse_id=warehouse_id, quantity__gt=0)
        .filter(Q(expiry_date__isnull=True) | Q(expiry_date__gte=today))
        .values_list('expiry_date', 'quantity')
    )
    rows.sort(key=lambda row: (row[0] is None, row[0] or today))
    return rows


def resolve_sale_batch(
    product_id: UUID,
    warehouse_id: UUID,
    quantity: Decimal,
    today: date | None = None,
    claimed: dict | None = None,
) -> date | None:
    """
    Pick the batch a sale line draws from when the caller names none:
    the earliest-expiring unexpired batch that can cover the quantity,
    the non-expiring batch last. `claimed` maps expiry_date to quantity
    already taken by earlier lines of the same document.

    When no batch can cover the line the fullest one is returned and
    the ledger rejects the movement with InsufficientStockError.
    """
    if claimed is None:
        claimed = {}
    batches = [
        (expiry, available - claimed.get(expiry, ZERO))
        for expiry, available in sellable_batches(product_id, warehouse_id, today)
    ]
    for expiry, available in batches:
        if available >= quantity:
            return expiry
    if not batches:
        return None
    return max(batches, key=lambda row: row[1])[0]


def find_ledger_drift() -> list[dict]:
    """
    Batches where record.quantity != SUM(movement.quantity) for the same
    key. Movement groups without a record count as drift too.
    """
    sums = {
        (row['product_id'], row['warehouse_id'], row['expiry_date']): row['total']
        for row in (
            StockMovement.objects
            .order_by()
            .values('product_id', 'warehouse_id', 'expiry_date')
            .annotate(total=Sum('quantity'))
        )
    }
    drift = []
    for record in StockRecord.objects.all().iterator():
        key = (record.product_id, record.warehouse_id, record.expiry_date)
        ledger = sums.pop(key, ZERO)
        if ledger != record.quantity:
            drift.append({'batch': record.batch_key, 'record': record.quantity, 'ledger': ledger})
    for (product_id, warehouse_id, expiry_date), total in sums.items():
        if total != 0:
            drift.append({
                'batch': BatchKey(product_id, warehouse_id, expiry_date),
                'record': None,
                'ledger': total,
            })
    return drift
