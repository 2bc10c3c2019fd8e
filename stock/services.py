"""
Stock — Service Layer

LedgerService is the only writer of StockRecord and StockMovement:
apply_movement locks the batch row, checks the resulting balance and
writes the new quantity plus one movement in the same transaction.

ExpiryService drives the daily sweep (zero out expired batches through
the ledger) and the earlier expiry warning pass.

@file stock/services.py
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES, ZERO
from core.exceptions import BusinessRuleViolation, InsufficientStockError

from . import selectors
from .models import BatchKey, StockMovement, StockRecord
from .watchers import StockWatcher

logger = logging.getLogger('stockpoint')

MovementType = StockMovement.MovementType

OUTBOUND_TYPES = frozenset({
    MovementType.SALE.value, MovementType.DAMAGE.value,
    MovementType.LOST.value, MovementType.EXPIRED.value,
})
INBOUND_TYPES = frozenset({
    MovementType.PURCHASE.value, MovementType.FOUND.value, MovementType.OPENING_STOCK.value,
})
# ADJUSTMENT can be + or -; it is also the type of every compensating movement.

MANUAL_TYPES = frozenset({
    MovementType.DAMAGE.value, MovementType.LOST.value, MovementType.FOUND.value,
    MovementType.ADJUSTMENT.value, MovementType.OPENING_STOCK.value,
})

# Smallest quantity both ledger columns can store.
QUANTITY_STEP = Decimal(1).scaleb(-DECIMAL_PLACES)
QUANTITY_LIMIT = Decimal(10) ** (DECIMAL_MAX_DIGITS - DECIMAL_PLACES)

MANUAL_REFERENCE = 'Manual Adjustment'
EXPIRY_REFERENCE = 'Stock Expiry'


@dataclass(frozen=True)
class MovementResult:
    record: StockRecord
    movement: StockMovement
    # Outbound mutation left the product total at or under its min_stock.
    low_stock: bool = False


@dataclass
class SweepReport:
    processed: list[StockMovement] = field(default_factory=list)
    failed: list[BatchKey] = field(default_factory=list)


def _normalize_type(movement_type) -> str:
    if movement_type not in MovementType.values:
        raise BusinessRuleViolation(detail=f'Invalid movement_type: {movement_type}')
    return MovementType(movement_type).value


def _to_quantity(value) -> Decimal:
    """
    Decimal at the ledger's precision. Finer values are refused, not
    rounded: the record and the movement must store the same delta.
    """
    try:
        quantity = Decimal(value)
        if not quantity.is_finite():
            raise ValueError(value)
        stored = quantity.quantize(QUANTITY_STEP)
    except (InvalidOperation, TypeError, ValueError):
        raise BusinessRuleViolation(detail=f'Invalid movement quantity: {value}')
    if stored != quantity:
        raise BusinessRuleViolation(
            detail=f'Movement quantity {value} has more than {DECIMAL_PLACES} decimal places.',
        )
    if abs(stored) >= QUANTITY_LIMIT:
        raise BusinessRuleViolation(detail=f'Movement quantity {value} is out of range.')
    return stored


def _validate_intent(quantity: Decimal, movement_type: str) -> None:
    if quantity == 0:
        raise BusinessRuleViolation(detail='Movement quantity must be non-zero.')
    if movement_type in OUTBOUND_TYPES and quantity > 0:
        raise BusinessRuleViolation(detail=f'{movement_type} movements must be negative.')
    if movement_type in INBOUND_TYPES and quantity < 0:
        raise BusinessRuleViolation(detail=f'{movement_type} movements must be positive.')


def _lock_record(key: BatchKey, quantity: Decimal) -> StockRecord:
    """
    Return the batch row locked FOR UPDATE. A missing row is created at
    zero only for inbound deltas; concurrent first-writers collapse onto
    the same row through the unique constraint.
    """
    try:
        return StockRecord.objects.select_for_update().get(**key.lookup())
    except StockRecord.DoesNotExist:
        if quantity < 0:
            raise InsufficientStockError(
                detail=f'Insufficient stock: batch={key}, requested={-quantity}, available=0.',
                batch_key=key, requested=-quantity, available=ZERO,
            )
    record, _ = StockRecord.objects.get_or_create(
        product_id=key.product_id,
        warehouse_id=key.warehouse_id,
        expiry_date=key.expiry_date,
        defaults={'quantity': ZERO},
    )
    return StockRecord.objects.select_for_update().get(pk=record.pk)


class LedgerService:
    """Atomic stock mutations: one StockRecord update + one StockMovement insert."""

    @staticmethod
    @transaction.atomic
    def apply_movement(
        *,
        product_id: UUID,
        warehouse_id: UUID,
        quantity: Decimal,
        movement_type: str,
        expiry_date: date | None = None,
        reference_type: str = '',
        reference_id=None,
        notes: str = '',
        created_by=None,
    ) -> MovementResult:
        """
        Apply a signed quantity delta to one batch.

        Raises InsufficientStockError when the batch would go negative;
        nothing is written in that case, and an enclosing atomic block
        (a multi-line document) rolls back with it. Quantities finer than
        the stored precision are refused with BusinessRuleViolation.

        The result's low_stock is read inside the transaction; alert
        delivery still waits for commit (StockWatcher.schedule_low_stock_check).
        """
        quantity = _to_quantity(quantity)
        movement_type = _normalize_type(movement_type)
        _validate_intent(quantity, movement_type)
        key = BatchKey(product_id, warehouse_id, expiry_date)

        record = _lock_record(key, quantity)
        candidate = record.quantity + quantity
        if candidate < 0:
            raise InsufficientStockError(
                detail=(
                    f'Insufficient stock: batch={key}, requested={-quantity}, '
                    f'available={record.quantity}.'
                ),
                batch_key=key, requested=-quantity, available=record.quantity,
            )

        record.quantity = candidate
        record.save(update_fields=['quantity', 'updated_at'])

        movement = StockMovement(
            product_id=product_id,
            warehouse_id=warehouse_id,
            expiry_date=expiry_date,
            quantity=quantity,
            movement_type=movement_type,
            reference_type=reference_type or '',
            reference_id=str(reference_id) if reference_id is not None else None,
            notes=notes or '',
            created_by=created_by,
        )
        movement.save()

        logger.info(
            'StockMovement %s %s qty=%s batch=%s balance=%s ref=%s:%s',
            movement.pk, movement_type, quantity, key, candidate,
            reference_type, reference_id,
        )
        low_stock = quantity < 0 and StockWatcher.check_low_stock(product_id) is not None
        return MovementResult(record=record, movement=movement, low_stock=low_stock)

    @staticmethod
    @transaction.atomic
    def record_manual_movement(
        *,
        product_id: UUID,
        warehouse_id: UUID,
        quantity: Decimal,
        movement_type: str,
        expiry_date: date | None = None,
        notes: str = '',
        created_by=None,
    ) -> MovementResult:
        """
        Manual damage / lost / found / adjustment / opening stock.

        quantity is a magnitude for every type except adjustment, which
        keeps its own sign. damage and lost reduce stock.
        """
        movement_type = _normalize_type(movement_type)
        if movement_type not in MANUAL_TYPES:
            raise BusinessRuleViolation(
                detail=f'{movement_type} is not a manual movement type.',
            )
        quantity = _to_quantity(quantity)
        if movement_type in OUTBOUND_TYPES:
            quantity = -abs(quantity)
        elif movement_type in INBOUND_TYPES:
            quantity = abs(quantity)

        result = LedgerService.apply_movement(
            product_id=product_id,
            warehouse_id=warehouse_id,
            expiry_date=expiry_date,
            quantity=quantity,
            movement_type=movement_type,
            reference_type=MANUAL_REFERENCE,
            notes=notes,
            created_by=created_by,
        )
        if quantity < 0:
            StockWatcher.schedule_low_stock_check([product_id])
        return result


class ExpiryService:
    """Daily expiry handling: warning pass and zero-out sweep."""

    @staticmethod
    def _expire_batch(record_id: int, today: date) -> StockMovement | None:
        with transaction.atomic():
            record = StockRecord.objects.select_for_update().get(pk=record_id)
            if record.quantity <= 0 or record.expiry_date is None or record.expiry_date >= today:
                return None
            result = LedgerService.apply_movement(
                product_id=record.product_id,
                warehouse_id=record.warehouse_id,
                expiry_date=record.expiry_date,
                quantity=-record.quantity,
                movement_type=MovementType.EXPIRED,
                reference_type=EXPIRY_REFERENCE,
                notes=f'Stock expired on {record.expiry_date.isoformat()}. Auto-removed.',
            )
            StockWatcher.schedule_low_stock_check([record.product_id])
            return result.movement

    @staticmethod
    def sweep_expired(today: date | None = None) -> SweepReport:
        """
        Zero out every batch with expiry_date < today and quantity > 0.

        Each batch is its own transaction; a failing batch is logged and
        the sweep moves on. Re-running is a no-op.
        """
        today = today or timezone.localdate()
        report = SweepReport()
        candidates = list(
            selectors.expired_batches(today=today).values_list(
                'pk', 'product_id', 'warehouse_id', 'expiry_date',
            )
        )
        if not candidates:
            logger.info('Expiry sweep %s: no expired stock found.', today)
            return report

        for record_id, product_id, warehouse_id, expiry_date in candidates:
            key = BatchKey(product_id, warehouse_id, expiry_date)
            try:
                movement = ExpiryService._expire_batch(record_id, today)
            except Exception:
                logger.exception('Expiry sweep failed for batch %s', key)
                report.failed.append(key)
                continue
            if movement is not None:
                report.processed.append(movement)
                logger.info('Expired batch %s written off (%s).', key, movement.quantity)

        logger.info(
            'Expiry sweep %s completed: %d processed, %d failed.',
            today, len(report.processed), len(report.failed),
        )
        return report

    @staticmethod
    def warn_expiring(days: int | None = None, today: date | None = None) -> int:
        """Hand every batch expiring within the horizon to the watcher. No ledger writes."""
        if days is None:
            days = settings.STOCK_EXPIRY_WARNING_DAYS
        records = list(selectors.expiring_batches(days=days, today=today))
        for record in records:
            StockWatcher.emit_expiring(record, today=today)
        logger.info('Expiry warning pass: %d batches expire within %d days.', len(records), days)
        return len(records)
