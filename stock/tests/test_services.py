"""
Tests — LedgerService: apply_movement and manual movements.

Invariant after every sequence: record.quantity == sum of movements.
Insufficient stock writes nothing. Sign rules per movement type.

@file stock/tests/test_services.py
"""

from decimal import Decimal

import pytest

from core.exceptions import BusinessRuleViolation, InsufficientStockError
from stock import selectors
from stock.models import BatchKey, StockMovement, StockRecord
from stock.services import LedgerService
from tests.factories import ProductFactory, SuperuserFactory, WarehouseFactory, days_from_today, stock_in


pytestmark = pytest.mark.django_db

MT = StockMovement.MovementType


def _apply(product, warehouse, quantity, movement_type, expiry_date=None, **kwargs):
    return LedgerService.apply_movement(
        product_id=product.pk,
        warehouse_id=warehouse.pk,
        expiry_date=expiry_date,
        quantity=Decimal(quantity),
        movement_type=movement_type,
        **kwargs,
    )


class TestApplyMovement:

    def test_first_inbound_creates_record(self, product, warehouse):
        result = _apply(product, warehouse, 12, MT.PURCHASE, reference_type='Purchase', reference_id='P-1')
        assert result.record.quantity == Decimal('12')
        assert result.movement.quantity == Decimal('12')
        assert result.movement.movement_type == 'purchase'
        assert result.movement.reference_id == 'P-1'
        assert StockRecord.objects.filter(product=product).count() == 1

    def test_outbound_on_missing_batch_fails_without_creating_record(self, product, warehouse):
        with pytest.raises(InsufficientStockError) as exc_info:
            _apply(product, warehouse, -1, MT.SALE)
        assert exc_info.value.available == Decimal('0')
        assert exc_info.value.requested == Decimal('1')
        assert not StockRecord.objects.filter(product=product).exists()
        assert not StockMovement.objects.filter(product=product).exists()

    def test_concrete_sale_purchase_oversell_sequence(self, product, warehouse):
        stock_in(product, warehouse, 10)

        after_sale = _apply(product, warehouse, -4, MT.SALE)
        assert after_sale.record.quantity == Decimal('6')
        assert after_sale.movement.quantity == Decimal('-4')

        after_purchase = _apply(product, warehouse, 20, MT.PURCHASE)
        assert after_purchase.record.quantity == Decimal('26')

        count_before = StockMovement.objects.count()
        with pytest.raises(InsufficientStockError) as exc_info:
            _apply(product, warehouse, -30, MT.SALE)

        error = exc_info.value
        assert error.batch_key == BatchKey(product.pk, warehouse.pk, None)
        assert error.requested == Decimal('30')
        assert error.available == Decimal('26')
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('26')
        assert StockMovement.objects.count() == count_before

    def test_exact_depletion_is_allowed(self, product, warehouse):
        stock_in(product, warehouse, 5)
        result = _apply(product, warehouse, -5, MT.SALE)
        assert result.record.quantity == Decimal('0')

    def test_batches_are_independent(self, product, warehouse):
        dated = days_from_today(60)
        stock_in(product, warehouse, 3)
        stock_in(product, warehouse, 7, expiry_date=dated)

        with pytest.raises(InsufficientStockError):
            _apply(product, warehouse, -5, MT.SALE)

        _apply(product, warehouse, -5, MT.SALE, expiry_date=dated)
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('3')
        assert selectors.get_quantity(product.pk, warehouse.pk, dated) == Decimal('2')

    def test_warehouses_are_independent(self, product, warehouse):
        other = WarehouseFactory()
        stock_in(product, warehouse, 4)
        with pytest.raises(InsufficientStockError):
            _apply(product, other, -1, MT.SALE)

    def test_created_by_and_notes_recorded(self, product, warehouse):
        user = SuperuserFactory()
        movement = _apply(product, warehouse, 2, MT.FOUND, notes='shelf count', created_by=user).movement
        movement.refresh_from_db()
        assert movement.created_by == user
        assert movement.notes == 'shelf count'

    def test_invariant_after_mixed_sequence(self, product, warehouse):
        dated = days_from_today(90)
        stock_in(product, warehouse, 50)
        stock_in(product, warehouse, 30, expiry_date=dated)
        for qty, mtype, expiry in [
            (-7, MT.SALE, None), (-3, MT.DAMAGE, dated), (12, MT.PURCHASE, None),
            (-1, MT.LOST, None), (4, MT.FOUND, dated), (-2, MT.ADJUSTMENT, None),
            (5, MT.ADJUSTMENT, dated), (-30, MT.SALE, dated),
        ]:
            _apply(product, warehouse, qty, mtype, expiry_date=expiry)

        assert selectors.find_ledger_drift() == []
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('52')
        assert selectors.get_quantity(product.pk, warehouse.pk, dated) == Decimal('6')

    def test_cent_quantities_keep_the_invariant(self, product, warehouse):
        _apply(product, warehouse, '0.01', MT.FOUND)
        result = _apply(product, warehouse, '0.25', MT.FOUND)
        assert result.record.quantity == Decimal('0.26')
        result.record.refresh_from_db()
        assert result.record.quantity == Decimal('0.26')

        _apply(product, warehouse, '-0.13', MT.ADJUSTMENT)
        assert selectors.find_ledger_drift() == []
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('0.13')

    @pytest.mark.parametrize('quantity', ['0.015', '0.001', '-0.005', '1E+20', 'NaN'])
    def test_quantity_finer_than_storage_is_refused(self, product, warehouse, quantity):
        _apply(product, warehouse, '0.01', MT.FOUND)
        with pytest.raises(BusinessRuleViolation):
            _apply(product, warehouse, quantity, MT.ADJUSTMENT)

        assert StockMovement.objects.count() == 1
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('0.01')
        assert selectors.find_ledger_drift() == []


class TestMovementValidation:

    def test_zero_quantity_rejected(self, product, warehouse):
        with pytest.raises(BusinessRuleViolation):
            _apply(product, warehouse, 0, MT.ADJUSTMENT)

    def test_unknown_type_rejected(self, product, warehouse):
        with pytest.raises(BusinessRuleViolation):
            _apply(product, warehouse, 1, 'teleport')

    @pytest.mark.parametrize('movement_type', [MT.SALE, MT.DAMAGE, MT.LOST, MT.EXPIRED])
    def test_outbound_types_must_be_negative(self, product, warehouse, movement_type):
        with pytest.raises(BusinessRuleViolation):
            _apply(product, warehouse, 1, movement_type)

    @pytest.mark.parametrize('movement_type', [MT.PURCHASE, MT.FOUND, MT.OPENING_STOCK])
    def test_inbound_types_must_be_positive(self, product, warehouse, movement_type):
        stock_in(product, warehouse, 10)
        with pytest.raises(BusinessRuleViolation):
            _apply(product, warehouse, -1, movement_type)

    def test_adjustment_accepts_either_sign(self, product, warehouse):
        _apply(product, warehouse, 4, MT.ADJUSTMENT)
        _apply(product, warehouse, -3, MT.ADJUSTMENT)
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('1')

    def test_plain_string_type_accepted(self, product, warehouse):
        result = _apply(product, warehouse, 2, 'opening_stock')
        assert result.movement.movement_type == MT.OPENING_STOCK


class TestManualMovement:

    def test_damage_takes_magnitude_and_reduces(self, product, warehouse):
        stock_in(product, warehouse, 10)
        result = LedgerService.record_manual_movement(
            product_id=product.pk, warehouse_id=warehouse.pk,
            quantity=Decimal('3'), movement_type='damage',
        )
        assert result.movement.quantity == Decimal('-3')
        assert result.movement.reference_type == 'Manual Adjustment'
        assert result.record.quantity == Decimal('7')

    def test_found_is_always_inbound(self, product, warehouse):
        result = LedgerService.record_manual_movement(
            product_id=product.pk, warehouse_id=warehouse.pk,
            quantity=Decimal('-2'), movement_type='found',
        )
        assert result.movement.quantity == Decimal('2')

    def test_adjustment_keeps_sign(self, product, warehouse):
        stock_in(product, warehouse, 10)
        result = LedgerService.record_manual_movement(
            product_id=product.pk, warehouse_id=warehouse.pk,
            quantity=Decimal('-4'), movement_type='adjustment',
        )
        assert result.record.quantity == Decimal('6')

    @pytest.mark.parametrize('movement_type', ['sale', 'purchase', 'expired'])
    def test_document_types_not_manual(self, product, warehouse, movement_type):
        with pytest.raises(BusinessRuleViolation):
            LedgerService.record_manual_movement(
                product_id=product.pk, warehouse_id=warehouse.pk,
                quantity=Decimal('1'), movement_type=movement_type,
            )

    def test_lost_beyond_stock_rejected(self, product, warehouse):
        stock_in(product, warehouse, 1)
        with pytest.raises(InsufficientStockError):
            LedgerService.record_manual_movement(
                product_id=product.pk, warehouse_id=warehouse.pk,
                quantity=Decimal('2'), movement_type='lost',
            )
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('1')


class TestProductIsolation:

    def test_other_products_untouched(self, warehouse):
        a, b = ProductFactory(), ProductFactory()
        stock_in(a, warehouse, 5)
        stock_in(b, warehouse, 9)
        _apply(a, warehouse, -5, MT.SALE)
        assert selectors.get_product_total(b.pk) == Decimal('9')
