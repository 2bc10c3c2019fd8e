"""
Tests — SaleService: all-or-nothing posting, batch resolution,
reversal on edit and delete.

@file sales/tests/test_services.py
"""

from decimal import Decimal
from itertools import count

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from core.exceptions import BusinessRuleViolation, InsufficientStockError
from sales.models import REFERENCE_TYPE, Sale, SaleItem
from sales.services import SaleService
from stock import selectors
from stock.models import StockMovement
from tests.factories import ProductFactory, WarehouseFactory, days_from_today, stock_in


pytestmark = pytest.mark.django_db

_invoice_numbers = count(1)


def _item(product, warehouse, quantity, **extra):
    return {'product_id': product.pk, 'warehouse_id': warehouse.pk, 'quantity': Decimal(quantity), **extra}


def _sell(items, **kwargs):
    kwargs.setdefault('invoice_number', f'INV-T{next(_invoice_numbers):04d}')
    kwargs.setdefault('sale_date', timezone.localdate())
    kwargs.setdefault('payment_method', Sale.PaymentMethod.CASH)
    return SaleService.create_sale(items=items, **kwargs)


class TestCreateSale:

    def test_posts_one_negative_movement_per_line(self, product, warehouse):
        stock_in(product, warehouse, 10)
        sale = _sell([_item(product, warehouse, 4)])
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('6')

        movement = StockMovement.objects.get(reference_type=REFERENCE_TYPE, reference_id=str(sale.pk))
        assert movement.quantity == Decimal('-4')
        assert movement.movement_type == 'sale'
        assert sale.grand_total == Decimal('400.00')

    def test_multi_line_sale_is_all_or_nothing(self, warehouse):
        a, b, c = ProductFactory(), ProductFactory(), ProductFactory(name='Short Item')
        stock_in(a, warehouse, 10)
        stock_in(b, warehouse, 2)
        stock_in(c, warehouse, 10)
        movements_before = StockMovement.objects.count()

        with pytest.raises(InsufficientStockError) as exc_info:
            _sell([_item(a, warehouse, 3), _item(b, warehouse, 5), _item(c, warehouse, 1)], invoice_number='INV-ALL')

        assert b.name in str(exc_info.value.detail)
        assert exc_info.value.requested == Decimal('5')
        assert exc_info.value.available == Decimal('2')
        assert StockMovement.objects.count() == movements_before
        assert not Sale.objects.filter(invoice_number='INV-ALL').exists()
        assert not SaleItem.objects.exists()
        for product, qty in ((a, 10), (b, 2), (c, 10)):
            assert selectors.get_product_total(product.pk) == Decimal(qty)

    def test_vat_applies_to_vatable_products(self, warehouse, settings):
        settings.VAT_RATE = Decimal('0.18')
        product = ProductFactory(is_vatable=True, selling_price=Decimal('50'))
        stock_in(product, warehouse, 5)
        sale = _sell([_item(product, warehouse, 2)])
        assert sale.total_amount == Decimal('100.00')
        assert sale.tax_amount == Decimal('18.00')
        assert sale.grand_total == Decimal('118.00')

    def test_same_invoice_twice_rejected(self, product, warehouse):
        stock_in(product, warehouse, 10)
        _sell([_item(product, warehouse, 1)], invoice_number='INV-DUP')
        with pytest.raises(ValidationError):
            _sell([_item(product, warehouse, 1)], invoice_number='INV-DUP')
        assert selectors.get_product_total(product.pk) == Decimal('9')


class TestBatchSelection:

    def test_fefo_when_batch_omitted(self, product, warehouse):
        soon, later = days_from_today(10), days_from_today(90)
        stock_in(product, warehouse, 5, expiry_date=later)
        stock_in(product, warehouse, 5, expiry_date=soon)
        stock_in(product, warehouse, 5)

        sale = _sell([_item(product, warehouse, 3)])
        assert sale.items.get().expiry_date == soon
        assert selectors.get_quantity(product.pk, warehouse.pk, soon) == Decimal('2')

    def test_lines_share_claimed_quantities(self, product, warehouse):
        soon = days_from_today(10)
        stock_in(product, warehouse, 4, expiry_date=soon)
        stock_in(product, warehouse, 10)

        sale = _sell([_item(product, warehouse, 3), _item(product, warehouse, 3)])
        batches = sorted((item.expiry_date is None, item.quantity) for item in sale.items.all())
        assert batches == [(False, Decimal('3')), (True, Decimal('3'))]
        assert selectors.get_quantity(product.pk, warehouse.pk, soon) == Decimal('1')
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('7')

    def test_explicit_null_means_undated_batch(self, product, warehouse):
        stock_in(product, warehouse, 5, expiry_date=days_from_today(3))
        with pytest.raises(InsufficientStockError):
            _sell([_item(product, warehouse, 1, expiry_date=None)])

    def test_explicit_batch(self, product, warehouse):
        later = days_from_today(60)
        stock_in(product, warehouse, 5, expiry_date=days_from_today(3))
        stock_in(product, warehouse, 5, expiry_date=later)
        _sell([_item(product, warehouse, 2, expiry_date=later)])
        assert selectors.get_quantity(product.pk, warehouse.pk, later) == Decimal('3')

    def test_expired_batch_cannot_be_sold(self, product, warehouse):
        expired = days_from_today(-1)
        stock_in(product, warehouse, 5, expiry_date=expired)
        with pytest.raises(BusinessRuleViolation):
            _sell([_item(product, warehouse, 1, expiry_date=expired)])
        with pytest.raises(InsufficientStockError):
            _sell([_item(product, warehouse, 1)])

    def test_other_warehouse_stock_not_used(self, product, warehouse):
        stock_in(product, WarehouseFactory(), 50)
        with pytest.raises(InsufficientStockError):
            _sell([_item(product, warehouse, 1)])


class TestUpdateAndDelete:

    def test_delete_restores_stock_and_keeps_history(self, product, warehouse):
        stock_in(product, warehouse, 10)
        sale = _sell([_item(product, warehouse, 4)])
        SaleService.delete_sale(sale.pk)

        assert selectors.get_product_total(product.pk) == Decimal('10')
        movements = list(selectors.movements_for_reference(REFERENCE_TYPE, sale.pk))
        assert [(m.movement_type, m.quantity) for m in movements] == [
            ('sale', Decimal('-4')), ('adjustment', Decimal('4')),
        ]
        sale.refresh_from_db()
        assert sale.is_deleted

    def test_update_lines_reverses_then_reposts(self, product, warehouse):
        stock_in(product, warehouse, 10)
        sale = _sell([_item(product, warehouse, 4)])
        SaleService.update_sale(sale.pk, items=[_item(product, warehouse, 7)])

        assert selectors.get_product_total(product.pk) == Decimal('3')
        sale.refresh_from_db()
        assert sale.grand_total == Decimal('700.00')
        assert sale.items.filter(is_deleted=False).get().quantity == Decimal('7')
        assert selectors.find_ledger_drift() == []

    def test_update_can_use_stock_freed_by_the_reversal(self, product, warehouse):
        stock_in(product, warehouse, 5)
        sale = _sell([_item(product, warehouse, 5)])
        SaleService.update_sale(sale.pk, items=[_item(product, warehouse, 5)])
        assert selectors.get_product_total(product.pk) == Decimal('0')

    def test_failed_update_leaves_sale_untouched(self, product, warehouse):
        stock_in(product, warehouse, 5)
        sale = _sell([_item(product, warehouse, 2)])
        with pytest.raises(InsufficientStockError):
            SaleService.update_sale(sale.pk, items=[_item(product, warehouse, 9)], notes='changed')

        sale.refresh_from_db()
        assert sale.notes == ''
        assert sale.items.filter(is_deleted=False).get().quantity == Decimal('2')
        assert selectors.get_product_total(product.pk) == Decimal('3')

    def test_header_only_update(self, product, warehouse):
        stock_in(product, warehouse, 5)
        sale = _sell([_item(product, warehouse, 2)])
        before = StockMovement.objects.count()
        SaleService.update_sale(sale.pk, payment_method=Sale.PaymentMethod.CARD)
        sale.refresh_from_db()
        assert sale.payment_method == 'card'
        assert StockMovement.objects.count() == before

    def test_reversal_returns_to_the_drawn_batch(self, product, warehouse):
        soon = days_from_today(5)
        stock_in(product, warehouse, 3, expiry_date=soon)
        stock_in(product, warehouse, 3)
        sale = _sell([_item(product, warehouse, 2)])
        SaleService.delete_sale(sale.pk)
        assert selectors.get_quantity(product.pk, warehouse.pk, soon) == Decimal('3')
        assert selectors.get_quantity(product.pk, warehouse.pk, None) == Decimal('3')
