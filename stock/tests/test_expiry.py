"""
Tests — expiry sweep, expiry warnings, their Celery tasks and
management commands.

@file stock/tests/test_expiry.py
"""

from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from stock import selectors
from stock.models import StockMovement
from stock.services import EXPIRY_REFERENCE, ExpiryService
from stock.signals import expiry_alert
from stock.tasks import check_expiring_stock_task, process_expired_stock_task
from tests.factories import ProductFactory, days_from_today, stock_in


pytestmark = pytest.mark.django_db


@pytest.fixture
def expiry_events():
    received = []

    def collect(sender, record, days_left, **kwargs):
        received.append((record.batch_key, days_left))

    expiry_alert.connect(collect)
    yield received
    expiry_alert.disconnect(collect)


class TestSweepExpired:

    def test_expired_batch_is_zeroed_once(self, product, warehouse):
        yesterday = days_from_today(-1)
        stock_in(product, warehouse, 5, expiry_date=yesterday)

        report = ExpiryService.sweep_expired()
        assert len(report.processed) == 1
        movement = report.processed[0]
        assert movement.quantity == Decimal('-5')
        assert movement.movement_type == StockMovement.MovementType.EXPIRED
        assert movement.reference_type == EXPIRY_REFERENCE
        assert selectors.get_quantity(product.pk, warehouse.pk, yesterday) == Decimal('0')

        count = StockMovement.objects.count()
        again = ExpiryService.sweep_expired()
        assert again.processed == []
        assert again.failed == []
        assert StockMovement.objects.count() == count

    def test_expiring_today_and_undated_untouched(self, product, warehouse):
        stock_in(product, warehouse, 3, expiry_date=days_from_today(0))
        stock_in(product, warehouse, 4)
        report = ExpiryService.sweep_expired()
        assert report.processed == []
        assert selectors.get_product_total(product.pk) == Decimal('7')

    def test_explicit_today(self, product, warehouse):
        expiry = days_from_today(10)
        stock_in(product, warehouse, 2, expiry_date=expiry)
        report = ExpiryService.sweep_expired(today=days_from_today(11))
        assert len(report.processed) == 1
        assert selectors.find_ledger_drift() == []

    def test_failing_batch_does_not_stop_the_sweep(self, warehouse, monkeypatch):
        bad, good = ProductFactory(), ProductFactory()
        stock_in(bad, warehouse, 1, expiry_date=days_from_today(-5))
        stock_in(good, warehouse, 1, expiry_date=days_from_today(-2))
        original = ExpiryService._expire_batch
        bad_record = selectors.expired_batches().get(product=bad)

        def flaky(record_id, today):
            if record_id == bad_record.pk:
                raise RuntimeError('lock timeout')
            return original(record_id, today)

        monkeypatch.setattr(ExpiryService, '_expire_batch', staticmethod(flaky))
        report = ExpiryService.sweep_expired()

        assert [key.product_id for key in report.failed] == [bad.pk]
        assert len(report.processed) == 1
        assert selectors.get_product_total(good.pk) == Decimal('0')
        assert selectors.get_product_total(bad.pk) == Decimal('1')


class TestWarnExpiring:

    def test_alerts_each_batch_in_window(self, product, warehouse, expiry_events):
        stock_in(product, warehouse, 1, expiry_date=days_from_today(3))
        stock_in(product, warehouse, 1, expiry_date=days_from_today(45))
        count = ExpiryService.warn_expiring(days=30)
        assert count == 1
        assert [days for _, days in expiry_events] == [3]

    def test_does_not_write_movements(self, product, warehouse):
        stock_in(product, warehouse, 1, expiry_date=days_from_today(3))
        before = StockMovement.objects.count()
        ExpiryService.warn_expiring(days=30)
        assert StockMovement.objects.count() == before

    def test_default_horizon_from_settings(self, product, warehouse, settings, expiry_events):
        settings.STOCK_EXPIRY_WARNING_DAYS = 5
        stock_in(product, warehouse, 1, expiry_date=days_from_today(6))
        assert ExpiryService.warn_expiring() == 0


class TestTasks:

    def test_process_expired_stock_task(self, product, warehouse):
        stock_in(product, warehouse, 5, expiry_date=days_from_today(-1))
        assert process_expired_stock_task() == {'processed_count': 1, 'failed_count': 0}
        assert process_expired_stock_task() == {'processed_count': 0, 'failed_count': 0}

    def test_check_expiring_stock_task(self, product, warehouse, expiry_events):
        stock_in(product, warehouse, 1, expiry_date=days_from_today(2))
        assert check_expiring_stock_task(days=7) == {'expiring_count': 1}
        assert len(expiry_events) == 1


class TestCommands:

    def test_process_expired_stock_command(self, product, warehouse):
        stock_in(product, warehouse, 4, expiry_date=days_from_today(1))
        out = StringIO()
        call_command('process_expired_stock', '--date', days_from_today(2).isoformat(), stdout=out)
        assert '1 batches written off' in out.getvalue()
        assert selectors.get_product_total(product.pk) == Decimal('0')

    def test_process_expired_stock_rejects_bad_date(self):
        with pytest.raises(CommandError):
            call_command('process_expired_stock', '--date', 'not-a-date', stdout=StringIO())

    def test_check_expiring_stock_command(self, product, warehouse):
        stock_in(product, warehouse, 1, expiry_date=days_from_today(1))
        out = StringIO()
        call_command('check_expiring_stock', '--days', '3', stdout=out)
        assert '1 batches expire within 3 days' in out.getvalue()

    def test_check_stock_ledger_consistent(self, product, warehouse):
        stock_in(product, warehouse, 1)
        out = StringIO()
        call_command('check_stock_ledger', stdout=out)
        assert 'consistent' in out.getvalue()

    def test_check_stock_ledger_reports_drift(self, product, warehouse):
        stock_in(product, warehouse, 1)
        product.stock_records.update(quantity=Decimal('4'))
        with pytest.raises(CommandError):
            call_command('check_stock_ledger', stdout=StringIO(), stderr=StringIO())
