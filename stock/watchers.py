"""
Stock — Watcher

Low-stock and expiry alerting. Reads only; it never writes to the
ledger, and services schedule it after commit so a failing receiver
cannot roll back a movement.

@file stock/watchers.py
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from . import selectors
from .signals import expiry_alert, low_stock_alert

logger = logging.getLogger('stockpoint')


@dataclass(frozen=True)
class LowStockAlert:
    product_id: UUID
    product_name: str
    total: Decimal
    min_stock: Decimal


class StockWatcher:

    @staticmethod
    def check_low_stock(product_id: UUID) -> LowStockAlert | None:
        """
        Compare the product's total on-hand against its min_stock.
        min_stock == 0 disables the alert. Safe to call repeatedly.
        """
        from catalog.models import Product

        product = Product.objects.filter(pk=product_id).only('name', 'min_stock').first()
        if product is None or product.min_stock <= 0:
            return None
        total = selectors.get_product_total(product_id)
        if total > product.min_stock:
            return None
        return LowStockAlert(
            product_id=product.pk,
            product_name=product.name,
            total=total,
            min_stock=product.min_stock,
        )

    @staticmethod
    def emit_low_stock(product_ids) -> list[LowStockAlert]:
        alerts = []
        for product_id in dict.fromkeys(product_ids):
            alert = StockWatcher.check_low_stock(product_id)
            if alert is None:
                continue
            low_stock_alert.send(sender=StockWatcher, alert=alert)
            alerts.append(alert)
        return alerts

    @staticmethod
    def schedule_low_stock_check(product_ids) -> None:
        """Run emit_low_stock once the surrounding transaction commits."""
        ids = list(product_ids)
        transaction.on_commit(lambda: StockWatcher.emit_low_stock(ids))

    @staticmethod
    def emit_expiring(record, today=None) -> int:
        today = today or timezone.localdate()
        days_left = (record.expiry_date - today).days
        expiry_alert.send(sender=StockWatcher, record=record, days_left=days_left)
        return days_left
