"""
Stock — Signals

Alert signals sent by StockWatcher, plus the default receivers that log
them. Delivery (mail, notification rows, push) hooks in by connecting
further receivers; the ledger never waits on any of them.

@file stock/signals.py
"""

import logging

from django.dispatch import Signal, receiver

logger = logging.getLogger('stockpoint')

# kwargs: alert (stock.watchers.LowStockAlert)
low_stock_alert = Signal()

# kwargs: record (stock.models.StockRecord), days_left (int)
expiry_alert = Signal()


@receiver(low_stock_alert)
def log_low_stock(sender, alert, **kwargs):
    logger.warning(
        'Low stock: %s total=%s min_stock=%s',
        alert.product_name, alert.total, alert.min_stock,
    )


@receiver(expiry_alert)
def log_expiring_batch(sender, record, days_left, **kwargs):
    logger.warning(
        'Batch %s expires in %d days (qty=%s).',
        record.batch_key, days_left, record.quantity,
    )
