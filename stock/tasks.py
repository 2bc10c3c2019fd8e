"""
Stock — Celery Tasks

Daily expiry jobs, registered with Celery Beat in config/celery.py.

@file stock/tasks.py
"""

import logging

from celery import shared_task

logger = logging.getLogger('stockpoint')


@shared_task(name='stock.process_expired_stock')
def process_expired_stock_task():
    """
    Daily task: write off every batch whose expiry date has passed.
    Safe to re-run; already zeroed batches are skipped.
    """
    from .services import ExpiryService

    report = ExpiryService.sweep_expired()
    logger.info(
        'process_expired_stock_task completed: %d processed, %d failed.',
        len(report.processed), len(report.failed),
    )
    return {'processed_count': len(report.processed), 'failed_count': len(report.failed)}


@shared_task(name='stock.check_expiring_stock')
def check_expiring_stock_task(days=None):
    from .services import ExpiryService

    count = ExpiryService.warn_expiring(days=days)
    return {'expiring_count': count}
