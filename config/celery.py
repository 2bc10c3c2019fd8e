"""
StockPoint — Celery Application

Workers autodiscover tasks.py in every installed app. The daily expiry
jobs are scheduled here; django_celery_beat's DatabaseScheduler picks
the entries up on first start and they can be retimed from the admin.

@file config/celery.py
"""

import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('stockpoint')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()


@app.on_after_finalize.connect
def setup_periodic_tasks(sender, **kwargs):
    from django.conf import settings

    hour = settings.STOCK_EXPIRY_SWEEP_HOUR
    sender.conf.beat_schedule = {
        'process-expired-stock-daily': {
            'task': 'stock.process_expired_stock',
            'schedule': crontab(hour=hour, minute=0),
        },
        'check-expiring-stock-daily': {
            'task': 'stock.check_expiring_stock',
            'schedule': crontab(hour=hour, minute=15),
        },
    }
