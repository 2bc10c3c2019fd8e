"""
Raise expiry warnings for batches expiring soon.

Usage:
    python manage.py check_expiring_stock --days 30

@file stock/management/commands/check_expiring_stock.py
"""

from django.conf import settings
from django.core.management.base import BaseCommand

from stock.services import ExpiryService


class Command(BaseCommand):
    help = 'Emit an expiry alert for every batch expiring within the warning horizon.'

    def add_arguments(self, parser):
        parser.add_argument('--days', type=int, default=settings.STOCK_EXPIRY_WARNING_DAYS)

    def handle(self, *args, **options):
        count = ExpiryService.warn_expiring(days=options['days'])
        self.stdout.write(self.style.SUCCESS(
            f"{count} batches expire within {options['days']} days."
        ))
