"""
Write off expired stock batches through the ledger.

Usage:
    python manage.py process_expired_stock
    python manage.py process_expired_stock --date 2026-01-31

@file stock/management/commands/process_expired_stock.py
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from stock.services import ExpiryService


class Command(BaseCommand):
    help = 'Zero out every stock batch whose expiry date is before today.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date', dest='today', default=None,
            help='Treat this ISO date as today (default: current local date).',
        )

    def handle(self, *args, **options):
        today = None
        if options['today']:
            try:
                today = date.fromisoformat(options['today'])
            except ValueError:
                raise CommandError(f"Invalid --date: {options['today']}")

        report = ExpiryService.sweep_expired(today=today)

        for movement in report.processed:
            self.stdout.write(
                f'  Expired {movement.batch_key}: {movement.quantity}'
            )
        for key in report.failed:
            self.stderr.write(f'  Failed {key}')

        self.stdout.write(self.style.SUCCESS(
            f'Done: {len(report.processed)} batches written off, {len(report.failed)} failed.'
        ))
