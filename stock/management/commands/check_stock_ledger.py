"""
Verify that every stock record matches the sum of its movements.

Exits non-zero when drift is found, so it can run from cron or CI.

@file stock/management/commands/check_stock_ledger.py
"""

from django.core.management.base import BaseCommand, CommandError

from stock.selectors import find_ledger_drift


class Command(BaseCommand):
    help = 'Compare StockRecord quantities against the movement ledger.'

    def handle(self, *args, **options):
        drift = find_ledger_drift()
        if not drift:
            self.stdout.write(self.style.SUCCESS('Stock ledger is consistent.'))
            return

        for row in drift:
            self.stderr.write(
                f"  {row['batch']}: record={row['record']} ledger={row['ledger']}"
            )
        raise CommandError(f'{len(drift)} batch(es) out of balance.')
