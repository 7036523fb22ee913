"""
Management command to sync variant prices from QuickBooks.
Schedule: once a day, at night.
"""

from django.core.management.base import BaseCommand, CommandError

from apps.reconciliation.exceptions import BridgeError
from apps.reconciliation.services.bridge import BridgeClient, BridgeConfig
from apps.reconciliation.services.price_sync import QuickBooksPriceSync


class Command(BaseCommand):
    help = "Update variant prices from the QuickBooks bridge"

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help='Report price changes without writing them')

    def handle(self, *args, **options):
        try:
            client = BridgeClient(BridgeConfig.from_settings())
            summary = QuickBooksPriceSync(client, dry_run=options['dry_run']).run()
        except BridgeError as exc:
            raise CommandError(f"QuickBooks sync failed: {exc}")

        self.stdout.write('=' * 50)
        self.stdout.write('💵 PRICE SYNC SUMMARY')
        self.stdout.write('=' * 50)
        self.stdout.write(f"Total linked variants: {summary.linked_variants}")
        self.stdout.write(f"Missing in QB:         {summary.missing_in_qb}")
        self.stdout.write(f"Updated prices:        {summary.updated}")
        self.stdout.write(f"Skipped (unchanged):   {summary.unchanged}")
        self.stdout.write(f"Skipped (no price):    {summary.no_price}")
        self.stdout.write(f"Errors:                {len(summary.errors)}")
        self.stdout.write(self.style.SUCCESS('✅ Done'))
