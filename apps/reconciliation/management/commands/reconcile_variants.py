"""
Management command to heal variants from the attribute catalog.

Usage:
    python manage.py reconcile_variants --all --dry-run
    python manage.py reconcile_variants 12 15 31
"""

from django.core.management.base import BaseCommand, CommandError

from apps.reconciliation.services import ALL_PRODUCTS, ReconciliationRunner


class Command(BaseCommand):
    help = "Link variants to product options whose attribute values match their titles"

    def add_arguments(self, parser):
        parser.add_argument('product_ids', nargs='*', type=int, help='Products to reconcile')
        parser.add_argument('--all', action='store_true', help='Reconcile every product')
        parser.add_argument('--dry-run', action='store_true', help='Report updates without writing them')

    def handle(self, *args, **options):
        product_ids = options['product_ids']
        if options['all'] and product_ids:
            raise CommandError('Pass either product ids or --all, not both.')
        if not options['all'] and not product_ids:
            raise CommandError('Pass product ids or --all.')

        scope = ALL_PRODUCTS if options['all'] else product_ids
        dry_run = options['dry_run']

        if dry_run:
            self.stdout.write(self.style.WARNING('📋 DRY RUN - nothing will be written'))

        summary = ReconciliationRunner(dry_run=dry_run).run(scope)

        if dry_run:
            for plan in summary.plans:
                for update in plan.updates:
                    self.stdout.write(
                        f"  product {plan.product_id} variant {update.variant_id}: "
                        f"{update.option_selections}"
                        + (f" sku={update.sku_if_missing}" if update.sku_if_missing else '')
                    )

        self.stdout.write('=' * 50)
        self.stdout.write('📊 SUMMARY')
        self.stdout.write('=' * 50)
        self.stdout.write(f"Products processed: {summary.products_processed}")
        self.stdout.write(f"Products updated:   {summary.products_updated}")
        self.stdout.write(f"Variants healed:    {summary.healed_count}")
        self.stdout.write(f"Variants skipped:   {summary.skipped_count}")
        self.stdout.write(f"SKUs not assigned:  {summary.sku_skipped_count}")
        self.stdout.write(f"Errors:             {summary.error_count}")

        for error in summary.errors:
            self.stdout.write(self.style.ERROR(f"  ❌ {error['entity']} {error['id']}: {error['error']}"))

        if summary.error_count:
            self.stdout.write(self.style.WARNING('⚠️  Completed with errors; re-running is safe.'))
        else:
            self.stdout.write(self.style.SUCCESS('✅ Reconciliation complete'))
