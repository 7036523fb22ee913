"""
Management command to generate a product's variants from its variant attributes.

Usage:
    python manage.py generate_variants 12 --base-price 24.99
    python manage.py generate_variants 12 --dry-run
"""

from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError

from apps.reconciliation.exceptions import ReconciliationError
from apps.reconciliation.services import VariantGenerator


def _price(value):
    try:
        return Decimal(value)
    except InvalidOperation:
        raise CommandError(f"Invalid base price: {value}")


class Command(BaseCommand):
    help = "Create one variant per combination of the product's variant attributes"

    def add_arguments(self, parser):
        parser.add_argument('product_id', type=int)
        parser.add_argument('--base-price', type=str, default=None, help='Price of each new variant (default 0)')
        parser.add_argument('--dry-run', action='store_true', help='List the combinations without writing')

    def handle(self, *args, **options):
        base_price = _price(options['base_price']) if options['base_price'] is not None else None
        dry_run = options['dry_run']

        if dry_run:
            self.stdout.write(self.style.WARNING('📋 DRY RUN - nothing will be written'))

        try:
            result = VariantGenerator(dry_run=dry_run).run(options['product_id'], base_price=base_price)
        except ReconciliationError as exc:
            raise CommandError(str(exc))

        self.stdout.write(f"Combinations:     {len(result.combinations)}")
        self.stdout.write(f"Already present:  {len(result.existing_titles)}")

        if dry_run:
            for title in result.pending_titles:
                self.stdout.write(f"  + {title}")
            return

        self.stdout.write(f"Options created:  {len(result.created_option_ids)}")
        self.stdout.write(f"Variants created: {len(result.created_variant_ids)}")
        self.stdout.write(self.style.SUCCESS('✅ Variant generation complete'))
