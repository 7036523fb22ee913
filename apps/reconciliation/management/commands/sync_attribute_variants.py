"""
Management command to heal one product's variants against one attribute key.
"""

from django.core.management.base import BaseCommand, CommandError

from apps.reconciliation.exceptions import NotFoundError
from apps.reconciliation.services import AttributeVariantSync


class Command(BaseCommand):
    help = "Link a product's variants to the option named after an attribute key"

    def add_arguments(self, parser):
        parser.add_argument('product_id', type=int)
        parser.add_argument('attribute_key_id', type=int)
        parser.add_argument('--dry-run', action='store_true', help='Report updates without writing them')

    def handle(self, *args, **options):
        sync = AttributeVariantSync(dry_run=options['dry_run'])
        try:
            summary = sync.run(options['product_id'], options['attribute_key_id'])
        except NotFoundError as exc:
            raise CommandError(str(exc))

        self.stdout.write(f"Variants healed:  {summary.healed_count}")
        self.stdout.write(f"Variants skipped: {summary.skipped_count}")
        self.stdout.write(f"Errors:           {summary.error_count}")

        for error in summary.errors:
            self.stdout.write(self.style.ERROR(f"  ❌ {error['entity']} {error['id']}: {error['error']}"))

        if not summary.error_count:
            self.stdout.write(self.style.SUCCESS('✅ Sync complete'))
