"""
Management command to delete unlinked copies of QuickBooks-linked variants.

Usage:
    python manage.py cleanup_duplicate_variants --dry-run
    python manage.py cleanup_duplicate_variants
"""

from django.core.management.base import BaseCommand

from apps.reconciliation.services import DuplicateVariantCleanup


class Command(BaseCommand):
    help = "Delete duplicate variants that lack the QuickBooks link their twin has"

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help='Report duplicates without deleting')

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        if dry_run:
            self.stdout.write(self.style.WARNING('📋 DRY RUN - nothing will be deleted'))

        result = DuplicateVariantCleanup(dry_run=dry_run).run()

        if not result.groups:
            self.stdout.write(self.style.SUCCESS('✅ No duplicate variants found'))
            return

        for group in result.groups:
            if group.resolvable:
                self.stdout.write(
                    f"  📌 product {group.product_id} '{group.title}': "
                    f"keep {group.keep_id}, delete {group.delete_ids}"
                )
            else:
                self.stdout.write(self.style.WARNING(
                    f"  ⚠️  product {group.product_id} '{group.title}': "
                    f"variants {group.variant_ids} need manual review"
                ))

        self.stdout.write('=' * 50)
        self.stdout.write('📊 SUMMARY')
        self.stdout.write('=' * 50)
        self.stdout.write(f"Duplicate groups:  {len(result.groups)}")
        self.stdout.write(f"Needs review:      {len(result.needs_review)}")
        self.stdout.write(f"Protected (sold):  {len(result.protected)}")
        self.stdout.write(f"Variants deleted:  {len(result.deleted_variant_ids)}")
