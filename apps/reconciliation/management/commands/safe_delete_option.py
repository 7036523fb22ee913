"""
Management command to delete a product option and its unsold variants.
"""

from django.core.management.base import BaseCommand, CommandError

from apps.reconciliation.exceptions import NotFoundError
from apps.reconciliation.services import SafeOptionDeletion
from apps.reconciliation.services.safe_deletion import ABORT_IF_PROTECTED


class Command(BaseCommand):
    help = "Delete a product option, deleting only the variants without sales history"

    def add_arguments(self, parser):
        parser.add_argument('option_id', type=int)
        parser.add_argument(
            '--abort-if-protected',
            action='store_true',
            help='Keep everything when any variant has order history',
        )

    def handle(self, *args, **options):
        workflow = SafeOptionDeletion(abort_if_protected=options['abort_if_protected'])
        try:
            result = workflow.run(options['option_id'])
        except NotFoundError as exc:
            raise CommandError(str(exc))

        self.stdout.write(f"Variants found:   {len(result.variant_ids)}")
        self.stdout.write(f"Variants deleted: {len(result.deleted_variant_ids)}")

        if result.protected:
            self.stdout.write(self.style.WARNING(f"🛡️  Protected variants: {len(result.protected)}"))
            for protected in result.protected:
                self.stdout.write(f"   - variant {protected.variant_id} ({protected.order_count} order line items)")

        if result.state == ABORT_IF_PROTECTED:
            raise CommandError(f"Option {result.option_id} kept: {result.error}")

        self.stdout.write(self.style.SUCCESS(f"✅ Option {result.option_id} deleted"))
