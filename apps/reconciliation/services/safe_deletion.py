"""
Safe deletion of a product option and the variants that depend on it.

Flow:
1. FIND_VARIANTS     - variants selecting a value on the option
2. CHECK_SALES       - variants referenced by order line items are protected
3. ABORT_IF_PROTECTED (only when requested) or DELETE_VARIANTS (safe subset)
4. DELETE_OPTION     - the option is deleted regardless of protected variants;
                       their selection rows for it cascade away with it

Variant and option deletion share one transaction. If the option deletion
fails, the rollback restores the deleted variants and the run ends COMPENSATED.
"""

import logging
from typing import List, Optional

from django.db import transaction

from apps.products.models import ProductOption
from apps.reconciliation.exceptions import NotFoundError, ProtectedEntityError

from .product_store import ProductStore

logger = logging.getLogger(__name__)

FIND_VARIANTS = 'FIND_VARIANTS'
CHECK_SALES = 'CHECK_SALES'
ABORT_IF_PROTECTED = 'ABORT_IF_PROTECTED'
DELETE_VARIANTS = 'DELETE_VARIANTS'
DELETE_OPTION = 'DELETE_OPTION'
COMPLETED = 'COMPLETED'
COMPENSATED = 'COMPENSATED'


class SafeDeletionResult:
    def __init__(self, option_id):
        self.option_id = option_id
        self.state = FIND_VARIANTS
        self.variant_ids: List[int] = []
        self.safe_to_delete: List[int] = []
        self.protected: List[ProtectedEntityError] = []
        self.deleted_variant_ids: List[int] = []
        self.option_deleted = False
        self.error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state == COMPLETED

    @property
    def protected_variant_ids(self) -> List[int]:
        return [p.variant_id for p in self.protected]

    def to_dict(self) -> dict:
        return {
            'option_id': self.option_id,
            'state': self.state,
            'variants_found': len(self.variant_ids),
            'variants_deleted': len(self.deleted_variant_ids),
            'deleted_variant_ids': list(self.deleted_variant_ids),
            'protected_variants': [p.to_dict() for p in self.protected],
            'option_deleted': self.option_deleted,
            'success': self.success,
            'error': self.error,
        }


class SafeOptionDeletion:
    """Operator-invoked deletion of one product option."""

    def __init__(self, store: Optional[ProductStore] = None, abort_if_protected: bool = False):
        self.store = store or ProductStore()
        self.abort_if_protected = abort_if_protected

    def run(self, option_id) -> SafeDeletionResult:
        result = SafeDeletionResult(option_id)

        result.state = FIND_VARIANTS
        result.variant_ids = self.find_variants(option_id)

        result.state = CHECK_SALES
        self.check_sales(result)

        if result.protected and self.abort_if_protected:
            result.state = ABORT_IF_PROTECTED
            result.error = f"{len(result.protected)} variant(s) have sales history"
            logger.warning(
                "Option %s kept: protected variants %s",
                option_id, result.protected_variant_ids,
            )
            return result

        try:
            with transaction.atomic():
                result.state = DELETE_VARIANTS
                self.delete_variants(result)

                result.state = DELETE_OPTION
                self.delete_option(option_id)
                result.option_deleted = True
        except Exception as exc:
            failed_state = result.state
            result.state = COMPENSATED
            result.error = str(exc)
            restored = result.deleted_variant_ids
            result.deleted_variant_ids = []
            logger.error(
                "Deleting option %s failed during %s: %s; rolled back, %d variant(s) restored",
                option_id, failed_state, exc, len(restored),
            )
            raise

        result.state = COMPLETED
        logger.info(
            "Option %s deleted: %d variant(s) deleted, %d protected",
            option_id, len(result.deleted_variant_ids), len(result.protected),
        )
        return result

    def find_variants(self, option_id) -> List[int]:
        variant_ids = self.store.find_variants_by_option(option_id)
        logger.info("Found %d variant(s) for option %s", len(variant_ids), option_id)
        return variant_ids

    def check_sales(self, result: SafeDeletionResult):
        for variant_id in result.variant_ids:
            order_count = self.store.count_line_items(variant_id)
            if order_count > 0:
                result.protected.append(ProtectedEntityError(variant_id, order_count))
                logger.info("Variant %s protected (%d order line items)", variant_id, order_count)
            else:
                result.safe_to_delete.append(variant_id)

    def delete_variants(self, result: SafeDeletionResult):
        if not result.safe_to_delete:
            logger.info("No variants to delete")
            return
        result.deleted_variant_ids = self.store.delete_variants(
            result.safe_to_delete,
            change_reason=f'safe delete of option {result.option_id}',
        )
        logger.info("Deleted %d variant(s)", len(result.deleted_variant_ids))

    def delete_option(self, option_id):
        try:
            option = ProductOption.objects.get(pk=option_id)
        except ProductOption.DoesNotExist:
            raise NotFoundError('option', option_id)
        option.delete()
