"""
Cleanup of duplicate variants: several variants of one product sharing a title.

Imports have left products with a QuickBooks-linked variant next to bare
copies of it. A group is cleaned only when exactly one of its variants carries
a ``quickbooks_id``: that one is kept and the unlinked copies are deleted,
except copies with sales history. Every other group is reported for manual
review.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import Count

from apps.products.models import ProductVariant
from apps.reconciliation.exceptions import ProtectedEntityError

from .product_store import ProductStore

logger = logging.getLogger(__name__)

CHANGE_REASON = 'duplicate variant cleanup'


class DuplicateGroup:
    def __init__(self, product_id, title: str, variant_ids: List[int]):
        self.product_id = product_id
        self.title = title
        self.variant_ids = variant_ids
        self.keep_id: Optional[int] = None
        self.delete_ids: List[int] = []

    @property
    def resolvable(self) -> bool:
        return self.keep_id is not None

    def to_dict(self) -> dict:
        return {
            'product_id': self.product_id,
            'title': self.title,
            'variant_ids': list(self.variant_ids),
            'keep': self.keep_id,
            'delete': list(self.delete_ids),
        }


class DuplicateCleanupResult:
    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.groups: List[DuplicateGroup] = []
        self.protected: List[ProtectedEntityError] = []
        self.deleted_variant_ids: List[int] = []

    @property
    def resolvable(self) -> List[DuplicateGroup]:
        return [g for g in self.groups if g.resolvable]

    @property
    def needs_review(self) -> List[DuplicateGroup]:
        return [g for g in self.groups if not g.resolvable]

    def to_dict(self) -> dict:
        return {
            'dry_run': self.dry_run,
            'groups': [g.to_dict() for g in self.groups],
            'needs_review': len(self.needs_review),
            'protected': [p.to_dict() for p in self.protected],
            'deleted_variant_ids': list(self.deleted_variant_ids),
        }


def _quickbooks_id(variant: ProductVariant) -> str:
    return (variant.metadata or {}).get('quickbooks_id') or ''


class DuplicateVariantCleanup:
    def __init__(self, store: Optional[ProductStore] = None, dry_run: bool = False):
        self.store = store or ProductStore()
        self.dry_run = dry_run

    def find_groups(self) -> List[DuplicateGroup]:
        duplicated = (
            ProductVariant.objects.exclude(title='')
            .values('product_id', 'title')
            .order_by()
            .annotate(variant_count=Count('id'))
            .filter(variant_count__gt=1)
        )
        keys = {(row['product_id'], row['title']) for row in duplicated}
        if not keys:
            return []

        members: Dict[Tuple[int, str], List[ProductVariant]] = defaultdict(list)
        product_ids = {product_id for product_id, _ in keys}
        for variant in ProductVariant.objects.filter(product_id__in=product_ids).order_by('id'):
            if (variant.product_id, variant.title) in keys:
                members[(variant.product_id, variant.title)].append(variant)

        groups = []
        for (product_id, title), variants in sorted(members.items()):
            group = DuplicateGroup(product_id, title, [v.pk for v in variants])
            linked = [v for v in variants if _quickbooks_id(v)]
            unlinked = [v for v in variants if not _quickbooks_id(v)]
            if len(linked) == 1 and unlinked:
                group.keep_id = linked[0].pk
                group.delete_ids = [v.pk for v in unlinked]
            else:
                logger.warning(
                    "Duplicate variants %s of product %s ('%s') need manual review",
                    group.variant_ids, product_id, title,
                )
            groups.append(group)
        return groups

    def run(self) -> DuplicateCleanupResult:
        result = DuplicateCleanupResult(dry_run=self.dry_run)
        result.groups = self.find_groups()

        deletable = []
        for group in result.resolvable:
            for variant_id in group.delete_ids:
                order_count = self.store.count_line_items(variant_id)
                if order_count:
                    result.protected.append(ProtectedEntityError(variant_id, order_count))
                    logger.info("Duplicate variant %s kept: %d order line items", variant_id, order_count)
                else:
                    deletable.append(variant_id)

        logger.info(
            "%d duplicate group(s): %d resolvable, %d for review, %d variant(s) to delete%s",
            len(result.groups), len(result.resolvable), len(result.needs_review),
            len(deletable), ' (dry run)' if self.dry_run else '',
        )
        if self.dry_run or not deletable:
            return result

        with transaction.atomic():
            result.deleted_variant_ids = self.store.delete_variants(deletable, change_reason=CHANGE_REASON)
        logger.info("Deleted %d duplicate variant(s)", len(result.deleted_variant_ids))
        return result
