"""
Detection and repair of variants that lost their option links.

A variant is orphaned when it has no selections although its product defines
options and has exactly one variant. Single-variant products without options
are not orphaned; some legitimately have none, and they are only listed for
diagnosis. Multi-variant products get a per-variant issue report instead.
"""

import logging
from collections import Counter
from typing import List, Optional

from django.db import IntegrityError, transaction

from apps.products.models import Product, ProductOption, ProductOptionValue, VariantOptionSelection
from apps.reconciliation.exceptions import ReconciliationError

from .product_store import ProductStore

logger = logging.getLogger(__name__)

DEFAULT_OPTION_TITLE = 'Title'
DEFAULT_ORPHAN_VALUE = 'Default'
DEFAULT_SINGLE_VARIANT_VALUE = 'Default Variant'

ISSUE_NO_OPTIONS = 'NO_OPTIONS'
ISSUE_MISSING_OPTION = 'MISSING_OPTION'
ISSUE_EMPTY_OPTION_VALUE = 'EMPTY_OPTION_VALUE'

CHANGE_REASON = 'orphan repair'


def is_orphaned(product: Product, variant) -> bool:
    """True when the product's only variant selects nothing while options exist."""
    variants = list(product.variants.all())
    return (
        len(variants) == 1
        and variants[0].pk == variant.pk
        and len(product.options.all()) > 0
        and not variant.get_option_selections()
    )


class VariantIssue:
    def __init__(self, product, variant, issue, option_title=None, expected_value=None, actual_value=None):
        self.product_id = product.pk
        self.product_title = product.title
        self.product_handle = product.handle
        self.variant_id = variant.pk
        self.variant_title = (variant.title or '').strip() or 'N/A'
        self.variant_sku = variant.sku or 'N/A'
        self.issue = issue
        self.option_title = option_title
        self.expected_value = expected_value
        self.actual_value = actual_value

    def to_dict(self) -> dict:
        data = {
            'product_id': self.product_id,
            'product_title': self.product_title,
            'product_handle': self.product_handle,
            'variant_id': self.variant_id,
            'variant_title': self.variant_title,
            'variant_sku': self.variant_sku,
            'issue': self.issue,
        }
        if self.option_title is not None:
            data['option_title'] = self.option_title
            data['expected_value'] = self.expected_value
        if self.actual_value is not None:
            data['actual_value'] = self.actual_value
        return data


class AuditReport:
    def __init__(self):
        self.total_products = 0
        self.total_variants = 0
        self.issues: List[VariantIssue] = []
        self.products_with_issues = set()

    @property
    def summary(self) -> dict:
        counts = Counter(issue.issue for issue in self.issues)
        return {
            'variants_with_no_options': counts[ISSUE_NO_OPTIONS],
            'variants_with_missing_options': counts[ISSUE_MISSING_OPTION],
            'variants_with_empty_option_values': counts[ISSUE_EMPTY_OPTION_VALUE],
        }

    def to_dict(self) -> dict:
        return {
            'total_products': self.total_products,
            'total_variants': self.total_variants,
            'products_with_issues': len(self.products_with_issues),
            'summary': self.summary,
            'issues': [issue.to_dict() for issue in self.issues],
        }


class RepairStats:
    def __init__(self, dry_run: bool):
        self.dry_run = dry_run
        self.processed = 0
        self.success = 0
        self.skipped = 0
        self.errors: List[str] = []

    def to_dict(self) -> dict:
        return {
            'dry_run': self.dry_run,
            'processed': self.processed,
            'success': self.success,
            'skipped': self.skipped,
            'errors': list(self.errors),
        }


class OrphanAuditor:
    def __init__(self, store: Optional[ProductStore] = None):
        self.store = store or ProductStore()

    def _products(self):
        return list(self.store.product_queryset().order_by('id'))

    def find_orphaned_products(self) -> List[Product]:
        """Single-variant products with options whose variant selects nothing."""
        orphaned = []
        for product in self._products():
            variants = list(product.variants.all())
            if len(variants) == 1 and is_orphaned(product, variants[0]):
                orphaned.append(product)
        logger.info("Found %d product(s) with orphaned options", len(orphaned))
        return orphaned

    def find_optionless_single_variant_products(self) -> List[Product]:
        return [
            product for product in self._products()
            if len(product.variants.all()) == 1 and len(product.options.all()) == 0
        ]

    @staticmethod
    def breakdown_by_wc_type(products) -> dict:
        return dict(Counter((p.metadata or {}).get('wc_type') or 'unknown' for p in products))

    def audit_multi_variant_products(self) -> AuditReport:
        """Report variants of multi-variant products that are missing option links."""
        report = AuditReport()

        for product in self._products():
            variants = list(product.variants.all())
            if len(variants) <= 1:
                continue
            report.total_products += 1

            options = list(product.options.all())
            if not options:
                continue

            for variant in variants:
                report.total_variants += 1
                selections = {s.option_id: s for s in variant.option_selections.all()}
                expected = (variant.title or '').strip()

                if not selections:
                    report.issues.append(VariantIssue(product, variant, ISSUE_NO_OPTIONS))
                    report.products_with_issues.add(product.pk)
                    continue

                for option in options:
                    selection = selections.get(option.pk)
                    if selection is None:
                        report.issues.append(VariantIssue(
                            product, variant, ISSUE_MISSING_OPTION,
                            option_title=option.title, expected_value=expected,
                        ))
                        report.products_with_issues.add(product.pk)
                    elif not selection.option_value.value.strip():
                        report.issues.append(VariantIssue(
                            product, variant, ISSUE_EMPTY_OPTION_VALUE,
                            option_title=option.title, expected_value=expected,
                            actual_value=selection.option_value.value or '(empty)',
                        ))
                        report.products_with_issues.add(product.pk)

        logger.info(
            "Audited %d variant(s) of %d multi-variant product(s): %d issue(s)",
            report.total_variants, report.total_products, len(report.issues),
        )
        return report

    def repair_orphaned_products(self, dry_run: bool = True) -> RepairStats:
        """Link each orphaned variant to its product's "Title" option."""
        stats = RepairStats(dry_run)

        for product in self.find_orphaned_products():
            stats.processed += 1
            variant = product.variants.all()[0]
            value = variant.title or DEFAULT_ORPHAN_VALUE
            title_option = next(
                (o for o in product.options.all() if o.title == DEFAULT_OPTION_TITLE), None
            )

            if title_option is None:
                logger.error("Product %s has no '%s' option; skipping", product.pk, DEFAULT_OPTION_TITLE)
                stats.errors.append(f"{product.title}: no {DEFAULT_OPTION_TITLE} option found")
                continue

            if dry_run:
                logger.info("Would link variant %s to option %s = %r", variant.pk, title_option.pk, value)
                stats.success += 1
                continue

            try:
                self.store.update_variant(
                    variant.pk, {title_option.pk: value}, change_reason=CHANGE_REASON,
                )
            except ReconciliationError as exc:
                logger.error("Product %s: %s", product.pk, exc)
                stats.errors.append(f"{product.title}: {exc}")
                continue

            stats.success += 1
            logger.info("Linked variant %s of product %s to '%s'", variant.pk, product.pk, value)

        return stats

    def fix_optionless_single_variant_products(self, dry_run: bool = True) -> RepairStats:
        """Create a "Title" option for single-variant products without options."""
        stats = RepairStats(dry_run)

        for product in self.find_optionless_single_variant_products():
            stats.processed += 1
            variant = product.variants.all()[0]
            value = variant.title or DEFAULT_SINGLE_VARIANT_VALUE

            if ProductOption.objects.filter(product=product, title=DEFAULT_OPTION_TITLE).exists():
                stats.skipped += 1
                continue

            if dry_run:
                logger.info("Would create option '%s' = %r on product %s", DEFAULT_OPTION_TITLE, value, product.pk)
                stats.success += 1
                continue

            try:
                with transaction.atomic():
                    option = ProductOption.objects.create(product=product, title=DEFAULT_OPTION_TITLE)
                    option_value = ProductOptionValue.objects.create(option=option, value=value)
                    VariantOptionSelection.objects.create(
                        variant=variant, option=option, option_value=option_value,
                    )
            except IntegrityError as exc:
                logger.error("Product %s: %s", product.pk, exc)
                stats.errors.append(f"{product.title}: {exc}")
                continue

            stats.success += 1
            logger.info("Created option '%s' for product %s", DEFAULT_OPTION_TITLE, product.pk)

        return stats
