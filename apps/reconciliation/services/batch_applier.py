"""
Runs attribute-to-variant reconciliation over all products or a given list.

Each product is committed on its own; a killed run leaves earlier products
healed and a re-run skips them, because already-satisfied variants produce no
updates.
"""

import logging
from typing import List, Optional

from django.db import InterfaceError, OperationalError, transaction

from apps.reconciliation.exceptions import ReconciliationError

from .attribute_catalog import AttributeCatalog
from .option_matcher import match_options
from .product_store import ALL_PRODUCTS, ProductScope, ProductStore
from .variant_reconciler import ProductReconciliation, VariantUpdate, reconcile_product

logger = logging.getLogger(__name__)

CHANGE_REASON = 'variant reconciliation'


class ReconciliationSummary:
    """Aggregate counts of one reconciliation run."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.products_processed = 0
        self.products_updated = 0
        self.healed_count = 0
        self.skipped_count = 0
        self.sku_skipped_count = 0
        self.error_count = 0
        self.errors: List[dict] = []
        self.plans: List[ProductReconciliation] = []

    def record_error(self, entity: str, entity_id, message: str):
        self.error_count += 1
        self.errors.append({'entity': entity, 'id': entity_id, 'error': message})

    def to_dict(self) -> dict:
        return {
            'dry_run': self.dry_run,
            'products_processed': self.products_processed,
            'products_updated': self.products_updated,
            'healed': self.healed_count,
            'skipped': self.skipped_count,
            'sku_skipped': self.sku_skipped_count,
            'errors': self.error_count,
            'error_details': self.errors,
        }


class ReconciliationRunner:
    """
    Orchestrates catalog -> matcher -> reconciler -> store for each product.

    With ``dry_run`` the computed updates are collected in the summary and
    nothing is written.
    """

    def __init__(
        self,
        store: Optional[ProductStore] = None,
        catalog: Optional[AttributeCatalog] = None,
        dry_run: bool = False,
    ):
        self.store = store or ProductStore()
        self.catalog = catalog or AttributeCatalog()
        self.dry_run = dry_run

    def run(self, product_ids: ProductScope = ALL_PRODUCTS) -> ReconciliationSummary:
        summary = ReconciliationSummary(dry_run=self.dry_run)
        attribute_keys = self.catalog.list_attribute_keys()
        ids = self.store.product_ids(product_ids)

        logger.info(
            "Reconciling %d product(s) against %d attribute key(s)%s",
            len(ids), len(attribute_keys), ' (dry run)' if self.dry_run else '',
        )

        for product_id in ids:
            try:
                self.reconcile_product(product_id, attribute_keys, summary)
            except (OperationalError, InterfaceError):
                logger.exception("Database unavailable; aborting reconciliation run")
                raise
            except ReconciliationError as exc:
                logger.error("Product %s: %s", product_id, exc)
                summary.record_error('product', product_id, str(exc))

        logger.info(
            "Reconciliation complete: healed=%d skipped=%d errors=%d products_updated=%d",
            summary.healed_count, summary.skipped_count,
            summary.error_count, summary.products_updated,
        )
        return summary

    def reconcile_product(self, product_id, attribute_keys, summary: ReconciliationSummary):
        product = self.store.get_product(product_id)
        summary.products_processed += 1

        matches = match_options(product, attribute_keys)
        plan = reconcile_product(product, matches)
        summary.skipped_count += len(plan.unchanged)

        if self.dry_run:
            summary.plans.append(plan)
            summary.healed_count += len(plan.updates)
            if plan.has_changes:
                summary.products_updated += 1
            return plan

        return self.apply_plan(product, plan, summary)

    def apply_plan(self, product, plan: ProductReconciliation, summary: ReconciliationSummary):
        """
        Write one product's plan in a single transaction.

        Per-variant failures are recorded and skipped; the healed count only
        grows once the whole product has committed.
        """
        if not plan.has_changes:
            return plan

        healed = 0
        with transaction.atomic():
            healed_keys = set()
            for update in plan.updates:
                if self._apply_update(product, update, summary):
                    healed += 1
                    healed_keys.update(update.attribute_keys.values())

            # Only keys that healed at least one variant join the product's set
            plan.healing_key_ids = [k for k in plan.healing_key_ids if k in healed_keys]
            if plan.variant_attributes_changed:
                metadata = dict(product.metadata or {})
                metadata['variant_attributes'] = plan.variant_attributes
                self.store.update_product_metadata(product.pk, metadata, change_reason=CHANGE_REASON)

            if healed_keys or plan.variant_attributes_changed:
                summary.products_updated += 1

        summary.healed_count += healed
        return plan

    def _apply_update(self, product, update: VariantUpdate, summary: ReconciliationSummary) -> bool:
        try:
            with transaction.atomic():
                variant = self.store.update_variant(
                    update.variant_id,
                    update.option_selections,
                    sku=update.sku_if_missing,
                    change_reason=CHANGE_REASON,
                )
                for option_id, value in update.option_selections.items():
                    attribute_value = self.catalog.ensure_attribute_value(update.attribute_keys[option_id], value)
                    product.attribute_values.add(attribute_value)
        except ReconciliationError as exc:
            logger.error("Variant %s of product %s not healed: %s", update.variant_id, product.pk, exc)
            summary.record_error('variant', update.variant_id, str(exc))
            return False

        if update.sku_if_missing and variant.sku != update.sku_if_missing:
            summary.sku_skipped_count += 1
        logger.info("Healed variant %s of product %s: %s", update.variant_id, product.pk, update.option_selections)
        return True
