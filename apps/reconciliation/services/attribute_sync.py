"""
Heals one product's variants against a single attribute key.

The option titled with the key's label is the target; it is created when the
product does not have one yet. Healing then follows the same rules and the
same write path as a full reconciliation run, restricted to that one
(option, key) pair.
"""

import logging
from typing import Optional

from apps.products.models import ProductOption

from .attribute_catalog import AttributeCatalog
from .batch_applier import ReconciliationRunner, ReconciliationSummary
from .product_store import ProductStore
from .variant_reconciler import reconcile_product

logger = logging.getLogger(__name__)


class AttributeVariantSync:
    def __init__(
        self,
        store: Optional[ProductStore] = None,
        catalog: Optional[AttributeCatalog] = None,
        dry_run: bool = False,
    ):
        self.store = store or ProductStore()
        self.catalog = catalog or AttributeCatalog()
        self.dry_run = dry_run

    def run(self, product_id, attribute_key_id) -> ReconciliationSummary:
        key = self.catalog.get_attribute_key(attribute_key_id)
        product = self.store.get_product(product_id)
        summary = ReconciliationSummary(dry_run=self.dry_run)
        summary.products_processed = 1

        option = next((o for o in product.options.all() if o.title == key.label), None)
        if option is None:
            if self.dry_run:
                logger.info("Product %s has no '%s' option; it would be created", product.pk, key.label)
                option = ProductOption(product=product, title=key.label)
            else:
                self.store.create_option(product.pk, key.label)
                product = self.store.get_product(product.pk)
                option = next(o for o in product.options.all() if o.title == key.label)

        plan = reconcile_product(product, [(option, key)])
        summary.skipped_count += len(plan.unchanged)

        if self.dry_run:
            summary.plans.append(plan)
            summary.healed_count += len(plan.updates)
            if plan.has_changes:
                summary.products_updated += 1
            return summary

        runner = ReconciliationRunner(store=self.store, catalog=self.catalog)
        runner.apply_plan(product, plan, summary)

        logger.info(
            "Synced product %s against '%s': healed=%d errors=%d",
            product.pk, key.label, summary.healed_count, summary.error_count,
        )
        return summary
