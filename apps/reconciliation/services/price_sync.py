"""
Updates variant prices from QuickBooks through the bridge.
Only variants whose metadata carries a ``quickbooks_id`` are considered.
"""

import logging
import threading
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from django.db import DataError, IntegrityError, transaction

from apps.products.models import ProductVariant

from .bridge import BridgeClient

logger = logging.getLogger(__name__)

PRICE_SOURCE = 'quickbooks'


class PriceSyncSummary:
    def __init__(self, dry_run: bool):
        self.dry_run = dry_run
        self.linked_variants = 0
        self.updated = 0
        self.unchanged = 0
        self.no_price = 0
        self.missing_in_qb = 0
        self.errors: List[str] = []

    def to_dict(self) -> dict:
        return {
            'dry_run': self.dry_run,
            'linked_variants': self.linked_variants,
            'updated': self.updated,
            'unchanged': self.unchanged,
            'no_price': self.no_price,
            'missing_in_qb': self.missing_in_qb,
            'errors': len(self.errors),
        }


def _parse_price(raw) -> Optional[Decimal]:
    if raw is None or raw == '':
        return None
    try:
        price = Decimal(str(raw)).quantize(Decimal('0.01'))
    except InvalidOperation:
        return None
    if price.is_nan() or price < 0:
        return None
    return price


class QuickBooksPriceSync:
    def __init__(self, client: BridgeClient, dry_run: bool = False):
        self.client = client
        self.dry_run = dry_run

    def linked_variants(self) -> List[ProductVariant]:
        variants = ProductVariant.objects.select_related('price_set').order_by('id')
        return [v for v in variants if (v.metadata or {}).get('quickbooks_id')]

    def run(self, cancel_event: Optional[threading.Event] = None) -> PriceSyncSummary:
        summary = PriceSyncSummary(self.dry_run)
        variants = self.linked_variants()
        summary.linked_variants = len(variants)

        if not variants:
            logger.info("No variants linked to QuickBooks")
            return summary

        items = self.client.fetch_products(cancel_event=cancel_event)
        return self.apply(variants, items, summary)

    def apply(self, variants: Iterable[ProductVariant], items: Iterable[dict], summary: PriceSyncSummary) -> PriceSyncSummary:
        qb_items = {item.get('ListID'): item for item in items if item.get('ListID')}

        for variant in variants:
            qb_id = variant.metadata['quickbooks_id']
            item = qb_items.get(qb_id)

            if item is None:
                summary.missing_in_qb += 1
                logger.warning("Variant %s (%s) not found in QuickBooks response", variant.pk, variant.sku)
                continue

            if variant.price_set is None:
                summary.no_price += 1
                logger.warning("Variant %s (%s) has no price set", variant.pk, variant.sku)
                continue

            new_amount = _parse_price(item.get('SalesPrice'))
            if new_amount is None:
                summary.no_price += 1
                logger.warning("Variant %s (%s): invalid QuickBooks price %r", variant.pk, variant.sku, item.get('SalesPrice'))
                continue

            price_set = variant.price_set
            if price_set.amount == new_amount:
                summary.unchanged += 1
                continue

            if self.dry_run:
                summary.updated += 1
                logger.info("Would update %s: %s -> %s", variant.sku, price_set.amount, new_amount)
                continue

            try:
                with transaction.atomic():
                    price_set.amount = new_amount
                    price_set._price_change_source = PRICE_SOURCE
                    price_set.save()
            except (DataError, IntegrityError) as exc:
                logger.error("Variant %s (%s): price update failed - %s", variant.pk, variant.sku, exc)
                summary.errors.append(f"{variant.sku}: {exc}")
                continue

            summary.updated += 1
            if summary.updated % 25 == 0:
                logger.info("Progress: %d prices updated", summary.updated)

        return summary
