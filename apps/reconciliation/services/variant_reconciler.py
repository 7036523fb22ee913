"""
Computes the option selections a product's variants are missing.

A variant heals when its title is exactly one of the permitted values of an
attribute key matched to one of its product's options, and it has no
selection for that option yet. Matching is case- and whitespace-sensitive:
"5000 K" never heals against "5000K". Titles that match nothing are left for
manual correction rather than registered as new catalog values.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from apps.product_attributes.models import AttributeKey
from apps.products.models import Product, ProductOption, ProductVariant

from .attribute_catalog import AttributeCatalog

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r'\s+')
_NON_SLUG_RE = re.compile(r'[^a-z0-9-]')


def slug(value: str) -> str:
    """
    Strip surrounding whitespace, lower-case, turn inner whitespace runs into
    '-', then drop anything not alphanumeric or '-'.
    """
    return _NON_SLUG_RE.sub('', _WHITESPACE_RE.sub('-', value.strip().lower()))


def derive_sku(product_handle: str, value: str, max_length: Optional[int] = None) -> Optional[str]:
    """
    ``<handle>-<slug(value)>``. With ``max_length`` the handle is shortened so
    the value suffix survives; None when even the suffix does not fit.
    """
    suffix = f"-{slug(value)}"
    if max_length is None:
        return f"{product_handle}{suffix}"
    room = max_length - len(suffix)
    if room < 1:
        return None
    return f"{product_handle[:room].rstrip('-')}{suffix}"


class VariantUpdate:
    """Selections (and possibly a SKU) to add to one variant."""

    def __init__(self, variant_id, option_selections: Dict[int, str], sku_if_missing: Optional[str] = None):
        self.variant_id = variant_id
        self.option_selections = option_selections
        self.sku_if_missing = sku_if_missing
        # option id -> attribute key id, for catalog bookkeeping on apply
        self.attribute_keys: Dict[int, int] = {}

    def __repr__(self):
        return f"<VariantUpdate {self.variant_id} {self.option_selections} sku={self.sku_if_missing}>"

    def to_dict(self) -> dict:
        return {
            'variant_id': self.variant_id,
            'option_selections': dict(self.option_selections),
            'sku_if_missing': self.sku_if_missing,
        }


class ProductReconciliation:
    """Result of reconciling one product."""

    def __init__(self, product_id, previous_variant_attributes: Iterable[int]):
        self.product_id = product_id
        self.previous_variant_attributes = list(previous_variant_attributes)
        self.updates: List[VariantUpdate] = []
        self.unchanged: List[int] = []
        self.healing_key_ids: List[int] = []

    @property
    def variant_attributes(self) -> List[int]:
        """Previous ids plus every key that produced at least one candidate."""
        merged = list(self.previous_variant_attributes)
        for key_id in self.healing_key_ids:
            if key_id not in merged:
                merged.append(key_id)
        return merged

    @property
    def variant_attributes_changed(self) -> bool:
        return self.variant_attributes != self.previous_variant_attributes

    @property
    def has_changes(self) -> bool:
        return bool(self.updates) or self.variant_attributes_changed

    def to_dict(self) -> dict:
        return {
            'product_id': self.product_id,
            'updates': [u.to_dict() for u in self.updates],
            'unchanged': list(self.unchanged),
            'variant_attributes': self.variant_attributes,
        }


def _permitted_values(option: ProductOption, key: AttributeKey) -> set:
    """Catalog values of the key plus the values this option already uses."""
    values = set(AttributeCatalog.permitted_values(key))
    if option.pk is not None:
        values.update(v.value for v in option.values.all())
    return values


def reconcile_product(
    product: Product,
    matches: Sequence[Tuple[ProductOption, AttributeKey]],
) -> ProductReconciliation:
    """
    Compute the healing updates for one product.

    The product must come from ``ProductStore.get_product`` so options,
    option values, variants and selections are prefetched.
    """
    result = ProductReconciliation(product.pk, product.variant_attribute_ids)
    variants = list(product.variants.all())

    pending: Dict[int, VariantUpdate] = {}

    for option, key in matches:
        permitted = _permitted_values(option, key)
        key_healed = False

        for variant in variants:
            if option.pk in variant.get_option_selections():
                continue
            if variant.title not in permitted:
                continue

            update = pending.get(variant.pk)
            if update is None:
                update = pending[variant.pk] = VariantUpdate(variant.pk, {})
            update.option_selections[option.pk] = variant.title
            update.attribute_keys[option.pk] = key.pk
            key_healed = True

            logger.info(
                "Healing candidate: variant %s '%s' -> option '%s' in product %s",
                variant.pk, variant.title, option.title, product.pk,
            )

        if key_healed and key.pk not in result.healing_key_ids:
            result.healing_key_ids.append(key.pk)

    sku_max_length = ProductVariant._meta.get_field('sku').max_length
    taken_skus = {variant.sku for variant in variants if variant.sku}

    for variant in variants:
        update = pending.get(variant.pk)
        if update is None:
            result.unchanged.append(variant.pk)
            continue
        if not variant.sku:
            first_value = next(iter(update.option_selections.values()))
            sku = derive_sku(product.handle, first_value, max_length=sku_max_length)
            if sku is None or sku in taken_skus:
                # Several variants sharing a title derive the same SKU; the
                # first one keeps it and the rest heal without one.
                logger.warning(
                    "No SKU derived for variant %s of product %s: %r unavailable",
                    variant.pk, product.pk, sku,
                )
            else:
                update.sku_if_missing = sku
                taken_skus.add(sku)
        result.updates.append(update)

    return result
