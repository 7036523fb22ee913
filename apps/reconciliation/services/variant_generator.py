"""
Creates one variant per combination of a product's variant attributes.

The attributes come from ``metadata.variant_attributes``; the values of each
key are the AttributeValues linked to the product. Every key becomes a
product option titled with the key's label, and each new variant gets its
own price set. Combinations that already exist are left alone, so running
the generator again after adding a value only creates the new variants.
"""

import itertools
import logging
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from django.db import transaction

from apps.product_attributes.models import AttributeKey
from apps.products.models import (
    PriceSet,
    Product,
    ProductOption,
    ProductOptionValue,
    ProductVariant,
    VariantOptionSelection,
)
from apps.reconciliation.exceptions import ValidationError

from .attribute_catalog import AttributeCatalog
from .product_store import ProductStore
from .variant_reconciler import slug

logger = logging.getLogger(__name__)

MANAGED_BY = 'attributes'
MIN_VALUES_PER_KEY = 2
MAX_COMBINATIONS = 100
CHANGE_REASON = 'variant generation'

VARIANT_TITLE_SEPARATOR = ' / '

Axis = Tuple[AttributeKey, List[str]]


def variant_title(combination: Sequence[str]) -> str:
    return VARIANT_TITLE_SEPARATOR.join(combination)


def variation_slug(combination: Sequence[str]) -> str:
    return '-'.join(slug(value) for value in combination)


class VariantGenerationResult:
    def __init__(self, product_id, dry_run: bool = False):
        self.product_id = product_id
        self.dry_run = dry_run
        self.combinations: List[Tuple[str, ...]] = []
        self.existing_titles: List[str] = []
        self.created_option_ids: List[int] = []
        self.created_variant_ids: List[int] = []
        self.price_sets_created = 0

    @property
    def pending_titles(self) -> List[str]:
        existing = set(self.existing_titles)
        return [variant_title(c) for c in self.combinations if variant_title(c) not in existing]

    def to_dict(self) -> dict:
        return {
            'product_id': self.product_id,
            'dry_run': self.dry_run,
            'combinations': len(self.combinations),
            'existing': list(self.existing_titles),
            'created_options': list(self.created_option_ids),
            'created_variants': list(self.created_variant_ids),
            'price_sets_created': self.price_sets_created,
        }


class VariantGenerator:
    """
    Builds the cartesian product of a product's variant attributes.

    Raises ValidationError when the product has no variant attributes, a key
    has fewer than two values on the product, or there are more than
    ``MAX_COMBINATIONS`` combinations. All writes share one transaction.
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

    def run(self, product_id, base_price: Optional[Decimal] = None) -> VariantGenerationResult:
        product = self.store.get_product(product_id)
        axes = self.variant_axes(product)

        result = VariantGenerationResult(product.pk, dry_run=self.dry_run)
        result.combinations = list(itertools.product(*[values for _, values in axes]))
        if len(result.combinations) > MAX_COMBINATIONS:
            raise ValidationError(
                'product', product.pk,
                f"too many combinations: {len(result.combinations)}, max {MAX_COMBINATIONS}",
            )

        existing = {variant.title for variant in product.variants.all()}
        result.existing_titles = [
            variant_title(c) for c in result.combinations if variant_title(c) in existing
        ]

        logger.info(
            "Product %s: %d combination(s), %d already present%s",
            product.pk, len(result.combinations), len(result.existing_titles),
            ' (dry run)' if self.dry_run else '',
        )
        if self.dry_run:
            return result

        with transaction.atomic():
            options = [self._ensure_option(product, key, values, result) for key, values in axes]
            for combination in result.combinations:
                if variant_title(combination) in existing:
                    continue
                self._create_variant(product, options, combination, base_price, result)

        logger.info(
            "Product %s: created %d variant(s) and %d option(s)",
            product.pk, len(result.created_variant_ids), len(result.created_option_ids),
        )
        return result

    def variant_axes(self, product: Product) -> List[Axis]:
        key_ids = product.variant_attribute_ids
        if not key_ids:
            raise ValidationError('product', product.pk, 'no variant attributes set')

        axes = []
        for key_id in key_ids:
            key = self.catalog.get_attribute_key(key_id)
            values = list(
                product.attribute_values.filter(attribute_key=key)
                .order_by('id')
                .values_list('value', flat=True)
            )
            if len(values) < MIN_VALUES_PER_KEY:
                raise ValidationError(
                    'product', product.pk,
                    f"attribute {key.label} needs at least {MIN_VALUES_PER_KEY} values, has {len(values)}",
                )
            axes.append((key, values))
        return axes

    def _ensure_option(self, product: Product, key: AttributeKey, values, result) -> ProductOption:
        option = ProductOption.objects.filter(product=product, title=key.label).first()
        if option is None:
            option = self.store.create_option(product.pk, key.label, values)
            result.created_option_ids.append(option.pk)
            return option
        for value in values:
            ProductOptionValue.objects.get_or_create(option=option, value=value)
        return option

    def _create_variant(self, product, options, combination, base_price, result):
        price_set = PriceSet.objects.create(amount=base_price or Decimal('0'), currency_code='usd')
        result.price_sets_created += 1

        variant = ProductVariant(
            product=product,
            title=variant_title(combination),
            price_set=price_set,
            metadata={'managed_by': MANAGED_BY, 'variation': variation_slug(combination)},
        )
        variant._change_reason = CHANGE_REASON
        variant.save()

        for option, value in zip(options, combination):
            option_value = ProductOptionValue.objects.get(option=option, value=value)
            VariantOptionSelection.objects.create(variant=variant, option=option, option_value=option_value)

        result.created_variant_ids.append(variant.pk)
        logger.info("Created variant %s '%s' on product %s", variant.pk, variant.title, product.pk)
