"""
Query and mutation access to products, options and variants.

``get_product`` loads a product with its options, option values, variants and
each variant's current selections in one prefetching query, so the matcher
and reconciler never hit the database per variant.
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from django.core.exceptions import ValidationError as ModelValidationError
from django.db import DataError, IntegrityError, transaction
from django.db.models import Prefetch

from apps.products.models import (
    OrderLineItem,
    Product,
    ProductOption,
    ProductOptionValue,
    ProductVariant,
    VariantOptionSelection,
)
from apps.reconciliation.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALL_PRODUCTS = 'all'

ProductScope = Union[str, Iterable[int]]


class ProductStore:
    """ORM-backed product store used by the reconciliation pipeline."""

    def product_queryset(self):
        selections = VariantOptionSelection.objects.select_related('option_value')
        return Product.objects.prefetch_related(
            Prefetch('options', queryset=ProductOption.objects.order_by('id')),
            'options__values',
            Prefetch('variants', queryset=ProductVariant.objects.order_by('id')),
            Prefetch('variants__option_selections', queryset=selections),
        )

    def get_product(self, product_id) -> Product:
        try:
            return self.product_queryset().get(pk=product_id)
        except Product.DoesNotExist:
            raise NotFoundError('product', product_id)

    def product_ids(self, scope: ProductScope = ALL_PRODUCTS) -> List[int]:
        """Resolve ``ALL_PRODUCTS`` or an explicit id list to ordered product ids."""
        if scope == ALL_PRODUCTS:
            return list(Product.objects.order_by('id').values_list('id', flat=True))
        # Keep explicit ids as given, including unknown ones, so they are
        # reported as not found instead of silently dropped.
        ids = []
        for product_id in scope:
            if product_id not in ids:
                ids.append(product_id)
        return ids

    @transaction.atomic
    def update_variant(
        self,
        variant_id,
        option_selections: Dict[int, str],
        sku: Optional[str] = None,
        change_reason: str = '',
    ) -> ProductVariant:
        """
        Add option selections to a variant and, if it has none, set its SKU.

        Existing selections are never replaced. The SKU is written in its own
        savepoint after the selections: if the database rejects it (another
        variant owns it, or it is too long) the variant keeps its new
        selections and stays without a SKU.

        Raises NotFoundError for unknown variants/options, ConflictError when
        a selection violates a uniqueness constraint, and ValidationError when
        the stored variant fails model validation.
        """
        try:
            variant = ProductVariant.objects.select_for_update().get(pk=variant_id)
        except ProductVariant.DoesNotExist:
            raise NotFoundError('variant', variant_id)

        existing = set(variant.option_selections.values_list('option_id', flat=True))

        try:
            for option_id, value in option_selections.items():
                if option_id in existing:
                    continue
                try:
                    option = ProductOption.objects.get(pk=option_id, product_id=variant.product_id)
                except ProductOption.DoesNotExist:
                    raise NotFoundError('option', option_id)

                option_value, _ = ProductOptionValue.objects.get_or_create(option=option, value=value)
                VariantOptionSelection.objects.create(
                    variant=variant,
                    option=option,
                    option_value=option_value,
                )

            if sku and not variant.sku:
                self._assign_sku(variant, sku, change_reason)
        except IntegrityError as exc:
            raise ConflictError('variant', variant_id, str(exc))
        except (ModelValidationError, DataError) as exc:
            raise ValidationError('variant', variant_id, _describe(exc))

        return variant

    def _assign_sku(self, variant: ProductVariant, sku: str, change_reason: str) -> bool:
        variant.sku = sku
        variant._change_reason = change_reason
        try:
            with transaction.atomic():
                variant.save(update_fields=['sku', 'updated_at'])
        except (IntegrityError, DataError) as exc:
            variant.sku = None
            logger.warning("SKU %r not assigned to variant %s: %s", sku, variant.pk, exc)
            return False
        return True

    def update_product_metadata(self, product_id, metadata: dict, change_reason: str = '') -> Product:
        try:
            product = Product.objects.get(pk=product_id)
        except Product.DoesNotExist:
            raise NotFoundError('product', product_id)
        product.metadata = metadata
        product._change_reason = change_reason
        try:
            with transaction.atomic():
                product.save()
        except (ModelValidationError, DataError) as exc:
            raise ValidationError('product', product_id, _describe(exc))
        return product

    def create_option(self, product_id, title: str, values: Iterable[str] = ()) -> ProductOption:
        """Create an option on the product with the given values, in order."""
        try:
            with transaction.atomic():
                option = ProductOption.objects.create(product_id=product_id, title=title)
                for value in values:
                    ProductOptionValue.objects.get_or_create(option=option, value=value)
        except IntegrityError as exc:
            raise ConflictError('option', title, str(exc))
        logger.info("Created option '%s' on product %s", title, product_id)
        return option

    def find_variants_by_option(self, option_id) -> List[int]:
        """Ids of variants that select a value on the option."""
        if not ProductOption.objects.filter(pk=option_id).exists():
            raise NotFoundError('option', option_id)
        return list(
            VariantOptionSelection.objects.filter(option_id=option_id)
            .order_by('variant_id')
            .values_list('variant_id', flat=True)
            .distinct()
        )

    def count_line_items(self, variant_id) -> int:
        return OrderLineItem.objects.filter(variant_id=variant_id).count()

    def delete_variants(self, variant_ids: Iterable[int], change_reason: str = '') -> List[int]:
        """
        Delete variants and their price sets; returns the ids actually deleted.

        Must run inside the caller's transaction so a failure rolls back the
        whole set.
        """
        deleted = []
        variants = ProductVariant.objects.filter(pk__in=list(variant_ids)).select_related('price_set')
        for variant in variants.order_by('id'):
            variant_pk = variant.pk
            price_set = variant.price_set
            variant._change_reason = change_reason
            variant.delete()
            # price sets are owned 1:1 and go with their variant
            if price_set is not None:
                price_set.delete()
            deleted.append(variant_pk)
        return deleted


def _describe(exc) -> str:
    if isinstance(exc, ModelValidationError) and hasattr(exc, 'message_dict'):
        return '; '.join(f"{field}: {', '.join(messages)}" for field, messages in exc.message_dict.items())
    return str(exc)
