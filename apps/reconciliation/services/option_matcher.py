"""
Pairs each product option with the attribute key it represents.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from apps.product_attributes.models import AttributeKey
from apps.products.models import Product, ProductOption

logger = logging.getLogger(__name__)


def _find_key(option: ProductOption, attribute_keys: Sequence[AttributeKey]) -> Optional[AttributeKey]:
    """
    Return the key matching the option title, case-insensitively.

    A handle match beats a label match; among equals the first key in catalog
    order wins. Ties are logged but never raised.
    """
    title = option.title.lower()
    by_handle = [k for k in attribute_keys if k.handle.lower() == title]
    by_label = [k for k in attribute_keys if k.label.lower() == title and k not in by_handle]
    candidates = by_handle + by_label

    if not candidates:
        return None

    if len(candidates) > 1:
        logger.warning(
            "Option '%s' (id=%s) matches %d attribute keys (%s); using '%s'",
            option.title,
            option.pk,
            len(candidates),
            ', '.join(k.handle for k in candidates),
            candidates[0].handle,
        )

    return candidates[0]


def match_options(
    product: Product,
    attribute_keys: Sequence[AttributeKey],
) -> List[Tuple[ProductOption, AttributeKey]]:
    """
    Match every option of the product against the attribute catalog.
    Unmatched options are left out of the result.
    """
    matches = []
    for option in product.options.all():
        key = _find_key(option, attribute_keys)
        if key is None:
            logger.debug("Option '%s' of product %s matches no attribute key", option.title, product.pk)
            continue
        logger.info(
            "Match found: option '%s' -> attribute '%s' in product %s",
            option.title, key.label, product.pk,
        )
        matches.append((option, key))
    return matches
