"""
Product models for the storefront catalog.

Model Hierarchy:
- Product: The sellable entity (e.g., "LED PAR30 Light 10W")
- ProductOption: A product-scoped variation axis (e.g., "Color Options")
- ProductOptionValue: A value permitted on that axis (e.g., "5000K")
- ProductVariant: One purchasable SKU
- VariantOptionSelection: The value a variant selects on one option
- PriceSet / PriceHistory: The variant's price record and its audit trail
- OrderLineItem: Sales history used to protect variants from deletion
"""

from .product import Product, ProductOption, ProductOptionValue
from .variant import ProductVariant, VariantOptionSelection
from .pricing import PriceSet, PriceHistory
from .order import OrderLineItem

__all__ = [
    'Product',
    'ProductOption',
    'ProductOptionValue',
    'ProductVariant',
    'VariantOptionSelection',
    'PriceSet',
    'PriceHistory',
    'OrderLineItem',
]
