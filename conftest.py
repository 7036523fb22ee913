import pytest

from apps.product_attributes.models import AttributeKey, AttributeValue
from apps.products.models import (
    OrderLineItem,
    PriceSet,
    Product,
    ProductOption,
    ProductOptionValue,
    ProductVariant,
    VariantOptionSelection,
)


def make_product(title='LED PAR30 Light 10W', handle=None, metadata=None):
    return Product.objects.create(title=title, handle=handle or '', metadata=metadata)


def make_option(product, title, values=()):
    option = ProductOption.objects.create(product=product, title=title)
    for value in values:
        ProductOptionValue.objects.create(option=option, value=value)
    return option


def make_variant(product, title='', sku=None, amount=None, metadata=None):
    price_set = PriceSet.objects.create(amount=amount) if amount is not None else None
    return ProductVariant.objects.create(
        product=product, title=title, sku=sku, price_set=price_set, metadata=metadata,
    )


def select(variant, option, value):
    option_value, _ = ProductOptionValue.objects.get_or_create(option=option, value=value)
    return VariantOptionSelection.objects.create(variant=variant, option=option, option_value=option_value)


def make_key(label, handle=None, options=(), values=()):
    key = AttributeKey.objects.create(label=label, handle=handle or '', options=list(options))
    for value in values:
        AttributeValue.objects.create(attribute_key=key, value=value)
    return key


def sell(variant, order_id='order-1'):
    return OrderLineItem.objects.create(order_id=order_id, variant=variant, title=variant.title)


@pytest.fixture
def color_temperature():
    return make_key(
        'Color Temperature',
        handle='color-temperature',
        options=['3000K', '4000K', '5000K'],
    )


@pytest.fixture
def led_strip(color_temperature):
    """Product with an unlinked 'Color Temperature' option and two bare variants."""
    product = make_product('LED Strip', handle='led-strip')
    option = make_option(product, 'Color Temperature')
    warm = make_variant(product, title='3000K')
    cool = make_variant(product, title='5000K')
    return {'product': product, 'option': option, 'warm': warm, 'cool': cool}
