from decimal import Decimal

import pytest

from apps.product_attributes.models import AttributeValue
from apps.products.models import PriceSet, ProductOption, ProductVariant
from apps.reconciliation.exceptions import ValidationError
from apps.reconciliation.services import VariantGenerator
from apps.reconciliation.services.variant_generator import MANAGED_BY, MAX_COMBINATIONS
from conftest import make_key, make_option, make_product, make_variant


def _attach(product, key, *values):
    for value in values:
        attribute_value, _ = AttributeValue.objects.get_or_create(attribute_key=key, value=value)
        product.attribute_values.add(attribute_value)


@pytest.fixture
def flood_light(db):
    wattage = make_key('Wattage', handle='wattage')
    color = make_key('Color Temperature', handle='color-temperature')
    product = make_product('Flood Light', handle='flood-light',
                           metadata={'variant_attributes': [wattage.pk, color.pk]})
    _attach(product, wattage, '10W', '20W')
    _attach(product, color, '3000K', '5000K')
    return {'product': product, 'wattage': wattage, 'color': color}


@pytest.mark.django_db
class TestVariantGenerator:
    def test_creates_every_combination(self, flood_light):
        product = flood_light['product']

        result = VariantGenerator().run(product.pk, base_price=Decimal('24.99'))

        titles = list(product.variants.order_by('id').values_list('title', flat=True))
        assert titles == ['10W / 3000K', '10W / 5000K', '20W / 3000K', '20W / 5000K']
        assert len(result.created_variant_ids) == 4
        assert result.price_sets_created == 4
        assert set(PriceSet.objects.values_list('amount', flat=True)) == {Decimal('24.99')}
        assert list(product.options.order_by('id').values_list('title', flat=True)) == [
            'Wattage', 'Color Temperature',
        ]

    def test_variants_select_their_values(self, flood_light):
        product = flood_light['product']

        VariantGenerator().run(product.pk)

        variant = product.variants.get(title='20W / 3000K')
        wattage = product.options.get(title='Wattage')
        color = product.options.get(title='Color Temperature')
        assert variant.get_option_selections() == {wattage.pk: '20W', color.pk: '3000K'}
        assert variant.metadata == {'managed_by': MANAGED_BY, 'variation': '20w-3000k'}
        assert variant.price_set.amount == Decimal('0')

    def test_reuses_existing_option(self, flood_light):
        product = flood_light['product']
        existing = make_option(product, 'Wattage', values=['10W'])

        result = VariantGenerator().run(product.pk)

        assert ProductOption.objects.filter(product=product, title='Wattage').get() == existing
        assert [v.value for v in existing.values.order_by('id')] == ['10W', '20W']
        assert len(result.created_option_ids) == 1

    def test_existing_combinations_skipped(self, flood_light):
        product = flood_light['product']
        make_variant(product, title='10W / 3000K', sku='FL-10-30')

        result = VariantGenerator().run(product.pk)

        assert result.existing_titles == ['10W / 3000K']
        assert len(result.created_variant_ids) == 3
        assert product.variants.count() == 4

    def test_second_run_creates_nothing(self, flood_light):
        product = flood_light['product']
        VariantGenerator().run(product.pk)

        result = VariantGenerator().run(product.pk)

        assert result.created_variant_ids == []
        assert product.variants.count() == 4

    def test_dry_run(self, flood_light):
        result = VariantGenerator(dry_run=True).run(flood_light['product'].pk)

        assert result.pending_titles == ['10W / 3000K', '10W / 5000K', '20W / 3000K', '20W / 5000K']
        assert not ProductVariant.objects.exists()
        assert not ProductOption.objects.exists()

    def test_key_needs_two_values(self, flood_light):
        product = flood_light['product']
        product.attribute_values.remove(*product.attribute_values.filter(value='20W'))

        with pytest.raises(ValidationError, match='at least 2 values'):
            VariantGenerator().run(product.pk)

    def test_requires_variant_attributes(self):
        product = make_product()

        with pytest.raises(ValidationError):
            VariantGenerator().run(product.pk)

    def test_too_many_combinations(self):
        keys = [make_key(f'Axis {n}', handle=f'axis-{n}') for n in range(3)]
        product = make_product(metadata={'variant_attributes': [k.pk for k in keys]})
        for key in keys:
            _attach(product, key, *[f'{key.handle}-{i}' for i in range(5)])

        with pytest.raises(ValidationError, match=str(MAX_COMBINATIONS)):
            VariantGenerator().run(product.pk)
        assert not ProductVariant.objects.exists()

    def test_failure_rolls_back_everything(self, flood_light, monkeypatch):
        product = flood_light['product']
        calls = []
        original = VariantGenerator._create_variant

        def fail_on_third(self, *args):
            calls.append(args)
            if len(calls) == 3:
                raise RuntimeError('price service down')
            return original(self, *args)

        monkeypatch.setattr(VariantGenerator, '_create_variant', fail_on_third)

        with pytest.raises(RuntimeError):
            VariantGenerator().run(product.pk)
        assert not ProductVariant.objects.exists()
        assert not ProductOption.objects.exists()
        assert not PriceSet.objects.exists()
