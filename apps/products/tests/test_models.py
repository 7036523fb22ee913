from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db.models import ProtectedError

from apps.products.models import PriceHistory, ProductOptionValue, VariantOptionSelection
from conftest import make_option, make_product, make_variant, select, sell


@pytest.mark.django_db
class TestProduct:
    def test_handle_defaults_to_slugified_title(self):
        product = make_product('LED PAR30 Light 10W')
        assert product.handle == 'led-par30-light-10w'

    def test_metadata_normalized_on_save(self):
        product = make_product(metadata={'variant_attributes': [3], 'import_batch': 'b7'})
        product.refresh_from_db()
        assert product.metadata == {'variant_attributes': [3], 'extension': {'import_batch': 'b7'}}
        assert product.variant_attribute_ids == [3]

    def test_variant_attribute_ids_empty_without_metadata(self):
        assert make_product().variant_attribute_ids == []

    def test_changes_are_recorded_in_history(self):
        product = make_product()
        product.title = 'Renamed'
        product._change_reason = 'rename'
        product.save()
        assert product.history.count() == 2
        assert product.history.first().history_change_reason == 'rename'


@pytest.mark.django_db
class TestProductVariant:
    def test_blank_sku_stored_as_null(self):
        product = make_product()
        first = make_variant(product, title='A', sku='')
        second = make_variant(product, title='B', sku='')
        assert first.sku is None
        assert second.sku is None

    def test_get_option_selections(self):
        product = make_product()
        option = make_option(product, 'Wattage')
        variant = make_variant(product, title='10W')
        select(variant, option, '10W')
        assert variant.get_option_selections() == {option.pk: '10W'}

    def test_sold_variant_cannot_be_deleted(self):
        product = make_product()
        variant = make_variant(product, title='10W')
        sell(variant)
        with pytest.raises(ProtectedError):
            variant.delete()


@pytest.mark.django_db
class TestVariantOptionSelection:
    def test_option_of_another_product_rejected(self):
        product = make_product('A', handle='a')
        other = make_product('B', handle='b')
        variant = make_variant(product, title='10W')
        foreign = make_option(other, 'Wattage', values=['10W'])

        with pytest.raises(ValidationError):
            VariantOptionSelection.objects.create(
                variant=variant, option=foreign, option_value=foreign.values.get(),
            )

    def test_value_of_another_option_rejected(self):
        product = make_product()
        wattage = make_option(product, 'Wattage', values=['10W'])
        color = make_option(product, 'Color', values=['Red'])
        variant = make_variant(product, title='10W')

        with pytest.raises(ValidationError):
            VariantOptionSelection.objects.create(
                variant=variant, option=wattage, option_value=color.values.get(),
            )

    def test_blank_option_value_rejected(self):
        product = make_product()
        option = make_option(product, 'Wattage')
        with pytest.raises(ValidationError):
            ProductOptionValue(option=option, value='  ').full_clean()


@pytest.mark.django_db
class TestPriceHistory:
    def test_amount_change_creates_history(self):
        product = make_product()
        variant = make_variant(product, title='10W', amount=Decimal('10.00'))
        price_set = variant.price_set

        price_set.amount = Decimal('12.50')
        price_set._price_change_source = 'quickbooks'
        price_set.save()

        history = PriceHistory.objects.get(price_set=price_set)
        assert history.old_amount == Decimal('10.00')
        assert history.new_amount == Decimal('12.50')
        assert history.source == 'quickbooks'
        assert history.price_difference == Decimal('2.50')
        assert history.percentage_change == Decimal('25')

    def test_unchanged_amount_creates_no_history(self):
        product = make_product()
        variant = make_variant(product, title='10W', amount=Decimal('10.00'))
        variant.price_set.save()
        assert not PriceHistory.objects.exists()
