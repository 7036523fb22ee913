import pytest

from apps.product_attributes.models import AttributeValue
from apps.products.models import Product, ProductVariant, VariantOptionSelection
from apps.reconciliation.services import ALL_PRODUCTS, ReconciliationRunner
from apps.reconciliation.services.attribute_catalog import RECONCILER_PROVENANCE
from conftest import make_key, make_option, make_product, make_variant


@pytest.mark.django_db
class TestReconciliationRunner:
    def test_color_options_scenario(self):
        key = make_key('Color Options', options=['5000K', '3000K'])
        p1 = make_product('P1', handle='p1')
        option = make_option(p1, 'Color Options')
        v1 = make_variant(p1, title='5000K')

        summary = ReconciliationRunner().run([p1.pk])

        v1.refresh_from_db()
        p1.refresh_from_db()
        assert v1.get_option_selections() == {option.pk: '5000K'}
        assert key.pk in p1.variant_attribute_ids
        assert summary.healed_count == 1
        assert summary.products_updated == 1
        assert summary.error_count == 0

    def test_sku_backfill(self, led_strip):
        ReconciliationRunner().run([led_strip['product'].pk])

        led_strip['warm'].refresh_from_db()
        led_strip['cool'].refresh_from_db()
        assert led_strip['warm'].sku == 'led-strip-3000k'
        assert led_strip['cool'].sku == 'led-strip-5000k'

    def test_healed_values_registered_and_linked(self, led_strip, color_temperature):
        ReconciliationRunner().run(ALL_PRODUCTS)

        values = AttributeValue.objects.filter(attribute_key=color_temperature).order_by('value')
        assert [v.value for v in values] == ['3000K', '5000K']
        assert all(v.metadata == {'created_by': RECONCILER_PROVENANCE} for v in values)
        assert set(led_strip['product'].attribute_values.all()) == set(values)

    def test_second_run_heals_nothing(self, led_strip):
        runner = ReconciliationRunner()
        first = runner.run(ALL_PRODUCTS)
        second = runner.run(ALL_PRODUCTS)

        assert first.healed_count == 2
        assert second.healed_count == 0
        assert second.products_updated == 0
        assert second.skipped_count == 2
        assert VariantOptionSelection.objects.count() == 2

    def test_no_matching_option(self):
        make_key('Wattage', options=['10W'])
        product = make_product()
        make_option(product, 'Beam Angle')
        make_variant(product, title='10W')

        summary = ReconciliationRunner().run(ALL_PRODUCTS)

        assert summary.healed_count == 0
        assert summary.error_count == 0
        assert not VariantOptionSelection.objects.exists()

    def test_dry_run_writes_nothing(self, led_strip):
        summary = ReconciliationRunner(dry_run=True).run(ALL_PRODUCTS)

        assert summary.healed_count == 2
        assert len(summary.plans) == 1
        assert not VariantOptionSelection.objects.exists()
        assert not AttributeValue.objects.exists()
        led_strip['product'].refresh_from_db()
        assert led_strip['product'].metadata is None

    def test_unknown_product_recorded(self, led_strip):
        summary = ReconciliationRunner().run([999, led_strip['product'].pk])

        assert summary.error_count == 1
        assert summary.errors[0]['id'] == 999
        assert summary.healed_count == 2

    def test_sku_conflict_still_heals_variant(self, led_strip):
        other = make_product('Other', handle='other')
        make_variant(other, title='Taken', sku='led-strip-3000k')

        summary = ReconciliationRunner().run([led_strip['product'].pk])

        assert summary.error_count == 0
        assert summary.healed_count == 2
        assert summary.sku_skipped_count == 1
        warm = ProductVariant.objects.get(pk=led_strip['warm'].pk)
        assert warm.get_option_selections() == {led_strip['option'].pk: '3000K'}
        assert warm.sku is None
        assert ProductVariant.objects.get(pk=led_strip['cool'].pk).sku == 'led-strip-5000k'

    def test_shared_title_heals_every_variant(self, led_strip):
        twin = make_variant(led_strip['product'], title='3000K')
        runner = ReconciliationRunner()

        runs = [runner.run([led_strip['product'].pk]) for _ in range(3)]

        assert [s.error_count for s in runs] == [0, 0, 0]
        assert [s.healed_count for s in runs] == [3, 0, 0]
        twin.refresh_from_db()
        led_strip['warm'].refresh_from_db()
        assert twin.get_option_selections() == {led_strip['option'].pk: '3000K'}
        assert led_strip['warm'].sku == 'led-strip-3000k'
        assert twin.sku is None

    def test_long_handle_sku_fits_column(self, color_temperature):
        product = make_product('Long', handle='a' * 95)
        make_option(product, 'Color Temperature')
        variant = make_variant(product, title='3000K')

        summary = ReconciliationRunner().run([product.pk])

        variant.refresh_from_db()
        max_length = ProductVariant._meta.get_field('sku').max_length
        assert summary.error_count == 0
        assert len(variant.sku) <= max_length
        assert variant.sku.endswith('-3000k')

    def test_invalid_variant_metadata_does_not_stop_batch(self, led_strip):
        legacy = make_product('Legacy', handle='legacy')
        make_option(legacy, 'Color Temperature')
        broken = make_variant(legacy, title='4000K')
        ProductVariant.objects.filter(pk=broken.pk).update(metadata={'wc_id': 'not-an-int'})

        summary = ReconciliationRunner().run([legacy.pk, led_strip['product'].pk])

        assert summary.error_count == 1
        assert summary.errors[0]['id'] == broken.pk
        assert 'wc_id' in summary.errors[0]['error']
        assert summary.healed_count == 2
        assert not broken.option_selections.exists()
        assert led_strip['warm'].option_selections.count() == 1

    def test_invalid_product_metadata_rolls_back_product(self, led_strip):
        Product.objects.filter(pk=led_strip['product'].pk).update(metadata={'wc_id': 'not-an-int'})
        healthy = make_product('Healthy', handle='healthy')
        make_option(healthy, 'Color Temperature')
        variant = make_variant(healthy, title='4000K')

        summary = ReconciliationRunner().run(ALL_PRODUCTS)

        assert summary.error_count == 1
        assert summary.errors[0]['entity'] == 'product'
        assert summary.errors[0]['id'] == led_strip['product'].pk
        assert summary.healed_count == 1
        assert not led_strip['warm'].option_selections.exists()
        assert variant.option_selections.count() == 1
