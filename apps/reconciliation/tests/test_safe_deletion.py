from decimal import Decimal
from unittest import mock

import pytest

from apps.products.models import PriceSet, ProductOption, ProductVariant, VariantOptionSelection
from apps.reconciliation.exceptions import NotFoundError
from apps.reconciliation.services import SafeOptionDeletion
from apps.reconciliation.services.safe_deletion import ABORT_IF_PROTECTED, COMPLETED
from conftest import make_option, make_product, make_variant, select, sell


@pytest.fixture
def wattage_option(db):
    product = make_product('Flood Light', handle='flood-light')
    option = make_option(product, 'Wattage')
    variants = []
    for title in ['10W', '20W', '30W']:
        variant = make_variant(product, title=title, amount=Decimal('9.99'))
        select(variant, option, title)
        variants.append(variant)
    sell(variants[1])
    return option, variants


@pytest.mark.django_db
class TestSafeOptionDeletion:
    def test_sold_variant_protected(self, wattage_option):
        option, (v10, v20, v30) = wattage_option

        result = SafeOptionDeletion().run(option.pk)

        assert result.state == COMPLETED
        assert result.success
        assert sorted(result.deleted_variant_ids) == sorted([v10.pk, v30.pk])
        assert result.protected_variant_ids == [v20.pk]
        assert result.protected[0].order_count == 1
        assert result.option_deleted
        assert list(ProductVariant.objects.values_list('pk', flat=True)) == [v20.pk]
        assert not ProductOption.objects.filter(pk=option.pk).exists()
        assert not VariantOptionSelection.objects.exists()

    def test_price_sets_deleted_with_their_variants(self, wattage_option):
        option, (v10, v20, v30) = wattage_option

        SafeOptionDeletion().run(option.pk)

        assert list(PriceSet.objects.values_list('pk', flat=True)) == [v20.price_set_id]

    def test_abort_if_protected_keeps_everything(self, wattage_option):
        option, variants = wattage_option

        result = SafeOptionDeletion(abort_if_protected=True).run(option.pk)

        assert result.state == ABORT_IF_PROTECTED
        assert not result.success
        assert result.deleted_variant_ids == []
        assert ProductVariant.objects.count() == 3
        assert ProductOption.objects.filter(pk=option.pk).exists()

    def test_option_without_variants(self):
        product = make_product()
        option = make_option(product, 'Color')

        result = SafeOptionDeletion().run(option.pk)

        assert result.success
        assert result.variant_ids == []
        assert not ProductOption.objects.filter(pk=option.pk).exists()

    def test_unknown_option(self):
        with pytest.raises(NotFoundError):
            SafeOptionDeletion().run(999)

    def test_failed_option_delete_restores_variants(self, wattage_option):
        option, variants = wattage_option
        workflow = SafeOptionDeletion()

        with mock.patch.object(ProductOption, 'delete', side_effect=RuntimeError('boom')):
            with pytest.raises(RuntimeError):
                workflow.run(option.pk)

        assert ProductVariant.objects.count() == 3
        assert VariantOptionSelection.objects.count() == 3
        assert ProductOption.objects.filter(pk=option.pk).exists()
