import pytest

from apps.reconciliation.services import AttributeCatalog, ProductStore, match_options
from conftest import make_key, make_option, make_product


@pytest.mark.django_db
class TestMatchOptions:
    def _match(self, product):
        product = ProductStore().get_product(product.pk)
        return match_options(product, AttributeCatalog().list_attribute_keys())

    def test_label_match_is_case_insensitive(self):
        key = make_key('Color Temperature', handle='cct')
        product = make_product()
        option = make_option(product, 'color temperature')

        assert self._match(product) == [(option, key)]

    def test_handle_match(self):
        key = make_key('Color Temperature', handle='cct')
        product = make_product()
        option = make_option(product, 'CCT')

        assert self._match(product) == [(option, key)]

    def test_unmatched_option_left_out(self):
        make_key('Wattage')
        product = make_product()
        make_option(product, 'Beam Angle')

        assert self._match(product) == []

    def test_handle_match_beats_label_match(self):
        by_label = make_key('Finish', handle='surface')
        by_handle = make_key('Surface Finish', handle='finish')
        product = make_product()
        option = make_option(product, 'Finish')

        assert self._match(product) == [(option, by_handle)]
        assert by_label.pk < by_handle.pk

    def test_first_key_in_catalog_order_wins_a_tie(self):
        first = make_key('Color', handle='color-1')
        make_key('Color', handle='color-2')
        product = make_product()
        option = make_option(product, 'Color')

        assert self._match(product) == [(option, first)]
