from decimal import Decimal
from unittest import mock

import pytest

from apps.products.models import PriceHistory, PriceSet
from apps.reconciliation.services.price_sync import PRICE_SOURCE, QuickBooksPriceSync
from conftest import make_product, make_variant


@pytest.fixture
def linked_variants(db):
    product = make_product('Flood Light', handle='flood-light')
    return {
        'changed': make_variant(product, title='10W', sku='FL-10', amount=Decimal('10.00'),
                                metadata={'quickbooks_id': 'QB-10'}),
        'same': make_variant(product, title='20W', sku='FL-20', amount=Decimal('20.00'),
                             metadata={'quickbooks_id': 'QB-20'}),
        'missing': make_variant(product, title='30W', sku='FL-30', amount=Decimal('30.00'),
                                metadata={'quickbooks_id': 'QB-30'}),
        'no_price_set': make_variant(product, title='40W', sku='FL-40',
                                     metadata={'quickbooks_id': 'QB-40'}),
        'unlinked': make_variant(product, title='50W', sku='FL-50', amount=Decimal('50.00')),
    }


QB_ITEMS = [
    {'ListID': 'QB-10', 'SalesPrice': '12.5'},
    {'ListID': 'QB-20', 'SalesPrice': 20},
    {'ListID': 'QB-40', 'SalesPrice': '40.00'},
]


def _client(items):
    client = mock.Mock()
    client.fetch_products.return_value = items
    return client


@pytest.mark.django_db
class TestQuickBooksPriceSync:
    def test_updates_changed_prices(self, linked_variants):
        summary = QuickBooksPriceSync(_client(QB_ITEMS)).run()

        assert summary.linked_variants == 4
        assert summary.updated == 1
        assert summary.unchanged == 1
        assert summary.missing_in_qb == 1
        assert summary.no_price == 1
        price_set = PriceSet.objects.get(pk=linked_variants['changed'].price_set_id)
        assert price_set.amount == Decimal('12.50')
        history = PriceHistory.objects.get()
        assert history.source == PRICE_SOURCE
        assert history.old_amount == Decimal('10.00')

    def test_dry_run(self, linked_variants):
        summary = QuickBooksPriceSync(_client(QB_ITEMS), dry_run=True).run()

        assert summary.updated == 1
        assert PriceSet.objects.get(pk=linked_variants['changed'].price_set_id).amount == Decimal('10.00')
        assert not PriceHistory.objects.exists()

    def test_invalid_price_skipped(self, linked_variants):
        items = [{'ListID': 'QB-10', 'SalesPrice': 'call for price'}]

        summary = QuickBooksPriceSync(_client(items)).run()

        assert summary.updated == 0
        assert summary.no_price == 1
        assert summary.missing_in_qb == 3

    def test_no_linked_variants_skips_bridge(self, db):
        client = _client([])

        summary = QuickBooksPriceSync(client).run()

        assert summary.linked_variants == 0
        client.fetch_products.assert_not_called()
