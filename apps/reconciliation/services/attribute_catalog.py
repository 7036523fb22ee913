"""
Read access to the attribute catalog, plus on-demand registration of values
the reconciler finds in use.
"""

import logging
from typing import List

from django.db import IntegrityError, transaction

from apps.product_attributes.models import AttributeKey, AttributeValue
from apps.reconciliation.exceptions import NotFoundError

logger = logging.getLogger(__name__)

RECONCILER_PROVENANCE = 'reconciler'


class AttributeCatalog:
    """Catalog of AttributeKeys and their registered AttributeValues."""

    def _queryset(self):
        return AttributeKey.objects.prefetch_related('values').order_by('id')

    def get_attribute_key(self, key_id) -> AttributeKey:
        try:
            return self._queryset().get(pk=key_id)
        except AttributeKey.DoesNotExist:
            raise NotFoundError('attribute_key', key_id)

    def list_attribute_keys(self) -> List[AttributeKey]:
        """All keys in catalog order (ascending id)."""
        return list(self._queryset())

    @staticmethod
    def permitted_values(attribute_key: AttributeKey) -> List[str]:
        """
        Allowed values of the key followed by its registered values,
        without duplicates. Order is preserved.
        """
        seen = set()
        values = []
        for value in attribute_key.allowed_values + [v.value for v in attribute_key.values.all()]:
            if value not in seen:
                seen.add(value)
                values.append(value)
        return values

    def ensure_attribute_value(self, key_id, value: str) -> AttributeValue:
        """
        Return the AttributeValue for ``(key_id, value)``, creating it if needed.

        Safe under concurrent calls: the unique constraint on
        ``(attribute_key, value)`` rejects the second insert, which is then
        treated as "already exists".
        """
        existing = AttributeValue.objects.filter(attribute_key_id=key_id, value=value).first()
        if existing:
            return existing

        if not AttributeKey.objects.filter(pk=key_id).exists():
            raise NotFoundError('attribute_key', key_id)

        try:
            with transaction.atomic():
                created = AttributeValue.objects.create(
                    attribute_key_id=key_id,
                    value=value,
                    metadata={'created_by': RECONCILER_PROVENANCE},
                )
        except IntegrityError:
            logger.debug("Attribute value %r for key %s created concurrently", value, key_id)
            return AttributeValue.objects.get(attribute_key_id=key_id, value=value)

        logger.info("Registered attribute value %r for key %s", value, key_id)
        return created
