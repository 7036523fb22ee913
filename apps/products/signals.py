"""
Django signals for the products app.
Handles price history records and warnings about managed option deletion.
"""

import logging

from django.db.models.signals import pre_save, pre_delete
from django.dispatch import receiver

from .models import PriceSet, PriceHistory, ProductOption

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=PriceSet)
def track_price_changes(sender, instance, **kwargs):
    """
    Create PriceHistory records when a price set's amount changes.
    Callers may set ``instance._price_change_source`` to tag the change.
    """
    if not instance.pk:
        # New price set, no history to track
        return

    try:
        old_instance = PriceSet.objects.get(pk=instance.pk)
    except PriceSet.DoesNotExist:
        return

    if old_instance.amount != instance.amount:
        PriceHistory.objects.create(
            price_set=instance,
            old_amount=old_instance.amount,
            new_amount=instance.amount,
            source=getattr(instance, '_price_change_source', ''),
        )


@receiver(pre_delete, sender=ProductOption)
def warn_on_managed_option_delete(sender, instance, **kwargs):
    """
    Log a warning when an option driven by an attribute key is deleted.
    This never blocks the deletion.
    """
    from apps.product_attributes.models import AttributeKey

    key_ids = instance.product.variant_attribute_ids
    if not key_ids:
        return

    managed_labels = set(
        AttributeKey.objects.filter(id__in=key_ids).values_list('label', flat=True)
    )
    if instance.title in managed_labels:
        logger.warning(
            "Managed option '%s' (id=%s) of product %s is being deleted; "
            "its variants will lose their selection for it",
            instance.title, instance.pk, instance.product_id,
        )
