from django.core.exceptions import ValidationError
from django.db import models
from simple_history.models import HistoricalRecords

from apps.core.metadata import VARIANT_METADATA


class ProductVariant(models.Model):
    """
    One purchasable SKU of a product.
    Each variant selects at most one value per product option.
    """
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.CASCADE,
        related_name='variants',
        verbose_name='Product'
    )
    title = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Title'
    )
    # NULL when absent so several variants may lack a SKU
    sku = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True,
        verbose_name='SKU'
    )
    metadata = models.JSONField(
        null=True,
        blank=True,
        verbose_name='Metadata'
    )
    price_set = models.OneToOneField(
        'products.PriceSet',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='variant',
        verbose_name='Price set'
    )
    option_values = models.ManyToManyField(
        'products.ProductOptionValue',
        through='VariantOptionSelection',
        related_name='variants',
        verbose_name='Option values'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated at'
    )

    history = HistoricalRecords()

    class Meta:
        ordering = ['product', 'id']
        verbose_name = 'Variant'
        verbose_name_plural = 'Variants'

    def __str__(self):
        return self.title or self.sku or f'Variant {self.pk}'

    def save(self, *args, **kwargs):
        if not self.sku:
            self.sku = None
        self.metadata = VARIANT_METADATA.normalize(self.metadata)
        super().save(*args, **kwargs)

    def get_option_selections(self):
        """Return dict of {option_id: value}."""
        return {
            selection.option_id: selection.option_value.value
            for selection in self.option_selections.all()
        }


class VariantOptionSelection(models.Model):
    """
    Through model linking a variant to the value it selects on one option.
    Ensures each variant has only one value per option, and that option and
    value both belong to the variant's product.
    """
    variant = models.ForeignKey(
        ProductVariant,
        on_delete=models.CASCADE,
        related_name='option_selections',
        verbose_name='Variant'
    )
    option = models.ForeignKey(
        'products.ProductOption',
        on_delete=models.CASCADE,
        related_name='selections',
        verbose_name='Option'
    )
    option_value = models.ForeignKey(
        'products.ProductOptionValue',
        on_delete=models.CASCADE,
        related_name='selections',
        verbose_name='Option value'
    )

    class Meta:
        ordering = ['option_id']
        unique_together = ['variant', 'option']
        verbose_name = 'Variant Option Selection'
        verbose_name_plural = 'Variant Option Selections'

    def __str__(self):
        return f"{self.variant} - {self.option.title}: {self.option_value.value}"

    def clean(self):
        if self.option.product_id != self.variant.product_id:
            raise ValidationError(
                f'Option {self.option_id} belongs to product {self.option.product_id}, '
                f'not to product {self.variant.product_id} of variant {self.variant_id}.'
            )
        if self.option_value.option_id != self.option_id:
            raise ValidationError(
                f'Value {self.option_value_id} does not belong to option {self.option_id}.'
            )

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)
