from django.core.exceptions import ValidationError
from django.db import models
from django.utils.text import slugify
from simple_history.models import HistoricalRecords

from apps.core.metadata import PRODUCT_METADATA


class Product(models.Model):
    """
    The sellable entity. Its variation axes are ProductOptions and its
    purchasable SKUs are ProductVariants.

    ``metadata.variant_attributes`` caches the ids of the AttributeKeys that
    drive this product's variant structure.
    """
    title = models.CharField(
        max_length=255,
        verbose_name='Title'
    )
    handle = models.SlugField(
        max_length=255,
        unique=True,
        verbose_name='Handle'
    )
    metadata = models.JSONField(
        null=True,
        blank=True,
        verbose_name='Metadata'
    )
    attribute_values = models.ManyToManyField(
        'product_attributes.AttributeValue',
        blank=True,
        related_name='products',
        verbose_name='Attribute values'
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
        ordering = ['id']
        verbose_name = 'Product'
        verbose_name_plural = 'Products'

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.handle:
            self.handle = slugify(self.title)
        self.metadata = PRODUCT_METADATA.normalize(self.metadata)
        super().save(*args, **kwargs)

    @property
    def variant_count(self):
        return self.variants.count()

    @property
    def variant_attribute_ids(self):
        """AttributeKey ids currently driving this product's variants."""
        return list((self.metadata or {}).get('variant_attributes') or [])


class ProductOption(models.Model):
    """
    A variation axis scoped to one product.
    Example: "Color Options" on one specific LED bulb.
    """
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='options',
        verbose_name='Product'
    )
    title = models.CharField(
        max_length=255,
        verbose_name='Title'
    )

    class Meta:
        ordering = ['id']
        unique_together = ['product', 'title']
        verbose_name = 'Product Option'
        verbose_name_plural = 'Product Options'

    def __str__(self):
        return f"{self.title} [{self.product.title}]"


class ProductOptionValue(models.Model):
    """A value permitted on one option of one product."""
    option = models.ForeignKey(
        ProductOption,
        on_delete=models.CASCADE,
        related_name='values',
        verbose_name='Option'
    )
    value = models.CharField(
        max_length=255,
        verbose_name='Value'
    )

    class Meta:
        ordering = ['id']
        unique_together = ['option', 'value']
        verbose_name = 'Option Value'
        verbose_name_plural = 'Option Values'

    def __str__(self):
        return f"{self.option.title}: {self.value}"

    def clean(self):
        if not self.value or not self.value.strip():
            raise ValidationError({'value': 'Option values cannot be blank.'})
