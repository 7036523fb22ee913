from django.db import models
from django.utils.text import slugify

from apps.core.metadata import ATTRIBUTE_KEY_METADATA, ATTRIBUTE_VALUE_METADATA


class AttributeKey(models.Model):
    """
    A named classification axis, independent of any product.
    Examples: Color Temperature, Wattage, Base Type.

    ``options`` holds the allowed values in display order. Some keys are
    open-ended and leave it empty. Once values are in use, options may only be
    appended to.
    """
    handle = models.SlugField(
        max_length=100,
        unique=True,
        verbose_name='Handle'
    )
    label = models.CharField(
        max_length=255,
        verbose_name='Label'
    )
    options = models.JSONField(
        default=list,
        blank=True,
        verbose_name='Allowed values'
    )
    metadata = models.JSONField(
        null=True,
        blank=True,
        verbose_name='Metadata'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']
        verbose_name = 'Attribute Key'
        verbose_name_plural = 'Attribute Keys'

    def __str__(self):
        return self.label

    def save(self, *args, **kwargs):
        if not self.handle:
            self.handle = slugify(self.label)
        self.options = list(self.options or [])
        self.metadata = ATTRIBUTE_KEY_METADATA.normalize(self.metadata)
        super().save(*args, **kwargs)

    @property
    def allowed_values(self):
        return list(self.options or [])


class AttributeValue(models.Model):
    """
    One concrete value registered under an AttributeKey.
    ``(attribute_key, value)`` is unique; the reconciler relies on that
    constraint when two runs register the same value at once.
    """
    attribute_key = models.ForeignKey(
        AttributeKey,
        on_delete=models.CASCADE,
        related_name='values',
        verbose_name='Attribute Key'
    )
    value = models.CharField(
        max_length=255,
        verbose_name='Value'
    )
    metadata = models.JSONField(
        null=True,
        blank=True,
        verbose_name='Metadata'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['attribute_key', 'id']
        unique_together = ['attribute_key', 'value']
        verbose_name = 'Attribute Value'
        verbose_name_plural = 'Attribute Values'

    def __str__(self):
        return f"{self.attribute_key.label}: {self.value}"

    def save(self, *args, **kwargs):
        self.metadata = ATTRIBUTE_VALUE_METADATA.normalize(self.metadata)
        super().save(*args, **kwargs)
