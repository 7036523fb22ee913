from django.db import models


class OrderLineItem(models.Model):
    """
    Historical order line. Only its link to a variant matters here: a variant
    with at least one line item has sales history and must not be deleted.
    """
    order_id = models.CharField(
        max_length=100,
        db_index=True,
        verbose_name='Order'
    )
    variant = models.ForeignKey(
        'products.ProductVariant',
        on_delete=models.PROTECT,
        related_name='line_items',
        verbose_name='Variant'
    )
    title = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Title'
    )
    quantity = models.PositiveIntegerField(
        default=1,
        verbose_name='Quantity'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Order Line Item'
        verbose_name_plural = 'Order Line Items'

    def __str__(self):
        return f"{self.order_id} - {self.title or self.variant_id} x{self.quantity}"
