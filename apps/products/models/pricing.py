from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class PriceSet(models.Model):
    """Price record owned 1:1 by a variant."""
    currency_code = models.CharField(
        max_length=3,
        default='usd',
        verbose_name='Currency'
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name='Amount'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated at'
    )

    class Meta:
        ordering = ['id']
        verbose_name = 'Price Set'
        verbose_name_plural = 'Price Sets'

    def __str__(self):
        if self.amount is None:
            return f"{self.currency_code.upper()} (no price)"
        return f"{self.currency_code.upper()} {self.amount:.2f}"


class PriceHistory(models.Model):
    """
    Track price changes for audit purposes.
    Automatically created when a price set's amount changes.
    """
    price_set = models.ForeignKey(
        PriceSet,
        on_delete=models.CASCADE,
        related_name='history',
        verbose_name='Price set'
    )
    old_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name='Previous amount'
    )
    new_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name='New amount'
    )
    source = models.CharField(
        max_length=50,
        blank=True,
        verbose_name='Source',
        help_text='What changed the price (e.g. "quickbooks")'
    )
    changed_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Changed at'
    )

    class Meta:
        ordering = ['-changed_at', '-id']
        verbose_name = 'Price History'
        verbose_name_plural = 'Price History'

    def __str__(self):
        return f"{self.price_set} - {self.old_amount} → {self.new_amount}"

    @property
    def price_difference(self):
        if self.old_amount is None or self.new_amount is None:
            return None
        return self.new_amount - self.old_amount

    @property
    def percentage_change(self):
        if self.old_amount is None or self.old_amount == 0:
            return None
        diff = self.price_difference
        if diff is None:
            return None
        return (diff / self.old_amount) * 100
