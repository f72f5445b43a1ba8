"""
Product model — what is stocked, and its on-hand balance.
"""

from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

# Upper bound of IntegerField / PositiveIntegerField on every supported backend
MAX_QUANTITY = 2147483647


class Product(models.Model):
    """
    A stocked product.

    The on-hand balance lives in _quantity. It is a projection of the
    movement ledger and is written only by InventoryBalance, on behalf of
    the Ledger. Read it through `quantity`.
    """

    code = models.CharField(
        unique=True,
        max_length=50,
        verbose_name=_('Code'),
    )
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Unit price'),
        help_text=_('Catalogue price, used for stock valuation'),
    )

    # Balance (updated atomically by the ledger)
    _quantity = models.IntegerField(default=0, verbose_name=_('Quantity on hand'))

    reorder_level = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name=_('Reorder level'),
        help_text=_('Empty = configured default. 0 = alert only when out of stock.'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        ordering = ['code']
        constraints = [
            models.CheckConstraint(
                condition=Q(_quantity__gte=0),
                name='stockledger_product_quantity_non_negative',
            ),
        ]

    @property
    def quantity(self) -> int:
        """On-hand quantity as last loaded from the database."""
        return self._quantity

    @property
    def effective_threshold(self) -> int:
        """Threshold with the configured default (see services.alerts.effective_threshold)."""
        from stockledger.services.alerts import effective_threshold
        return effective_threshold(self.reorder_level)

    @property
    def stock_value(self) -> Decimal:
        return self.unit_price * self._quantity

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"
