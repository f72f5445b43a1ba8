"""
Movement model — Immutable ledger of stock changes.
"""

from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import MovementKind


class MovementQuerySet(models.QuerySet):

    def for_product(self, product):
        pk = getattr(product, 'pk', product)
        return self.filter(product_id=pk)

    def of_kind(self, kind):
        return self.filter(kind=kind)

    def between(self, since=None, until=None):
        qs = self
        if since is not None:
            qs = qs.filter(timestamp__gte=since)
        if until is not None:
            qs = qs.filter(timestamp__lte=until)
        return qs


class Movement(models.Model):
    """
    Immutable record of one stock movement.

    Rules:
    - NEVER update() or delete()
    - Corrections are new movements (usually an ADJUSTMENT)
    - Created only by the ledger, in the same transaction that
      updates Product._quantity
    """

    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Product'),
    )
    kind = models.CharField(
        max_length=20,
        choices=MovementKind.choices,
        verbose_name=_('Kind'),
    )
    quantity = models.PositiveIntegerField(
        verbose_name=_('Quantity'),
        help_text=_('IN/OUT: units moved. ADJUSTMENT: new absolute balance.'),
    )
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Unit price'),
    )

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Date/Time'))
    performed_by = models.CharField(max_length=150, blank=True, default='', verbose_name=_('Performed by'))
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    reference_number = models.CharField(
        max_length=100,
        blank=True,
        default='',
        verbose_name=_('Reference'),
        help_text=_('Ex: PO-1234, invoice number'),
    )

    objects = MovementQuerySet.as_manager()

    class Meta:
        verbose_name = _('Movement')
        verbose_name_plural = _('Movements')
        ordering = ['id']
        indexes = [
            models.Index(fields=['product', 'id'], name='stockledger_mv_product_idx'),
            models.Index(fields=['kind', 'timestamp'], name='stockledger_mv_kind_ts_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(kind='adjustment') | Q(quantity__gt=0),
                name='stockledger_movement_quantity_positive',
            ),
        ]

    def save(self, *args, **kwargs):
        # Immutability check
        if self.pk:
            raise ValueError(
                "Movements are immutable. "
                "To correct the balance, record an adjustment."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion — movements are immutable."""
        raise ValueError(
            "Movements are immutable. "
            "To reverse one, record a new movement."
        )

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    def apply_to(self, balance: int) -> int:
        """Balance after this movement, given the balance before it."""
        if self.kind == MovementKind.IN:
            return balance + self.quantity
        if self.kind == MovementKind.OUT:
            return balance - self.quantity
        return self.quantity

    def __str__(self) -> str:
        if self.kind == MovementKind.ADJUSTMENT:
            return f"={self.quantity} | {self.product_id}"
        signal = '+' if self.kind == MovementKind.IN else '-'
        return f"{signal}{self.quantity} | {self.product_id}"
