"""
LowStockAlert model — one alert cycle for a product below its reorder level.

Alerts are derived state: the AlertEvaluator creates, refreshes and resolves
them after every ledger write.

    PENDING ──acknowledge()──► ACKNOWLEDGED
       │                            │
       └──── stock recovers ────────┴──► RESOLVED
             or resolve()

A new breach after RESOLVED starts a fresh alert (new row).
"""

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import ACTIVE_ALERT_STATUSES, AlertStatus


class LowStockAlertQuerySet(models.QuerySet):

    def active(self):
        """Pending or acknowledged alerts."""
        return self.filter(status__in=ACTIVE_ALERT_STATUSES)

    def pending(self):
        return self.filter(status=AlertStatus.PENDING)

    def for_product(self, product):
        pk = getattr(product, 'pk', product)
        return self.filter(product_id=pk)


class LowStockAlert(models.Model):
    """
    Low stock alert for a product.

    At most one non-resolved alert exists per product at any time.
    """

    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.CASCADE,
        related_name='alerts',
        verbose_name=_('Product'),
    )

    # Snapshot at last evaluation
    current_stock = models.IntegerField(verbose_name=_('Current stock'))
    threshold_used = models.PositiveIntegerField(verbose_name=_('Threshold'))

    status = models.CharField(
        max_length=20,
        choices=AlertStatus.choices,
        default=AlertStatus.PENDING,
        db_index=True,
        verbose_name=_('Status'),
    )

    raised_at = models.DateTimeField(default=timezone.now, verbose_name=_('Raised at'))
    evaluated_at = models.DateTimeField(default=timezone.now, verbose_name=_('Last evaluated'))
    resolved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Resolved at'))

    acknowledged_by = models.CharField(max_length=150, null=True, blank=True, verbose_name=_('Acknowledged by'))
    acknowledged_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Acknowledged at'))

    objects = LowStockAlertQuerySet.as_manager()

    class Meta:
        verbose_name = _('Low stock alert')
        verbose_name_plural = _('Low stock alerts')
        ordering = ['-raised_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['product'],
                condition=~Q(status='resolved'),
                name='stockledger_one_active_alert_per_product',
            ),
        ]

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_ALERT_STATUSES

    def __str__(self) -> str:
        return f"Alert #{self.pk}: product {self.product_id} at {self.current_stock} <= {self.threshold_used} [{self.status}]"
