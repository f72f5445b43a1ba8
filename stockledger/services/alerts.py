"""
Low stock alerts — derive alert state from the balance after each movement.

Usage:
    from stockledger.services.alerts import AlertEvaluator, transition

    evaluator = AlertEvaluator()
    evaluator.reevaluate(product)      # after a ledger write
    evaluator.acknowledge(alert_id, 'alice')
    evaluator.list_active()

transition() is the whole state machine and has no side effects:

    no active alert + quantity <= threshold  -> RAISE   (new PENDING alert)
    active alert    + quantity <= threshold  -> REFRESH (snapshot updated in place)
    active alert    + quantity >  threshold  -> RESOLVE
    anything else                            -> NONE
"""

import enum
import logging

from django.db import transaction
from django.db.models import Count, F, IntegerField, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from stockledger.conf import ledger_settings
from stockledger.exceptions import AlertNotFound, InvalidState, ProductNotFound
from stockledger.models.alert import LowStockAlert
from stockledger.models.enums import ACTIVE_ALERT_STATUSES, AlertStatus
from stockledger.models.product import Product
from stockledger.services.balance import model_pk, product_pk

logger = logging.getLogger('stockledger')


class AlertAction(str, enum.Enum):
    RAISE = 'raise'
    REFRESH = 'refresh'
    RESOLVE = 'resolve'
    NONE = 'none'


def default_threshold(default: int | None = None) -> int:
    """Threshold for products without a reorder_level."""
    if default is not None:
        return default
    return ledger_settings.DEFAULT_REORDER_THRESHOLD


def effective_threshold(reorder_level: int | None, default: int | None = None) -> int:
    """
    Reorder threshold used for alerting.

    None means the product never set one: the configured default applies.
    An explicit 0 is kept, so the product alerts only when it runs out.
    """
    if reorder_level is not None:
        return reorder_level
    return default_threshold(default)


def threshold_expression(default: int | None = None):
    """effective_threshold() as a database expression over Product rows."""
    return Coalesce(
        F('reorder_level'),
        Value(default_threshold(default)),
        output_field=IntegerField(),
    )


def transition(status: str | None, quantity: int, threshold: int) -> AlertAction:
    """Next alert action for a product given its current alert status (None = no alert)."""
    active = status in ACTIVE_ALERT_STATUSES
    if quantity <= threshold:
        return AlertAction.REFRESH if active else AlertAction.RAISE
    if active:
        return AlertAction.RESOLVE
    return AlertAction.NONE


class AlertEvaluator:
    """Applies transition() to persisted alerts, plus manual acknowledge/resolve."""

    def __init__(self, using: str = 'default', default_threshold: int | None = None,
                 clock=timezone.now):
        self.using = using
        self.default_threshold = default_threshold
        self.clock = clock

    def _alerts(self):
        return LowStockAlert.objects.using(self.using)

    def threshold_for(self, product: Product) -> int:
        return effective_threshold(product.reorder_level, self.default_threshold)

    def reevaluate(self, product) -> LowStockAlert | None:
        """
        Re-derive the product's alert from its committed balance.

        The product row is locked so two evaluations of the same product
        cannot both raise an alert.

        Returns:
            The alert that was raised, refreshed or resolved; None if nothing changed.
        """
        pk = product_pk(product)

        with transaction.atomic(using=self.using):
            try:
                locked = Product.objects.using(self.using).select_for_update().get(pk=pk)
            except Product.DoesNotExist:
                raise ProductNotFound(product=pk)

            alert = self._alerts().active().for_product(pk).select_for_update().first()
            threshold = self.threshold_for(locked)
            quantity = locked.quantity
            action = transition(alert.status if alert else None, quantity, threshold)
            now = self.clock()

            if action == AlertAction.RAISE:
                alert = self._alerts().create(
                    product_id=pk,
                    current_stock=quantity,
                    threshold_used=threshold,
                    status=AlertStatus.PENDING,
                    raised_at=now,
                    evaluated_at=now,
                )
                logger.info(
                    "ledger.alert.raised",
                    extra={"alert_id": alert.pk, "product_id": pk,
                           "current_stock": quantity, "threshold": threshold},
                )
            elif action == AlertAction.REFRESH:
                alert.current_stock = quantity
                alert.threshold_used = threshold
                alert.evaluated_at = now
                alert.save(update_fields=['current_stock', 'threshold_used', 'evaluated_at'])
            elif action == AlertAction.RESOLVE:
                alert.current_stock = quantity
                alert.status = AlertStatus.RESOLVED
                alert.resolved_at = now
                alert.evaluated_at = now
                alert.save(update_fields=['current_stock', 'status', 'resolved_at', 'evaluated_at'])
                logger.info(
                    "ledger.alert.resolved",
                    extra={"alert_id": alert.pk, "product_id": pk, "current_stock": quantity},
                )

            return alert

    def acknowledge(self, alert_id: int, actor: str) -> LowStockAlert:
        """
        Acknowledge a pending alert.

        Transition: PENDING → ACKNOWLEDGED

        Raises:
            AlertNotFound: If the alert doesn't exist
            InvalidState: If status is not PENDING
        """
        with transaction.atomic(using=self.using):
            try:
                alert = self._alerts().select_for_update().get(pk=model_pk(LowStockAlert, alert_id))
            except LowStockAlert.DoesNotExist:
                raise AlertNotFound(alert_id=alert_id)

            if alert.status != AlertStatus.PENDING:
                raise InvalidState(
                    current=alert.status,
                    expected=AlertStatus.PENDING,
                    alert_id=alert_id,
                )

            alert.status = AlertStatus.ACKNOWLEDGED
            alert.acknowledged_by = actor
            alert.acknowledged_at = self.clock()
            alert.save(update_fields=['status', 'acknowledged_by', 'acknowledged_at'])

        logger.info("ledger.alert.acknowledged", extra={"alert_id": alert_id, "actor": actor})
        return alert

    def resolve(self, alert_id: int) -> LowStockAlert:
        """
        Dismiss an alert regardless of stock level.

        Transition: PENDING|ACKNOWLEDGED → RESOLVED. Resolving a resolved
        alert returns it unchanged.

        Raises:
            AlertNotFound: If the alert doesn't exist
        """
        with transaction.atomic(using=self.using):
            try:
                alert = self._alerts().select_for_update().get(pk=model_pk(LowStockAlert, alert_id))
            except LowStockAlert.DoesNotExist:
                raise AlertNotFound(alert_id=alert_id)

            if alert.status == AlertStatus.RESOLVED:
                return alert

            alert.status = AlertStatus.RESOLVED
            alert.resolved_at = self.clock()
            alert.save(update_fields=['status', 'resolved_at'])

        logger.info("ledger.alert.dismissed", extra={"alert_id": alert_id})
        return alert

    def list_active(self) -> list[LowStockAlert]:
        """Pending and acknowledged alerts, newest first."""
        return list(self._alerts().active().select_related('product'))

    def count_by_status(self) -> dict[str, int]:
        counts = dict.fromkeys(AlertStatus.values, 0)
        rows = self._alerts().order_by().values('status').annotate(n=Count('id'))
        for row in rows:
            counts[row['status']] = row['n']
        return counts
