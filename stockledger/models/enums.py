"""
Enums for stock ledger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MovementKind(models.TextChoices):
    """
    Kind of stock movement.

    IN:         Goods received. quantity is added to the balance.
    OUT:        Goods issued. quantity is subtracted from the balance.
    ADJUSTMENT: Physical count correction. quantity is the new absolute
                balance, not a delta.
    """
    IN = 'in', _('Stock in')
    OUT = 'out', _('Stock out')
    ADJUSTMENT = 'adjustment', _('Adjustment')


class AlertStatus(models.TextChoices):
    """Low stock alert lifecycle status."""
    PENDING = 'pending', _('Pending')               # Raised, nobody has looked yet
    ACKNOWLEDGED = 'acknowledged', _('Acknowledged')  # Seen, still below threshold
    RESOLVED = 'resolved', _('Resolved')            # Stock recovered or dismissed


ACTIVE_ALERT_STATUSES = (AlertStatus.PENDING, AlertStatus.ACKNOWLEDGED)
