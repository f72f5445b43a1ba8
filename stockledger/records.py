"""
Immutable value records handed out by the public Ledger API.

Callers never receive live model instances, so nothing they hold can be
saved back over the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class MovementRecord:
    """One committed stock movement."""

    id: int
    product_id: int
    kind: str
    quantity: int
    unit_price: Decimal
    timestamp: datetime
    performed_by: str
    notes: str = ''
    reference_number: str = ''

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def from_model(cls, movement) -> MovementRecord:
        return cls(
            id=movement.pk,
            product_id=movement.product_id,
            kind=str(movement.kind),
            quantity=movement.quantity,
            unit_price=movement.unit_price,
            timestamp=movement.timestamp,
            performed_by=movement.performed_by,
            notes=movement.notes,
            reference_number=movement.reference_number,
        )


@dataclass(frozen=True)
class AlertState:
    """Snapshot of a low stock alert."""

    id: int
    product_id: int
    current_stock: int
    threshold_used: int
    status: str
    raised_at: datetime
    evaluated_at: datetime
    resolved_at: datetime | None = None
    acknowledged_by: str | None = None
    acknowledged_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.resolved_at is None

    @classmethod
    def from_model(cls, alert) -> AlertState:
        return cls(
            id=alert.pk,
            product_id=alert.product_id,
            current_stock=alert.current_stock,
            threshold_used=alert.threshold_used,
            status=str(alert.status),
            raised_at=alert.raised_at,
            evaluated_at=alert.evaluated_at,
            resolved_at=alert.resolved_at,
            acknowledged_by=alert.acknowledged_by,
            acknowledged_at=alert.acknowledged_at,
        )
