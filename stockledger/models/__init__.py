"""
Stock ledger models.

Core models:
- Product: What is stocked, with its on-hand balance
- Movement: Immutable ledger of changes
- LowStockAlert: Alert cycle for a product at or below its reorder level
"""

from stockledger.models.alert import LowStockAlert
from stockledger.models.enums import ACTIVE_ALERT_STATUSES, AlertStatus, MovementKind
from stockledger.models.movement import Movement
from stockledger.models.product import Product

__all__ = [
    'MovementKind',
    'AlertStatus',
    'ACTIVE_ALERT_STATUSES',
    'Product',
    'Movement',
    'LowStockAlert',
]
