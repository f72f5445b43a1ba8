"""
Exceptions for the stock ledger.

Every failure is a LedgerError subclass with a structured code for
programmatic handling and a default human-readable message.
"""

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """
    Structured exception for ledger operations.

    Usage:
        try:
            balance.apply_delta(product, -10)
        except InsufficientStock as e:
            print(f"Only {e.available} available")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    code = 'LEDGER_ERROR'

    _default_messages = {
        'LEDGER_ERROR': 'Stock ledger error',
        'PRODUCT_NOT_FOUND': 'Product not found',
        'INVALID_QUANTITY': 'Invalid quantity',
        'INVALID_PRICE': 'Unit price must not be negative',
        'INSUFFICIENT_STOCK': 'Insufficient stock',
        'ALERT_NOT_FOUND': 'Alert not found',
        'INVALID_STATE': 'Invalid state for this operation',
        'MOVEMENT_NOT_FOUND': 'Movement not found',
        'PERSISTENCE_FAILURE': 'The change could not be saved, try again',
    }

    def __init__(self, message: str | None = None, **data):
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.data:
            return f"[{self.code}] {self.message}"
        context = ', '.join(f"{k}={v}" for k, v in self.data.items())
        return f"[{self.code}] {self.message} ({context})"

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class ProductNotFound(LedgerError):
    code = 'PRODUCT_NOT_FOUND'


class InvalidQuantity(LedgerError):
    code = 'INVALID_QUANTITY'

    @property
    def requested(self):
        return self.data.get('requested')


class InvalidPrice(LedgerError):
    code = 'INVALID_PRICE'


class InsufficientStock(LedgerError):
    """Stock-out would drive the balance negative."""

    code = 'INSUFFICIENT_STOCK'

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)

    def __init__(self, message: str | None = None, **data):
        if message is None and 'available' in data:
            message = f"Insufficient stock: only {data['available']} available"
        super().__init__(message, **data)


class AlertNotFound(LedgerError):
    code = 'ALERT_NOT_FOUND'


class InvalidState(LedgerError):
    code = 'INVALID_STATE'


class MovementNotFound(LedgerError):
    code = 'MOVEMENT_NOT_FOUND'


class PersistenceFailure(LedgerError):
    """Nothing was committed; the whole operation is safe to retry."""

    code = 'PERSISTENCE_FAILURE'
