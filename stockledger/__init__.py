"""
Django Stock Ledger — stock movements, balances and low stock alerts.

Usage:
    from stockledger import get_ledger

    ledger = get_ledger()
    ledger.record_in(product, 20, unit_price='2.50', actor='alice')
    ledger.record_out(product, 5, actor='bob')
    ledger.get_quantity(product).unwrap()  # 15
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'Ledger':
        from stockledger.service import Ledger
        return Ledger
    elif name == 'get_ledger':
        from stockledger.service import get_ledger
        return get_ledger
    elif name == 'LedgerError':
        from stockledger.exceptions import LedgerError
        return LedgerError
    elif name == 'Product':
        from stockledger.models.product import Product
        return Product
    elif name == 'Movement':
        from stockledger.models.movement import Movement
        return Movement
    elif name == 'LowStockAlert':
        from stockledger.models.alert import LowStockAlert
        return LowStockAlert
    elif name == 'MovementKind':
        from stockledger.models.enums import MovementKind
        return MovementKind
    elif name == 'AlertStatus':
        from stockledger.models.enums import AlertStatus
        return AlertStatus
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'Ledger',
    'get_ledger',
    'LedgerError',
    'Product',
    'Movement',
    'LowStockAlert',
    'MovementKind',
    'AlertStatus',
]

__version__ = '0.1.0'
