"""
Ledger services — modular organization of stock ledger operations.

    from stockledger.services import InventoryBalance, StockMovements, AlertEvaluator
"""

from stockledger.services.alerts import AlertEvaluator
from stockledger.services.balance import InventoryBalance
from stockledger.services.movements import StockMovements
from stockledger.services.queries import LedgerQueries
from stockledger.services.reports import LedgerReports

__all__ = [
    'InventoryBalance',
    'StockMovements',
    'AlertEvaluator',
    'LedgerQueries',
    'LedgerReports',
]
