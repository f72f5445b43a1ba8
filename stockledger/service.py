"""
Ledger Service — The single public interface for stock ledger operations.

Usage:
    from stockledger.service import get_ledger

    ledger = get_ledger()
    ledger.record_in(product, 20, unit_price='2.50', actor='alice')
    result = ledger.record_out(product, 25, actor='bob')
    if not result.ok:
        print(result.error.message)   # Insufficient stock: only 20 available
    ledger.get_quantity(product).unwrap()   # 20

Every caller-facing operation returns a Result (Ok/Err) instead of raising.
"""

import logging
import time

from django.db import DatabaseError, OperationalError

from stockledger.conf import ledger_settings
from stockledger.exceptions import PersistenceFailure
from stockledger.records import AlertState, MovementRecord
from stockledger.results import returns_result
from stockledger.services.alerts import AlertEvaluator
from stockledger.services.balance import InventoryBalance
from stockledger.services.movements import StockMovements
from stockledger.services.queries import LedgerQueries
from stockledger.services.reports import LedgerReports

logger = logging.getLogger('stockledger')


class Ledger:
    """
    Stock ledger facade.

    Collaborators are injected; anything not passed is built for the
    given database alias.

    IMPORTANT: record_* are the only way to change a product's balance.
    Each one commits the balance update and the movement together, then
    re-evaluates the product's low stock alert. Alerting is best effort:
    a failure there is logged and the movement stays committed.
    """

    def __init__(self, balance: InventoryBalance | None = None,
                 alerts: AlertEvaluator | None = None,
                 using: str = 'default',
                 max_retries: int | None = None,
                 retry_delay: float | None = None):
        self.using = using
        self.balance = balance or InventoryBalance(using=using)
        self.alerts = alerts or AlertEvaluator(using=using)
        self.movements = StockMovements(balance=self.balance, using=using)
        self.queries = LedgerQueries(using=using)
        self.reports = LedgerReports(using=using, default_threshold=self.alerts.default_threshold)
        self.max_retries = ledger_settings.MAX_RETRIES if max_retries is None else max_retries
        self.retry_delay = ledger_settings.RETRY_DELAY if retry_delay is None else retry_delay

    # ══════════════════════════════════════════════════════════════
    # CORE: MOVEMENTS
    # ══════════════════════════════════════════════════════════════

    @returns_result
    def record_in(self, product, quantity, unit_price=0, notes='', actor='',
                  reference='') -> MovementRecord:
        """
        Stock entry: balance += quantity.

        Errors: ProductNotFound, InvalidQuantity, InvalidPrice, PersistenceFailure
        """
        movement = self._write('record_in', lambda: self.movements.receive(
            product, quantity, unit_price=unit_price, notes=notes,
            actor=actor, reference=reference,
        ))
        self._reevaluate(movement.product_id)
        return MovementRecord.from_model(movement)

    @returns_result
    def record_out(self, product, quantity, unit_price=0, notes='', actor='',
                   reference='') -> MovementRecord:
        """
        Stock exit: balance -= quantity, never below zero.

        Errors: ProductNotFound, InvalidQuantity, InvalidPrice,
        InsufficientStock (error.available holds the current balance),
        PersistenceFailure
        """
        movement = self._write('record_out', lambda: self.movements.issue(
            product, quantity, unit_price=unit_price, notes=notes,
            actor=actor, reference=reference,
        ), retry=True)
        self._reevaluate(movement.product_id)
        return MovementRecord.from_model(movement)

    @returns_result
    def record_adjustment(self, product, new_quantity, notes='', actor='',
                          reference='') -> MovementRecord:
        """
        Physical count: balance = new_quantity.

        Errors: ProductNotFound, InvalidQuantity, PersistenceFailure
        """
        movement = self._write('record_adjustment', lambda: self.movements.adjust(
            product, new_quantity, notes=notes, actor=actor, reference=reference,
        ))
        self._reevaluate(movement.product_id)
        return MovementRecord.from_model(movement)

    # ══════════════════════════════════════════════════════════════
    # CORE: QUERIES
    # ══════════════════════════════════════════════════════════════

    @returns_result
    def get_quantity(self, product) -> int:
        return self.balance.get_quantity(product)

    @returns_result
    def get_movement(self, movement_id: int) -> MovementRecord:
        return MovementRecord.from_model(self.queries.get_movement(movement_id))

    def history(self, product, limit: int | None = None) -> list[MovementRecord]:
        """Movements of a product, newest first."""
        return [
            MovementRecord.from_model(m)
            for m in self.queries.movements(product=product, limit=limit)
        ]

    @returns_result
    def audit(self, product):
        return self.balance.audit(product)

    # ══════════════════════════════════════════════════════════════
    # CORE: ALERTS
    # ══════════════════════════════════════════════════════════════

    @returns_result
    def acknowledge(self, alert_id: int, actor: str) -> AlertState:
        return AlertState.from_model(self.alerts.acknowledge(alert_id, actor))

    @returns_result
    def resolve(self, alert_id: int) -> AlertState:
        return AlertState.from_model(self.alerts.resolve(alert_id))

    def list_active_alerts(self) -> list[AlertState]:
        return [AlertState.from_model(a) for a in self.alerts.list_active()]

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    def _write(self, operation: str, func, retry: bool = False):
        """
        Run one transactional write.

        With retry, transient database errors repeat the whole operation up
        to max_retries more times. Only the stock-out uses it: a failed attempt
        of its conditional UPDATE has rolled back completely. Anything else
        surfaces the first error as PersistenceFailure.
        """
        attempts = self.max_retries + 1 if retry else 1
        for attempt in range(1, attempts + 1):
            try:
                return func()
            except OperationalError as exc:
                if attempt == attempts:
                    logger.error(
                        "ledger.write.failed",
                        extra={"operation": operation, "attempts": attempt, "error": str(exc)},
                    )
                    raise PersistenceFailure(operation=operation, attempts=attempt) from exc
                logger.warning(
                    "ledger.write.retry",
                    extra={"operation": operation, "attempt": attempt, "error": str(exc)},
                )
                time.sleep(self.retry_delay * attempt)
            except DatabaseError as exc:
                logger.error(
                    "ledger.write.failed",
                    extra={"operation": operation, "attempts": attempt, "error": str(exc)},
                )
                raise PersistenceFailure(operation=operation, attempts=attempt) from exc

    def _reevaluate(self, product) -> None:
        try:
            self.alerts.reevaluate(product)
        except Exception:
            logger.exception(
                "ledger.alert.failed",
                extra={"product_id": getattr(product, "pk", product)},
            )


def get_ledger(using: str | None = None) -> Ledger:
    """Build a Ledger from settings."""
    using = using or ledger_settings.DATABASE
    return Ledger(
        alerts=AlertEvaluator(
            using=using,
            default_threshold=ledger_settings.DEFAULT_REORDER_THRESHOLD,
        ),
        using=using,
    )
