"""
Stock movements — state-changing operations (receive, issue, adjust).

Each method updates the balance and appends the Movement inside one
transaction.atomic() block: both commit or neither does.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction

from stockledger.exceptions import InsufficientStock, InvalidPrice, InvalidQuantity, ProductNotFound
from stockledger.models.enums import MovementKind
from stockledger.models.movement import Movement
from stockledger.models.product import MAX_QUANTITY, Product
from stockledger.services.balance import InventoryBalance, product_pk

logger = logging.getLogger('stockledger')

CENTS = Decimal('0.01')

# Largest value Movement.unit_price (12 digits, 2 decimal places) can hold
MAX_PRICE = Decimal('9999999999.99')


def _to_quantity(value, allow_zero: bool = False) -> int:
    if isinstance(value, bool) or value is None:
        raise InvalidQuantity(requested=value)
    try:
        quantity = int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidQuantity(requested=value)
    if quantity != value:
        # fractional units
        raise InvalidQuantity(requested=value)
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise InvalidQuantity(requested=value)
    if quantity > MAX_QUANTITY:
        raise InvalidQuantity(requested=value, maximum=MAX_QUANTITY)
    return quantity


def _to_price(value) -> Decimal:
    try:
        price = Decimal(str(value if value is not None else 0))
        if not price.is_finite() or price < 0:
            raise InvalidPrice(unit_price=value)
        price = price.quantize(CENTS)
    except InvalidOperation:
        # too many digits to quantize
        raise InvalidPrice(unit_price=value)
    if price > MAX_PRICE:
        raise InvalidPrice(unit_price=value, maximum=MAX_PRICE)
    return price


class StockMovements:
    """State-changing stock movement methods."""

    def __init__(self, balance: InventoryBalance | None = None, using: str = 'default'):
        self.using = using
        self.balance = balance or InventoryBalance(using=using)

    def _append(self, pk, kind, quantity, unit_price, notes, actor, reference) -> Movement:
        return Movement.objects.using(self.using).create(
            product_id=pk,
            kind=kind,
            quantity=quantity,
            unit_price=unit_price,
            notes=notes or '',
            performed_by=actor or '',
            reference_number=reference or '',
        )

    def receive(self, product, quantity, unit_price=0, notes='', actor='',
                reference='') -> Movement:
        """
        Stock entry.

        Raises:
            InvalidQuantity: If quantity <= 0
            InvalidPrice: If unit_price < 0
            ProductNotFound: If the product doesn't exist
        """
        quantity = _to_quantity(quantity)
        price = _to_price(unit_price)
        pk = product_pk(product)

        with transaction.atomic(using=self.using):
            new_quantity = self.balance.apply_delta(pk, quantity)
            movement = self._append(pk, MovementKind.IN, quantity, price, notes, actor, reference)

        logger.info(
            "stock.receive",
            extra={
                "product_id": pk,
                "qty": quantity,
                "balance": new_quantity,
                "movement_id": movement.pk,
                "actor": actor,
            },
        )
        return movement

    def issue(self, product, quantity, unit_price=0, notes='', actor='',
              reference='') -> Movement:
        """
        Stock exit.

        Raises:
            InvalidQuantity: If quantity <= 0
            InvalidPrice: If unit_price < 0
            ProductNotFound: If the product doesn't exist
            InsufficientStock: If quantity > current balance

        Concurrency:
            - Runs under transaction.atomic()
            - Balance check and decrement are one conditional UPDATE
        """
        quantity = _to_quantity(quantity)
        price = _to_price(unit_price)
        pk = product_pk(product)

        try:
            with transaction.atomic(using=self.using):
                new_quantity = self.balance.apply_delta(pk, -quantity, require_non_negative=True)
                movement = self._append(pk, MovementKind.OUT, quantity, price, notes, actor, reference)
        except InsufficientStock as exc:
            logger.warning(
                "stock.issue.rejected",
                extra={"product_id": pk, "qty": quantity, "available": exc.available, "actor": actor},
            )
            raise

        logger.info(
            "stock.issue",
            extra={
                "product_id": pk,
                "qty": quantity,
                "balance": new_quantity,
                "movement_id": movement.pk,
                "actor": actor,
            },
        )
        return movement

    def adjust(self, product, new_quantity, notes='', actor='', reference='',
               unit_price=0) -> Movement:
        """
        Inventory adjustment (physical count).

        Sets the balance to new_quantity and records an ADJUSTMENT carrying the
        new absolute value. A count that matches the balance is still recorded.

        Raises:
            InvalidQuantity: If new_quantity < 0
            ProductNotFound: If the product doesn't exist
        """
        new_quantity = _to_quantity(new_quantity, allow_zero=True)
        price = _to_price(unit_price)
        pk = product_pk(product)

        with transaction.atomic(using=self.using):
            try:
                locked = (
                    Product.objects.using(self.using)
                    .select_for_update()
                    .only('pk', '_quantity')
                    .get(pk=pk)
                )
            except Product.DoesNotExist:
                raise ProductNotFound(product=pk)

            previous = locked.quantity
            self.balance.set_quantity(pk, new_quantity)
            movement = self._append(pk, MovementKind.ADJUSTMENT, new_quantity, price, notes, actor, reference)

        logger.info(
            "stock.adjust",
            extra={
                "product_id": pk,
                "previous": previous,
                "balance": new_quantity,
                "delta": new_quantity - previous,
                "movement_id": movement.pk,
                "actor": actor,
            },
        )
        return movement
