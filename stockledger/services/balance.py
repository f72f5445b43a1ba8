"""
Inventory balance — on-hand quantity per product.

The balance is a projection of the movement ledger. Reads are free; the
mutating methods are meant for StockMovements only and must run inside the
same transaction that appends the movement.
"""

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone

from stockledger.exceptions import InsufficientStock, InvalidQuantity, ProductNotFound
from stockledger.models.movement import Movement
from stockledger.models.product import MAX_QUANTITY, Product

logger = logging.getLogger('stockledger')


# BigAutoField range
MAX_PK = 9223372036854775807


def model_pk(model, value) -> int | None:
    """value (an instance or a raw id) as a primary key of model; None if it cannot be one."""
    try:
        pk = model._meta.pk.to_python(getattr(value, 'pk', value))
    except ValidationError:
        return None
    if pk is None or not -MAX_PK <= pk <= MAX_PK:
        return None
    return pk


def product_pk(product) -> int:
    """
    Accept a Product instance or a primary key.

    Raises:
        ProductNotFound: If the value cannot be a Product primary key
    """
    pk = model_pk(Product, product)
    if pk is None:
        raise ProductNotFound(product=getattr(product, 'pk', product))
    return pk


@dataclass(frozen=True)
class BalanceAudit:
    """Stored balance compared with a replay of the product's movements."""

    product_id: int
    recorded: int
    replayed: int

    @property
    def consistent(self) -> bool:
        return self.recorded == self.replayed

    @property
    def drift(self) -> int:
        return self.recorded - self.replayed


class InventoryBalance:
    """Current quantity per product, and the single atomic mutation path."""

    def __init__(self, using: str = 'default'):
        self.using = using

    def _products(self):
        return Product.objects.using(self.using)

    # ══════════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════════

    def get_quantity(self, product) -> int:
        """
        Current on-hand quantity.

        Raises:
            ProductNotFound: If the product does not exist
        """
        pk = product_pk(product)
        quantity = self._products().filter(pk=pk).values_list('_quantity', flat=True).first()
        if quantity is None:
            raise ProductNotFound(product=pk)
        return quantity

    def replay(self, product) -> int:
        """Net effect of every movement of the product, applied in append order."""
        pk = product_pk(product)
        balance = 0
        movements = (
            Movement.objects.using(self.using)
            .for_product(pk)
            .order_by('id')
            .only('kind', 'quantity')
        )
        for movement in movements.iterator():
            balance = movement.apply_to(balance)
        return balance

    def audit(self, product) -> BalanceAudit:
        """
        Compare the stored balance with a replay of the ledger.

        Read-only: a drift is reported, never corrected here.
        """
        pk = product_pk(product)
        result = BalanceAudit(
            product_id=pk,
            recorded=self.get_quantity(pk),
            replayed=self.replay(pk),
        )
        if not result.consistent:
            logger.warning(
                "balance.audit.drift",
                extra={
                    "product_id": pk,
                    "recorded": result.recorded,
                    "replayed": result.replayed,
                    "drift": result.drift,
                },
            )
        return result

    # ══════════════════════════════════════════════════════════════
    # MUTATIONS (ledger only)
    # ══════════════════════════════════════════════════════════════

    def apply_delta(self, product, delta: int, require_non_negative: bool = True) -> int:
        """
        Add delta to the balance with a single conditional UPDATE.

        The availability check and the write are the same statement, so two
        concurrent stock-outs cannot both pass against a stale balance.

        Returns:
            New quantity

        Raises:
            ProductNotFound: If the product does not exist
            InsufficientStock: If require_non_negative and the result would be < 0
            InvalidQuantity: If the result would not fit the balance column
        """
        pk = product_pk(product)
        qs = self._products().filter(pk=pk)
        if require_non_negative and delta < 0:
            qs = qs.filter(_quantity__gte=-delta)
        elif delta > 0:
            qs = qs.filter(_quantity__lte=MAX_QUANTITY - delta)

        updated = qs.update(_quantity=F('_quantity') + delta, updated_at=timezone.now())

        if not updated:
            available = self.get_quantity(pk)
            if delta > 0:
                raise InvalidQuantity(requested=delta, available=available, maximum=MAX_QUANTITY)
            raise InsufficientStock(available=available, requested=-delta, product=pk)

        return self.get_quantity(pk)

    def set_quantity(self, product, new_quantity: int) -> int:
        """
        Overwrite the balance (physical count correction).

        Raises:
            ProductNotFound: If the product does not exist
        """
        pk = product_pk(product)
        updated = self._products().filter(pk=pk).update(
            _quantity=new_quantity,
            updated_at=timezone.now(),
        )
        if not updated:
            raise ProductNotFound(product=pk)
        return new_quantity
