"""
Ledger queries — read-only operations over the movement log.
"""

from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from stockledger.exceptions import MovementNotFound
from stockledger.models.enums import MovementKind
from stockledger.models.movement import Movement
from stockledger.services.balance import model_pk, product_pk


class LedgerQueries:
    """Read-only movement query methods."""

    def __init__(self, using: str = 'default'):
        self.using = using

    def _movements(self):
        return Movement.objects.using(self.using)

    def get_movement(self, movement_id: int) -> Movement:
        try:
            return self._movements().get(pk=model_pk(Movement, movement_id))
        except Movement.DoesNotExist:
            raise MovementNotFound(movement_id=movement_id)

    def movements(self, product=None, kind: str | None = None,
                  since=None, until=None, limit: int | None = None):
        """
        Movements with filters, newest first.

        Args:
            product: Product or pk (None = all)
            kind: MovementKind value (None = all)
            since/until: Inclusive timestamp bounds
            limit: Max rows (None = no limit)
        """
        qs = self._movements().between(since, until)

        if product is not None:
            qs = qs.for_product(product_pk(product))

        if kind is not None:
            qs = qs.of_kind(kind)

        qs = qs.order_by('-id')
        if limit is not None:
            qs = qs[:limit]
        return qs

    def recent(self, limit: int = 20):
        return self.movements(limit=limit)

    def _total(self, product, kind) -> int:
        return self._movements().for_product(product).of_kind(kind).aggregate(
            t=Coalesce(Sum('quantity'), 0)
        )['t']

    def total_in(self, product) -> int:
        """Units ever received for the product."""
        return self._total(product, MovementKind.IN)

    def total_out(self, product) -> int:
        """Units ever issued for the product."""
        return self._total(product, MovementKind.OUT)

    def count_today(self) -> int:
        """Movements recorded since local midnight."""
        return self._movements().filter(timestamp__date=timezone.localdate()).count()
