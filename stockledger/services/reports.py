"""
Ledger reports — stock valuation, outflow and movement trends.

Valuation uses Product.unit_price (catalogue price) against the current
balance. Outflow uses the unit_price recorded on each OUT movement.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Count, F, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from stockledger.models.enums import MovementKind
from stockledger.models.movement import Movement
from stockledger.models.product import Product
from stockledger.services.alerts import threshold_expression

CENTS = Decimal('0.01')


@dataclass(frozen=True)
class StockSummary:
    total_products: int
    total_value: Decimal
    low_stock_count: int
    out_of_stock_count: int


@dataclass(frozen=True)
class OutflowSummary:
    total_value: Decimal
    movement_count: int
    average_value: Decimal


@dataclass(frozen=True)
class ProductOutflow:
    """Units and value issued for one product."""

    product_id: int
    code: str
    name: str
    units: int
    revenue: Decimal


@dataclass(frozen=True)
class DailyMovements:
    day: date
    units_in: int = 0
    units_out: int = 0
    movements_in: int = 0
    movements_out: int = 0


class LedgerReports:
    """
    Read-only reports over products and the movement ledger.

    default_threshold must match the AlertEvaluator's so that the low stock
    report and the active alerts agree; Ledger wires both from one value.
    """

    def __init__(self, using: str = 'default', default_threshold: int | None = None):
        self.using = using
        self.default_threshold = default_threshold

    def _products(self):
        return Product.objects.using(self.using).filter(is_active=True)

    def _outflow(self, since=None, until=None):
        return (
            Movement.objects.using(self.using)
            .of_kind(MovementKind.OUT)
            .between(since, until)
        )

    # ══════════════════════════════════════════════════════════════
    # STOCK
    # ══════════════════════════════════════════════════════════════

    def stock_value(self) -> Decimal:
        """Sum of unit_price * quantity over active products."""
        total = Decimal('0')
        for unit_price, quantity in self._products().values_list('unit_price', '_quantity'):
            total += unit_price * quantity
        return total.quantize(CENTS)

    def low_stock_products(self, threshold: int | None = None):
        """
        Active products at or below their reorder threshold.

        Args:
            threshold: Use this for every product instead of each one's
                effective threshold.
        """
        qs = self._products()
        if threshold is not None:
            return qs.filter(_quantity__lte=threshold)
        return (
            qs.alias(threshold=threshold_expression(self.default_threshold))
            .filter(_quantity__lte=F('threshold'))
        )

    def stock_summary(self) -> StockSummary:
        products = self._products()
        return StockSummary(
            total_products=products.count(),
            total_value=self.stock_value(),
            low_stock_count=self.low_stock_products().count(),
            out_of_stock_count=products.filter(_quantity=0).count(),
        )

    # ══════════════════════════════════════════════════════════════
    # OUTFLOW
    # ══════════════════════════════════════════════════════════════

    def outflow_summary(self, since=None, until=None) -> OutflowSummary:
        """Value of stock issued between since and until (inclusive)."""
        total = Decimal('0')
        count = 0
        for quantity, unit_price in self._outflow(since, until).values_list('quantity', 'unit_price'):
            total += unit_price * quantity
            count += 1

        average = (total / count).quantize(CENTS) if count else Decimal('0.00')
        return OutflowSummary(
            total_value=total.quantize(CENTS),
            movement_count=count,
            average_value=average,
        )

    def top_outflow_products(self, limit: int = 10, since=None, until=None) -> list[ProductOutflow]:
        """
        Products with the most units issued, highest first.

        Ties are broken by product id, oldest first.
        """
        totals: dict[int, tuple[int, Decimal]] = {}
        movements = self._outflow(since, until).values_list('product_id', 'quantity', 'unit_price')
        for product_id, quantity, unit_price in movements:
            units, revenue = totals.get(product_id, (0, Decimal('0')))
            totals[product_id] = (units + quantity, revenue + unit_price * quantity)

        ranked = sorted(totals.items(), key=lambda item: (-item[1][0], item[0]))[:limit]
        products = Product.objects.using(self.using).in_bulk([pk for pk, _ in ranked])

        return [
            ProductOutflow(
                product_id=pk,
                code=products[pk].code,
                name=products[pk].name,
                units=units,
                revenue=revenue.quantize(CENTS),
            )
            for pk, (units, revenue) in ranked
        ]

    def inventory_turnover(self, since=None, until=None) -> Decimal:
        """
        Outflow value divided by the average stock value per active product.

        0.00 when there is no stock value to turn over.
        """
        cost_of_goods = self.outflow_summary(since, until).total_value
        product_count = self._products().count()
        if not product_count:
            return Decimal('0.00')

        average_value = self.stock_value() / product_count
        if average_value <= 0:
            return Decimal('0.00')
        return (cost_of_goods / average_value).quantize(CENTS)

    # ══════════════════════════════════════════════════════════════
    # TRENDS
    # ══════════════════════════════════════════════════════════════

    def movement_trends(self, since=None, until=None) -> list[DailyMovements]:
        """
        Units and movement counts in and out per day, oldest day first.

        With both bounds given every day in the range is listed, including
        days without movements. Adjustments are not counted.
        """
        rows = (
            Movement.objects.using(self.using)
            .between(since, until)
            .filter(kind__in=[MovementKind.IN, MovementKind.OUT])
            .annotate(day=TruncDate('timestamp'))
            .values('day', 'kind')
            .annotate(units=Sum('quantity'), movements=Count('id'))
            .order_by('day', 'kind')
        )

        days: dict[date, dict] = {}
        if since is not None and until is not None:
            day = timezone.localtime(since).date()
            last = timezone.localtime(until).date()
            while day <= last:
                days[day] = {}
                day += timedelta(days=1)

        for row in rows:
            values = days.setdefault(row['day'], {})
            if row['kind'] == MovementKind.IN:
                values.update(units_in=row['units'], movements_in=row['movements'])
            else:
                values.update(units_out=row['units'], movements_out=row['movements'])

        return [DailyMovements(day=day, **values) for day, values in sorted(days.items())]
