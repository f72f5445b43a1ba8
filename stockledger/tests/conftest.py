"""
Pytest fixtures for stock ledger tests.
"""

from decimal import Decimal

import pytest

from stockledger.models import Product
from stockledger.service import Ledger, get_ledger
from stockledger.services import AlertEvaluator, InventoryBalance


@pytest.fixture
def product(db):
    """Product with an explicit reorder level of 5."""
    return Product.objects.create(
        code='WIDGET-1',
        name='Widget',
        unit_price=Decimal('2.50'),
        reorder_level=5,
    )


@pytest.fixture
def default_product(db):
    """Product without a reorder level (uses DEFAULT_REORDER_THRESHOLD = 10)."""
    return Product.objects.create(
        code='GADGET-1',
        name='Gadget',
        unit_price=Decimal('4.00'),
    )


@pytest.fixture
def zero_product(db):
    """Product that explicitly alerts only when out of stock."""
    return Product.objects.create(
        code='BOLT-1',
        name='Bolt',
        unit_price=Decimal('0.10'),
        reorder_level=0,
    )


@pytest.fixture
def ledger(db) -> Ledger:
    return get_ledger()


@pytest.fixture
def balance(db) -> InventoryBalance:
    return InventoryBalance()


@pytest.fixture
def evaluator(db) -> AlertEvaluator:
    return AlertEvaluator()
