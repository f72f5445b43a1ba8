"""
Concurrency tests: parallel writers against the same balance.

These need real commits visible across connections, so they use
transactional databases and one connection per thread.
"""

import random
import threading

import pytest
from django.db import connections

from stockledger.models import LowStockAlert, Movement, MovementKind
from stockledger.service import get_ledger


pytestmark = pytest.mark.django_db(transaction=True)


def run_in_threads(func, args_list):
    """Run func(*args) in one thread per entry, released together."""
    barrier = threading.Barrier(len(args_list))
    results = [None] * len(args_list)

    def worker(index, args):
        try:
            barrier.wait()
            results[index] = func(*args)
        finally:
            connections.close_all()

    threads = [
        threading.Thread(target=worker, args=(i, args))
        for i, args in enumerate(args_list)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results


class TestConcurrentIssues:

    def test_parallel_issues_never_oversell(self, product):
        ledger = get_ledger()
        ledger.record_in(product, 20).unwrap()

        results = run_in_threads(
            lambda: get_ledger().record_out(product.pk, 3),
            [()] * 10,
        )

        accepted = [r for r in results if r.ok]
        rejected = [r for r in results if not r.ok]
        assert len(accepted) == 6
        assert len(rejected) == 4
        assert all(r.code == 'INSUFFICIENT_STOCK' for r in rejected)

        assert ledger.get_quantity(product).unwrap() == 2
        assert Movement.objects.filter(kind=MovementKind.OUT).count() == 6
        assert ledger.audit(product).unwrap().consistent
        assert LowStockAlert.objects.active().for_product(product).count() == 1

    def test_parallel_writes_on_distinct_products(self, product, default_product):
        ledger = get_ledger()
        ledger.record_in(product, 50).unwrap()
        ledger.record_in(default_product, 50).unwrap()

        args = [(product.pk,)] * 5 + [(default_product.pk,)] * 5
        results = run_in_threads(lambda pk: get_ledger().record_out(pk, 4), args)

        assert all(r.ok for r in results)
        assert ledger.get_quantity(product).unwrap() == 30
        assert ledger.get_quantity(default_product).unwrap() == 30


class TestConcurrentMixedOperations:

    def test_balance_matches_replay(self, product):
        ledger = get_ledger()
        ledger.record_in(product, 10).unwrap()

        rng = random.Random(7)
        args = []
        for _ in range(16):
            kind = rng.choice(['in', 'out'])
            args.append((kind, rng.randint(1, 6)))

        def apply(kind, quantity):
            thread_ledger = get_ledger()
            if kind == 'in':
                return thread_ledger.record_in(product.pk, quantity)
            return thread_ledger.record_out(product.pk, quantity)

        results = run_in_threads(apply, args)

        assert all(r.code in (None, 'INSUFFICIENT_STOCK') for r in results)

        audit = ledger.audit(product).unwrap()
        assert audit.consistent
        assert audit.recorded >= 0
        assert Movement.objects.for_product(product).count() == 1 + sum(r.ok for r in results)
        assert LowStockAlert.objects.active().for_product(product).count() <= 1
