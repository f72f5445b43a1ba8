"""
Management command to audit balances against the movement ledger.

Usage:
    python manage.py audit_stock
    python manage.py audit_stock --product WIDGET-1
    python manage.py audit_stock --fail-on-mismatch

Read-only: drifts are reported, never corrected.
"""

from django.core.management.base import BaseCommand, CommandError

from stockledger.models import Product
from stockledger.services.balance import InventoryBalance


class Command(BaseCommand):
    """Audit stock balances command."""

    help = 'Replays the movement ledger and compares it with stored balances'

    def add_arguments(self, parser):
        parser.add_argument(
            '--product',
            help='Audit only the product with this code'
        )
        parser.add_argument(
            '--database',
            default='default',
            help='Database alias'
        )
        parser.add_argument(
            '--fail-on-mismatch',
            action='store_true',
            help='Exit with an error if any balance drifted'
        )

    def handle(self, *args, **options):
        using = options['database']
        balance = InventoryBalance(using=using)

        products = Product.objects.using(using).order_by('code')
        if options['product']:
            products = products.filter(code=options['product'])
            if not products.exists():
                raise CommandError(f"Product {options['product']!r} not found")

        checked = 0
        drifted = []
        for product in products:
            result = balance.audit(product.pk)
            checked += 1
            if not result.consistent:
                drifted.append(product.code)
                self.stdout.write(self.style.WARNING(
                    f'{product.code}: recorded {result.recorded}, '
                    f'ledger {result.replayed} (drift {result.drift:+d})'
                ))

        if drifted:
            message = f'{len(drifted)} of {checked} product(s) drifted'
            if options['fail_on_mismatch']:
                raise CommandError(message)
            self.stdout.write(self.style.ERROR(message))
        else:
            self.stdout.write(
                self.style.SUCCESS(f'{checked} product(s) consistent')
            )
