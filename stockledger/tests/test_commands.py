"""
Tests for the audit_stock command and the admin actions.
"""

from io import StringIO

import pytest
from django.contrib import admin
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import RequestFactory

from stockledger.admin import LowStockAlertAdmin
from stockledger.models import AlertStatus, LowStockAlert, Movement, Product


pytestmark = pytest.mark.django_db


def run_audit(*args):
    out = StringIO()
    call_command('audit_stock', *args, stdout=out)
    return out.getvalue()


class TestAuditStockCommand:

    def test_all_consistent(self, ledger, product, default_product):
        ledger.record_in(product, 10)
        ledger.record_out(product, 3)
        ledger.record_adjustment(default_product, 8)

        output = run_audit()

        assert '2 product(s) consistent' in output

    def test_drift_is_reported(self, ledger, product, default_product):
        ledger.record_in(product, 10)
        Product.objects.filter(pk=product.pk).update(_quantity=7)

        output = run_audit()

        assert 'WIDGET-1: recorded 7, ledger 10 (drift -3)' in output
        assert '1 of 2 product(s) drifted' in output
        # Read-only: nothing was corrected
        assert Product.objects.get(pk=product.pk).quantity == 7

    def test_fail_on_mismatch(self, ledger, product):
        ledger.record_in(product, 10)
        Product.objects.filter(pk=product.pk).update(_quantity=11)

        with pytest.raises(CommandError, match='1 of 1 product'):
            run_audit('--fail-on-mismatch')

    def test_single_product(self, ledger, product, default_product):
        Product.objects.filter(pk=default_product.pk).update(_quantity=3)

        output = run_audit('--product', 'WIDGET-1', '--fail-on-mismatch')

        assert '1 product(s) consistent' in output

    def test_unknown_product(self, db):
        with pytest.raises(CommandError, match='not found'):
            run_audit('--product', 'NOPE')


class TestAdmin:

    def test_models_registered(self):
        assert admin.site.is_registered(Product)
        assert admin.site.is_registered(Movement)
        assert admin.site.is_registered(LowStockAlert)

    def test_movement_admin_is_read_only(self):
        model_admin = admin.site._registry[Movement]
        request = RequestFactory().get('/')

        assert not model_admin.has_add_permission(request)
        assert not model_admin.has_change_permission(request)
        assert not model_admin.has_delete_permission(request)

    @pytest.fixture
    def alert_admin(self, monkeypatch):
        model_admin = LowStockAlertAdmin(LowStockAlert, admin.site)
        messages = []
        monkeypatch.setattr(
            model_admin, 'message_user',
            lambda request, message, *args, **kwargs: messages.append(str(message)),
        )
        model_admin.sent_messages = messages
        return model_admin

    @pytest.fixture
    def admin_request(self):
        request = RequestFactory().post('/')
        request.user = get_user_model().objects.create_user('alice')
        return request

    def test_acknowledge_action(self, ledger, product, alert_admin, admin_request):
        ledger.record_in(product, 2)

        alert_admin.acknowledge_alerts(admin_request, LowStockAlert.objects.all())

        alert = LowStockAlert.objects.get()
        assert alert.status == AlertStatus.ACKNOWLEDGED
        assert alert.acknowledged_by == 'alice'
        assert alert_admin.sent_messages == ['1 alert(s) acknowledged.']

    def test_resolve_action(self, ledger, product, default_product, alert_admin, admin_request):
        ledger.record_in(product, 2)
        ledger.record_in(default_product, 2)

        alert_admin.resolve_alerts(admin_request, LowStockAlert.objects.all())

        assert LowStockAlert.objects.active().count() == 0
        assert alert_admin.sent_messages == ['2 alert(s) resolved.']
