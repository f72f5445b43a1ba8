"""
Stock ledger admin.

Provides read-only views for production debugging:
- Product: editable catalogue fields, balance read-only
- Movement: read-only audit trail
- LowStockAlert: read-only with "acknowledge" and "resolve" actions

Stock only changes through the Ledger service.
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockledger.exceptions import LedgerError
from stockledger.models import AlertStatus, LowStockAlert, Movement, Product
from stockledger.services.alerts import AlertEvaluator

logger = logging.getLogger(__name__)


# =========================================================================
# PRODUCT ADMIN
# =========================================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Product admin — balance is read-only."""

    list_display = ['code', 'name', 'unit_price', 'quantity_display',
                    'reorder_level', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name']
    readonly_fields = ['_quantity', 'created_at', 'updated_at']

    @admin.display(description=_('Quantity'))
    def quantity_display(self, obj):
        return obj.quantity


# =========================================================================
# MOVEMENT ADMIN (read-only audit trail)
# =========================================================================

@admin.register(Movement)
class MovementAdmin(admin.ModelAdmin):
    """Movement admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'product', 'kind', 'quantity', 'unit_price',
                    'performed_by', 'reference_number']
    list_filter = ['kind', 'timestamp']
    search_fields = ['notes', 'reference_number', 'performed_by']
    readonly_fields = ['product', 'kind', 'quantity', 'unit_price', 'timestamp',
                       'performed_by', 'notes', 'reference_number']
    date_hierarchy = 'timestamp'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# LOW STOCK ALERT ADMIN (read-only with actions)
# =========================================================================

@admin.register(LowStockAlert)
class LowStockAlertAdmin(admin.ModelAdmin):
    """LowStockAlert admin — state changes go through the evaluator."""

    list_display = ['id', 'product', 'current_stock', 'threshold_used', 'status',
                    'raised_at', 'acknowledged_by', 'resolved_at']
    list_filter = ['status']
    search_fields = ['product__code', 'product__name']
    readonly_fields = ['product', 'current_stock', 'threshold_used', 'status',
                       'raised_at', 'evaluated_at', 'resolved_at',
                       'acknowledged_by', 'acknowledged_at']
    actions = ['acknowledge_alerts', 'resolve_alerts']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description=_('Acknowledge selected alerts'))
    def acknowledge_alerts(self, request, queryset):
        evaluator = AlertEvaluator(using=queryset.db)
        actor = request.user.get_username()

        count = 0
        for alert in queryset.filter(status=AlertStatus.PENDING):
            try:
                evaluator.acknowledge(alert.pk, actor)
                count += 1
            except LedgerError as exc:
                logger.warning("acknowledge_alerts: failed for alert %s: %s", alert.pk, exc)

        self.message_user(request, _('{count} alert(s) acknowledged.').format(count=count))

    @admin.action(description=_('Resolve selected alerts'))
    def resolve_alerts(self, request, queryset):
        evaluator = AlertEvaluator(using=queryset.db)

        count = 0
        for alert in queryset.active():
            try:
                evaluator.resolve(alert.pk)
                count += 1
            except LedgerError as exc:
                logger.warning("resolve_alerts: failed for alert %s: %s", alert.pk, exc)

        self.message_user(request, _('{count} alert(s) resolved.').format(count=count))
