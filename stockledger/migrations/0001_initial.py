"""
Initial migration for stock ledger models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create stock ledger models: Product, Movement, LowStockAlert."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0'), help_text='Catalogue price, used for stock valuation', max_digits=12, verbose_name='Unit price')),
                ('_quantity', models.IntegerField(default=0, verbose_name='Quantity on hand')),
                ('reorder_level', models.PositiveIntegerField(blank=True, help_text='Empty = configured default. 0 = alert only when out of stock.', null=True, verbose_name='Reorder level')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['code'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('_quantity__gte', 0)), name='stockledger_product_quantity_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Movement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('in', 'Stock in'), ('out', 'Stock out'), ('adjustment', 'Adjustment')], max_length=20, verbose_name='Kind')),
                ('quantity', models.PositiveIntegerField(help_text='IN/OUT: units moved. ADJUSTMENT: new absolute balance.', verbose_name='Quantity')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Unit price')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Date/Time')),
                ('performed_by', models.CharField(blank=True, default='', max_length=150, verbose_name='Performed by')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('reference_number', models.CharField(blank=True, default='', help_text='Ex: PO-1234, invoice number', max_length=100, verbose_name='Reference')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockledger.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Movement',
                'verbose_name_plural': 'Movements',
                'ordering': ['id'],
                'indexes': [
                    models.Index(fields=['product', 'id'], name='stockledger_mv_product_idx'),
                    models.Index(fields=['kind', 'timestamp'], name='stockledger_mv_kind_ts_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('kind', 'adjustment'), ('quantity__gt', 0), _connector='OR'), name='stockledger_movement_quantity_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LowStockAlert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('current_stock', models.IntegerField(verbose_name='Current stock')),
                ('threshold_used', models.PositiveIntegerField(verbose_name='Threshold')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('acknowledged', 'Acknowledged'), ('resolved', 'Resolved')], db_index=True, default='pending', max_length=20, verbose_name='Status')),
                ('raised_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Raised at')),
                ('evaluated_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Last evaluated')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='Resolved at')),
                ('acknowledged_by', models.CharField(blank=True, max_length=150, null=True, verbose_name='Acknowledged by')),
                ('acknowledged_at', models.DateTimeField(blank=True, null=True, verbose_name='Acknowledged at')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='alerts', to='stockledger.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Low stock alert',
                'verbose_name_plural': 'Low stock alerts',
                'ordering': ['-raised_at', '-id'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'resolved'), _negated=True), fields=('product',), name='stockledger_one_active_alert_per_product'),
                ],
            },
        ),
    ]
