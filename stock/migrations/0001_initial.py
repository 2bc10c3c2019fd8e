import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StockRecord',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('expiry_date', models.DateField(blank=True, db_index=True, null=True, verbose_name='expiry date')),
                ('quantity', models.DecimalField(decimal_places=2, default=0, max_digits=15, verbose_name='quantity')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_records', to='catalog.product', verbose_name='product')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_records', to='catalog.warehouse', verbose_name='warehouse')),
            ],
            options={
                'verbose_name': 'stock record',
                'verbose_name_plural': 'stock records',
                'ordering': ['product', 'warehouse', 'expiry_date'],
                'indexes': [
                    models.Index(fields=['expiry_date', 'quantity'], name='stock_expiry_qty_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('expiry_date__isnull', False)), fields=('product', 'warehouse', 'expiry_date'), name='unique_dated_stock_batch'),
                    models.UniqueConstraint(condition=models.Q(('expiry_date__isnull', True)), fields=('product', 'warehouse'), name='unique_undated_stock_batch'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='stock_quantity_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('expiry_date', models.DateField(blank=True, null=True, verbose_name='expiry date')),
                ('quantity', models.DecimalField(decimal_places=2, help_text='Signed: positive = inbound, negative = outbound', max_digits=15, verbose_name='quantity')),
                ('movement_type', models.CharField(choices=[('purchase', 'Purchase'), ('sale', 'Sale'), ('adjustment', 'Adjustment'), ('damage', 'Damage'), ('lost', 'Lost'), ('found', 'Found'), ('opening_stock', 'Opening stock'), ('expired', 'Expired')], db_index=True, max_length=16, verbose_name='movement type')),
                ('reference_type', models.CharField(blank=True, help_text='Purchase, Sale, Manual Adjustment, Stock Expiry', max_length=100, verbose_name='reference type')),
                ('reference_id', models.CharField(blank=True, max_length=64, null=True, verbose_name='reference ID')),
                ('notes', models.TextField(blank=True, verbose_name='notes')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_movements', to='catalog.product', verbose_name='product')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_movements', to='catalog.warehouse', verbose_name='warehouse')),
            ],
            options={
                'verbose_name': 'stock movement',
                'verbose_name_plural': 'stock movements',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['product', 'created_at'], name='movement_product_created_idx'),
                    models.Index(fields=['product', 'warehouse', 'created_at'], name='movement_prod_wh_created_idx'),
                    models.Index(fields=['reference_type', 'reference_id'], name='movement_reference_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity', 0), _negated=True), name='movement_quantity_non_zero'),
                ],
            },
        ),
    ]
