"""
Purchases — Serializers

@file purchases/serializers.py
"""

from decimal import Decimal

from rest_framework import serializers

from catalog.models import Product, Supplier, Warehouse
from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES

from .models import Purchase, PurchaseItem


class PurchaseItemReadSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)

    class Meta:
        model = PurchaseItem
        fields = [
            'id', 'product', 'product_name', 'warehouse', 'warehouse_name',
            'quantity', 'unit_price', 'total_price', 'tax_amount', 'expiry_date',
        ]
        read_only_fields = fields


class PurchaseReadSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    supplier_display = serializers.SerializerMethodField()
    items = serializers.SerializerMethodField()

    class Meta:
        model = Purchase
        fields = [
            'id', 'invoice_number', 'supplier', 'supplier_name', 'supplier_display',
            'purchase_date', 'status', 'status_display',
            'total_amount', 'tax_amount', 'grand_total', 'notes',
            'items', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_supplier_display(self, obj):
        if obj.supplier_id:
            return obj.supplier.name
        return obj.supplier_name

    def get_items(self, obj):
        items = [item for item in obj.items.all() if not item.is_deleted]
        return PurchaseItemReadSerializer(items, many=True).data


class PurchaseItemWriteSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.filter(is_deleted=False))
    warehouse = serializers.PrimaryKeyRelatedField(queryset=Warehouse.objects.filter(is_deleted=False))
    quantity = serializers.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES, min_value=Decimal('0.01'),
    )
    unit_price = serializers.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES,
        min_value=Decimal('0'), required=False, allow_null=True, default=None,
    )
    expiry_date = serializers.DateField(required=False, allow_null=True, default=None)

    def to_line(self, attrs) -> dict:
        return {
            'product_id': attrs['product'].pk,
            'warehouse_id': attrs['warehouse'].pk,
            'quantity': attrs['quantity'],
            'unit_price': attrs.get('unit_price'),
            'expiry_date': attrs.get('expiry_date'),
        }


class PurchaseWriteSerializer(serializers.Serializer):
    invoice_number = serializers.CharField(max_length=100)
    supplier = serializers.PrimaryKeyRelatedField(
        queryset=Supplier.objects.filter(is_deleted=False),
        required=False, allow_null=True,
    )
    supplier_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    purchase_date = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True)
    receive = serializers.BooleanField(required=False, allow_null=True, default=None)
    items = PurchaseItemWriteSerializer(many=True, required=True, allow_empty=False)

    def validate_invoice_number(self, value):
        value = value.strip()
        qs = Purchase.objects.filter(invoice_number=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('A purchase with this invoice number already exists.')
        return value

    def to_service_kwargs(self) -> dict:
        """validated_data reshaped for PurchaseService (ids instead of instances)."""
        data = dict(self.validated_data)
        kwargs = {}
        if 'items' in data:
            line = PurchaseItemWriteSerializer()
            kwargs['items'] = [line.to_line(item) for item in data.pop('items')]
        if 'supplier' in data:
            supplier = data.pop('supplier')
            kwargs['supplier_id'] = supplier.pk if supplier else None
        kwargs.update(data)
        return kwargs
