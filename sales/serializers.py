"""
Sales — Serializers

@file sales/serializers.py
"""

from decimal import Decimal

from rest_framework import serializers

from catalog.models import Product, Warehouse
from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES

from .models import Sale, SaleItem


class SaleItemReadSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)

    class Meta:
        model = SaleItem
        fields = [
            'id', 'product', 'product_name', 'warehouse', 'warehouse_name',
            'expiry_date', 'quantity', 'unit_price', 'total_price', 'tax_amount',
        ]
        read_only_fields = fields


class SaleReadSerializer(serializers.ModelSerializer):
    payment_method_display = serializers.CharField(source='get_payment_method_display', read_only=True)
    items = SaleItemReadSerializer(many=True, read_only=True)

    class Meta:
        model = Sale
        fields = [
            'id', 'invoice_number', 'sale_date', 'payment_method', 'payment_method_display',
            'total_amount', 'tax_amount', 'grand_total', 'notes',
            'items', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class SaleItemWriteSerializer(serializers.Serializer):
    """
    expiry_date is optional: omitted means "pick the batch for me",
    an explicit null means the non-expiring batch.
    """

    product = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.filter(is_deleted=False, is_active=True),
    )
    warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_deleted=False, is_active=True),
    )
    quantity = serializers.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES, min_value=Decimal('0.01'),
    )
    unit_price = serializers.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES,
        min_value=Decimal('0'), required=False, allow_null=True, default=None,
    )
    expiry_date = serializers.DateField(required=False, allow_null=True)

    def to_line(self, attrs) -> dict:
        line = {
            'product_id': attrs['product'].pk,
            'warehouse_id': attrs['warehouse'].pk,
            'quantity': attrs['quantity'],
            'unit_price': attrs.get('unit_price'),
        }
        if 'expiry_date' in attrs:
            line['expiry_date'] = attrs['expiry_date']
        return line


class SaleWriteSerializer(serializers.Serializer):
    invoice_number = serializers.CharField(max_length=100)
    sale_date = serializers.DateField()
    payment_method = serializers.ChoiceField(choices=Sale.PaymentMethod.choices)
    notes = serializers.CharField(required=False, allow_blank=True)
    items = SaleItemWriteSerializer(many=True, required=True, allow_empty=False)

    def validate_invoice_number(self, value):
        value = value.strip()
        qs = Sale.objects.filter(invoice_number=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('A sale with this invoice number already exists.')
        return value

    def to_service_kwargs(self) -> dict:
        data = dict(self.validated_data)
        if 'items' in data:
            line = SaleItemWriteSerializer()
            data['items'] = [line.to_line(item) for item in data['items']]
        return data
