"""
Catalog — Serializers

@file catalog/serializers.py
"""

from rest_framework import serializers

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES
from stock.serializers import StockRecordSerializer

from .models import Category, Product, Supplier, Warehouse

AUDIT_FIELDS = ['is_active', 'created_at', 'updated_at']


# ---------------------------------------------------------------------------
# Category / Supplier / Warehouse
# ---------------------------------------------------------------------------

class CategorySerializer(serializers.ModelSerializer):
    products_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'products_count'] + AUDIT_FIELDS
        read_only_fields = ['id', 'products_count'] + AUDIT_FIELDS

    def get_products_count(self, obj):
        return obj.products.filter(is_deleted=False).count()


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ['id', 'name', 'contact_person', 'phone', 'email', 'address'] + AUDIT_FIELDS
        read_only_fields = ['id'] + AUDIT_FIELDS


class WarehouseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Warehouse
        fields = ['id', 'name', 'code', 'address', 'phone'] + AUDIT_FIELDS
        read_only_fields = ['id'] + AUDIT_FIELDS

    def validate_code(self, value):
        return value.upper().strip()


# ---------------------------------------------------------------------------
# Product
# ---------------------------------------------------------------------------

class ProductReadSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True)
    total_stock = serializers.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES,
        read_only=True, default=None,
    )

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'code', 'category', 'category_name', 'unit', 'barcode',
            'purchase_price', 'selling_price', 'min_stock', 'total_stock',
            'has_expiry', 'is_vatable',
        ] + AUDIT_FIELDS
        read_only_fields = fields


class ProductWriteSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.filter(is_deleted=False),
    )

    class Meta:
        model = Product
        fields = [
            'name', 'code', 'category', 'unit', 'barcode',
            'purchase_price', 'selling_price', 'min_stock',
            'has_expiry', 'is_vatable',
        ]

    def validate_barcode(self, value):
        if not value:
            return None
        return value.strip() or None

    def validate_min_stock(self, value):
        if value < 0:
            raise serializers.ValidationError('Minimum stock cannot be negative.')
        return value

    def validate(self, attrs):
        purchase = attrs.get('purchase_price')
        selling = attrs.get('selling_price')
        for name, value in (('purchase_price', purchase), ('selling_price', selling)):
            if value is not None and value < 0:
                raise serializers.ValidationError({name: 'Price cannot be negative.'})
        return attrs


class ProductStockSerializer(serializers.Serializer):
    """Per-batch stock rows for one product plus the product-wide total."""

    product = ProductReadSerializer()
    total_stock = serializers.DecimalField(max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES)
    is_low_stock = serializers.BooleanField()
    batches = StockRecordSerializer(many=True)
