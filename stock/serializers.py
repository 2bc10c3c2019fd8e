"""
Stock — Serializers

Read serializers for batch rows and ledger movements, and the write
serializer behind the manual movement endpoint.

@file stock/serializers.py
"""

from django.utils import timezone
from rest_framework import serializers

from catalog.models import Product, Warehouse
from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES

from .models import StockMovement, StockRecord
from .services import MANUAL_TYPES


class StockRecordSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)
    days_to_expiry = serializers.SerializerMethodField()

    class Meta:
        model = StockRecord
        fields = [
            'id', 'product', 'product_name', 'warehouse', 'warehouse_name',
            'expiry_date', 'days_to_expiry', 'quantity', 'updated_at',
        ]
        read_only_fields = fields

    def get_days_to_expiry(self, obj):
        if obj.expiry_date is None:
            return None
        return (obj.expiry_date - timezone.localdate()).days


class StockMovementReadSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)
    movement_type_display = serializers.CharField(
        source='get_movement_type_display', read_only=True,
    )
    created_by_name = serializers.CharField(
        source='created_by.username', read_only=True, default=None,
    )

    class Meta:
        model = StockMovement
        fields = [
            'id', 'product', 'product_name', 'warehouse', 'warehouse_name',
            'expiry_date', 'quantity', 'movement_type', 'movement_type_display',
            'reference_type', 'reference_id', 'notes',
            'created_by', 'created_by_name', 'created_at',
        ]
        read_only_fields = fields


class StockMovementHistorySerializer(StockMovementReadSerializer):
    """Movement row with the running balance annotated by movement_history()."""

    balance = serializers.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES, read_only=True,
    )

    class Meta(StockMovementReadSerializer.Meta):
        fields = StockMovementReadSerializer.Meta.fields + ['balance']
        read_only_fields = fields


class ManualMovementSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.filter(is_deleted=False, is_active=True),
    )
    warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_deleted=False, is_active=True),
    )
    expiry_date = serializers.DateField(required=False, allow_null=True, default=None)
    quantity = serializers.DecimalField(max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES)
    movement_type = serializers.ChoiceField(choices=sorted(MANUAL_TYPES))
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        quantity = attrs['quantity']
        if quantity == 0:
            raise serializers.ValidationError({'quantity': 'Quantity must be non-zero.'})
        if attrs['movement_type'] != StockMovement.MovementType.ADJUSTMENT and quantity < 0:
            raise serializers.ValidationError({
                'quantity': 'Give a positive quantity; the movement type decides the direction.',
            })
        return attrs
