"""
Expenses — Serializers

@file expenses/serializers.py
"""

from rest_framework import serializers

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES, ZERO

from .models import Expense

AUDIT_FIELDS = ['is_active', 'created_at', 'updated_at']


class ExpenseSerializer(serializers.ModelSerializer):
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Expense
        fields = [
            'id', 'title', 'category', 'category_display', 'amount', 'description',
            'created_by', 'created_by_name',
        ] + AUDIT_FIELDS
        read_only_fields = ['id', 'category_display', 'created_by', 'created_by_name'] + AUDIT_FIELDS

    def get_created_by_name(self, obj):
        if obj.created_by is None:
            return None
        return obj.created_by.get_full_name() or obj.created_by.get_username()

    def validate_amount(self, value):
        if value < 0:
            raise serializers.ValidationError('Amount cannot be negative.')
        return value


class ExpenseItemSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES, min_value=ZERO,
    )
    description = serializers.CharField(required=False, allow_blank=True, default='')


class ExpenseBatchSerializer(serializers.Serializer):
    """POST body: one category, one or more expenses."""

    category = serializers.ChoiceField(choices=Expense.CategoryChoices.choices)
    items = ExpenseItemSerializer(many=True, allow_empty=False)

    def validate_items(self, items):
        titles = [item['title'].strip() for item in items]
        repeated = sorted({t for t in titles if titles.count(t) > 1})
        if repeated:
            raise serializers.ValidationError(f'Repeated title(s): {", ".join(repeated)}')
        taken = list(
            Expense.objects.filter(is_deleted=False, title__in=titles).values_list('title', flat=True)
        )
        if taken:
            raise serializers.ValidationError(f'Title(s) already used: {", ".join(sorted(taken))}')
        for item, title in zip(items, titles):
            item['title'] = title
        return items
