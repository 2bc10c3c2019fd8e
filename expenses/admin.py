"""
Expenses — Django Admin Configuration

@file expenses/admin.py
"""

from django.contrib import admin

from catalog.admin import TrackedAdmin

from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(TrackedAdmin):
    list_display = ('title', 'category', 'amount', 'created_by', 'created_at', 'is_active')
    list_filter = ('category', 'is_active', 'is_deleted')
    search_fields = ('title', 'description')
    list_select_related = ('created_by',)
    date_hierarchy = 'created_at'
    ordering = ('-created_at',)
