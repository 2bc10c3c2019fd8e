"""
Expenses — Service Layer

Expenses share the audited catalog write path. Several expenses of one
category can be recorded together; the batch commits or fails as a
whole.

@file expenses/services.py
"""

import logging

from django.db import transaction

from catalog.services import CatalogService

from .models import Expense

logger = logging.getLogger('stockpoint')


class ExpenseService(CatalogService):
    model = Expense
    label_field = 'title'

    @classmethod
    @transaction.atomic
    def record_many(cls, *, category, items, actor=None) -> list[Expense]:
        """Create one expense per item under a single category."""
        expenses = [cls.create(actor=actor, category=category, **item) for item in items]
        logger.info('%d %s expense(s) recorded by %s', len(expenses), category, actor)
        return expenses
